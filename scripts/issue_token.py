"""Mint a bearer token for local development.

Usage:
  python scripts/issue_token.py --id <employee-or-admin-id> --role employee --name "Mock Employee"

The token is signed with JWT_SECRET from the environment/.env, the same
secret the API verifies against.
"""

import argparse
import os
import sys

# ensure project root is on sys.path when running from scripts/
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from academy import create_app
from academy.auth import issue_token


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--id', required=True)
    parser.add_argument('--role', choices=('employee', 'admin'), default='employee')
    parser.add_argument('--name', default='')
    parser.add_argument('--hours', type=int, default=24)
    args = parser.parse_args()

    from datetime import timedelta
    app = create_app()
    with app.app_context():
        token = issue_token({'id': args.id, 'role': args.role, 'name': args.name},
                            expires_in=timedelta(hours=args.hours))
    print(token)


if __name__ == '__main__':
    main()
