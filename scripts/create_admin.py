"""Create an admin account, or reset its password if the username exists.

Usage:
  python scripts/create_admin.py --username ops --name "Ops Admin"

The password is read from ADMIN_PASSWORD or prompted for.
"""

import argparse
import getpass
import os
import sys

# ensure project root is on sys.path when running from scripts/
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from academy import create_app
from academy.extensions import db
from academy.models import Admin


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--username', required=True)
    parser.add_argument('--name', default='')
    args = parser.parse_args()

    password = os.getenv('ADMIN_PASSWORD') or getpass.getpass('Password: ')
    if not password:
        parser.error('password must not be empty')

    app = create_app()
    with app.app_context():
        admin = Admin.query.filter_by(username=args.username).first()
        created = admin is None
        if created:
            admin = Admin(username=args.username)
            db.session.add(admin)
        if args.name:
            admin.name = args.name
        admin.set_password(password)
        db.session.commit()
        if not admin.check_password(password):
            raise SystemExit('stored password hash does not verify')
        print(f"{'created' if created else 'updated'} admin {admin.username} ({admin.id})")


if __name__ == '__main__':
    main()
