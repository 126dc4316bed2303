"""Caller identity from bearer tokens.

Tokens are issued by the external auth service; this module only verifies
them and exposes the claims as a Flask-Login user.
"""

from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app
from flask_login import UserMixin

from .extensions import login_manager


class Principal(UserMixin):
    def __init__(self, claims):
        self.id = str(claims.get('id') or claims.get('sub') or '')
        self.role = claims.get('role')
        self.name = claims.get('name')
        self.claims = claims

    def get_id(self):
        return self.id

    def __repr__(self):
        return f"<Principal id={self.id} role={self.role}>"


def issue_token(claims, expires_in=timedelta(hours=24)):
    payload = dict(claims)
    payload['exp'] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(payload, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256'))


def decode_token(token):
    """Return the token claims, or None if the token is invalid or expired."""
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET'],
                          algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')])
    except jwt.PyJWTError as e:
        current_app.logger.info('rejected bearer token: %s', e)
        return None


@login_manager.request_loader
def load_principal(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    claims = decode_token(token.strip())
    if not claims:
        return None
    principal = Principal(claims)
    return principal if principal.id else None
