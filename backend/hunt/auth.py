"""Admin credential check and bearer tokens.

There is a single admin identity configured through ``ADMIN_EMAIL`` and
``ADMIN_PASSWORD``. A successful login yields an opaque signed token that
Flask-Login's request loader turns back into an :class:`AdminUser`.
"""
import hmac

from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from hunt.errors import Unauthorized

TOKEN_SALT = 'hunt-admin-token'


class AdminUser(UserMixin):
    role = 'admin'

    def __init__(self, email: str):
        self.email = email

    def get_id(self):
        return self.email


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def authenticate_admin(email: str, password: str) -> str:
    """Check the admin credential pair and return a signed bearer token."""
    cfg = current_app.config
    email_ok = hmac.compare_digest((email or '').lower().encode(), (cfg.get('ADMIN_EMAIL') or '').lower().encode())
    password_ok = hmac.compare_digest((password or '').encode(), (cfg.get('ADMIN_PASSWORD') or '').encode())
    if not (email_ok and password_ok):
        current_app.logger.info(f"[admin-login] rejected email={email}")
        raise Unauthorized('Invalid credentials')
    current_app.logger.info(f"[admin-login] ok email={email}")
    return _serializer().dumps({'role': 'admin', 'email': cfg['ADMIN_EMAIL']})


def load_admin_from_request(req):
    header = req.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    token = header.split(' ', 1)[1].strip()
    max_age = int(current_app.config.get('ADMIN_TOKEN_MAX_AGE_SEC', 8 * 60 * 60))
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info("[admin-auth] expired token")
        return None
    except BadSignature:
        return None
    if not isinstance(payload, dict) or payload.get('role') != 'admin':
        return None
    return AdminUser(payload.get('email'))
