"""
SESSION TOKENS
==============

Members are identified by a signed, timestamped token carried in an
HTTP-only cookie (or an ``Authorization: Bearer`` header for non-browser
clients). Flask-Login resolves the token into ``current_user`` on every
request through the request loader registered below.
"""

import logging
from datetime import datetime, timezone
from functools import wraps

from flask import current_app, request
from flask_login import current_user
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from welfare.errors import Forbidden, Unauthorized
from welfare.extensions import db, login_manager

logger = logging.getLogger(__name__)

TOKEN_SALT = 'welfare-session'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def generate_token(member_id):
    """Issue a signed session token for ``member_id``."""
    return _serializer().dumps({'id': member_id})


def verify_token(token):
    """Return the member id encoded in ``token`` or None if invalid/expired."""
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=current_app.config['AUTH_TOKEN_MAX_AGE'])
    except SignatureExpired:
        logger.info("Rejected expired session token")
        return None
    except BadSignature:
        logger.warning("Rejected session token with bad signature")
        return None
    return data.get('id') if isinstance(data, dict) else None


def set_auth_cookie(response, token):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        token,
        max_age=config['AUTH_TOKEN_MAX_AGE'],
        httponly=True,
        secure=config['AUTH_COOKIE_SECURE'],
        samesite='None' if config['AUTH_COOKIE_SECURE'] else 'Lax',
    )
    return response


def clear_auth_cookie(response):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        '',
        httponly=True,
        expires=datetime(1970, 1, 1, tzinfo=timezone.utc),
        secure=config['AUTH_COOKIE_SECURE'],
    )
    return response


def token_from_request():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[7:].strip()
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


# ============================================================
# FLASK-LOGIN INTEGRATION
# ============================================================

def init_auth(app):
    """Register the Flask-Login loaders on ``app``."""
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_member_from_request(req):
        from welfare.models import Member

        member_id = verify_token(token_from_request())
        if member_id is None:
            return None
        return db.session.get(Member, member_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthorized()


def admin_required(view_func):
    """Allow only authenticated members with the admin role."""
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not current_user.is_admin:
            logger.warning(f"Member {current_user.id} denied admin route {request.path}")
            raise Forbidden()
        return view_func(*args, **kwargs)
    return wrapper
