"""
Browser session helpers

The session cookie carries the backend bearer token together with the cached
user fields shown in the header (name, email, role, phone), plus the records
admin pages hand over to each other ("selected user").
"""
import logging
import time
from functools import wraps
from urllib.parse import urlparse

import jwt
from flask import redirect, request, session, url_for

from opticare.config.settings import OptiCareConfig

logger = logging.getLogger(__name__)

AUTH_KEYS = ('authToken', 'userId', 'userEmail', 'userName', 'userRole', 'userPhone')
SELECTION_PREFIX = 'selected:'


def store_login(payload, email):
    """Remember the login response of the backend"""
    session.permanent = True
    session['authToken'] = payload.get('token')
    session['userId'] = payload.get('userId')
    session['userEmail'] = email
    session['userName'] = payload.get('username')
    session['userRole'] = payload.get('role')
    session['userPhone'] = payload.get('phone')


def clear_login():
    """Forget the logged-in user and everything cached for them"""
    for key in list(session.keys()):
        if key in AUTH_KEYS or key.startswith(SELECTION_PREFIX) or key.startswith('wizard:'):
            session.pop(key, None)


def clear_auth_token():
    """Drop token and user id after the backend rejected them"""
    session.pop('authToken', None)
    session.pop('userId', None)


def get_token():
    return session.get('authToken')


def is_logged_in():
    return bool(session.get('authToken')) and session.get('userId') not in (None, '', 'null')


def current_user():
    """Cached user fields, or None for anonymous visitors"""
    if not is_logged_in():
        return None
    return {
        'id': session.get('userId'),
        'email': session.get('userEmail') or '',
        'name': session.get('userName') or 'User',
        'role': session.get('userRole'),
        'phone': session.get('userPhone') or '',
    }


def is_admin():
    return is_logged_in() and session.get('userRole') == OptiCareConfig.ADMIN_ROLE


def decode_token(token):
    """Read the JWT claims without verifying the signature

    The backend verifies the signature on every call; the frontend only needs
    the expiry and role claims to decide which pages to show.
    """
    return jwt.decode(token, options={'verify_signature': False})


def token_expired(claims, now=None):
    exp = claims.get('exp')
    if exp is None:
        return False
    now = time.time() if now is None else now
    return exp < now


def safe_redirect_target(target):
    """Accept only same-site relative paths as post-login targets"""
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/') or target.startswith('//'):
        return None
    return target


def _login_redirect():
    return redirect(url_for('auth.auth_page', redirectUrl=request.full_path.rstrip('?')))


def login_required(view):
    """Send anonymous visitors to the login page"""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_logged_in():
            return _login_redirect()
        return view(*args, **kwargs)
    return wrapped


def admin_required(view):
    """Allow only holders of a live ADMIN token"""
    @wraps(view)
    def wrapped(*args, **kwargs):
        token = get_token()
        if not token:
            return redirect(url_for('auth.auth_page'))

        try:
            claims = decode_token(token)
        except jwt.PyJWTError as e:
            logger.warning(f'Invalid admin token: {e}')
            clear_login()
            return redirect(url_for('auth.auth_page'))

        if token_expired(claims):
            logger.info('Admin token expired, clearing session')
            clear_login()
            return redirect(url_for('auth.auth_page'))

        if claims.get('role') != OptiCareConfig.ADMIN_ROLE:
            return redirect(url_for('main.home'))

        return view(*args, **kwargs)
    return wrapped


def remember_selection(key, record):
    session[SELECTION_PREFIX + key] = record


def get_selection(key):
    return session.get(SELECTION_PREFIX + key)


def forget_selection(key):
    session.pop(SELECTION_PREFIX + key, None)
