import datetime
import logging
from functools import wraps

import jwt
from flask import current_app, jsonify, request

from database import get_store, to_object_id
from models import SessionUser

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = 'healthwise_session'
SESSION_MAX_AGE = 60 * 60 * 24 * 7


def generate_jwt(payload, exp_seconds=SESSION_MAX_AGE):
    secret = current_app.config['SECRET_KEY']
    payload_copy = payload.copy()
    payload_copy['exp'] = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=exp_seconds)
    return jwt.encode(payload_copy, secret, algorithm='HS256')


def decode_jwt(token):
    secret = current_app.config['SECRET_KEY']
    try:
        return jwt.decode(token, secret, algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected session token: %s", e)
        return None


def session_payload(user, requires_password_change=False):
    return SessionUser(
        user_id=str(user['_id']),
        role=user['role'],
        display_name=user.get('displayName', ''),
        email=user.get('email', ''),
        requires_password_change=requires_password_change,
    ).model_dump()


def set_session_cookie(response, payload):
    response.set_cookie(
        SESSION_COOKIE_NAME,
        generate_jwt(payload),
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=current_app.config.get('SESSION_COOKIE_SECURE', False),
        samesite='Lax',
        path='/',
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(SESSION_COOKIE_NAME, path='/')
    return response


def get_session():
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        auth = request.headers.get('Authorization', '')
        parts = auth.split()
        if len(parts) == 2 and parts[0].lower() == 'bearer':
            token = parts[1]
    if not token:
        return None
    return decode_jwt(token)


def get_current_user():
    data = get_session()
    if not data:
        return None
    user_id = to_object_id(data.get('user_id'))
    if user_id is None:
        return None
    return get_store().users.find_one({'_id': user_id})


def role_required(*roles):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            user = get_current_user()
            if not user:
                return jsonify({"error": "Authentication required"}), 401
            if user.get('role') not in roles:
                return jsonify({"error": "Insufficient permissions"}), 403
            return f(user, *args, **kwargs)
        return wrapper
    return decorator
