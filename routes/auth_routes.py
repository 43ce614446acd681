from flask import Blueprint, jsonify, request

from auth import (
    clear_session_cookie, get_session, role_required, session_payload, set_session_cookie,
)
from database import get_store
from services.registration_service import authenticate, change_password, user_profile

auth_bp = Blueprint('auth_bp', __name__)
profile_bp = Blueprint('profile_bp', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return jsonify({"success": False, "error": "Email and password are required."}), 400
    user = authenticate(get_store(), data['email'], data['password'])
    if not user:
        return jsonify({"success": False, "error": "Invalid email or password."}), 401
    payload = session_payload(user, user.get('requiresPasswordChange', False))
    response = jsonify({
        "success": True,
        "message": "Login successful!",
        "role": user['role'],
        "requires_password_change": payload['requires_password_change'],
    })
    return set_session_cookie(response, payload)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    return clear_session_cookie(jsonify({"message": "Logged out"}))


@auth_bp.route('/session', methods=['GET'])
def session():
    data = get_session()
    if not data:
        return jsonify({"error": "Not authenticated"}), 401
    data.pop('exp', None)
    return jsonify(data)


@auth_bp.route('/change-password', methods=['POST'])
@role_required('patient', 'doctor', 'admin')
def change_password_route(user):
    data = request.get_json(silent=True) or {}
    ok, error = change_password(get_store(), user['_id'], data.get('new_password'), data.get('confirm_password'))
    if not ok:
        return jsonify({"success": False, "error": error}), 400
    response = jsonify({"success": True, "message": "Password updated."})
    return set_session_cookie(response, session_payload(user, False))


@profile_bp.route('', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def profile(user):
    return jsonify({"profile": user_profile(get_store(), user['_id'])})
