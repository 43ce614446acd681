import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from auth import role_required
from database import get_store, serialize
from models import NewUser
from seed_data import seed_database
from services.registration_service import list_users, register_user

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin_bp', __name__)


# ========================= Users =========================

@admin_bp.route('/users', methods=['GET'])
@role_required('admin')
def get_users(user):
    try:
        users = list_users(get_store())
    except PyMongoError as e:
        logger.error("Error fetching users: %s", e)
        return jsonify({"error": "Could not load user list from database."}), 500
    return jsonify({"users": users}), 200


@admin_bp.route('/users', methods=['POST'])
@role_required('admin')
def create_user(user):
    try:
        new_user = NewUser.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({"error": "Invalid user data", "details": e.errors(include_url=False)}), 400

    success, detail = register_user(get_store(), new_user)
    if not success:
        return jsonify({"error": detail}), 400
    doc, temporary_password = detail

    emailer = current_app.extensions['services']['emailer']
    login_url = f"{current_app.config['APP_URL']}/login"
    email_sent, email_error = emailer.send_welcome_email(
        new_user.email, new_user.display_name, temporary_password, new_user.role, login_url
    )
    return jsonify({
        "message": "User created",
        "user": serialize(doc),
        "welcome_email_sent": email_sent,
        "email_error": email_error,
    }), 201


# ========================= Seeding =========================

@admin_bp.route('/seed', methods=['POST'])
@role_required('admin')
def seed(user):
    try:
        counts = seed_database(get_store())
    except PyMongoError as e:
        logger.error("Error seeding database: %s", e)
        return jsonify({"success": False, "error": f"Seeding failed: {e}"}), 500
    return jsonify({"success": True, "seeded": counts}), 200
