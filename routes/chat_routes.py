from flask import Blueprint, jsonify, request

from auth import role_required
from database import get_store
from services.chat_service import chat_id, list_messages, mark_messages_read, send_message, unread_notifications

chat_bp = Blueprint('chat_bp', __name__)


@chat_bp.route('/notifications', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def notifications(user):
    return jsonify(unread_notifications(get_store(), user['_id'])), 200


@chat_bp.route('/<other_id>/messages', methods=['GET'])
@role_required('patient', 'doctor')
def get_messages(user, other_id):
    thread = chat_id(user['_id'], other_id)
    return jsonify({"chatId": thread, "messages": list_messages(get_store(), thread)}), 200


@chat_bp.route('/<other_id>/messages', methods=['POST'])
@role_required('patient', 'doctor')
def post_message(user, other_id):
    data = request.get_json(silent=True) or {}
    result = send_message(get_store(), user['_id'], user.get('displayName', ''), other_id, data.get('text', ''))
    if result.get('error'):
        return jsonify(result), 400
    return jsonify(result), 201


@chat_bp.route('/<other_id>/read', methods=['POST'])
@role_required('patient', 'doctor')
def mark_read(user, other_id):
    updated = mark_messages_read(get_store(), chat_id(user['_id'], other_id), user['_id'])
    return jsonify({"success": True, "updated": updated}), 200
