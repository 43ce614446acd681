import logging

from pymongo import ASCENDING, DESCENDING

from database import serialize
from models import ChatMessage, SYSTEM_SENDER_ID

logger = logging.getLogger(__name__)


def chat_id(a, b):
    """Stable identifier for the thread between two participants, in either order."""
    return '_'.join(sorted([str(a), str(b)]))


def send_message(store, sender_id, sender_name, receiver_id, text):
    if not text or not text.strip():
        return {"error": "Message cannot be empty."}
    message = ChatMessage(
        chat_id=chat_id(sender_id, receiver_id),
        sender_id=str(sender_id),
        sender_name=sender_name,
        receiver_id=str(receiver_id),
        text=text.strip(),
    )
    doc = message.to_document()
    result = store.chat_messages.insert_one(doc)
    doc['_id'] = result.inserted_id
    return {"message": serialize(doc)}


def post_system_message(store, sender_name, patient_id, doctor_id, text):
    """Insert a system-authored message into the doctor/patient thread, addressed to the doctor."""
    message = ChatMessage(
        chat_id=chat_id(doctor_id, patient_id),
        sender_id=SYSTEM_SENDER_ID,
        sender_name=sender_name,
        receiver_id=str(doctor_id),
        text=text,
    )
    result = store.chat_messages.insert_one(message.to_document())
    logger.info("[CHAT] %s posted to %s", sender_name, message.chat_id)
    return result.inserted_id


def list_messages(store, thread_id):
    cursor = store.chat_messages.find({'chatId': thread_id}).sort('timestamp', ASCENDING)
    return [serialize(m) for m in cursor]


def mark_messages_read(store, thread_id, user_id):
    # only messages addressed to this user
    result = store.chat_messages.update_many(
        {'chatId': thread_id, 'receiverId': str(user_id), 'isRead': False},
        {'$set': {'isRead': True}},
    )
    return result.modified_count


def unread_notifications(store, user_id, limit=20):
    query = {'receiverId': str(user_id), 'isRead': False}
    count = store.chat_messages.count_documents(query)
    cursor = store.chat_messages.find(query).sort('timestamp', DESCENDING).limit(limit)
    items = [
        {
            "id": str(m['_id']),
            "chatId": m['chatId'],
            "from": m.get('senderName'),
            "text": m.get('text'),
            "timestamp": m['timestamp'].isoformat(),
        }
        for m in cursor
    ]
    return {"unreadMessagesCount": count, "notifications": items}
