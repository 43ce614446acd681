from pymongo import DESCENDING

from database import serialize
from services.chat_service import chat_id, list_messages
from services.patient_service import patient_medications, recent_health_data

SUGGESTION_DECISIONS = ('approved', 'rejected')


def doctor_patients(store, doctor_id):
    cursor = store.users.find({'role': 'patient', 'assignedDoctorId': str(doctor_id)})
    return [serialize(p) for p in cursor]


def patient_details(store, patient_id, doctor_id):
    patient = store.users.find_one({'_id': patient_id, 'role': 'patient'})
    if not patient:
        return {"error": "Patient not found"}
    suggestions = store.ai_suggestions.find({'patientId': patient_id}).sort('timestamp', DESCENDING)
    return {
        "patient": serialize(patient),
        "healthData": list(reversed(recent_health_data(store, patient_id, 10))),
        "medications": patient_medications(store, patient_id),
        "aiSuggestions": [serialize(s) for s in suggestions],
        "chatMessages": list_messages(store, chat_id(doctor_id, patient_id)),
    }


def update_suggestion_status(store, suggestion_id, patient_id, status):
    if status not in SUGGESTION_DECISIONS:
        return {"error": "Status must be 'approved' or 'rejected'", "code": 400}
    result = store.ai_suggestions.update_one(
        {'_id': suggestion_id, 'patientId': patient_id},
        {'$set': {'status': status}},
    )
    if result.matched_count == 0:
        return {"error": "Suggestion not found or does not belong to the patient.", "code": 404}
    if result.modified_count == 0:
        return {"error": f"Suggestion status was already set to {status}.", "code": 409}
    return {"updatedSuggestion": {"id": str(suggestion_id), "status": status}}
