from flask import Blueprint, current_app, jsonify, request

from auth import role_required
from database import get_store, to_object_id
from services.care_ai_service import AIServiceError
from services.chat_service import send_message
from services.doctor_service import doctor_patients, patient_details, update_suggestion_status
from services.patient_service import (
    health_data_summary, dashboard_data, medication_adherence_summary, patient_medications,
)
from services.severity_service import risk_profile_summary

doctor_bp = Blueprint('doctor_bp', __name__)


def _load_patient(patient_id_str, user):
    patient_id = to_object_id(patient_id_str)
    if patient_id is None:
        return None, (jsonify({"error": "Invalid patient ID format."}), 400)
    patient = get_store().users.find_one({'_id': patient_id, 'role': 'patient'})
    if not patient:
        return None, (jsonify({"error": "Patient not found"}), 404)
    if user['role'] == 'doctor' and patient.get('assignedDoctorId') != str(user['_id']):
        return None, (jsonify({"error": "Patient is not assigned to you."}), 403)
    return patient, None


def _care_ai():
    return current_app.extensions['services']['care_ai']


# -----------------------------------------------------------
# GET /doctor/patients
# -----------------------------------------------------------
@doctor_bp.route('/patients', methods=['GET'])
@role_required('doctor', 'admin')
def list_patients(user):
    doctor_id = request.args.get('doctor_id') if user['role'] == 'admin' else user['_id']
    return jsonify({"patients": doctor_patients(get_store(), doctor_id)}), 200


# -----------------------------------------------------------
# GET /doctor/patients/<id>
# -----------------------------------------------------------
@doctor_bp.route('/patients/<patient_id>', methods=['GET'])
@role_required('doctor', 'admin')
def get_patient(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    return jsonify(patient_details(get_store(), patient['_id'], user['_id'])), 200


# -----------------------------------------------------------
# POST /doctor/patients/<id>/messages
# -----------------------------------------------------------
@doctor_bp.route('/patients/<patient_id>/messages', methods=['POST'])
@role_required('doctor')
def message_patient(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    data = request.get_json(silent=True) or {}
    result = send_message(get_store(), user['_id'], user['displayName'], patient['_id'], data.get('text', ''))
    if result.get('error'):
        return jsonify(result), 400
    return jsonify(result), 201


# -----------------------------------------------------------
# PUT /doctor/patients/<id>/suggestions/<sid>
# -----------------------------------------------------------
@doctor_bp.route('/patients/<patient_id>/suggestions/<suggestion_id>', methods=['PUT'])
@role_required('doctor')
def update_suggestion(user, patient_id, suggestion_id):
    suggestion_oid = to_object_id(suggestion_id)
    if to_object_id(patient_id) is None or suggestion_oid is None:
        return jsonify({"error": "Invalid ID format for suggestion or patient."}), 400
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    data = request.get_json(silent=True) or {}
    result = update_suggestion_status(get_store(), suggestion_oid, patient['_id'], data.get('status'))
    if result.get('error'):
        return jsonify({"error": result['error']}), result['code']
    return jsonify(result), 200


# -----------------------------------------------------------
# AI assistance
# -----------------------------------------------------------
@doctor_bp.route('/patients/<patient_id>/summary', methods=['POST'])
@role_required('doctor', 'admin')
def summarize(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    try:
        result = _care_ai().summarize_history(str(patient['_id']), patient.get('medicalHistory'))
    except AIServiceError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify(result.model_dump()), 200


@doctor_bp.route('/patients/<patient_id>/care-plan', methods=['POST'])
@role_required('doctor', 'admin')
def care_plan(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    medications = patient_medications(get_store(), patient['_id'])
    current = ", ".join(f"{m['name']} {m['dosage']} {m['frequency']}" for m in medications) or "None"
    risks = f"{(patient.get('readmissionRisk') or 'unknown').capitalize()} readmission risk."
    try:
        result = _care_ai().generate_care_plan(str(patient['_id']), patient.get('medicalHistory'), current, risks)
    except AIServiceError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify(result.model_dump()), 200


@doctor_bp.route('/patients/<patient_id>/trends', methods=['POST'])
@role_required('doctor', 'admin')
def trends(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    data = dashboard_data(get_store(), patient['_id'])
    result = _care_ai().analyze_health_trends(
        str(patient['_id']),
        risk_profile_summary(patient),
        health_data_summary(data),
        medication_adherence_summary(data['medications']),
    )
    return jsonify(result.model_dump()), 200


@doctor_bp.route('/patients/<patient_id>/appointment-suggestion', methods=['POST'])
@role_required('doctor', 'admin')
def appointment_suggestion(user, patient_id):
    patient, error = _load_patient(patient_id, user)
    if error:
        return error
    try:
        suggestion = _care_ai().suggest_appointment(
            str(patient['_id']),
            patient.get('displayName', ''),
            patient.get('readmissionRisk'),
            str(user['_id']),
            user.get('displayName', ''),
        )
    except AIServiceError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify({"suggestion": suggestion.model_dump() if suggestion else None}), 200
