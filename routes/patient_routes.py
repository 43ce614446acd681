import logging

from flask import Blueprint, current_app, jsonify, request
from pymongo.errors import PyMongoError

from auth import role_required
from database import get_store, to_object_id
from services.care_ai_service import AIServiceError
from services.patient_service import dashboard_data, health_data_summary
from services.severity_service import risk_profile_summary
from services.symptom_service import list_symptom_reports, submit_symptom_report

logger = logging.getLogger(__name__)

patient_bp = Blueprint('patient_bp', __name__)


def _resolve_patient(user):
    """The logged-in patient, or for admins the patient named by ?patient_id=."""
    if user['role'] == 'patient':
        return user, None
    patient_id = to_object_id(request.args.get('patient_id'))
    if patient_id is None:
        return None, (jsonify({"error": "Invalid patient ID format."}), 400)
    patient = get_store().users.find_one({'_id': patient_id, 'role': 'patient'})
    if not patient:
        return None, (jsonify({"error": "Patient not found"}), 404)
    return patient, None


@patient_bp.route('/dashboard', methods=['GET'])
@role_required('patient', 'admin')
def dashboard(user):
    patient, error = _resolve_patient(user)
    if error:
        return error
    try:
        data = dashboard_data(get_store(), patient['_id'])
    except PyMongoError as e:
        logger.error("Error fetching patient dashboard data: %s", e)
        return jsonify({"error": "Could not load patient data."}), 500
    return jsonify(data), 200


@patient_bp.route('/symptoms', methods=['GET'])
@role_required('patient', 'admin')
def symptom_reports(user):
    patient, error = _resolve_patient(user)
    if error:
        return error
    try:
        reports = list_symptom_reports(get_store(), patient['_id'])
    except PyMongoError as e:
        logger.error("Error fetching symptom reports: %s", e)
        return jsonify({"error": "Could not load symptom reports."}), 500
    return jsonify({"symptomReports": reports}), 200


@patient_bp.route('/symptoms', methods=['POST'])
@role_required('patient')
def submit_symptoms(user):
    data = request.get_json(silent=True) or {}
    services = current_app.extensions['services']
    try:
        result = submit_symptom_report(
            get_store(),
            services['classifier'],
            services['emailer'],
            user,
            data.get('severity'),
            data.get('description', ''),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except PyMongoError as e:
        logger.error("Error submitting symptom report: %s", e)
        return jsonify({"error": "Could not save your report."}), 500
    return jsonify(result.to_dict()), 201


@patient_bp.route('/interventions', methods=['POST'])
@role_required('patient', 'admin')
def interventions(user):
    patient, error = _resolve_patient(user)
    if error:
        return error
    care_ai = current_app.extensions['services']['care_ai']
    try:
        data = dashboard_data(get_store(), patient['_id'])
    except PyMongoError as e:
        logger.error("Error fetching patient data for interventions: %s", e)
        return jsonify({"error": "Could not load patient data."}), 500
    try:
        result = care_ai.suggest_interventions(health_data_summary(data), risk_profile_summary(patient))
    except AIServiceError as e:
        return jsonify({"error": str(e)}), 502
    return jsonify(result.model_dump()), 200
