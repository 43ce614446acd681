"""Critical-alert decision and notification fan-out for symptom reports.

`decide` is pure. `fan_out` performs up to three independent, best-effort
notifications and reports what happened to each one; a failing channel is
logged and recorded, never raised.
"""
import logging
from dataclasses import dataclass

from models import SEVERITIES, SYSTEM_ALERT_SENDER, SYSTEM_INFO_SENDER
from services.chat_service import post_system_message
from services.notification_service import send_sms_alert

logger = logging.getLogger(__name__)

SENT = 'sent'
SKIPPED = 'skipped'
FAILED = 'failed'

MANUAL_SEVERE_FALLBACK = "AI assessment unavailable; defaulting based on patient manual severe selection."


@dataclass(frozen=True)
class NotificationOutcome:
    channel: str
    status: str
    detail: str

    def __str__(self):
        return f"{self.channel.upper()} {self.status}: {self.detail}"

    def to_dict(self):
        return {"channel": self.channel, "status": self.status, "detail": self.detail}


def decide(selected, assessment):
    """True when any signal calls for a critical alert."""
    if selected == 'severe':
        return True
    if assessment is None:
        return False
    return assessment.ai_severity == 'severe' or assessment.alert_recommended


def build_alert_text(patient_name, description, selected, assessment):
    lines = [
        f"CRITICAL SYMPTOM ALERT for {patient_name}.",
        f'Reported symptoms: "{description}"',
        f"Patient-selected severity: {selected}.",
    ]
    if assessment is not None:
        lines.append(f"AI-assessed severity: {assessment.ai_severity}.")
        lines.append(f"AI justification: {assessment.justification}")
    elif selected == 'severe':
        lines.append(MANUAL_SEVERE_FALLBACK)
    return "\n".join(lines)


def build_info_text(patient_name, description, selected, assessment):
    return "\n".join([
        f"Symptom update from {patient_name}.",
        f'Reported symptoms: "{description}"',
        f"Patient-selected severity: {selected}. AI-assessed severity: {assessment.ai_severity}.",
        f"Suggested follow-up: {assessment.follow_up_suggestion}",
    ])


def build_sms_text(patient_name, selected, assessment):
    # the more severe of the patient's selection and the AI assessment
    severity = selected
    if assessment is not None and SEVERITIES.index(assessment.ai_severity) > SEVERITIES.index(selected):
        severity = assessment.ai_severity
    return f"HealthWise Hub URGENT: {patient_name} reported {severity} symptoms. Please check on them immediately."


def _notify_sms(patient, text):
    phone = patient.get('emergencyContactPhone')
    if not phone:
        return NotificationOutcome('sms', SKIPPED, "no emergency contact phone on file")
    try:
        send_sms_alert(phone, text)
    except Exception as e:
        logger.exception("SMS alert for patient %s failed", patient.get('_id'))
        return NotificationOutcome('sms', FAILED, f"SMS alert to {phone} failed: {e}")
    return NotificationOutcome('sms', SENT, f"SMS alert logged for emergency contact {phone}")


def _notify_email(emailer, patient, description):
    address = patient.get('emergencyContactEmail')
    if not address:
        return NotificationOutcome('email', SKIPPED, "no emergency contact email on file")
    try:
        ok, error = emailer.send_severe_symptom_alert(address, patient.get('displayName', 'Patient'), description)
    except Exception as e:
        logger.exception("Email alert for patient %s failed", patient.get('_id'))
        ok, error = False, str(e)
    if not ok:
        return NotificationOutcome('email', FAILED, f"email to {address} failed: {error}")
    return NotificationOutcome('email', SENT, f"email alert sent to {address}")


def _notify_chat(store, patient, sender_name, text):
    doctor_id = patient.get('assignedDoctorId')
    if not doctor_id:
        return NotificationOutcome('chat', SKIPPED, "no assigned doctor on file")
    try:
        post_system_message(store, sender_name, patient['_id'], doctor_id, text)
    except Exception as e:
        logger.exception("Chat alert for patient %s failed", patient.get('_id'))
        return NotificationOutcome('chat', FAILED, f"{sender_name} message to doctor failed: {e}")
    return NotificationOutcome('chat', SENT, f"{sender_name} message posted to assigned doctor")


def fan_out(store, emailer, patient, report, assessment, critical):
    name = patient.get('displayName', 'Patient')
    description = report['description']
    selected = report['severity']

    if critical:
        logger.warning("[ALERT] Critical symptom report from patient %s", patient.get('_id'))
        return [
            _notify_sms(patient, build_sms_text(name, selected, assessment)),
            _notify_email(emailer, patient, description),
            _notify_chat(store, patient, SYSTEM_ALERT_SENDER, build_alert_text(name, description, selected, assessment)),
        ]

    if assessment is None or not assessment.follow_up_suggestion:
        # non-critical reports without a follow-up are not surfaced to the doctor
        if not patient.get('assignedDoctorId'):
            return [NotificationOutcome('chat', SKIPPED, "no assigned doctor on file")]
        return [NotificationOutcome('chat', SKIPPED, "non-critical report with no follow-up suggestion")]

    return [_notify_chat(store, patient, SYSTEM_INFO_SENDER, build_info_text(name, description, selected, assessment))]
