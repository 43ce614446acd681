import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pymongo import DESCENDING

from database import serialize
from models import SEVERITIES, SeverityAssessment, SymptomReport
from services.alert_service import NotificationOutcome, decide, fan_out
from services.severity_service import latest_vitals_summary, risk_profile_summary

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    report: dict
    critical: bool
    assessment: Optional[SeverityAssessment] = None
    notifications: List[NotificationOutcome] = field(default_factory=list)

    def to_dict(self):
        return {
            "report": serialize(self.report),
            "critical": self.critical,
            "assessment": self.assessment.model_dump() if self.assessment else None,
            "notifications": [n.to_dict() for n in self.notifications],
            "status": [str(n) for n in self.notifications],
        }


def validate_report(severity, description):
    if severity not in SEVERITIES:
        return "Severity must be one of: mild, moderate, severe."
    if not isinstance(description, str) or not description.strip():
        return "Symptom description is required."
    return None


def submit_symptom_report(store, classifier, emailer, patient, severity, description):
    """Persist a report, then assess it and notify. Only the insert may raise."""
    error = validate_report(severity, description)
    if error:
        raise ValueError(error)

    patient_id = patient['_id']
    report = SymptomReport(
        patient_id=patient_id,
        severity=severity,
        description=description.strip(),
        user_id=str(patient_id),
    )
    doc = report.to_document()
    doc['_id'] = store.symptom_reports.insert_one(doc).inserted_id
    logger.info("Symptom report %s stored for patient %s (%s)", doc['_id'], patient_id, severity)

    try:
        risk_profile = risk_profile_summary(patient)
        vitals = latest_vitals_summary(store, patient_id)
    except Exception:
        logger.exception("Could not build classifier context for patient %s", patient_id)
        assessment = None
    else:
        assessment = classifier.assess(patient_id, report.description, risk_profile, vitals, severity)

    critical = decide(severity, assessment)
    notifications = fan_out(store, emailer, patient, doc, assessment, critical)
    for outcome in notifications:
        logger.info("[NOTIFICATION] %s", outcome)

    return SubmissionResult(report=doc, critical=critical, assessment=assessment, notifications=notifications)


def list_symptom_reports(store, patient_id, limit=None):
    cursor = store.symptom_reports.find({'patientId': patient_id}).sort('timestamp', DESCENDING)
    if limit:
        cursor = cursor.limit(limit)
    return [serialize(r) for r in cursor]
