import logging

from langchain_core.prompts import ChatPromptTemplate
from pymongo import DESCENDING

from models import SeverityAssessment
from services.llm_service import coerce, structured_chain

logger = logging.getLogger(__name__)

SEVERITY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are an AI clinical decision support assistant. Your role is to analyze patient-reported symptoms in conjunction with their risk profile and latest vital signs to determine an objective severity level.

Based on your analysis:
1. Determine the objective severity: 'mild', 'moderate', or 'severe'. This may differ from the patient's self-assessment.
2. Provide a concise justification, mentioning the specific symptoms, risks or vital signs that influenced your decision.
3. Recommend whether a critical alert is necessary. A critical alert implies potential need for immediate medical intervention or emergency services. Recommend one if the severity is 'severe' or if a combination of symptoms, risks and vitals suggests an urgent situation even when overall severity seems moderate.
4. If there is a specific question or check the doctor should follow up on, provide it as a short follow-up suggestion; otherwise leave it empty.

Prioritize patient safety. If in doubt, recommend a critical alert.
If the patient self-selected 'severe', your severity should also be 'severe' with a critical alert recommended, unless there is overwhelming evidence that this is a gross misjudgment.
If the symptoms are vague or minor and vitals and risk profile are stable, 'mild' or 'moderate' with no critical alert is appropriate."""),
    ("human", """Patient ID: {patient_id}
Symptom Description Reported by Patient: "{symptom_description}"
Patient's Manually Selected Severity: {manually_selected_severity}

Patient's Known Risk Profile:
{patient_risk_profile}

Patient's Latest Vital Signs:
{latest_vitals}"""),
])


def risk_profile_summary(patient):
    risk = patient.get('readmissionRisk') or 'unknown'
    history = patient.get('medicalHistory') or 'none recorded'
    return f"Readmission risk: {risk}. Medical history: {history}"


def latest_vitals_summary(store, patient_id):
    latest = store.health_data.find_one({'patientId': patient_id}, sort=[('timestamp', DESCENDING)])
    if not latest:
        return "No recent vitals recorded."
    parts = []
    if latest.get('heartRate') is not None:
        parts.append(f"Heart Rate: {latest['heartRate']} bpm")
    if latest.get('bloodGlucose') is not None:
        parts.append(f"Blood Glucose: {latest['bloodGlucose']} mg/dL")
    if latest.get('steps') is not None:
        parts.append(f"Steps: {latest['steps']}")
    if not parts:
        return "No recent vitals recorded."
    return ", ".join(parts) + f" (recorded {latest['timestamp'].isoformat()})"


class SeverityClassifier:
    """Wraps the severity prompt. `assess` returns None whenever no usable assessment came back."""

    def __init__(self, llm):
        self.llm = llm
        self.chain = structured_chain(SEVERITY_PROMPT, llm, SeverityAssessment) if llm is not None else None

    def assess(self, patient_id, description, risk_profile, latest_vitals, selected):
        if self.chain is None:
            logger.warning("Severity classifier is not configured; using manual severity for patient %s", patient_id)
            return None
        try:
            result = self.chain.invoke({
                "patient_id": str(patient_id),
                "symptom_description": description,
                "manually_selected_severity": selected,
                "patient_risk_profile": risk_profile,
                "latest_vitals": latest_vitals,
            })
            assessment = coerce(result, SeverityAssessment)
        except Exception:
            logger.exception("Severity classification failed for patient %s", patient_id)
            return None
        if assessment is None:
            logger.warning("Classifier produced no structured output for patient %s", patient_id)
        return assessment
