"""LLM prompt wrappers used by the doctor and patient dashboards."""
import logging
from typing import Optional

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from models import AppointmentSuggestion, HealthTrendAnalysis
from services.llm_service import coerce, structured_chain

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    pass


class HistorySummary(BaseModel):
    summary: str = Field(..., description="A concise summary of the patient medical history.")


class CarePlan(BaseModel):
    care_plan: str = Field(..., description="The generated care plan for the patient.")


class SuggestedInterventions(BaseModel):
    suggested_interventions: str = Field(
        ..., description="Suggested interventions based on the patient data and risk predictions."
    )


class AppointmentDraft(BaseModel):
    appointment_reason: Optional[str] = Field(default=None, description="The suggested reason for the appointment.")
    proposed_timeframe: Optional[str] = Field(
        default=None, description='When the appointment should happen, e.g. "within 3 days".'
    )


SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You are an AI assistant helping doctors quickly understand a patient's medical history. "
               "The summary should be concise and highlight the most important details for a doctor making treatment decisions."),
    ("human", "Summarize the following medical history for patient ID {patient_id}.\nMedical History: {medical_history}"),
])

CARE_PLAN_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You are an AI assistant specialized in generating personalized care plans for patients post-discharge. "
               "The doctor will adjust and approve the plan, so make it detailed and actionable."),
    ("human", """Generate a care plan for patient with ID {patient_id} based on their predicted risks.

Patient Medical History: {medical_history}
Patient Current Medications: {current_medications}
Predicted Risks: {predicted_risks}"""),
])

INTERVENTIONS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are an AI assistant specialized in generating suggested interventions for patients based on their health data and risk predictions.
The interventions should be specific, actionable, personalized, and easy for a doctor to understand and implement.
Focus on lifestyle adjustments, medication reminders or clarifications (never suggest changing dosages or medications themselves), and potential follow-up actions."""),
    ("human", """Patient health data:
{patient_health_data}

Risk predictions:
{risk_predictions}"""),
])

TRENDS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are an AI clinical data analyst assisting a doctor. Analyze patient health data trends, medication adherence, and their overall risk profile to identify concerning patterns that might require medical attention.
Look for:
- Sustained vital signs outside normal ranges (elevated heart rate, unstable blood glucose).
- Significant negative changes in activity levels, such as a sudden drop in steps.
- Poor adherence to critical medications, especially combined with other risk factors or abnormal vitals.
If a concerning trend exists, give a concise trend summary and a specific, actionable suggested action for the doctor.
If nothing is concerning, set is_trend_concerning to false and leave the summary and action empty."""),
    ("human", """Patient ID: {patient_id}
Patient Risk Profile:
{patient_risk_profile}

Recent Health Data Summary:
{recent_health_data_summary}

Medication Adherence Summary:
{medication_adherence_summary}"""),
])

APPOINTMENT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You are an AI assistant helping doctors manage high-risk patients. Suggest an urgent follow-up appointment: "
               "a concise reason related to managing high readmission risk and a near-term timeframe such as \"within 3 days\"."),
    ("human", """Patient Name: {patient_name} (ID: {patient_id})
Assigned Doctor: {doctor_name} (ID: {doctor_id})
Current Readmission Risk: {readmission_risk}"""),
])


class CareAI:
    def __init__(self, llm):
        self.llm = llm

    def _run(self, prompt, schema, inputs):
        if self.llm is None:
            raise AIServiceError("AI service is not configured.")
        try:
            result = coerce(structured_chain(prompt, self.llm, schema).invoke(inputs), schema)
        except Exception as e:
            logger.exception("%s generation failed", schema.__name__)
            raise AIServiceError(f"AI request failed: {e}") from e
        return result

    def _require(self, result, what):
        if result is None:
            raise AIServiceError(f"AI failed to produce a {what}.")
        return result

    def summarize_history(self, patient_id, medical_history):
        result = self._run(SUMMARY_PROMPT, HistorySummary, {
            "patient_id": patient_id,
            "medical_history": medical_history or "No medical history recorded.",
        })
        return self._require(result, "history summary")

    def generate_care_plan(self, patient_id, medical_history, current_medications, predicted_risks):
        result = self._run(CARE_PLAN_PROMPT, CarePlan, {
            "patient_id": patient_id,
            "medical_history": medical_history or "No medical history recorded.",
            "current_medications": current_medications,
            "predicted_risks": predicted_risks,
        })
        return self._require(result, "care plan")

    def suggest_interventions(self, patient_health_data, risk_predictions):
        result = self._run(INTERVENTIONS_PROMPT, SuggestedInterventions, {
            "patient_health_data": patient_health_data,
            "risk_predictions": risk_predictions,
        })
        return self._require(result, "list of interventions")

    def analyze_health_trends(self, patient_id, risk_profile, health_summary, adherence_summary):
        try:
            output = self._run(TRENDS_PROMPT, HealthTrendAnalysis, {
                "patient_id": patient_id,
                "patient_risk_profile": risk_profile,
                "recent_health_data_summary": health_summary,
                "medication_adherence_summary": adherence_summary,
            })
        except AIServiceError:
            output = None
        if output is None:
            logger.warning("No structured trend analysis for patient %s", patient_id)
            return HealthTrendAnalysis(is_trend_concerning=False, trend_summary="AI analysis failed to produce a result.")
        if not output.is_trend_concerning:
            return HealthTrendAnalysis(is_trend_concerning=False)
        return output

    def suggest_appointment(self, patient_id, patient_name, readmission_risk, doctor_id, doctor_name):
        """None unless the patient is high risk. Identity fields always come from the caller."""
        if readmission_risk != 'high':
            return None
        draft = self._run(APPOINTMENT_PROMPT, AppointmentDraft, {
            "patient_id": patient_id,
            "patient_name": patient_name,
            "doctor_id": doctor_id,
            "doctor_name": doctor_name,
            "readmission_risk": readmission_risk,
        })
        if draft is None or not draft.appointment_reason:
            return AppointmentSuggestion(
                appointment_reason=f"Follow-up for high-risk patient {patient_name}.",
                proposed_timeframe="Within 3-5 days",
                patient_id=patient_id, patient_name=patient_name,
                doctor_id=doctor_id, doctor_name=doctor_name,
            )
        return AppointmentSuggestion(
            appointment_reason=draft.appointment_reason,
            proposed_timeframe=draft.proposed_timeframe or "Within 3-5 days",
            patient_id=patient_id, patient_name=patient_name,
            doctor_id=doctor_id, doctor_name=doctor_name,
        )
