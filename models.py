from datetime import datetime
from typing import Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

Severity = Literal['mild', 'moderate', 'severe']
Role = Literal['patient', 'doctor', 'admin']
ReadmissionRisk = Literal['low', 'medium', 'high']
SuggestionStatus = Literal['pending', 'approved', 'rejected']

SEVERITIES = ('mild', 'moderate', 'severe')
ROLES = ('patient', 'doctor', 'admin')

SYSTEM_SENDER_ID = 'system'
SYSTEM_ALERT_SENDER = 'System Alert'
SYSTEM_INFO_SENDER = 'System Info'


class SymptomReport(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    patient_id: ObjectId
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    severity: Severity
    description: str
    user_id: str

    def is_severe(self):
        return self.severity == 'severe'

    def to_document(self):
        return {
            'patientId': self.patient_id,
            'timestamp': self.timestamp,
            'severity': self.severity,
            'description': self.description,
            'userId': self.user_id,
        }


class SeverityAssessment(BaseModel):
    """Classifier output for one report. Never stored."""
    model_config = ConfigDict(frozen=True)

    ai_severity: Severity = Field(..., description="The severity level determined by the analysis.")
    justification: str = Field(
        ..., description="Reasoning for the severity, citing the symptoms, risks or vitals that drove it."
    )
    alert_recommended: bool = Field(
        ..., description="Whether a critical alert (urgent doctor review or emergency services) is recommended."
    )
    follow_up_suggestion: Optional[str] = Field(
        default=None, description="Optional question or check the doctor should follow up on."
    )


class ChatMessage(BaseModel):
    chat_id: str
    sender_id: str
    sender_name: str
    receiver_id: str
    text: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    is_read: bool = False

    def to_document(self):
        return {
            'chatId': self.chat_id,
            'senderId': self.sender_id,
            'senderName': self.sender_name,
            'receiverId': self.receiver_id,
            'text': self.text,
            'timestamp': self.timestamp,
            'isRead': self.is_read,
        }


class SessionUser(BaseModel):
    user_id: str
    role: Role
    display_name: str
    email: str
    requires_password_change: bool = False


class NewUser(BaseModel):
    email: str
    display_name: str
    role: Role
    specialty: Optional[str] = None
    assigned_doctor_id: Optional[str] = None
    medical_history: Optional[str] = None
    readmission_risk: Optional[ReadmissionRisk] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_email: Optional[str] = None


class AppointmentSuggestion(BaseModel):
    appointment_reason: str = Field(..., description="The suggested reason for the appointment.")
    proposed_timeframe: str = Field(
        ..., description='A human-readable suggested timeframe, e.g. "within 3 days" or "next week".'
    )
    patient_id: str
    patient_name: str
    doctor_id: str
    doctor_name: str


class HealthTrendAnalysis(BaseModel):
    is_trend_concerning: bool = Field(..., description="Whether any concerning trends were identified.")
    trend_summary: Optional[str] = Field(
        default=None, description="What the trend is and why it is concerning. Null if nothing concerning."
    )
    suggested_action_for_doctor: Optional[str] = Field(
        default=None, description="A concrete step for the doctor to consider. Null if nothing concerning."
    )
