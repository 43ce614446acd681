import logging
import random
from datetime import datetime, timedelta

from bson import ObjectId
from passlib.hash import pbkdf2_sha256

from database import COLLECTIONS
from services.chat_service import chat_id

logger = logging.getLogger(__name__)

ADMIN_ID = ObjectId('607f1f77bcf86cd799439010')
PATIENT_ID_ALICE = ObjectId('607f1f77bcf86cd799439011')
DOCTOR_ID_SMITH = ObjectId('607f1f77bcf86cd799439012')
PATIENT_ID_BOB = ObjectId('607f1f77bcf86cd799439013')
DOCTOR_ID_JONES = ObjectId('607f1f77bcf86cd799439014')

DEMO_PASSWORD = "password"
COMMON_MEDS = ['Metformin', 'Lisinopril', 'Atorvastatin', 'Amlodipine', 'Amoxicillin']


def _users(now):
    return [
        {'_id': ADMIN_ID, 'email': 'admin@healthwise.com', 'displayName': 'Admin User', 'role': 'admin',
         'creationTime': now - timedelta(days=365)},
        {'_id': DOCTOR_ID_SMITH, 'email': 'dr.smith@healthwise.com', 'displayName': 'Dr. John Smith',
         'role': 'doctor', 'specialty': 'Cardiology', 'creationTime': now - timedelta(days=700)},
        {'_id': DOCTOR_ID_JONES, 'email': 'dr.jones@healthwise.com', 'displayName': 'Dr. Emily Jones',
         'role': 'doctor', 'specialty': 'Internal Medicine', 'creationTime': now - timedelta(days=300)},
        {
            '_id': PATIENT_ID_ALICE,
            'email': 'alice.wonder@mail.com',
            'displayName': 'Alice Wonderland',
            'role': 'patient',
            'assignedDoctorId': str(DOCTOR_ID_SMITH),
            'assignedDoctorName': 'Dr. John Smith',
            'creationTime': now - timedelta(days=180),
            'lastActivity': now - timedelta(days=2),
            'readmissionRisk': 'high',
            'medicalHistory': "Diagnosed with Type 2 Diabetes 3 years ago. Past surgery: Appendectomy. Allergic to penicillin.",
            'emergencyContactPhone': '+15550100200',
            'emergencyContactEmail': 'carol.wonder@mail.com',
        },
        {
            '_id': PATIENT_ID_BOB,
            'email': 'bob.builder@mail.com',
            'displayName': 'Bob Builder',
            'role': 'patient',
            'assignedDoctorId': str(DOCTOR_ID_JONES),
            'assignedDoctorName': 'Dr. Emily Jones',
            'creationTime': now - timedelta(days=240),
            'lastActivity': now - timedelta(days=1),
            'readmissionRisk': 'medium',
            'medicalHistory': "History of hypertension. Recovering from minor cardiac event. No known allergies.",
        },
    ]


def seed_database(store, rng=None):
    """Wipe the demo collections and load a fixed cast of users plus generated activity."""
    rng = rng or random.Random()
    now = datetime.utcnow()

    for name in COLLECTIONS:
        store.db[name].delete_many({})
    logger.info("Collections cleared.")

    users = _users(now)
    store.users.insert_many(users)
    password_hash = pbkdf2_sha256.hash(DEMO_PASSWORD)
    store.credentials.insert_many([
        {'userId': u['_id'], 'email': u['email'], 'passwordHash': password_hash, 'requiresPasswordChange': False}
        for u in users
    ])

    patients = [PATIENT_ID_ALICE, PATIENT_ID_BOB]
    health = []
    for patient_id in patients:
        for i in range(30):
            health.append({
                'patientId': patient_id,
                'timestamp': now - timedelta(days=30 - i, hours=rng.randint(0, 12)),
                'steps': rng.randint(1000, 15000),
                'heartRate': rng.randint(60, 120),
                'bloodGlucose': rng.randint(70, 180),
            })
    store.health_data.insert_many(health)

    medications = []
    for patient_id in patients:
        for name in rng.sample(COMMON_MEDS, rng.randint(1, 3)):
            medications.append({
                'patientId': patient_id,
                'name': name,
                'dosage': f"{rng.randint(10, 100)}mg",
                'frequency': rng.choice(['Once daily', 'Twice daily', 'As needed']),
                'lastTaken': now - timedelta(hours=rng.randint(1, 24)),
                'adherence': rng.randint(60, 100),
            })
    store.medications.insert_many(medications)

    reports = [
        {'patientId': PATIENT_ID_ALICE, 'userId': str(PATIENT_ID_ALICE), 'timestamp': now - timedelta(days=4),
         'severity': 'mild', 'description': "Slight dizziness after standing up quickly."},
        {'patientId': PATIENT_ID_ALICE, 'userId': str(PATIENT_ID_ALICE), 'timestamp': now - timedelta(days=1),
         'severity': 'moderate', 'description': "Increased thirst and blurred vision since yesterday."},
        {'patientId': PATIENT_ID_BOB, 'userId': str(PATIENT_ID_BOB), 'timestamp': now - timedelta(days=3),
         'severity': 'mild', 'description': "Mild headache in the mornings."},
    ]
    store.symptom_reports.insert_many(reports)

    suggestions = [
        {'patientId': PATIENT_ID_ALICE, 'timestamp': now - timedelta(days=2), 'status': 'pending',
         'suggestionText': "Consider reviewing Metformin adherence given rising glucose readings."},
        {'patientId': PATIENT_ID_BOB, 'timestamp': now - timedelta(days=1), 'status': 'pending',
         'suggestionText': "Consider home blood pressure monitoring twice daily for two weeks."},
    ]
    store.ai_suggestions.insert_many(suggestions)

    thread = chat_id(DOCTOR_ID_SMITH, PATIENT_ID_ALICE)
    lines = [
        "Hello Alice, how are you feeling since discharge?",
        "Mostly fine, a bit tired in the afternoons.",
        "Please keep logging your glucose readings every morning.",
        "Will do, thank you doctor.",
        "Let me know if the dizziness comes back.",
    ]
    messages = []
    for i, text in enumerate(lines):
        doctor_sends = i % 2 == 0
        messages.append({
            'chatId': thread,
            'senderId': str(DOCTOR_ID_SMITH if doctor_sends else PATIENT_ID_ALICE),
            'senderName': 'Dr. John Smith' if doctor_sends else 'Alice Wonderland',
            'receiverId': str(PATIENT_ID_ALICE if doctor_sends else DOCTOR_ID_SMITH),
            'text': text,
            'timestamp': now - timedelta(hours=48 - i * 2),
            'isRead': True,
        })
    store.chat_messages.insert_many(messages)

    counts = {
        'users': len(users),
        'healthData': len(health),
        'medications': len(medications),
        'symptomReports': len(reports),
        'aiSuggestions': len(suggestions),
        'chatMessages': len(messages),
    }
    logger.info("Database seeded: %s", counts)
    return counts


if __name__ == "__main__":
    from app import create_app
    from database import get_store

    app = create_app()
    with app.app_context():
        seed_database(get_store())
    print("Seed data created.")
