import logging
import secrets
from datetime import datetime

from passlib.hash import pbkdf2_sha256

from database import serialize, to_object_id

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def authenticate(store, email, password):
    """Returns the user document for valid credentials, else None."""
    credential = store.credentials.find_one({'email': email})
    if not credential or not pbkdf2_sha256.verify(password, credential['passwordHash']):
        return None
    user = store.users.find_one({'_id': credential['userId']})
    if not user:
        logger.error("Credential for %s points at a missing user profile", email)
        return None
    store.users.update_one({'_id': user['_id']}, {'$set': {'lastSignInTime': datetime.utcnow()}})
    user['requiresPasswordChange'] = credential.get('requiresPasswordChange', False)
    return user


def register_user(store, new_user):
    """Create a profile plus credentials with a temporary password.

    Returns (success, detail) where detail is (user_doc, temporary_password)
    on success and an error message otherwise.
    """
    if store.credentials.find_one({'email': new_user.email}):
        return False, "Email already registered"

    doc = {
        'email': new_user.email,
        'displayName': new_user.display_name,
        'role': new_user.role,
        'creationTime': datetime.utcnow(),
    }
    if new_user.role == 'doctor':
        doc['specialty'] = new_user.specialty
    elif new_user.role == 'patient':
        if new_user.assigned_doctor_id:
            doctor = store.users.find_one({'_id': to_object_id(new_user.assigned_doctor_id), 'role': 'doctor'})
            if not doctor:
                return False, "Assigned doctor not found"
            doc['assignedDoctorId'] = str(doctor['_id'])
            doc['assignedDoctorName'] = doctor['displayName']
        doc.update({
            'medicalHistory': new_user.medical_history,
            'readmissionRisk': new_user.readmission_risk,
            'emergencyContactPhone': new_user.emergency_contact_phone,
            'emergencyContactEmail': new_user.emergency_contact_email,
        })

    temporary_password = secrets.token_urlsafe(9)
    doc['_id'] = store.users.insert_one(doc).inserted_id
    store.credentials.insert_one({
        'userId': doc['_id'],
        'email': new_user.email,
        'passwordHash': pbkdf2_sha256.hash(temporary_password),
        'requiresPasswordChange': True,
    })
    logger.info("Created %s account %s", new_user.role, doc['_id'])
    return True, (doc, temporary_password)


def change_password(store, user_id, new_password, confirm_password):
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
    if new_password != confirm_password:
        return False, "Passwords do not match."
    result = store.credentials.update_one(
        {'userId': user_id},
        {'$set': {'passwordHash': pbkdf2_sha256.hash(new_password), 'requiresPasswordChange': False}},
    )
    if result.matched_count == 0:
        return False, "Credentials not found."
    return True, None


def list_users(store):
    return [serialize(u) for u in store.users.find({})]


def user_profile(store, user_id):
    return serialize(store.users.find_one({'_id': user_id}))
