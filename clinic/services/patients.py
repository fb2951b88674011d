import logging
import secrets

from django.db import transaction
from django.utils import timezone

from clinic.models import Patient, User

logger = logging.getLogger(__name__)

# serializer key -> Patient column
PROFILE_FIELDS = {
    'dateOfBirth': 'date_of_birth',
    'gender': 'gender',
    'address': 'address',
    'emergencyContactName': 'emergency_contact_name',
    'emergencyContactPhone': 'emergency_contact_phone',
    'medicalHistory': 'medical_history',
    'allergies': 'allergies',
    'bloodGroup': 'blood_group',
    'admitDate': 'admit_date',
    'admitTime': 'admit_time',
    'wardNumber': 'ward_number',
    'problem': 'problem',
    'diagnosis': 'diagnosis',
    'treatmentPlan': 'treatment_plan',
    'notes': 'notes',
    'doctor': 'doctor',
}

USER_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'phone': 'phone',
    'email': 'email',
}


def placeholder_email(first_name: str, last_name: str) -> str:
    """Unique throwaway address for patients registered without one."""
    stamp = int(timezone.now().timestamp() * 1000)
    slug = f"{first_name}.{last_name}".lower().replace(' ', '')
    return f"{slug}.{stamp}.{secrets.token_hex(3)}@temp.patient.local"


def _unique_username(email: str) -> str:
    base = email.split('@')[0][:120] or 'patient'
    username = base
    while User.objects.filter(username=username).exists():
        username = f"{base}-{secrets.token_hex(3)}"
    return username


def create_patient_user(*, first_name: str, last_name: str, email: str = '', phone: str = '',
                        password: str | None = None) -> User:
    """Create a PATIENT user; without a password the account cannot log in."""
    email = email or placeholder_email(first_name, last_name)
    user = User(
        username=_unique_username(email),
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phone or '',
        role=User.ROLE_PATIENT,
    )
    if password:
        user.set_password(password)
    else:
        user.set_unusable_password()
    user.save()
    return user


@transaction.atomic
def create_patient(data: dict) -> Patient:
    """Create user and profile together from validated serializer data."""
    user = create_patient_user(
        first_name=data['firstName'],
        last_name=data['lastName'],
        email=data.get('email') or '',
        phone=data.get('phone') or '',
    )
    profile = Patient(user=user)
    for key, column in PROFILE_FIELDS.items():
        if key in data:
            setattr(profile, column, data[key])
    profile.save()
    logger.info("Created patient %s (user %s)", profile.id, user.id)
    return profile


@transaction.atomic
def update_patient(profile: Patient, data: dict) -> Patient:
    user = profile.user
    user_changed = []
    for key, column in USER_FIELDS.items():
        # blank names/emails from the edit form mean "leave as is"
        if data.get(key) not in (None, ''):
            setattr(user, column, data[key])
            user_changed.append(column)
    if user_changed:
        user.save(update_fields=user_changed + ['updated_at'])
    for key, column in PROFILE_FIELDS.items():
        if key in data:
            setattr(profile, column, data[key])
    profile.save()
    return profile


@transaction.atomic
def delete_patient(profile: Patient) -> None:
    user = profile.user
    profile.delete()
    user.delete()
