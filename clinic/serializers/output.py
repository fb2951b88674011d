"""
Response shapes.

Plain functions turning model instances into the camelCase dictionaries
the frontend consumes.  Nested user blocks only carry the fields the
screens display.
"""
from __future__ import annotations

from clinic.models import Appointment, Doctor, DoctorSchedule, Medicine, Patient, User


def _iso(value):
    return value.isoformat() if value else None


def user_brief(user: User | None, *, contact: bool = True) -> dict | None:
    if user is None:
        return None
    data = {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
    }
    if contact:
        data['email'] = user.email
        data['phone'] = user.phone
    return data


def user_dict(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'phone': user.phone,
        'role': user.role,
        'isActive': user.is_active,
        'createdAt': _iso(user.date_joined),
        'lastLogin': _iso(user.last_login),
    }


def schedule_dict(schedule: DoctorSchedule) -> dict:
    return {
        'id': schedule.id,
        'doctorId': schedule.doctor_id,
        'dayOfWeek': schedule.day_of_week,
        'startTime': schedule.start_time,
        'endTime': schedule.end_time,
        'isActive': schedule.is_active,
    }


def doctor_dict(doctor: Doctor, *, with_schedules: bool = True) -> dict:
    data = {
        'id': doctor.id,
        'userId': doctor.user_id,
        'user': user_brief(doctor.user),
        'licenseNumber': doctor.license_number,
        'specialization': doctor.specialization,
        'qualification': doctor.qualification,
        'experience': doctor.experience,
        'consultationFee': float(doctor.consultation_fee),
        'department': doctor.department,
        'designation': doctor.designation,
        'biography': doctor.biography,
        'languages': doctor.languages,
        'address': doctor.address,
        'isAvailable': doctor.is_available,
        'createdAt': _iso(doctor.created_at),
        'updatedAt': _iso(doctor.updated_at),
    }
    if with_schedules:
        data['schedules'] = [schedule_dict(s) for s in doctor.schedules.all()]
    appointment_count = getattr(doctor, 'appointment_count', None)
    if appointment_count is not None:
        data['_count'] = {'appointments': appointment_count}
    return data


def patient_dict(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'userId': patient.user_id,
        'user': user_brief(patient.user),
        'dateOfBirth': _iso(patient.date_of_birth),
        'gender': patient.gender,
        'address': patient.address,
        'emergencyContactName': patient.emergency_contact_name,
        'emergencyContactPhone': patient.emergency_contact_phone,
        'medicalHistory': patient.medical_history,
        'allergies': patient.allergies,
        'bloodGroup': patient.blood_group,
        'admitDate': _iso(patient.admit_date),
        'admitTime': patient.admit_time,
        'wardNumber': patient.ward_number,
        'problem': patient.problem,
        'diagnosis': patient.diagnosis,
        'treatmentPlan': patient.treatment_plan,
        'notes': patient.notes,
        'doctorId': patient.doctor_id,
        'createdAt': _iso(patient.created_at),
        'updatedAt': _iso(patient.updated_at),
    }


def appointment_dict(appointment: Appointment) -> dict:
    return {
        'id': appointment.id,
        'patientId': appointment.patient_id,
        'doctorId': appointment.doctor_id,
        'userId': appointment.booked_by_id,
        'firstName': appointment.first_name,
        'lastName': appointment.last_name,
        'date': _iso(appointment.date),
        'time': appointment.time,
        'duration': appointment.duration,
        'type': appointment.type,
        'status': appointment.status,
        'notes': appointment.notes,
        'symptoms': appointment.symptoms,
        'diagnosis': appointment.diagnosis,
        'prescription': appointment.prescription,
        'createdAt': _iso(appointment.created_at),
        'updatedAt': _iso(appointment.updated_at),
        'patient': {
            'id': appointment.patient_id,
            'user': user_brief(appointment.patient.user),
        },
        'doctor': {
            'id': appointment.doctor_id,
            'specialization': appointment.doctor.specialization,
            'user': user_brief(appointment.doctor.user, contact=False),
        },
    }


def medicine_dict(medicine: Medicine) -> dict:
    return {
        'id': medicine.id,
        'name': medicine.name,
        'genericName': medicine.generic_name,
        'category': medicine.category,
        'manufacturer': medicine.manufacturer,
        'dosage': medicine.dosage,
        'form': medicine.form,
        'price': float(medicine.price),
        'stock': medicine.stock,
        'minStockLevel': medicine.min_stock_level,
        'expiryDate': _iso(medicine.expiry_date),
        'batchNumber': medicine.batch_number,
        'description': medicine.description,
        'sideEffects': medicine.side_effects,
        'requiresPrescription': medicine.requires_prescription,
        'isControlled': medicine.is_controlled,
        'createdAt': _iso(medicine.created_at),
        'updatedAt': _iso(medicine.updated_at),
    }
