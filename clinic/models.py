"""
Database models for the iHealth backend.

Users carry a single role (ADMIN, DOCTOR, STAFF or PATIENT).  Patients and
doctors keep their domain specific details in one-to-one profiles so that
authentication stays on the user table.  Appointments link the two, and the
pharmacy inventory lives in :class:`Medicine`.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class User(AbstractUser):
    """Custom user model with a role used for every permission decision."""
    ROLE_ADMIN = 'ADMIN'
    ROLE_DOCTOR = 'DOCTOR'
    ROLE_STAFF = 'STAFF'
    ROLE_PATIENT = 'PATIENT'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_PATIENT, 'Patient'),
    ]
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=32, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Doctor(models.Model):
    """Professional profile of a user with the DOCTOR role."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    license_number = models.CharField(max_length=64, unique=True)
    specialization = models.CharField(max_length=128, db_index=True)
    qualification = models.CharField(max_length=255, blank=True)
    experience = models.PositiveIntegerField(default=0, help_text="Years of practice")
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    department = models.CharField(max_length=128, blank=True)
    designation = models.CharField(max_length=128, blank=True)
    biography = models.TextField(blank=True)
    languages = models.JSONField(default=list, blank=True)
    address = models.CharField(max_length=255, blank=True)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Dr. {self.user.get_full_name() or self.user.username} ({self.specialization})"


class DoctorSchedule(models.Model):
    """Working hours of a doctor for one weekday (0 = Sunday .. 6 = Saturday)."""
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='schedules')
    day_of_week = models.PositiveSmallIntegerField(validators=[MinValueValidator(0), MaxValueValidator(6)])
    start_time = models.CharField(max_length=5, help_text="HH:MM")
    end_time = models.CharField(max_length=5, help_text="HH:MM")
    is_active = models.BooleanField(default=True)

    class Meta:
        unique_together = [('doctor', 'day_of_week')]
        ordering = ['day_of_week']

    def __str__(self) -> str:
        return f"{self.doctor_id}@{self.day_of_week} {self.start_time}-{self.end_time}"


class Patient(models.Model):
    """Demographic and clinical profile of a user with the PATIENT role."""
    GENDER_CHOICES = [
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
        ('OTHER', 'Other'),
    ]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, default='OTHER')
    address = models.CharField(max_length=255, blank=True)
    emergency_contact_name = models.CharField(max_length=128, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)
    medical_history = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    blood_group = models.CharField(max_length=3, blank=True)
    # Admission
    admit_date = models.DateField(null=True, blank=True)
    admit_time = models.CharField(max_length=5, blank=True)
    ward_number = models.CharField(max_length=32, blank=True)
    # Clinical notes
    problem = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    treatment_plan = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    doctor = models.ForeignKey(
        Doctor, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.user.get_full_name() or self.user.username


class Appointment(models.Model):
    TYPE_CHOICES = [
        ('CONSULTATION', 'Consultation'),
        ('FOLLOW_UP', 'Follow up'),
        ('CHECK_UP', 'Check up'),
        ('EMERGENCY', 'Emergency'),
        ('SURGERY', 'Surgery'),
    ]
    STATUS_SCHEDULED = 'SCHEDULED'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_NO_SHOW = 'NO_SHOW'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]
    ACTIVE_STATUSES = (STATUS_SCHEDULED, STATUS_CONFIRMED, STATUS_IN_PROGRESS)

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='appointments')
    booked_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='booked_appointments'
    )
    # Walk-in bookings record the name as typed at the desk
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    date = models.DateField()
    time = models.CharField(max_length=5, null=True, blank=True, help_text="HH:MM")
    duration = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(15), MaxValueValidator(180)]
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default='CONSULTATION')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    notes = models.TextField(blank=True)
    symptoms = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    prescription = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date', 'time'], name='clinic_appt_doc_date_time_idx'),
            models.Index(fields=['patient', 'date'], name='clinic_appt_pat_date_idx'),
            models.Index(fields=['created_at'], name='clinic_appt_created_idx'),
        ]

    def __str__(self) -> str:
        return f"appt {self.id} d={self.doctor_id} p={self.patient_id} {self.date} {self.time or '--:--'}"


class Medicine(models.Model):
    FORM_CHOICES = [
        ('TABLET', 'Tablet'),
        ('CAPSULE', 'Capsule'),
        ('SYRUP', 'Syrup'),
        ('INJECTION', 'Injection'),
        ('CREAM', 'Cream'),
        ('DROPS', 'Drops'),
        ('INHALER', 'Inhaler'),
    ]
    name = models.CharField(max_length=255, db_index=True)
    generic_name = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=128)
    manufacturer = models.CharField(max_length=255, blank=True)
    dosage = models.CharField(max_length=64, help_text="Strength, e.g. 500mg")
    form = models.CharField(max_length=16, choices=FORM_CHOICES, default='TABLET')
    price = models.DecimalField(max_digits=10, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)
    min_stock_level = models.PositiveIntegerField(default=10)
    expiry_date = models.DateField(db_index=True)
    batch_number = models.CharField(max_length=64, blank=True)
    description = models.TextField(blank=True)
    side_effects = models.TextField(blank=True)
    requires_prescription = models.BooleanField(default=False)
    is_controlled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} {self.dosage}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audit_object_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}#{self.object_id}"
