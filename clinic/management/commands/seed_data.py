"""
Management command to populate the database with demo data.

Safe to run repeatedly: every record is looked up by a natural key
(email, license number, batch number) before it is created.
"""
from datetime import date, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import Appointment, Doctor, DoctorSchedule, Medicine, Patient, User

WEEKDAYS = [1, 2, 3, 4, 5]  # Monday to Friday

DOCTORS = [
    ('dr.wilson@ihealth.com', 'Sarah', 'Wilson', 'MD001234', 'Cardiology', 'MD, FACC', 15, '200.00'),
    ('dr.brown@ihealth.com', 'Michael', 'Brown', 'MD005678', 'Neurology', 'MD, PhD', 12, '250.00'),
    ('dr.anderson@ihealth.com', 'Emily', 'Anderson', 'MD009012', 'Pediatrics', 'MD, FAAP', 8, '150.00'),
]

PATIENTS = [
    ('john.smith@email.com', 'John', 'Smith', date(1985, 5, 15), 'MALE', 'O+', 'Penicillin'),
    ('emma.johnson@email.com', 'Emma', 'Johnson', date(1992, 8, 22), 'FEMALE', 'A+', 'None known'),
    ('robert.davis@email.com', 'Robert', 'Davis', date(1978, 11, 8), 'MALE', 'B+', 'Shellfish'),
]

# name, generic, category, manufacturer, dosage, form, price, stock, min level, expiry offset (days), batch
MEDICINES = [
    ('Aspirin', 'Acetylsalicylic Acid', 'Pain Relief', 'PharmaCorp', '325mg', 'TABLET', '5.99', 500, 50, 400, 'ASP001'),
    ('Lisinopril', 'Lisinopril', 'Blood Pressure', 'CardioMed', '10mg', 'TABLET', '15.50', 20, 25, 300, 'LIS002'),
    ('Metformin', 'Metformin HCl', 'Diabetes', 'DiabetesCare', '500mg', 'TABLET', '12.00', 300, 30, 20, 'MET003'),
    ('Amoxicillin', 'Amoxicillin', 'Antibiotics', 'AntibioTech', '250mg', 'CAPSULE', '18.75', 150, 20, -10, 'AMX004'),
    ('Vitamin D3', 'Cholecalciferol', 'Vitamins', 'VitaHealth', '1000 IU', 'TABLET', '8.99', 400, 40, 500, 'VIT005'),
]


class Command(BaseCommand):
    help = 'Populate the database with demo users, doctors, patients, medicines and appointments'

    @transaction.atomic
    def handle(self, *args, **options):
        admin = self.ensure_user('admin@ihealth.com', 'admin123', 'Admin', 'User', User.ROLE_ADMIN,
                                 is_staff=True, is_superuser=True)
        self.ensure_user('staff@ihealth.com', 'staff123', 'Front', 'Desk', User.ROLE_STAFF)
        doctors = self.create_doctors()
        patients = self.create_patients()
        self.create_medicines()
        self.create_appointments(admin, doctors, patients)
        self.stdout.write(self.style.SUCCESS('Demo data ready.'))
        self.stdout.write('Admin: admin@ihealth.com / admin123')
        self.stdout.write('Doctors: dr.wilson@ihealth.com, dr.brown@ihealth.com, dr.anderson@ihealth.com / doctor123')
        self.stdout.write('Patients: john.smith@email.com, emma.johnson@email.com, robert.davis@email.com / patient123')

    def ensure_user(self, email, password, first_name, last_name, role, **extra):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                'username': email.split('@')[0],
                'first_name': first_name,
                'last_name': last_name,
                'role': role,
                **extra,
            },
        )
        if created:
            user.set_password(password)
            user.save(update_fields=['password'])
            self.stdout.write(f'created {role.lower()} {email}')
        return user

    def create_doctors(self):
        doctors = []
        for email, first, last, license_number, specialization, qualification, years, fee in DOCTORS:
            user = self.ensure_user(email, 'doctor123', first, last, User.ROLE_DOCTOR)
            doctor, _ = Doctor.objects.get_or_create(
                user=user,
                defaults={
                    'license_number': license_number,
                    'specialization': specialization,
                    'qualification': qualification,
                    'experience': years,
                    'consultation_fee': Decimal(fee),
                },
            )
            for day in WEEKDAYS:
                DoctorSchedule.objects.get_or_create(
                    doctor=doctor, day_of_week=day,
                    defaults={'start_time': '09:00', 'end_time': '17:00'},
                )
            doctors.append(doctor)
        return doctors

    def create_patients(self):
        patients = []
        for email, first, last, dob, gender, blood_group, allergies in PATIENTS:
            user = self.ensure_user(email, 'patient123', first, last, User.ROLE_PATIENT)
            patient, _ = Patient.objects.get_or_create(
                user=user,
                defaults={
                    'date_of_birth': dob,
                    'gender': gender,
                    'blood_group': blood_group,
                    'allergies': allergies,
                },
            )
            patients.append(patient)
        return patients

    def create_medicines(self):
        today = timezone.localdate()
        for (name, generic, category, maker, dosage, form, price, stock,
             min_level, expiry_offset, batch) in MEDICINES:
            Medicine.objects.get_or_create(
                batch_number=batch,
                defaults={
                    'name': name,
                    'generic_name': generic,
                    'category': category,
                    'manufacturer': maker,
                    'dosage': dosage,
                    'form': form,
                    'price': Decimal(price),
                    'stock': stock,
                    'min_stock_level': min_level,
                    'expiry_date': today + timedelta(days=expiry_offset),
                },
            )

    def create_appointments(self, admin, doctors, patients):
        if Appointment.objects.exists():
            return
        today = timezone.localdate()
        Appointment.objects.create(
            patient=patients[0], doctor=doctors[0], booked_by=admin,
            date=today + timedelta(days=1), time='10:00', duration=30,
            type='CONSULTATION', status=Appointment.STATUS_SCHEDULED,
            notes='Regular checkup', symptoms='General wellness check',
        )
        Appointment.objects.create(
            patient=patients[1], doctor=doctors[1], booked_by=admin,
            date=today + timedelta(days=7), time='14:30', duration=45,
            type='FOLLOW_UP', status=Appointment.STATUS_CONFIRMED,
            notes='Follow-up for previous treatment', symptoms='Headaches, dizziness',
        )
