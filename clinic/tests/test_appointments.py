"""
API tests for booking, scoping and the free-slot lookup.
"""
from datetime import timedelta

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from clinic.models import Appointment, Patient, User
from clinic.services.appointments import js_weekday
from clinic.tests.factories import make_appointment, make_doctor, make_patient, make_user, next_monday


class AppointmentAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = make_user(User.ROLE_STAFF)
        self.doctor = make_doctor(working_days=[1], start='09:00', end='11:00')
        self.other_doctor = make_doctor(working_days=[1])
        self.patient = make_patient(first_name='Alice', last_name='Walker')
        self.other_patient = make_patient(first_name='Bob', last_name='Marley')
        self.monday = next_monday()

    def authenticate(self, user) -> None:
        self.client.force_authenticate(user=user)

    def book(self, **body):
        payload = {'doctorId': self.doctor.id, 'date': self.monday.isoformat(), 'time': '09:00'}
        payload.update(body)
        payload = {k: v for k, v in payload.items() if v is not None}
        return self.client.post(reverse('appointments'), payload, format='json')

    def test_staff_books_for_existing_patient(self) -> None:
        self.authenticate(self.staff)
        resp = self.book(patientId=self.patient.id, type='FOLLOW_UP', notes='Bring reports')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertFalse(resp.data['patientCreated'])
        appt = resp.data['appointment']
        self.assertEqual(appt['patient']['id'], self.patient.id)
        self.assertEqual(appt['doctor']['user']['lastName'], 'House')
        self.assertEqual(appt['duration'], 30)
        self.assertEqual(appt['status'], 'SCHEDULED')
        self.assertEqual(appt['userId'], self.staff.id)

    def test_walk_in_creates_placeholder_patient(self) -> None:
        self.authenticate(self.staff)
        before = Patient.objects.count()
        resp = self.book(firstName='Walk', lastName='In')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(resp.data['patientCreated'])
        self.assertEqual(Patient.objects.count(), before + 1)
        self.assertEqual(resp.data['appointment']['firstName'], 'Walk')

    def test_booking_needs_patient_or_names(self) -> None:
        self.authenticate(self.staff)
        resp = self.book(firstName='Only')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['message'], 'Either patientId or both firstName and lastName must be provided')

    def test_unknown_patient_or_unavailable_doctor(self) -> None:
        self.authenticate(self.staff)
        resp = self.book(patientId=9999)
        self.assertEqual(resp.data['message'], 'Patient not found')
        self.doctor.is_available = False
        self.doctor.save()
        resp = self.book(patientId=self.patient.id)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['message'], 'Doctor not found or not available')

    def test_double_booking_is_a_conflict(self) -> None:
        self.authenticate(self.staff)
        self.assertEqual(self.book(patientId=self.patient.id).status_code, status.HTTP_201_CREATED)
        resp = self.book(patientId=self.other_patient.id)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data, {
            'error': 'Conflict Error',
            'message': 'Doctor already has an appointment at this time',
        })
        # another doctor, or an untimed booking, is fine
        self.assertEqual(self.book(patientId=self.other_patient.id, doctorId=self.other_doctor.id).status_code, 201)
        self.assertEqual(self.book(patientId=self.other_patient.id, time=None).status_code, 201)

    def test_cancelled_booking_frees_the_time(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday, status=Appointment.STATUS_CANCELLED)
        self.authenticate(self.staff)
        self.assertEqual(self.book(patientId=self.other_patient.id).status_code, status.HTTP_201_CREATED)

    def test_invalid_time_and_duration(self) -> None:
        self.authenticate(self.staff)
        self.assertEqual(self.book(patientId=self.patient.id, time='9am').status_code, 400)
        self.assertEqual(self.book(patientId=self.patient.id, duration=10).status_code, 400)
        self.assertEqual(self.book(patientId=self.patient.id, duration=181).status_code, 400)

    def test_patient_books_for_themself(self) -> None:
        self.authenticate(self.patient.user)
        resp = self.book(patientId=self.other_patient.id)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['appointment']['patientId'], self.patient.id)

    def test_list_is_scoped_by_role(self) -> None:
        mine = make_appointment(self.patient, self.doctor, self.monday, '09:30')
        make_appointment(self.other_patient, self.other_doctor, self.monday, '09:00')

        self.authenticate(self.patient.user)
        resp = self.client.get(reverse('appointments'))
        self.assertEqual([a['id'] for a in resp.data['appointments']], [mine.id])

        self.authenticate(self.doctor.user)
        resp = self.client.get(reverse('appointments'))
        self.assertEqual([a['id'] for a in resp.data['appointments']], [mine.id])

        self.authenticate(self.staff)
        resp = self.client.get(reverse('appointments'))
        self.assertEqual(resp.data['pagination']['total'], 2)
        # ordered by date then time
        self.assertEqual([a['time'] for a in resp.data['appointments']], ['09:00', '09:30'])

    def test_list_filters(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday, '09:30')
        Appointment.objects.create(patient=self.other_patient, doctor=self.doctor, date=self.monday,
                                   time='10:00', first_name='Zed', last_name='Visitor')
        self.authenticate(self.staff)

        resp = self.client.get(reverse('appointments'), {'patientSearch': 'walk'})
        self.assertEqual(len(resp.data['appointments']), 1)
        resp = self.client.get(reverse('appointments'), {'patientSearch': 'zed'})
        self.assertEqual(resp.data['appointments'][0]['lastName'], 'Visitor')

        today = timezone.localdate()
        resp = self.client.get(reverse('appointments'), {'createdDate': today.isoformat()})
        self.assertEqual(resp.data['pagination']['total'], 2)
        resp = self.client.get(reverse('appointments'), {'createdDate': (today - timedelta(days=3)).isoformat()})
        self.assertEqual(resp.data['pagination']['total'], 0)
        resp = self.client.get(reverse('appointments'), {'createdDate': 'yesterday'})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_update_and_cancel_are_scoped(self) -> None:
        appt = make_appointment(self.other_patient, self.doctor, self.monday)
        url = reverse('appointment_detail', args=[appt.id])

        self.authenticate(self.patient.user)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data['message'], 'You can only view your own appointments')
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.other_doctor.user)
        resp = self.client.put(url, {'status': 'CONFIRMED'}, format='json')
        self.assertEqual(resp.data['message'], 'You can only update your own appointments')

        self.authenticate(self.doctor.user)
        resp = self.client.put(url, {'status': 'COMPLETED', 'diagnosis': 'Migraine'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['appointment']['diagnosis'], 'Migraine')

        self.authenticate(self.other_patient.user)
        resp = self.client.delete(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        appt.refresh_from_db()
        self.assertEqual(appt.status, Appointment.STATUS_CANCELLED)

    def test_reschedule_into_taken_time_is_a_conflict(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday, '10:00')
        moving = make_appointment(self.other_patient, self.doctor, self.monday, '09:00')
        self.authenticate(self.staff)
        url = reverse('appointment_detail', args=[moving.id])
        resp = self.client.put(url, {'time': '10:00'}, format='json')
        self.assertEqual(resp.data['error'], 'Conflict Error')
        resp = self.client.put(url, {'time': '10:30'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['appointment']['time'], '10:30')

    def test_reactivating_cancelled_booking_into_taken_time_is_a_conflict(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday, '09:00')
        cancelled = make_appointment(self.other_patient, self.doctor, self.monday, '09:00',
                                     status=Appointment.STATUS_CANCELLED)
        self.authenticate(self.staff)
        url = reverse('appointment_detail', args=[cancelled.id])
        resp = self.client.put(url, {'status': 'SCHEDULED'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['error'], 'Conflict Error')
        active = Appointment.objects.filter(doctor=self.doctor, date=self.monday, time='09:00',
                                            status__in=Appointment.ACTIVE_STATUSES)
        self.assertEqual(active.count(), 1)
        # a free time is fine
        resp = self.client.put(url, {'status': 'CONFIRMED', 'time': '09:30'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['appointment']['status'], 'CONFIRMED')

    def test_missing_appointment(self) -> None:
        self.authenticate(self.staff)
        resp = self.client.get(reverse('appointment_detail', args=[424242]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)


class AvailableSlotsAPITests(APITestCase):
    def setUp(self) -> None:
        self.doctor = make_doctor(working_days=[1], start='09:00', end='11:00')
        self.patient = make_patient()
        self.monday = next_monday()
        self.client.force_authenticate(user=self.patient.user)

    def slots(self, day=None, doctor_id=None):
        url = reverse('available_slots', args=[doctor_id or self.doctor.id])
        params = {} if day is None else {'date': day}
        return self.client.get(url, params)

    def test_weekday_convention(self) -> None:
        self.assertEqual(js_weekday(self.monday), 1)
        self.assertEqual(js_weekday(self.monday - timedelta(days=1)), 0)

    def test_free_day_lists_every_slot(self) -> None:
        resp = self.slots(self.monday.isoformat())
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['availableSlots'], ['09:00', '09:30', '10:00', '10:30'])
        self.assertEqual(resp.data['schedule'], {'startTime': '09:00', 'endTime': '11:00'})

    def test_active_bookings_block_slots(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday, '09:00', duration=60)
        make_appointment(self.patient, self.doctor, self.monday, '10:30',
                         status=Appointment.STATUS_CANCELLED)
        make_appointment(self.patient, self.doctor, self.monday, None)
        resp = self.slots(self.monday.isoformat())
        self.assertEqual(resp.data['availableSlots'], ['10:00', '10:30'])

    def test_bookings_on_other_days_do_not_count(self) -> None:
        make_appointment(self.patient, self.doctor, self.monday + timedelta(days=7), '09:00')
        resp = self.slots(self.monday.isoformat())
        self.assertEqual(len(resp.data['availableSlots']), 4)

    def test_day_without_schedule(self) -> None:
        resp = self.slots((self.monday - timedelta(days=1)).isoformat())
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {'availableSlots': [], 'message': 'Doctor is not available on this day'})

    def test_inactive_schedule_counts_as_no_schedule(self) -> None:
        self.doctor.schedules.update(is_active=False)
        resp = self.slots(self.monday.isoformat())
        self.assertEqual(resp.data['availableSlots'], [])
        self.assertIn('message', resp.data)

    def test_date_is_required_and_validated(self) -> None:
        resp = self.slots()
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['error'], 'Validation Error')
        self.assertIn('Date is required', resp.data['message'])
        self.assertEqual(self.slots('2030-02-30').status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_doctor(self) -> None:
        resp = self.slots(self.monday.isoformat(), doctor_id=98765)
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(APPOINTMENT_SLOT_MINUTES=60)
    def test_slot_length_setting(self) -> None:
        resp = self.slots(self.monday.isoformat())
        self.assertEqual(resp.data['availableSlots'], ['09:00', '10:00'])
