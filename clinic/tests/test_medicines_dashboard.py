from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Appointment, Medicine, User
from clinic.tests.factories import make_appointment, make_doctor, make_medicine, make_patient, make_user

pytestmark = pytest.mark.django_db


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def staff():
    return make_user(User.ROLE_STAFF)


@pytest.fixture
def shelf():
    today = timezone.localdate()
    return {
        'plenty': make_medicine(name='Aspirin', stock=500, min_stock_level=50),
        'low': make_medicine(name='Lisinopril', stock=10, min_stock_level=10),
        'expired': make_medicine(name='Amoxicillin', expiry_date=today - timedelta(days=1)),
        'soon': make_medicine(name='Metformin', expiry_date=today + timedelta(days=5)),
    }


def test_create_medicine_maps_client_fields(staff):
    r = client_for(staff).post(reverse('medicines'), {
        'name': 'Ibuprofen',
        'category': 'Pain Relief',
        'strength': '200mg',
        'dosageForm': 'powder',
        'price': '3.25',
        'stockQuantity': 40,
        'expiryDate': '2031-01-31',
        'isControlledSubstance': True,
    }, format='json')
    assert r.status_code == 201
    body = r.data['medicine']
    assert body['dosage'] == '200mg'
    assert body['form'] == 'TABLET'
    assert body['stock'] == 40
    assert body['minStockLevel'] == 10
    assert body['isControlled'] is True


def test_create_rejects_missing_fields_and_negative_stock(staff):
    client = client_for(staff)
    r = client.post(reverse('medicines'), {'name': 'X'}, format='json')
    assert r.status_code == 400
    assert r.data['error'] == 'Validation Error'
    r = client.post(reverse('medicines'), {
        'name': 'X', 'category': 'Y', 'strength': '1mg', 'price': '1.00',
        'stockQuantity': -1, 'expiryDate': '2031-01-01',
    }, format='json')
    assert r.status_code == 400


def test_doctor_reads_but_cannot_write_inventory(shelf):
    doctor = make_doctor()
    client = client_for(doctor.user)
    assert client.get(reverse('medicines')).status_code == 200
    r = client.put(reverse('medicine_detail', args=[shelf['plenty'].id]), {'price': '1.00'}, format='json')
    assert r.status_code == 403
    assert client.get(reverse('medicine_low_stock')).status_code == 403


def test_list_search_and_low_stock_filter(staff, shelf):
    client = client_for(staff)
    r = client.get(reverse('medicines'), {'search': 'aspi'})
    assert [m['name'] for m in r.data['medicines']] == ['Aspirin']
    r = client.get(reverse('medicines'), {'lowStock': 'true'})
    assert [m['name'] for m in r.data['medicines']] == ['Lisinopril']


def test_update_and_admin_only_delete(staff, shelf):
    med = shelf['plenty']
    r = client_for(staff).put(reverse('medicine_detail', args=[med.id]),
                              {'stockQuantity': 7, 'dosageForm': 'syrup'}, format='json')
    assert r.status_code == 200
    med.refresh_from_db()
    assert (med.stock, med.form) == (7, 'SYRUP')

    assert client_for(staff).delete(reverse('medicine_detail', args=[med.id])).status_code == 403
    admin = make_user(User.ROLE_ADMIN)
    assert client_for(admin).delete(reverse('medicine_detail', args=[med.id])).status_code == 200
    assert not Medicine.objects.filter(pk=med.id).exists()


@pytest.mark.parametrize('operation,amount,expected', [
    ('set', 25, 25),
    ('add', 25, 125),
    ('subtract', 25, 75),
    ('subtract', 500, 0),
])
def test_stock_operations(staff, operation, amount, expected):
    med = make_medicine(stock=100)
    r = client_for(staff).patch(reverse('medicine_stock', args=[med.id]),
                                {'stock': amount, 'operation': operation}, format='json')
    assert r.status_code == 200
    assert r.data['previousStock'] == 100
    assert r.data['newStock'] == expected
    med.refresh_from_db()
    assert med.stock == expected


def test_stock_rejects_negative_and_unknown_operation(staff):
    med = make_medicine(stock=5)
    client = client_for(staff)
    r = client.patch(reverse('medicine_stock', args=[med.id]), {'stock': -1}, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'stock: Stock must be a non-negative number'
    r = client.patch(reverse('medicine_stock', args=[med.id]), {'stock': 1, 'operation': 'double'}, format='json')
    assert r.status_code == 400
    assert client.patch(reverse('medicine_stock', args=[4040]), {'stock': 1}, format='json').status_code == 404


def test_alert_endpoints(staff, shelf):
    client = client_for(staff)
    low = client.get(reverse('medicine_low_stock')).data
    assert [m['name'] for m in low['medicines']] == ['Lisinopril'] and low['count'] == 1
    expired = client.get(reverse('medicine_expired')).data
    assert [m['name'] for m in expired['medicines']] == ['Amoxicillin']
    soon = client.get(reverse('medicine_expiring_soon')).data
    assert [m['name'] for m in soon['medicines']] == ['Metformin']


def test_dashboard_stats(staff, shelf):
    doctor = make_doctor()
    patient = make_patient()
    today = timezone.localdate()
    make_appointment(patient, doctor, today, '09:00')
    make_appointment(patient, doctor, today, '10:00', status=Appointment.STATUS_COMPLETED)

    r = client_for(staff).get(reverse('dashboard_stats'))
    assert r.status_code == 200
    stats = r.data['stats']
    assert stats['totalPatients'] == 1
    assert stats['totalDoctors'] == 1
    assert stats['totalAppointments'] == 2
    assert stats['todayAppointments'] == 2
    assert stats['monthlyAppointments'] == 2
    assert stats['pendingAppointments'] == 1
    assert stats['completedAppointments'] == 1
    assert stats['totalMedicines'] == 4
    assert stats['lowStockMedicines'] == 1
    assert stats['expiredMedicines'] == 1
    assert len(r.data['recentAppointments']) == 2
    assert {row['status']: row['count'] for row in r.data['appointmentsByStatus']} == {
        'COMPLETED': 1, 'SCHEDULED': 1,
    }
    assert r.data['monthlyTrends'] == [{'month': today.strftime('%Y-%m'), 'count': 2}]


def test_dashboard_appointment_lists_are_scoped():
    doctor = make_doctor()
    other = make_doctor()
    patient = make_patient()
    today = timezone.localdate()
    make_appointment(patient, doctor, today, '09:00')
    make_appointment(patient, other, today, '11:00')
    make_appointment(patient, doctor, today + timedelta(days=3), '09:00', status=Appointment.STATUS_CONFIRMED)
    make_appointment(patient, doctor, today + timedelta(days=4), '09:00', status=Appointment.STATUS_CANCELLED)
    make_appointment(patient, doctor, today + timedelta(days=30), '09:00')

    r = client_for(doctor.user).get(reverse('dashboard_today'))
    assert [a['time'] for a in r.data['appointments']] == ['09:00']

    r = client_for(patient.user).get(reverse('dashboard_today'))
    assert len(r.data['appointments']) == 2

    r = client_for(doctor.user).get(reverse('dashboard_upcoming'))
    assert [a['status'] for a in r.data['appointments']] == ['SCHEDULED', 'CONFIRMED']


def test_recent_patients_and_medicine_alerts(staff, shelf):
    for _ in range(12):
        make_patient()
    r = client_for(staff).get(reverse('dashboard_recent_patients'))
    assert len(r.data['patients']) == 10

    patient = make_patient()
    assert client_for(patient.user).get(reverse('dashboard_recent_patients')).status_code == 403

    r = client_for(staff).get(reverse('dashboard_medicine_alerts'))
    assert r.status_code == 200
    assert r.data['alerts'] == {'lowStock': 1, 'expired': 1, 'expiringSoon': 1}
    assert [m['name'] for m in r.data['expiringSoonMedicines']] == ['Metformin']


@pytest.mark.parametrize('role', [User.ROLE_PATIENT, User.ROLE_DOCTOR])
def test_medicine_alerts_need_pharmacy_role(role, shelf):
    r = client_for(make_user(role)).get(reverse('dashboard_medicine_alerts'))
    assert r.status_code == 403


def test_dashboard_recent_appointments_are_scoped():
    doctor = make_doctor()
    me = make_patient()
    someone_else = make_patient()
    today = timezone.localdate()
    mine = make_appointment(me, doctor, today, '10:00')
    make_appointment(someone_else, doctor, today, '09:00')

    r = client_for(me.user).get(reverse('dashboard_stats'))
    assert r.status_code == 200
    assert [a['id'] for a in r.data['recentAppointments']] == [mine.id]

    r = client_for(doctor.user).get(reverse('dashboard_stats'))
    assert len(r.data['recentAppointments']) == 2


def test_healthz():
    r = APIClient().get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}
