import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, Patient, User
from clinic.tests.factories import PASSWORD, make_user

pytestmark = pytest.mark.django_db


def login(client, email, password=PASSWORD):
    return client.post(reverse('login_view'), {'email': email, 'password': password}, format='json')


def test_login_returns_jwt_pair_and_user():
    client = APIClient()
    u = make_user(User.ROLE_STAFF, email='desk@example.com')
    r = login(client, 'desk@example.com')
    assert r.status_code == 200
    assert r.data['token'] and r.data['refresh']
    assert r.data['user']['id'] == u.id
    assert r.data['user']['role'] == 'STAFF'
    assert AuditEvent.objects.filter(action='login', user=u, detail__result='ok').exists()


def test_login_accepts_username_too():
    client = APIClient()
    u = make_user(User.ROLE_DOCTOR)
    r = client.post(reverse('login_view'), {'username': u.username, 'password': PASSWORD}, format='json')
    assert r.status_code == 200


def test_no_role_bypass_in_login():
    client = APIClient()
    u = make_user(User.ROLE_PATIENT, email='p@example.com')
    r = client.post(reverse('login_view'),
                    {'email': 'p@example.com', 'password': PASSWORD, 'role': 'ADMIN'}, format='json')
    assert r.status_code == 200
    assert r.data['user']['role'] == 'PATIENT'
    u.refresh_from_db()
    assert u.role == 'PATIENT'


def test_wrong_password_and_inactive_user_are_rejected_the_same_way():
    client = APIClient()
    make_user(User.ROLE_STAFF, email='a@example.com')
    make_user(User.ROLE_STAFF, email='b@example.com', is_active=False)
    wrong = login(client, 'a@example.com', 'nope')
    inactive = login(client, 'b@example.com')
    unknown = login(client, 'ghost@example.com')
    for r in (wrong, inactive, unknown):
        assert r.status_code == 400
        assert r.data['error'] == 'Validation Error'
        assert r.data['message'] == 'Invalid email or password'


def test_login_requires_an_identifier():
    r = APIClient().post(reverse('login_view'), {'password': 'x'}, format='json')
    assert r.status_code == 400
    assert r.data['message'] == 'Email is required'


def test_bearer_token_grants_access_to_me():
    client = APIClient()
    make_user(User.ROLE_DOCTOR, email='doc@example.com')
    token = login(client, 'doc@example.com').data['token']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get(reverse('me_view'))
    assert r.status_code == 200
    assert r.data['user']['email'] == 'doc@example.com'


def test_missing_or_bad_token_is_401_with_envelope():
    client = APIClient()
    r = client.get(reverse('me_view'))
    assert r.status_code == 401
    assert r.data['error'] == 'Access Denied'
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    assert client.get(reverse('me_view')).status_code == 401


def test_deactivated_user_token_stops_working():
    client = APIClient()
    u = make_user(User.ROLE_STAFF, email='gone@example.com')
    token = login(client, 'gone@example.com').data['token']
    User.objects.filter(pk=u.pk).update(is_active=False)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    assert client.get(reverse('me_view')).status_code == 401


def test_register_creates_patient_with_profile():
    client = APIClient()
    r = client.post(reverse('register_view'), {
        'email': 'New.Patient@Example.com',
        'password': 'Str0ng-Passw0rd!',
        'firstName': 'New',
        'lastName': 'Patient',
        'role': 'ADMIN',
    }, format='json')
    assert r.status_code == 201
    assert r.data['user']['role'] == 'PATIENT'
    user = User.objects.get(email='new.patient@example.com')
    assert Patient.objects.filter(user=user).exists()

    dup = client.post(reverse('register_view'), {
        'email': 'new.patient@example.com',
        'password': 'Str0ng-Passw0rd!',
        'firstName': 'Again',
        'lastName': 'Patient',
    }, format='json')
    assert dup.status_code == 400
    assert 'already exists' in dup.data['message']


def test_register_rejects_weak_password():
    r = APIClient().post(reverse('register_view'), {
        'email': 'weak@example.com', 'password': '123', 'firstName': 'W', 'lastName': 'K',
    }, format='json')
    assert r.status_code == 400
    assert not User.objects.filter(email='weak@example.com').exists()


def test_refresh_and_logout_blacklist():
    client = APIClient()
    make_user(User.ROLE_STAFF, email='s@example.com')
    data = login(client, 's@example.com').data
    r = client.post(reverse('refresh_view'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 200 and r.data['token']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    r = client.post(reverse('logout_view'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 200
    client.credentials()
    r = client.post(reverse('refresh_view'), {'refresh': data['refresh']}, format='json')
    assert r.status_code == 401


def test_update_profile_and_change_password():
    client = APIClient()
    u = make_user(User.ROLE_STAFF, email='me@example.com')
    client.force_authenticate(u)
    r = client.put(reverse('me_view'), {'firstName': 'Renamed', 'phone': '555-0101'}, format='json')
    assert r.status_code == 200
    assert r.data['user']['firstName'] == 'Renamed'

    r = client.post(reverse('change_password_view'),
                    {'currentPassword': 'wrong', 'newPassword': 'An0ther-Secret!'}, format='json')
    assert r.status_code == 400
    r = client.post(reverse('change_password_view'),
                    {'currentPassword': PASSWORD, 'newPassword': 'An0ther-Secret!'}, format='json')
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.check_password('An0ther-Secret!')


def test_user_admin_is_admin_only_and_delete_deactivates():
    client = APIClient()
    admin = make_user(User.ROLE_ADMIN)
    staff = make_user(User.ROLE_STAFF)
    target = make_user(User.ROLE_PATIENT)

    client.force_authenticate(staff)
    r = client.get(reverse('users'))
    assert r.status_code == 403
    assert r.data == {'error': 'Access Denied', 'message': 'Insufficient permissions'}

    client.force_authenticate(admin)
    r = client.get(reverse('users'), {'role': 'PATIENT'})
    assert r.status_code == 200
    assert [u['id'] for u in r.data['users']] == [target.id]
    assert r.data['pagination']['total'] == 1

    r = client.put(reverse('user_detail', args=[target.id]), {'role': 'STAFF'}, format='json')
    assert r.status_code == 200 and r.data['user']['role'] == 'STAFF'

    r = client.delete(reverse('user_detail', args=[target.id]))
    assert r.status_code == 200
    target.refresh_from_db()
    assert target.is_active is False
    assert client.delete(reverse('user_detail', args=[admin.id])).status_code == 400
