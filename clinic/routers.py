"""
URL mappings for the iHealth API.

Paths follow the frontend's endpoint list; trailing slashes are omitted
(``APPEND_SLASH`` is off).
"""
from django.urls import include, path

from .views import appointments, auth, dashboard, doctors, health, medicines, patients, users

urlpatterns = [
    # django_prometheus serves /metrics itself
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    path('api/auth/login', auth.login_view, name='login_view'),
    path('api/auth/register', auth.register_view, name='register_view'),
    path('api/auth/refresh', auth.refresh_view, name='refresh_view'),
    path('api/auth/logout', auth.logout_view, name='logout_view'),
    path('api/auth/me', auth.me_view, name='me_view'),
    path('api/auth/change-password', auth.change_password_view, name='change_password_view'),

    path('api/users', users.list_users, name='users'),
    path('api/users/<int:user_id>', users.user_detail, name='user_detail'),

    path('api/patients', patients.patients, name='patients'),
    path('api/patients/<int:patient_id>', patients.patient_detail, name='patient_detail'),

    path('api/doctors', doctors.doctors, name='doctors'),
    path('api/doctors/<int:doctor_id>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<int:doctor_id>/schedules', doctors.doctor_schedules, name='doctor_schedules'),

    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/<int:appointment_id>', appointments.appointment_detail, name='appointment_detail'),
    path('api/appointments/doctor/<int:doctor_id>/available-slots', appointments.available_slots,
         name='available_slots'),

    path('api/medicines', medicines.medicines, name='medicines'),
    path('api/medicines/alerts/low-stock', medicines.low_stock_alerts, name='medicine_low_stock'),
    path('api/medicines/alerts/expired', medicines.expired_alerts, name='medicine_expired'),
    path('api/medicines/alerts/expiring-soon', medicines.expiring_soon_alerts, name='medicine_expiring_soon'),
    path('api/medicines/<int:medicine_id>', medicines.medicine_detail, name='medicine_detail'),
    path('api/medicines/<int:medicine_id>/stock', medicines.update_stock, name='medicine_stock'),

    path('api/dashboard/stats', dashboard.stats, name='dashboard_stats'),
    path('api/dashboard/today-appointments', dashboard.today_appointments, name='dashboard_today'),
    path('api/dashboard/upcoming-appointments', dashboard.upcoming_appointments, name='dashboard_upcoming'),
    path('api/dashboard/recent-patients', dashboard.recent_patients, name='dashboard_recent_patients'),
    path('api/dashboard/medicine-alerts', dashboard.medicine_alerts, name='dashboard_medicine_alerts'),
]
