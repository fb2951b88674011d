"""
Django admin registrations for the clinic models.

Lets superusers inspect and correct records through ``/admin/``.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditEvent,
    Doctor,
    DoctorSchedule,
    Medicine,
    Patient,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_active', 'is_staff')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')


class DoctorScheduleInline(admin.TabularInline):
    model = DoctorSchedule
    extra = 0


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'license_number', 'is_available')
    list_filter = ('specialization', 'is_available')
    search_fields = ('user__first_name', 'user__last_name', 'license_number')
    inlines = [DoctorScheduleInline]


@admin.register(DoctorSchedule)
class DoctorScheduleAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'day_of_week', 'start_time', 'end_time', 'is_active')
    list_filter = ('day_of_week', 'is_active')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('user', 'gender', 'blood_group', 'doctor', 'created_at')
    list_filter = ('gender', 'blood_group')
    search_fields = ('user__first_name', 'user__last_name', 'user__email')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'date', 'time', 'type', 'status')
    list_filter = ('status', 'type', 'date')
    search_fields = ('first_name', 'last_name', 'patient__user__last_name')


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'form', 'stock', 'min_stock_level', 'expiry_date')
    list_filter = ('category', 'form', 'requires_prescription')
    search_fields = ('name', 'generic_name', 'manufacturer', 'batch_number')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    readonly_fields = ('created_at',)
