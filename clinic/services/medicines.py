from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from clinic.models import Medicine


def search_medicines(*, search: str = '', category: str = '', low_stock: bool = False):
    qs = Medicine.objects.all()
    if search:
        qs = qs.filter(
            Q(name__icontains=search)
            | Q(generic_name__icontains=search)
            | Q(category__icontains=search)
            | Q(manufacturer__icontains=search)
        )
    if category:
        qs = qs.filter(category__icontains=category)
    if low_stock:
        qs = qs.filter(stock__lte=F('min_stock_level'))
    return qs.order_by('-created_at', '-id')


def low_stock():
    return Medicine.objects.filter(stock__lte=F('min_stock_level')).order_by('stock', 'name')


def expired(today=None):
    today = today or timezone.localdate()
    return Medicine.objects.filter(expiry_date__lt=today).order_by('expiry_date')


def expiring_soon(today=None, days: int | None = None):
    today = today or timezone.localdate()
    days = settings.MEDICINE_EXPIRY_WARNING_DAYS if days is None else days
    return Medicine.objects.filter(
        expiry_date__gte=today, expiry_date__lte=today + timedelta(days=days)
    ).order_by('expiry_date')


@transaction.atomic
def adjust_stock(medicine_id: int, quantity: int, operation: str = 'set') -> tuple[Medicine, int]:
    """Apply a stock change; subtracting never goes below zero.

    Returns the updated medicine and the stock level before the change.
    """
    medicine = Medicine.objects.select_for_update().get(pk=medicine_id)
    previous = medicine.stock
    if operation == 'add':
        medicine.stock = previous + quantity
    elif operation == 'subtract':
        medicine.stock = max(0, previous - quantity)
    else:
        medicine.stock = quantity
    medicine.save(update_fields=['stock', 'updated_at'])
    return medicine, previous
