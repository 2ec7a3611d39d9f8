"""Utility functions for audit logging, runtime settings and reference numbers"""
import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings as django_settings
from django.utils import timezone

from .models import AuditLog, Setting

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     society=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, vendor_renew, invoice_payment, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., vendor name)
        object_reference: Reference identifier (e.g., invoice number, pass code)
        society: Society the change belongs to (defaults to the user's society)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        if audit_user is not None and not audit_user.is_authenticated:
            audit_user = None

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        if society is None and audit_user is not None:
            society = audit_user.society

        return AuditLog.objects.create(
            user=audit_user,
            society=society,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Never fail the main operation because of audit logging
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def get_setting(key, default=None):
    """Read a runtime setting, falling back to the Django settings module"""
    setting = Setting.objects.filter(key=key).first()
    if setting is not None:
        return setting.value
    return getattr(django_settings, f'SOCIETYHUB_{key.upper()}', default)


def get_int_setting(key, default):
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Setting {key} has non-integer value {value!r}, using {default}")
        return default


def generate_reference(prefix, model, field):
    """Generate a unique reference such as INV-20240115-1A2B3C4D"""
    reference = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while model.objects.filter(**{field: reference}).exists():
        reference = f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return reference


WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def all_weekdays():
    return list(WEEKDAYS)


def weekday_name(day):
    """'Mon'..'Sun' for a date"""
    return WEEKDAYS[day.weekday()]


def normalize_weekdays(values):
    """
    Map 'monday', 'MON', 'Mon' etc. to short names in weekday order.
    Raises ValueError on anything that is not a weekday.
    """
    days = set()
    for value in values:
        short = str(value).strip()[:3].capitalize()
        if short not in WEEKDAYS:
            raise ValueError(f"Unknown weekday '{value}'")
        days.add(short)
    return [day for day in WEEKDAYS if day in days]


def format_amount(value):
    """Money as a two decimal string; SQLite sums come back unscaled"""
    return str(Decimal(value or 0).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))
