"""
Billing operations shared by the API views and management commands:
bulk generation, overdue refresh, late fees and payment.
"""
import logging
import re
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from societyhub.core.cache_signals import invalidate_stats_cache, suspend_cache_signals
from societyhub.core.utils import format_amount, generate_reference
from societyhub.society.models import Unit
from .models import BillingConfig, Invoice

logger = logging.getLogger(__name__)

User = get_user_model()

MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


class BillingError(Exception):
    """Invoice operation not allowed in the invoice's current state"""


def is_valid_month(value):
    return bool(value) and bool(MONTH_PATTERN.match(value))


def month_of(day: date) -> str:
    return day.strftime('%Y-%m')


def default_due_date(month, due_day):
    """Due date inside the billing month, clamped to the month's last day"""
    year, month_number = (int(part) for part in month.split('-'))
    first_of_next = date(year + month_number // 12, month_number % 12 + 1, 1)
    last_day = (first_of_next - timedelta(days=1)).day
    return date(year, month_number, min(max(due_day, 1), last_day))


def get_billing_config(society):
    config, created = BillingConfig.objects.get_or_create(
        society=society,
        defaults={'late_fee': Decimal(settings.SOCIETYHUB_DEFAULT_LATE_FEE)},
    )
    if created:
        logger.info(f"Created default billing config for society {society.code}")
    return config


def new_invoice_number():
    return generate_reference('INV', Invoice, 'invoice_number')


def primary_resident(unit):
    """Tenant pays when the unit is let out, the owner otherwise"""
    residents = User.objects.filter(unit=unit, is_active=True, resident_type__in=['owner', 'tenant'])
    return residents.filter(resident_type='tenant').first() or residents.filter(resident_type='owner').first()


def generate_invoices(society, month, due_date=None, block=None, maintenance=None, utilities=None,
                      issue_date=None, created_by=None, description=''):
    """
    Raise one invoice per unit of the society (optionally one block) for
    ``month``. Units that already have a non-cancelled invoice for the month
    are skipped. Returns ``(created_invoices, skipped_count)``.
    """
    config = get_billing_config(society)
    maintenance = config.maintenance_amount if maintenance is None else maintenance
    utilities = config.utility_amount if utilities is None else utilities
    due_date = due_date or default_due_date(month, config.due_day)
    issue_date = issue_date or timezone.localdate()

    units = Unit.objects.filter(society=society, status='active').order_by('block', 'number')
    if block:
        units = units.filter(block__iexact=block)

    already_billed = set(
        Invoice.objects.filter(society=society, month=month)
        .exclude(status='cancelled')
        .values_list('unit_id', flat=True)
    )

    created = []
    skipped = 0
    with transaction.atomic(), suspend_cache_signals():
        for unit in units:
            if unit.id in already_billed:
                skipped += 1
                continue
            invoice = Invoice.objects.create(
                society=society,
                unit=unit,
                resident=primary_resident(unit),
                invoice_number=new_invoice_number(),
                month=month,
                maintenance=maintenance,
                utilities=utilities,
                amount=maintenance + utilities,
                description=description or f"Maintenance for {month}",
                issue_date=issue_date,
                due_date=due_date,
                created_by=created_by,
            )
            created.append(invoice)

    if created:
        invalidate_stats_cache(society.id, ['billing_stats', 'admin_dashboard'])
    logger.info(f"Generated {len(created)} invoices for {society.code} {month} (skipped {skipped})")
    return created, skipped


def refresh_overdue_invoices(queryset=None, today=None):
    """Persist pending -> overdue for invoices past their due date"""
    today = today or timezone.localdate()
    queryset = Invoice.objects.all() if queryset is None else queryset
    stale = queryset.filter(status='pending', due_date__lt=today)
    society_ids = set(stale.values_list('society_id', flat=True))
    count = stale.update(status='overdue', updated_at=timezone.now())
    if count:
        logger.info(f"Marked {count} invoices overdue")
        # update() bypasses post_save, so drop the cached stats here
        for society_id in society_ids:
            invalidate_stats_cache(society_id, ['billing_stats', 'admin_dashboard'])
    return count


def late_fee_candidates(queryset, today=None):
    """
    Overdue invoices whose grace period has run out and that carry no
    penalty yet, paired with the late fee of their society.
    """
    today = today or timezone.localdate()
    candidates = []
    configs = {}
    invoices = queryset.filter(status__in=['pending', 'overdue'], penalty=Decimal('0.00'), due_date__lt=today)
    for invoice in invoices.select_related('society'):
        config = configs.get(invoice.society_id)
        if config is None:
            config = configs[invoice.society_id] = get_billing_config(invoice.society)
        if config.late_fee <= 0:
            continue
        if invoice.due_date + timedelta(days=config.grace_period_days) >= today:
            continue
        candidates.append((invoice, config.late_fee))
    return candidates


def apply_late_fees(queryset, today=None):
    """Add the society's late fee to eligible overdue invoices; returns them"""
    today = today or timezone.localdate()
    refresh_overdue_invoices(queryset, today)
    updated = []
    with transaction.atomic():
        for invoice, fee in late_fee_candidates(queryset, today):
            invoice.penalty = fee
            invoice.amount = invoice.calculate_amount()
            invoice.save(update_fields=['penalty', 'amount', 'updated_at'])
            updated.append(invoice)
    return updated


def pay_invoice(invoice, payment_mode, paid_date=None):
    if invoice.status == 'paid':
        raise BillingError('Invoice is already paid')
    if invoice.status == 'cancelled':
        raise BillingError('Cancelled invoices cannot be paid')
    invoice.status = 'paid'
    invoice.payment_mode = payment_mode
    invoice.paid_date = paid_date or timezone.localdate()
    invoice.save(update_fields=['status', 'payment_mode', 'paid_date', 'updated_at'])
    return invoice


def cancel_invoice(invoice):
    if invoice.status == 'paid':
        raise BillingError('Paid invoices cannot be cancelled')
    if invoice.status == 'cancelled':
        raise BillingError('Invoice is already cancelled')
    invoice.status = 'cancelled'
    invoice.save(update_fields=['status', 'updated_at'])
    return invoice


def summarize_defaulters(overdue_invoices, today=None):
    """
    Group overdue invoices per unit, largest outstanding first. Each entry
    carries the unit, who is billed, how many invoices are unpaid and for
    how long.
    """
    today = today or timezone.localdate()
    grouped = {}
    for invoice in overdue_invoices.select_related('unit', 'resident').order_by('due_date'):
        entry = grouped.get(invoice.unit_id)
        if entry is None:
            resident = invoice.resident
            entry = grouped[invoice.unit_id] = {
                'unit': invoice.unit_id,
                'unit_label': invoice.unit.label,
                'block': invoice.unit.block,
                'unit_number': invoice.unit.number,
                'resident': resident.id if resident else None,
                'resident_name': resident.display_name if resident else None,
                'resident_phone': resident.phone if resident else None,
                'invoice_count': 0,
                'total_due': Decimal('0.00'),
                'oldest_due_date': invoice.due_date.isoformat(),
                'max_days_overdue': (today - invoice.due_date).days,
                'invoices': [],
            }
        entry['invoice_count'] += 1
        entry['total_due'] += invoice.amount
        entry['invoices'].append(invoice.invoice_number)

    defaulters = sorted(grouped.values(), key=lambda entry: entry['total_due'], reverse=True)
    for entry in defaulters:
        entry['total_due'] = format_amount(entry['total_due'])
    return defaulters
