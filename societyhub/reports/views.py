import logging
from datetime import datetime, timedelta
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.db.models import Sum, Count, Q, DecimalField
from django.db.models.functions import TruncMonth
from django.utils import timezone

from societyhub.amenities.models import AmenityBooking
from societyhub.billing.filters import effective_status_q
from societyhub.billing.models import Invoice
from societyhub.core.cache_utils import cached_stats
from societyhub.core.utils import format_amount
from societyhub.core.permissions import (
    IsSuperAdmin, IsSocietyAdmin, RESIDENT, scope_to_society, scoped_society_id,
)
from societyhub.events.filters import effective_event_status_q
from societyhub.events.models import Event
from societyhub.society.filters import occupied_units_q
from societyhub.society.models import Society, Unit
from societyhub.vendors.models import Vendor
from societyhub.visitors.models import Visitor

logger = logging.getLogger('societyhub.reports')

User = get_user_model()


def _amount(queryset, field='amount'):
    return queryset.aggregate(total=Sum(field, output_field=DecimalField()))['total'] or Decimal('0.00')


def compute_admin_dashboard(request):
    today = timezone.localdate()
    units = scope_to_society(Unit.objects.all(), request)
    invoices = scope_to_society(Invoice.objects.all(), request)
    visitors = scope_to_society(Visitor.objects.all(), request)
    events = scope_to_society(Event.objects.all(), request)
    bookings = scope_to_society(AmenityBooking.objects.all(), request, field='amenity__society')
    residents = scope_to_society(User.objects.filter(role=RESIDENT, is_active=True), request)

    unpaid = invoices.filter(effective_status_q('pending', today) | effective_status_q('overdue', today))
    month_paid = invoices.filter(status='paid', paid_date__year=today.year, paid_date__month=today.month)
    total_units = units.count()
    occupied = units.filter(occupied_units_q()).count()

    return {
        'units': total_units,
        'occupied_units': occupied,
        'vacant_units': total_units - occupied,
        'residents': residents.count(),
        'vendors_active': scope_to_society(Vendor.objects.filter(status='active'), request).count(),
        'pending_invoices': unpaid.count(),
        'pending_amount': format_amount(_amount(unpaid)),
        'month_collection': format_amount(_amount(month_paid)),
        'visitors_today': visitors.filter(Q(created_at__date=today) | Q(entry_time__date=today)).count(),
        'pending_bookings': bookings.filter(status=AmenityBooking.STATUS_PENDING).count(),
        'upcoming_events': events.filter(effective_event_status_q(Event.STATUS_UPCOMING, today)).count(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def admin_dashboard(request):
    """Headline numbers for the society admin dashboard"""
    data = cached_stats('admin_dashboard', scoped_society_id(request), lambda: compute_admin_dashboard(request))
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def platform_stats(request):
    """Platform-wide totals for the super admin"""
    societies = Society.objects.values('status').annotate(count=Count('id'))
    by_status = {code: 0 for code, _ in Society.STATUS_CHOICES}
    for row in societies:
        by_status[row['status']] = row['count']

    users = User.objects.filter(is_active=True).values('role').annotate(count=Count('id'))
    by_role = {code: 0 for code, _ in User.ROLE_CHOICES}
    for row in users:
        by_role[row['role']] = row['count']

    invoices = Invoice.objects.exclude(status='cancelled')
    return Response({
        'societies': {'total': sum(by_status.values()), **by_status},
        'users': {'total': sum(by_role.values()), **by_role},
        'total_invoiced': format_amount(_amount(invoices)),
        'total_collected': format_amount(_amount(invoices.filter(status='paid'))),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def collection_report(request):
    """Invoiced vs collected per billing month"""
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)

    try:
        date_to = datetime.strptime(date_to, '%Y-%m-%d').date() if date_to else timezone.localdate()
        date_from = datetime.strptime(date_from, '%Y-%m-%d').date() if date_from else (date_to - timedelta(days=180)).replace(day=1)
    except ValueError:
        return Response({'error': 'Dates must be YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)

    invoices = scope_to_society(Invoice.objects.exclude(status='cancelled'), request).filter(
        issue_date__gte=date_from, issue_date__lte=date_to
    )
    monthly = invoices.annotate(period=TruncMonth('issue_date')).values('period').annotate(
        invoiced=Sum('amount', output_field=DecimalField()),
        collected=Sum('amount', filter=Q(status='paid'), output_field=DecimalField()),
        count=Count('id'),
    ).order_by('period')

    rows = []
    for row in monthly:
        invoiced = row['invoiced'] or Decimal('0.00')
        collected = row['collected'] or Decimal('0.00')
        rows.append({
            'month': row['period'].strftime('%Y-%m'),
            'invoices': row['count'],
            'invoiced': format_amount(invoiced),
            'collected': format_amount(collected),
            'collection_rate': float(round(collected / invoiced * 100, 2)) if invoiced else 0.0,
        })

    return Response({
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'months': rows,
        'total_invoiced': format_amount(_amount(invoices)),
        'total_collected': format_amount(_amount(invoices.filter(status='paid'))),
    })
