import logging
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.paginator import Paginator
from django.db.models import Q, Sum, Count
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from societyhub.core.cache_utils import cached_stats
from societyhub.core.exports import csv_response, export_filename
from societyhub.core.permissions import (
    IsSocietyAdmin, is_society_admin, can_access_society, scope_to_society, scoped_society_id, resolve_society,
)
from societyhub.core.utils import create_audit_log, format_amount
from .filters import InvoiceFilter, DefaulterFilter, effective_status_q
from .models import Invoice
from .pdf import render_invoice_pdf
from .serializers import (
    InvoiceSerializer, GenerateInvoicesSerializer, PayInvoiceSerializer, BillingConfigSerializer,
)
from .services import (
    BillingError, generate_invoices, apply_late_fees, pay_invoice, cancel_invoice,
    get_billing_config, summarize_defaulters,
)

logger = logging.getLogger('societyhub.billing')


def _invoice_queryset(request):
    return scope_to_society(
        Invoice.objects.select_related('society', 'unit', 'resident').prefetch_related('items'),
        request
    )


def _own_invoices(user):
    """Invoices billed to the user or raised against the user's unit"""
    query = Q(resident=user)
    if user.unit_id:
        query |= Q(unit_id=user.unit_id)
    return Invoice.objects.filter(query).select_related('society', 'unit', 'resident').prefetch_related('items')


def _can_view_invoice(user, invoice):
    if is_society_admin(user):
        return can_access_society(user, invoice.society_id)
    return invoice.resident_id == user.id or (user.unit_id is not None and invoice.unit_id == user.unit_id)


DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _positive_int(value, default):
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return default


def _paginated(request, queryset):
    page = _positive_int(request.query_params.get('page'), 1)
    limit = min(_positive_int(request.query_params.get('limit'), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = InvoiceSerializer(page_obj, many=True)
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def invoice_list_create(request):
    """List all invoices or raise a single invoice"""
    if request.method == 'GET':
        filterset = InvoiceFilter(request.query_params, queryset=_invoice_queryset(request))
        return _paginated(request, filterset.qs.order_by('-issue_date', '-created_at'))
    else:
        society = resolve_society(request)
        if society is None:
            return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = InvoiceSerializer(data=request.data, context={'society': society})
        if serializer.is_valid():
            invoice = serializer.save(society=society, created_by=request.user)
            create_audit_log(
                request=request, action='create', model_name='Invoice', object_id=invoice.id,
                object_name=f"Invoice {invoice.invoice_number}", object_reference=invoice.invoice_number,
                society=society, changes={'unit': invoice.unit.label, 'amount': str(invoice.amount)}
            )
            return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_invoices(request):
    """Invoices of the logged in resident"""
    queryset = _own_invoices(request.user)
    invoice_status = request.query_params.get('status')
    if invoice_status:
        queryset = queryset.filter(effective_status_q(invoice_status.lower()))
    serializer = InvoiceSerializer(queryset.order_by('-issue_date', '-created_at'), many=True)
    return Response(serializer.data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    """Retrieve, update or delete an invoice"""
    invoice = get_object_or_404(
        Invoice.objects.select_related('society', 'unit', 'resident').prefetch_related('items'), pk=pk
    )
    if not _can_view_invoice(request.user, invoice):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        serializer = InvoiceSerializer(invoice)
        return Response(serializer.data)

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        if invoice.status in ('paid', 'cancelled'):
            return Response({'error': f'{invoice.get_status_display()} invoices cannot be edited'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = InvoiceSerializer(invoice, data=request.data, partial=request.method == 'PATCH',
                                       context={'society': invoice.society})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if invoice.status == 'paid':
            return Response({'error': 'Paid invoices cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(
            request=request, action='delete', model_name='Invoice', object_id=invoice.id,
            object_name=f"Invoice {invoice.invoice_number}", object_reference=invoice.invoice_number,
            society=invoice.society, changes={'amount': str(invoice.amount)}
        )
        invoice.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def invoice_cancel(request, pk):
    """Cancel an unpaid invoice"""
    invoice = get_object_or_404(_invoice_queryset(request), pk=pk)
    try:
        cancel_invoice(invoice)
    except BillingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request, action='invoice_cancel', model_name='Invoice', object_id=invoice.id,
        object_name=f"Invoice {invoice.invoice_number}", object_reference=invoice.invoice_number,
        society=invoice.society, changes={'reason': request.data.get('reason', '')}
    )
    return Response(InvoiceSerializer(invoice).data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_pay(request, invoice_number):
    """Record payment of an invoice identified by its number"""
    invoice = get_object_or_404(Invoice.objects.select_related('society', 'unit', 'resident'), invoice_number=invoice_number)
    if not _can_view_invoice(request.user, invoice):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = PayInvoiceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = invoice.get_effective_status()
    try:
        pay_invoice(invoice, serializer.validated_data['payment_mode'], serializer.validated_data.get('paid_date'))
    except BillingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Invoice {invoice.invoice_number} paid via {invoice.payment_mode} by {request.user.username}")
    create_audit_log(
        request=request, action='invoice_payment', model_name='Invoice', object_id=invoice.id,
        object_name=f"Invoice {invoice.invoice_number}", object_reference=invoice.invoice_number,
        society=invoice.society,
        changes={
            'amount': str(invoice.amount),
            'payment_mode': invoice.payment_mode,
            'status': {'from': old_status, 'to': 'paid'},
        }
    )
    return Response(InvoiceSerializer(invoice).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def invoice_generate(request):
    """Generate the month's invoices for every unit (or one block)"""
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = GenerateInvoicesSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    created, skipped = generate_invoices(
        society,
        data['month'],
        due_date=data.get('due_date'),
        block=data.get('block') or None,
        maintenance=data.get('maintenance_amount'),
        utilities=data.get('utility_amount'),
        issue_date=data.get('issue_date'),
        created_by=request.user,
        description=data.get('description', ''),
    )

    create_audit_log(
        request=request, action='invoice_generate', model_name='Invoice', object_id=data['month'],
        object_name=f"Invoices for {data['month']}", object_reference=data['month'], society=society,
        changes={'created': len(created), 'skipped': skipped, 'block': data.get('block') or 'all'}
    )
    return Response({
        'month': data['month'],
        'created': len(created),
        'skipped': skipped,
        'invoices': InvoiceSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def invoice_apply_late_fees(request):
    """Add the configured late fee to overdue invoices past the grace period"""
    updated = apply_late_fees(scope_to_society(Invoice.objects.all(), request))
    for invoice in updated:
        create_audit_log(
            request=request, action='late_fee', model_name='Invoice', object_id=invoice.id,
            object_name=f"Invoice {invoice.invoice_number}", object_reference=invoice.invoice_number,
            society=invoice.society, changes={'penalty': str(invoice.penalty), 'amount': str(invoice.amount)}
        )
    return Response({
        'updated': len(updated),
        'total_penalty': format_amount(sum((invoice.penalty for invoice in updated), Decimal('0.00'))),
        'invoices': [invoice.invoice_number for invoice in updated],
    })


def compute_billing_stats(invoices):
    today = timezone.localdate()

    def amount_of(queryset):
        return queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    paid = invoices.filter(status='paid')
    pending = invoices.filter(effective_status_q('pending', today))
    overdue = invoices.filter(effective_status_q('overdue', today))
    return {
        'total': invoices.count(),
        'paid': paid.count(),
        'pending': pending.count(),
        'overdue': overdue.count(),
        'cancelled': invoices.filter(status='cancelled').count(),
        'total_collection': format_amount(amount_of(paid)),
        'pending_amount': format_amount(amount_of(pending)),
        'overdue_amount': format_amount(amount_of(overdue)),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def billing_stats(request):
    """Invoice counts by status with collected and outstanding amounts"""
    invoices = scope_to_society(Invoice.objects.all(), request)
    data = cached_stats('billing_stats', scoped_society_id(request), lambda: compute_billing_stats(invoices))
    return Response(data)


def _overdue_invoices(request):
    queryset = scope_to_society(Invoice.objects.all(), request).filter(effective_status_q('overdue'))
    return DefaulterFilter(request.query_params, queryset=queryset).qs


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def defaulter_list(request):
    """Units with overdue invoices, largest outstanding first"""
    return Response(summarize_defaulters(_overdue_invoices(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def defaulter_stats(request):
    """Number of defaulting units and how much they owe"""
    overdue = _overdue_invoices(request)
    totals = overdue.aggregate(total=Sum('amount'), units=Count('unit', distinct=True))
    total = totals['total'] or Decimal('0.00')
    units = totals['units'] or 0
    average = (total / units).quantize(Decimal('0.01')) if units else Decimal('0.00')
    return Response({
        'count': units,
        'total_outstanding': format_amount(total),
        'average_due': format_amount(average),
        'overdue_invoices': overdue.count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def invoice_export(request):
    """Export the (filtered) invoices as CSV"""
    filterset = InvoiceFilter(request.query_params, queryset=_invoice_queryset(request))
    rows = (
        [
            invoice.invoice_number,
            invoice.unit.label,
            invoice.resident.display_name if invoice.resident_id else '',
            invoice.month,
            invoice.maintenance,
            invoice.utilities,
            invoice.penalty,
            invoice.amount,
            invoice.issue_date.isoformat(),
            invoice.due_date.isoformat(),
            invoice.get_effective_status(),
            invoice.paid_date.isoformat() if invoice.paid_date else '',
            invoice.payment_mode,
        ]
        for invoice in filterset.qs.order_by('-issue_date', 'unit__block', 'unit__number')
    )
    header = ['Invoice No', 'Unit', 'Resident', 'Month', 'Maintenance', 'Utilities', 'Penalty', 'Amount',
              'Issue Date', 'Due Date', 'Status', 'Paid Date', 'Payment Mode']
    return csv_response('invoices', header, rows)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_pdf(request, pk):
    """Download an invoice as PDF"""
    invoice = get_object_or_404(
        Invoice.objects.select_related('society', 'unit', 'resident').prefetch_related('items'), pk=pk
    )
    if not _can_view_invoice(request.user, invoice):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    response = HttpResponse(render_invoice_pdf(invoice), content_type='application/pdf')
    filename = export_filename(invoice.invoice_number, 'pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def billing_config(request):
    """Retrieve or update the society's billing defaults"""
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
    config = get_billing_config(society)

    if request.method == 'GET':
        return Response(BillingConfigSerializer(config).data)
    serializer = BillingConfigSerializer(config, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
