import logging
from decimal import Decimal, ROUND_HALF_UP
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from societyhub.core.cache_utils import cached_stats
from societyhub.core.exports import csv_response
from societyhub.core.permissions import IsSocietyAdmin, scope_to_society, scoped_society_id, resolve_society
from societyhub.core.utils import create_audit_log, format_amount
from .contracts import contract_status, contract_end_bounds, renewal_term, EXPIRED, EXPIRING
from .filters import VendorFilter, get_contract_warning_days
from .models import Vendor, VendorPayment
from .serializers import (
    VendorSerializer, VendorStatusSerializer, VendorRenewSerializer,
    VendorRatingSerializer, VendorPaymentSerializer,
)

logger = logging.getLogger('societyhub.vendors')


def _vendor_queryset(request):
    return scope_to_society(Vendor.objects.all(), request)


def _serializer_context(request):
    return {'request': request, 'warning_days': get_contract_warning_days()}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_list_create(request):
    """List all vendors or create a new vendor"""
    if request.method == 'GET':
        queryset = _vendor_queryset(request).annotate(
            pending_total=Sum('payments__amount', filter=Q(payments__status='pending'))
        ).order_by('name')
        filterset = VendorFilter(request.query_params, queryset=queryset)
        serializer = VendorSerializer(filterset.qs, many=True, context=_serializer_context(request))
        return Response(serializer.data)
    else:
        society = resolve_society(request)
        if society is None:
            return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = VendorSerializer(data=request.data, context=_serializer_context(request))
        if serializer.is_valid():
            vendor = serializer.save(society=society)
            logger.info(f"Vendor {vendor.name} added to society {society.code} by {request.user.username}")
            create_audit_log(
                request=request, action='create', model_name='Vendor', object_id=vendor.id,
                object_name=vendor.name, society=society
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_detail(request, pk):
    """Retrieve, update or delete a vendor"""
    vendor = get_object_or_404(_vendor_queryset(request), pk=pk)
    context = _serializer_context(request)

    if request.method == 'GET':
        serializer = VendorSerializer(vendor, context=context)
        return Response(serializer.data)
    elif request.method == 'PUT':
        serializer = VendorSerializer(vendor, data=request.data, context=context)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    elif request.method == 'PATCH':
        serializer = VendorSerializer(vendor, data=request.data, partial=True, context=context)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Vendor', object_id=vendor.id,
            object_name=vendor.name, society=vendor.society
        )
        vendor.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_status(request, pk):
    """Activate or deactivate a vendor"""
    vendor = get_object_or_404(_vendor_queryset(request), pk=pk)
    serializer = VendorStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = vendor.status
    vendor.status = serializer.validated_data['status']
    vendor.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request, action='vendor_status', model_name='Vendor', object_id=vendor.id,
        object_name=vendor.name, society=vendor.society,
        changes={'status': {'from': old_status, 'to': vendor.status}}
    )
    return Response(VendorSerializer(vendor, context=_serializer_context(request)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_renew(request, pk):
    """Renew a vendor contract for another term"""
    vendor = get_object_or_404(_vendor_queryset(request), pk=pk)
    serializer = VendorRenewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    today = timezone.localdate()
    try:
        new_start, new_end = renewal_term(vendor.contract_start, vendor.contract_end, today, data.get('contract_end'))
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    changes = {
        'contract_start': {'from': str(vendor.contract_start), 'to': str(new_start)},
        'contract_end': {'from': str(vendor.contract_end), 'to': str(new_end)},
    }
    vendor.contract_start = new_start
    vendor.contract_end = new_end
    if 'contract_value' in data:
        vendor.contract_value = data['contract_value']
    if 'payment_terms' in data:
        vendor.payment_terms = data['payment_terms']
    # Renewing a contract brings the vendor back into service
    vendor.status = 'active'
    vendor.save()

    logger.info(f"Vendor {vendor.name} renewed until {new_end}")
    create_audit_log(
        request=request, action='vendor_renew', model_name='Vendor', object_id=vendor.id,
        object_name=vendor.name, society=vendor.society, changes=changes
    )
    return Response(VendorSerializer(vendor, context=_serializer_context(request)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_rate(request, pk):
    """Add a 1-5 rating to the vendor's running average"""
    serializer = VendorRatingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        vendor = get_object_or_404(_vendor_queryset(request).select_for_update(), pk=pk)
        rating = Decimal(serializer.validated_data['rating'])
        total = vendor.rating * vendor.rating_count + rating
        vendor.rating_count += 1
        vendor.rating = (total / vendor.rating_count).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        vendor.save(update_fields=['rating', 'rating_count', 'updated_at'])

    return Response(VendorSerializer(vendor, context=_serializer_context(request)).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_payments(request, pk):
    """Payment history of a vendor or record a new payment"""
    vendor = get_object_or_404(_vendor_queryset(request), pk=pk)

    if request.method == 'GET':
        payments = vendor.payments.select_related('created_by')
        payment_status = request.query_params.get('status')
        if payment_status:
            payments = payments.filter(status=payment_status.lower())
        serializer = VendorPaymentSerializer(payments, many=True)
        return Response(serializer.data)
    else:
        serializer = VendorPaymentSerializer(data=request.data)
        if serializer.is_valid():
            paid_at = timezone.now() if serializer.validated_data.get('status') == 'paid' else None
            payment = serializer.save(vendor=vendor, created_by=request.user, paid_at=paid_at)
            create_audit_log(
                request=request, action='vendor_payment', model_name='VendorPayment', object_id=payment.id,
                object_name=vendor.name, object_reference=payment.reference, society=vendor.society,
                changes={'amount': str(payment.amount), 'status': payment.status}
            )
            return Response(VendorPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_payment_pay(request, pk, payment_id):
    """Mark a pending vendor payment as paid"""
    vendor = get_object_or_404(_vendor_queryset(request), pk=pk)
    payment = get_object_or_404(VendorPayment, pk=payment_id, vendor=vendor)
    if payment.status == 'paid':
        return Response({'error': 'Payment is already marked as paid'}, status=status.HTTP_400_BAD_REQUEST)

    payment.status = 'paid'
    payment.paid_at = timezone.now()
    reference = request.data.get('reference')
    if reference:
        payment.reference = reference
    payment.save()
    create_audit_log(
        request=request, action='vendor_payment', model_name='VendorPayment', object_id=payment.id,
        object_name=vendor.name, object_reference=payment.reference, society=vendor.society,
        changes={'status': {'from': 'pending', 'to': 'paid'}}
    )
    return Response(VendorPaymentSerializer(payment).data)


def compute_vendor_stats(vendors):
    today = timezone.localdate()
    warning_days = get_contract_warning_days()
    expiring_lookups, _ = contract_end_bounds(EXPIRING, today, warning_days)
    expired_lookups, _ = contract_end_bounds(EXPIRED, today, warning_days)
    pending = VendorPayment.objects.filter(vendor__in=vendors, status='pending')

    return {
        'total': vendors.count(),
        'active': vendors.filter(status='active').count(),
        'inactive': vendors.filter(status='inactive').count(),
        'expiring_soon': vendors.filter(**expiring_lookups).count(),
        'expired': vendors.filter(**expired_lookups).count(),
        'pending_payment_amount': format_amount(pending.aggregate(total=Sum('amount'))['total']),
        'vendors_with_pending_payments': pending.values('vendor').distinct().count(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_stats(request):
    """Vendor counts by status and contract status, plus outstanding payments"""
    vendors = _vendor_queryset(request)
    data = cached_stats('vendor_stats', scoped_society_id(request), lambda: compute_vendor_stats(vendors))
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def vendor_export(request):
    """Export the (filtered) vendor list as CSV"""
    filterset = VendorFilter(request.query_params, queryset=_vendor_queryset(request).order_by('name'))
    today = timezone.localdate()
    warning_days = get_contract_warning_days()
    rows = (
        [
            vendor.name,
            vendor.company,
            vendor.service_type,
            vendor.contact_person,
            vendor.email,
            vendor.get_status_display(),
            contract_status(vendor.contract_end, today, warning_days),
            vendor.contract_end.isoformat() if vendor.contract_end else '',
            vendor.address,
        ]
        for vendor in filterset.qs
    )
    header = ['Name', 'Company', 'Type', 'Contact', 'Email', 'Status', 'Contract Status', 'Contract End', 'Address']
    return csv_response('vendors', header, rows)
