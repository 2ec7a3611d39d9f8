import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from societyhub.core.permissions import (
    IsSocietyAdmin, IsSocietyMember, is_society_admin, scope_to_society, resolve_society,
)
from societyhub.core.utils import create_audit_log
from .filters import AmenityFilter, BookingFilter
from .models import Amenity, AmenityBooking
from .serializers import (
    AmenitySerializer, AmenityBookingSerializer, BookingRequestSerializer, BookingStatusSerializer, quote_payload,
)

logger = logging.getLogger('societyhub.amenities')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def amenity_list_create(request):
    """List the society's amenities or add one (admin)"""
    if request.method == 'GET':
        filterset = AmenityFilter(request.query_params, queryset=scope_to_society(Amenity.objects.all(), request))
        serializer = AmenitySerializer(filterset.qs, many=True)
        return Response(serializer.data)

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
    serializer = AmenitySerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(society=society)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def amenity_detail(request, pk):
    amenity = get_object_or_404(scope_to_society(Amenity.objects.all(), request), pk=pk)

    if request.method == 'GET':
        return Response(AmenitySerializer(amenity).data)

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = AmenitySerializer(amenity, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        amenity.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def amenity_quote(request, pk):
    """Hours and price of a slot without booking it"""
    amenity = get_object_or_404(scope_to_society(Amenity.objects.all(), request), pk=pk)
    data = request.query_params if request.method == 'GET' else request.data
    serializer = BookingRequestSerializer(data=data, context={'amenity': amenity})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return Response(quote_payload(amenity, serializer.validated_data))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def booking_list_create(request):
    """
    The caller's bookings (``when=upcoming|past``) or a new booking.

    New bookings start PENDING until an admin approves them.
    """
    if request.method == 'GET':
        bookings = AmenityBooking.objects.filter(user=request.user).select_related('amenity', 'user__unit')
        when = request.query_params.get('when')
        today = timezone.localdate()
        if when == 'upcoming':
            bookings = bookings.filter(date__gte=today).order_by('date', 'start_time')
        elif when == 'past':
            bookings = bookings.filter(date__lt=today)
        serializer = AmenityBookingSerializer(bookings, many=True)
        return Response(serializer.data)

    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)

    amenity_id = request.data.get('amenity')
    with transaction.atomic():
        # Serialize bookings of one amenity so two requests cannot take the same slot
        if amenity_id:
            list(Amenity.objects.select_for_update().filter(pk=amenity_id))
        serializer = AmenityBookingSerializer(data=request.data, context={'society': society})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        booking = serializer.save(user=request.user)

    logger.info(f"Booking {booking.id} for {booking.amenity.name} on {booking.date} by {request.user.username}")
    return Response(AmenityBookingSerializer(booking).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def booking_list_all(request):
    """Every booking of the society (admin)"""
    bookings = scope_to_society(
        AmenityBooking.objects.select_related('amenity', 'user__unit'), request, field='amenity__society'
    )
    filterset = BookingFilter(request.query_params, queryset=bookings)
    serializer = AmenityBookingSerializer(filterset.qs, many=True)
    return Response(serializer.data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def booking_status(request, pk):
    """Admins approve, confirm or reject; the booking owner may cancel"""
    bookings = scope_to_society(
        AmenityBooking.objects.select_related('amenity', 'user'), request, field='amenity__society'
    )
    booking = get_object_or_404(bookings, pk=pk)

    serializer = BookingStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data['status']

    is_owner = booking.user_id == request.user.id
    if not is_society_admin(request.user):
        if not (is_owner and new_status == AmenityBooking.STATUS_CANCELLED):
            return Response({'error': 'You can only cancel your own bookings'}, status=status.HTTP_403_FORBIDDEN)

    if not booking.can_transition_to(new_status):
        return Response(
            {'error': f'Cannot change booking status from {booking.status} to {new_status}'},
            status=status.HTTP_400_BAD_REQUEST
        )

    old_status = booking.status
    booking.status = new_status
    booking.save(update_fields=['status', 'updated_at'])

    create_audit_log(
        request=request, action='booking_status', model_name='AmenityBooking', object_id=booking.id,
        object_name=f"{booking.amenity.name} {booking.date}", society=booking.amenity.society,
        changes={'status': {'from': old_status, 'to': new_status}}
    )
    return Response(AmenityBookingSerializer(booking).data)
