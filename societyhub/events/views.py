import logging
from datetime import timedelta
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from societyhub.core.exports import csv_response
from societyhub.core.permissions import (
    IsSocietyAdmin, IsSocietyMember, is_society_admin, scope_to_society, resolve_society,
)
from .filters import EventFilter, effective_event_status_q
from .models import Event, EventRSVP
from .serializers import EventSerializer, RSVPSerializer, AttendeeSerializer

logger = logging.getLogger('societyhub.events')


def _event_queryset(request):
    return scope_to_society(Event.objects.all(), request).annotate(
        attendee_count=Count('rsvps', filter=Q(rsvps__status=EventRSVP.STATUS_RSVP))
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def event_list_create(request):
    """List the society's events or announce one (admin)"""
    if request.method == 'GET':
        filterset = EventFilter(request.query_params, queryset=_event_queryset(request))
        serializer = EventSerializer(filterset.qs, many=True, context={'request': request})
        return Response(serializer.data)

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
    serializer = EventSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        serializer.save(society=society, created_by=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def event_detail(request, pk):
    event = get_object_or_404(_event_queryset(request), pk=pk)

    if request.method == 'GET':
        return Response(EventSerializer(event, context={'request': request}).data)

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = EventSerializer(event, data=request.data, partial=request.method == 'PATCH',
                                     context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def event_rsvp(request, pk):
    """Register (RSVP) or withdraw (CANCELLED) the caller's attendance"""
    serializer = RSVPSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data['status']

    with transaction.atomic():
        event = get_object_or_404(scope_to_society(Event.objects.select_for_update(), request), pk=pk)
        rsvp = EventRSVP.objects.filter(event=event, user=request.user).first()

        if new_status == EventRSVP.STATUS_CANCELLED:
            if rsvp is None or rsvp.status == EventRSVP.STATUS_CANCELLED:
                return Response({'error': 'You have not RSVPed to this event'}, status=status.HTTP_400_BAD_REQUEST)
            rsvp.status = EventRSVP.STATUS_CANCELLED
            rsvp.save(update_fields=['status', 'updated_at'])
        else:
            effective = event.get_effective_status()
            if effective in (Event.STATUS_CANCELLED, Event.STATUS_COMPLETED):
                return Response({'error': f'Event is {effective.lower()}'}, status=status.HTTP_400_BAD_REQUEST)
            if rsvp is not None and rsvp.status == EventRSVP.STATUS_RSVP:
                return Response({'error': 'You have already RSVPed to this event'}, status=status.HTTP_400_BAD_REQUEST)
            if event.is_full():
                return Response({'error': 'Event is full'}, status=status.HTTP_400_BAD_REQUEST)
            if rsvp is None:
                rsvp = EventRSVP.objects.create(event=event, user=request.user)
            else:
                rsvp.status = EventRSVP.STATUS_RSVP
                rsvp.save(update_fields=['status', 'updated_at'])

    logger.info(f"{request.user.username} set RSVP {new_status} for event {event.id}")
    return Response(EventSerializer(event, context={'request': request}).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def event_attendees(request, pk):
    event = get_object_or_404(scope_to_society(Event.objects.all(), request), pk=pk)
    rsvps = event.rsvps.filter(status=EventRSVP.STATUS_RSVP).select_related('user__unit').order_by('created_at')
    return Response(AttendeeSerializer(rsvps, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyMember])
def event_stats(request):
    """Event counters for the dashboard cards"""
    today = timezone.localdate()
    events = scope_to_society(Event.objects.all(), request)
    rsvps = EventRSVP.objects.filter(event__in=events, status=EventRSVP.STATUS_RSVP)
    return Response({
        'total': events.count(),
        'this_year': events.filter(date__year=today.year).count(),
        'upcoming': events.filter(
            effective_event_status_q(Event.STATUS_UPCOMING, today), date__lte=today + timedelta(days=30)
        ).count(),
        'this_month': events.filter(date__year=today.year, date__month=today.month).count(),
        'total_attendees': rsvps.count(),
        'my_rsvps': rsvps.filter(user=request.user).count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def event_export(request):
    """Export the (filtered) events as CSV"""
    filterset = EventFilter(request.query_params, queryset=_event_queryset(request))
    rows = (
        [
            event.title,
            event.date.isoformat(),
            event.time.strftime('%H:%M'),
            event.location,
            event.get_category_display(),
            event.organizer,
            event.get_effective_status(),
            event.attendee_count,
            event.max_attendees or '',
        ]
        for event in filterset.qs.order_by('date', 'time')
    )
    header = ['Title', 'Date', 'Time', 'Location', 'Category', 'Organizer', 'Status', 'Attendees', 'Max Attendees']
    return csv_response('events', header, rows)
