import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from societyhub.core.cache_utils import cached_stats
from societyhub.core.permissions import (
    IsGateStaff, IsGateUser, RESIDENT,
    has_role, is_society_admin, can_access_society, scope_to_society, scoped_society_id, resolve_society,
)
from societyhub.core.utils import create_audit_log, generate_reference
from .filters import VisitorFilter
from .models import Visitor
from .pass_generator import generate_pass_image
from .serializers import VisitorSerializer, VisitorStatusSerializer

logger = logging.getLogger('societyhub.visitors')

ACTIVITY_LABELS = {
    Visitor.STATUS_PENDING: 'Visitor registered',
    Visitor.STATUS_APPROVED: 'Visitor approved',
    Visitor.STATUS_REJECTED: 'Visitor rejected',
    Visitor.STATUS_CHECKED_IN: 'Visitor checked in',
    Visitor.STATUS_CHECKED_OUT: 'Visitor checked out',
}


def _visitor_queryset(request):
    """Gate staff see the whole society, residents only visitors of their unit"""
    queryset = scope_to_society(
        Visitor.objects.select_related('society', 'visiting_unit', 'created_by', 'approved_by'), request
    )
    if has_role(request.user, RESIDENT):
        if not request.user.unit_id:
            return queryset.none()
        queryset = queryset.filter(visiting_unit_id=request.user.unit_id)
    return queryset


def _can_manage(user, visitor):
    if has_role(user, RESIDENT):
        return user.unit_id is not None and visitor.visiting_unit_id == user.unit_id
    return can_access_society(user, visitor.society_id)


def _register_visitor(request, initial_status):
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = VisitorSerializer(data=request.data, context={'society': society})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    extra = {
        'society': society,
        'status': initial_status,
        'pass_code': generate_reference('GP', Visitor, 'pass_code'),
        'created_by': request.user,
    }
    if initial_status == Visitor.STATUS_APPROVED:
        extra['approved_by'] = request.user
    elif initial_status == Visitor.STATUS_CHECKED_IN:
        extra['entry_time'] = timezone.now()
    if has_role(request.user, RESIDENT):
        extra['visiting_unit'] = request.user.unit

    visitor = serializer.save(**extra)
    logger.info(f"Visitor {visitor.pass_code} registered as {initial_status} by {request.user.username}")
    return Response(VisitorSerializer(visitor).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGateUser])
def visitor_list_create(request):
    """
    List visitors or register one.

    Residents pre-approve their own visitors (APPROVED); guards and admins
    register walk-ins as PENDING unless ``pre_approved`` is set.
    """
    if request.method == 'GET':
        filterset = VisitorFilter(request.query_params, queryset=_visitor_queryset(request))
        serializer = VisitorSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    if has_role(request.user, RESIDENT):
        if not request.user.unit_id:
            return Response({'error': 'You are not linked to a unit'}, status=status.HTTP_400_BAD_REQUEST)
        return _register_visitor(request, Visitor.STATUS_APPROVED)

    pre_approved = str(request.data.get('pre_approved', '')).lower() in ('1', 'true', 'yes')
    return _register_visitor(request, Visitor.STATUS_APPROVED if pre_approved else Visitor.STATUS_PENDING)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGateStaff])
def visitor_check_in(request):
    """Register a visitor who enters right away"""
    return _register_visitor(request, Visitor.STATUS_CHECKED_IN)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGateUser])
def visitor_detail(request, pk):
    """Retrieve, update or delete a visitor"""
    visitor = get_object_or_404(_visitor_queryset(request), pk=pk)

    if request.method == 'GET':
        serializer = VisitorSerializer(visitor)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        extra = {}
        if has_role(request.user, RESIDENT):
            if visitor.created_by_id != request.user.id:
                return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
            # Residents only ever host visitors at their own unit
            extra['visiting_unit'] = request.user.unit
        serializer = VisitorSerializer(visitor, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save(**extra)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not is_society_admin(request.user):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        visitor.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _change_status(request, visitor, new_status):
    old_status = visitor.status
    try:
        visitor.transition_to(new_status, user=request.user)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request, action='visitor_status', model_name='Visitor', object_id=visitor.id,
        object_name=visitor.name, object_reference=visitor.pass_code, society=visitor.society,
        changes={'status': {'from': old_status, 'to': new_status}}
    )
    return Response(VisitorSerializer(visitor).data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGateUser])
def visitor_status(request, pk):
    """Move a visitor through PENDING/APPROVED/REJECTED/CHECKED_IN/CHECKED_OUT"""
    visitor = get_object_or_404(_visitor_queryset(request), pk=pk)
    if not _can_manage(request.user, visitor):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = VisitorStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data['status']

    # Residents decide on their visitors; the gate handles entry and exit
    if has_role(request.user, RESIDENT) and new_status not in (Visitor.STATUS_APPROVED, Visitor.STATUS_REJECTED):
        return Response({'error': 'Residents can only approve or reject visitors'}, status=status.HTTP_403_FORBIDDEN)

    return _change_status(request, visitor, new_status)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGateStaff])
def visitor_check_out(request, pk):
    """Mark a checked-in visitor as having left"""
    visitor = get_object_or_404(_visitor_queryset(request), pk=pk)
    return _change_status(request, visitor, Visitor.STATUS_CHECKED_OUT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateUser])
def visitor_pass(request, pk):
    """Gate pass as a PNG image"""
    visitor = get_object_or_404(_visitor_queryset(request), pk=pk)
    if visitor.status in (Visitor.STATUS_REJECTED, Visitor.STATUS_CHECKED_OUT):
        return Response({'error': f'No pass for a {visitor.get_status_display().lower()} visitor'},
                        status=status.HTTP_400_BAD_REQUEST)

    response = HttpResponse(generate_pass_image(visitor), content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="{visitor.pass_code}.png"'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateStaff])
def visitor_logs(request):
    """Visitors who have left, newest exit first"""
    queryset = _visitor_queryset(request).filter(status=Visitor.STATUS_CHECKED_OUT)
    filterset = VisitorFilter(request.query_params, queryset=queryset)
    serializer = VisitorSerializer(filterset.qs.order_by('-exit_time'), many=True)
    return Response(serializer.data)


def compute_guard_stats(visitors):
    today = timezone.localdate()
    return {
        'visitors_today': visitors.filter(Q(created_at__date=today) | Q(entry_time__date=today)).count(),
        'pending_approvals': visitors.filter(status=Visitor.STATUS_PENDING).count(),
        'currently_inside': visitors.filter(status=Visitor.STATUS_CHECKED_IN).count(),
        'checked_out_today': visitors.filter(status=Visitor.STATUS_CHECKED_OUT, exit_time__date=today).count(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateStaff])
def guard_stats(request):
    """Gate counters for the guard dashboard"""
    visitors = scope_to_society(Visitor.objects.all(), request)
    data = cached_stats('guard_stats', scoped_society_id(request), lambda: compute_guard_stats(visitors))
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateStaff])
def guard_activity(request):
    """Last 20 visitor events at the gate"""
    visitors = scope_to_society(Visitor.objects.select_related('visiting_unit'), request).order_by('-updated_at')[:20]
    activity = []
    for visitor in visitors:
        if visitor.status == Visitor.STATUS_CHECKED_OUT and visitor.exit_time:
            time = visitor.exit_time
        elif visitor.status == Visitor.STATUS_CHECKED_IN and visitor.entry_time:
            time = visitor.entry_time
        else:
            time = visitor.updated_at
        activity.append({
            'id': visitor.id,
            'name': visitor.name,
            'unit': visitor.visiting_unit.label if visitor.visiting_unit_id else None,
            'status': visitor.status,
            'action': ACTIVITY_LABELS[visitor.status],
            'pass_code': visitor.pass_code,
            'time': time.isoformat(),
        })
    return Response(activity)
