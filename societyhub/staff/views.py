import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date
from societyhub.core.permissions import (
    IsSocietyAdmin, IsGateStaff, is_society_admin, is_super_admin, scope_to_society, resolve_society,
)
from societyhub.core.utils import create_audit_log
from societyhub.society.models import Society
from .models import Staff
from .serializers import StaffSerializer, StaffStatusSerializer
from .services import set_duty_status, attendance_history, build_roster, week_start_of

logger = logging.getLogger('societyhub.staff')

STAFF_TYPES = {'guard': Staff.ROLE_GUARD, 'maid': Staff.ROLE_MAID}


def _staff_queryset(request):
    return scope_to_society(Staff.objects.select_related('user'), request)


def _guard_positions(request):
    """Sanctioned guard posts of the society in view (all societies for a platform-wide super admin)"""
    if is_super_admin(request.user) and not request.query_params.get('society'):
        return Society.objects.aggregate(total=Sum('guard_positions'))['total'] or 0
    society = resolve_society(request)
    return society.guard_positions if society else 0


def _staff_stats(request, staff):
    guards = _staff_queryset(request).filter(role=Staff.ROLE_GUARD).count()
    return {
        'total': staff.count(),
        'on_duty': staff.filter(status=Staff.STATUS_ON_DUTY).count(),
        'on_leave': staff.filter(status=Staff.STATUS_ON_LEAVE).count(),
        'vacant': max(_guard_positions(request) - guards, 0),
    }


def _list_or_create(request, role=None):
    if request.method == 'GET':
        staff = _staff_queryset(request)
        role = role or STAFF_TYPES.get((request.query_params.get('type') or '').lower())
        if role:
            staff = staff.filter(role=role)
        stats = _staff_stats(request, staff)

        search = (request.query_params.get('search') or '').strip()
        if search:
            staff = staff.filter(Q(name__icontains=search) | Q(phone__icontains=search) | Q(gate__icontains=search))
        serializer = StaffSerializer(staff, many=True)
        return Response({'data': serializer.data, 'stats': stats})

    if not is_society_admin(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    society = resolve_society(request)
    if society is None:
        return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)

    data = request.data.copy()
    if role:
        data['role'] = role
    elif isinstance(data.get('role'), str):
        data['role'] = data['role'].upper()
    serializer = StaffSerializer(data=data)
    if serializer.is_valid():
        member = serializer.save(society=society)
        logger.info(f"Staff {member.name} ({member.role}) added to {society.code} by {request.user.username}")
        return Response(StaffSerializer(member).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def staff_list_create(request):
    """List staff (``type=guard|maid``) with duty stats, or add a staff member"""
    return _list_or_create(request)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def guard_list_create(request):
    return _list_or_create(request, Staff.ROLE_GUARD)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def maid_list_create(request):
    return _list_or_create(request, Staff.ROLE_MAID)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def staff_detail(request, pk):
    """Retrieve, update or delete a staff member"""
    member = get_object_or_404(_staff_queryset(request), pk=pk)

    if request.method == 'GET':
        return Response(StaffSerializer(member).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StaffSerializer(member, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if member.user_id:
            # The login goes with the staff record
            member.user.is_active = False
            member.user.save(update_fields=['is_active'])
        member.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGateStaff])
def staff_status(request, pk):
    """
    Change duty status. Admins can change anyone; a guard only themselves,
    and only between ON_DUTY and OFF_DUTY.
    """
    member = get_object_or_404(_staff_queryset(request), pk=pk)
    serializer = StaffStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data['status']

    if not is_society_admin(request.user):
        if member.user_id != request.user.id or new_status == Staff.STATUS_ON_LEAVE:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    old_status = member.status
    set_duty_status(member, new_status)
    create_audit_log(
        request=request, action='staff_status', model_name='Staff', object_id=member.id,
        object_name=member.name, society=member.society,
        changes={'status': {'from': old_status, 'to': new_status}}
    )
    return Response(StaffSerializer(member).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateStaff])
def staff_attendance(request, pk):
    """Attendance over the last 30 days"""
    member = get_object_or_404(_staff_queryset(request), pk=pk)
    if not is_society_admin(request.user) and member.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(attendance_history(member))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGateStaff])
def staff_roster(request):
    """Weekly shift roster (``week_start`` defaults to this week's Monday)"""
    today = timezone.localdate()
    week_start_param = request.query_params.get('week_start')
    if week_start_param:
        week_start = parse_date(week_start_param)
        if week_start is None:
            return Response({'error': 'week_start must be YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    else:
        week_start = week_start_of(today)

    staff = _staff_queryset(request)
    role = STAFF_TYPES.get((request.query_params.get('type') or '').lower())
    if role:
        staff = staff.filter(role=role)

    return Response({
        'week_start': week_start.isoformat(),
        'days': build_roster(staff.order_by('shift', 'name'), week_start, today),
    })
