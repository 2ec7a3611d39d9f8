import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.db.models import Prefetch
from societyhub.core.exports import csv_response
from societyhub.core.permissions import (
    IsSuperAdmin, IsSocietyAdmin, RESIDENT,
    is_super_admin, is_society_admin, scope_to_society, resolve_society, can_access_society,
)
from societyhub.core.utils import create_audit_log
from .filters import UnitFilter, MemberFilter, occupied_units_q
from .models import Society, Unit
from .serializers import SocietySerializer, UnitSerializer, MemberSerializer

logger = logging.getLogger('societyhub.society')

User = get_user_model()


def _units_queryset():
    return Unit.objects.prefetch_related(
        Prefetch('residents', queryset=User.objects.filter(is_active=True, role=RESIDENT))
    )


def _members_queryset(request):
    return scope_to_society(User.objects.filter(role=RESIDENT).select_related('unit'), request)


# Society views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def society_list_create(request):
    """List societies or register a new society (create requires super admin)"""
    if request.method == 'GET':
        if is_super_admin(request.user):
            societies = Society.objects.all()
            status_filter = request.query_params.get('status')
            if status_filter:
                societies = societies.filter(status=status_filter.lower())
        else:
            societies = Society.objects.filter(pk=request.user.society_id)
        serializer = SocietySerializer(societies, many=True)
        return Response(serializer.data)
    else:
        if not is_super_admin(request.user):
            return Response({'error': 'Only super admins can register societies'}, status=status.HTTP_403_FORBIDDEN)
        serializer = SocietySerializer(data=request.data)
        if serializer.is_valid():
            society = serializer.save()
            logger.info(f"Society {society.code} registered by {request.user.username}")
            return Response(SocietySerializer(society).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def society_detail(request, pk):
    """Retrieve, update or delete a society"""
    society = get_object_or_404(Society, pk=pk)
    if not can_access_society(request.user, society.id):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        serializer = SocietySerializer(society)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        if not is_society_admin(request.user):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = SocietySerializer(society, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not is_super_admin(request.user):
            return Response({'error': 'Only super admins can delete societies'}, status=status.HTTP_403_FORBIDDEN)
        society.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def society_approve(request, pk):
    """Activate a pending (or reinstate a suspended) society"""
    society = get_object_or_404(Society, pk=pk)
    if society.status == 'active':
        return Response({'error': 'Society is already active'}, status=status.HTTP_400_BAD_REQUEST)

    old_status = society.status
    society.status = 'active'
    society.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request, action='society_approve', model_name='Society', object_id=society.id,
        object_name=society.name, object_reference=society.code, society=society,
        changes={'status': {'from': old_status, 'to': 'active'}}
    )
    return Response(SocietySerializer(society).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def society_suspend(request, pk):
    """Suspend a society"""
    society = get_object_or_404(Society, pk=pk)
    if society.status == 'suspended':
        return Response({'error': 'Society is already suspended'}, status=status.HTTP_400_BAD_REQUEST)

    old_status = society.status
    society.status = 'suspended'
    society.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request, action='society_suspend', model_name='Society', object_id=society.id,
        object_name=society.name, object_reference=society.code, society=society,
        changes={'status': {'from': old_status, 'to': 'suspended'}, 'reason': request.data.get('reason', '')}
    )
    return Response(SocietySerializer(society).data)


# Unit views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def unit_list_create(request):
    """List all units or create a new unit"""
    if request.method == 'GET':
        queryset = scope_to_society(_units_queryset(), request)
        filterset = UnitFilter(request.query_params, queryset=queryset)
        serializer = UnitSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        society = resolve_society(request)
        if society is None:
            return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = UnitSerializer(data=request.data, context={'society': society})
        if serializer.is_valid():
            unit = serializer.save(society=society)
            return Response(UnitSerializer(unit).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def unit_detail(request, pk):
    """Retrieve, update or delete a unit"""
    unit = get_object_or_404(scope_to_society(_units_queryset(), request), pk=pk)

    if request.method == 'GET':
        serializer = UnitSerializer(unit)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UnitSerializer(unit, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if unit.residents.filter(is_active=True).exists():
            return Response({'error': 'Unit has active residents'}, status=status.HTTP_409_CONFLICT)
        unit.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Resident directory views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def member_list_create(request):
    """List the resident directory or add a resident"""
    if request.method == 'GET':
        filterset = MemberFilter(request.query_params, queryset=_members_queryset(request))
        queryset = filterset.qs.order_by('unit__block', 'unit__number', 'first_name')
        serializer = MemberSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        society = resolve_society(request)
        if society is None:
            return Response({'error': 'No society selected'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = MemberSerializer(data=request.data, context={'society': society})
        if serializer.is_valid():
            member = serializer.save()
            logger.info(f"Resident {member.username} added to unit {member.unit} by {request.user.username}")
            return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def member_detail(request, pk):
    """Retrieve, update or deactivate a resident"""
    member = get_object_or_404(_members_queryset(request), pk=pk)

    if request.method == 'GET':
        serializer = MemberSerializer(member)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MemberSerializer(
            member, data=request.data, partial=request.method == 'PATCH',
            context={'society': member.society}
        )
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE deactivates, invoices and visitor history keep their resident
        member.is_active = False
        member.save(update_fields=['is_active', 'updated_at'])
        create_audit_log(
            request=request, action='delete', model_name='User', object_id=member.id,
            object_name=member.display_name, society=member.society,
            changes={'is_active': {'from': True, 'to': False}}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def member_stats(request):
    """Directory counts: residents by type and unit occupancy"""
    members = _members_queryset(request).filter(is_active=True)
    units = scope_to_society(Unit.objects.all(), request)
    total_units = units.count()
    occupied_units = units.filter(occupied_units_q()).count()

    return Response({
        'total': members.count(),
        'owners': members.filter(resident_type='owner').count(),
        'tenants': members.filter(resident_type='tenant').count(),
        'units': total_units,
        'occupied_units': occupied_units,
        'vacant_units': total_units - occupied_units,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def member_export(request):
    """Export the (filtered) resident directory as CSV"""
    filterset = MemberFilter(request.query_params, queryset=_members_queryset(request))
    queryset = filterset.qs.order_by('unit__block', 'unit__number', 'first_name')
    rows = (
        [
            member.display_name,
            member.email,
            member.phone,
            member.unit.block if member.unit else '',
            member.unit.number if member.unit else '',
            member.get_resident_type_display() if member.resident_type else '',
            'Active' if member.is_active else 'Inactive',
        ]
        for member in queryset
    )
    return csv_response('residents', ['Name', 'Email', 'Phone', 'Block', 'Unit', 'Type', 'Status'], rows)
