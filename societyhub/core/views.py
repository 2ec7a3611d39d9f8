from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import Setting, AuditLog
from .permissions import (
    IsSuperAdmin, IsSocietyAdmin, SUPER_ADMIN, ADMIN, COMMITTEE, RESIDENT, GUARD, VENDOR,
    is_super_admin, is_society_admin, scope_to_society, get_role,
)
from .serializers import (
    UserSerializer, UserCreateSerializer, RegisterSerializer,
    SettingSerializer, AuditLogSerializer
)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.effective_role
        token['society_id'] = user.society_id
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _can_assign_role(request, role):
    if is_super_admin(request.user):
        return True
    return role != SUPER_ADMIN


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = scope_to_society(User.objects.select_related('society', 'unit'), request)
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        search = request.query_params.get('search', '').strip()
        if search:
            users = users.filter(
                Q(username__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search)
            )
        serializer = UserSerializer(users.order_by('username'), many=True)
        return Response(serializer.data)
    else:
        data = request.data.copy()
        if not is_super_admin(request.user):
            data['society'] = request.user.society_id
        if not _can_assign_role(request, data.get('role')):
            return Response({'error': 'Only super admins can create super admins'}, status=status.HTTP_403_FORBIDDEN)
        serializer = UserCreateSerializer(data=data)
        if serializer.is_valid():
            user = serializer.save()
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(scope_to_society(User.objects.all(), request), pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        if not _can_assign_role(request, request.data.get('role')):
            return Response({'error': 'Only super admins can grant the super admin role'}, status=status.HTTP_403_FORBIDDEN)
        if not is_super_admin(request.user) and 'society' in request.data and str(request.data['society']) != str(request.user.society_id):
            return Response({'error': 'Users cannot be moved to another society'}, status=status.HTTP_403_FORBIDDEN)
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role derived dashboard permissions"""
    user = request.user
    user_data = UserSerializer(user).data
    role = get_role(user)

    if user.society_id:
        user_data['society'] = {
            'id': user.society.id,
            'name': user.society.name,
            'code': user.society.code,
            'status': user.society.status,
        }

    is_admin = role in (SUPER_ADMIN, ADMIN, COMMITTEE)
    user_data['is_admin'] = is_admin
    user_data['is_super_admin'] = role == SUPER_ADMIN
    user_data['can_access_dashboard'] = is_admin
    user_data['can_manage_vendors'] = is_admin
    user_data['can_manage_billing'] = is_admin
    user_data['can_manage_staff'] = is_admin
    user_data['can_manage_amenities'] = is_admin
    user_data['can_manage_events'] = is_admin
    user_data['can_access_gate'] = is_admin or role == GUARD
    user_data['can_approve_visitors'] = is_admin or role in (GUARD, RESIDENT)
    user_data['can_book_amenities'] = is_admin or role == RESIDENT
    user_data['can_view_own_invoices'] = role == RESIDENT
    user_data['can_access_vendor_portal'] = role == VENDOR
    user_data['can_access_platform'] = role == SUPER_ADMIN

    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method == 'PUT':
        serializer = SettingSerializer(setting, data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    elif request.method == 'PATCH':
        serializer = SettingSerializer(setting, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    # Admins see their society's trail, everyone else only their own actions
    if is_society_admin(request.user):
        queryset = scope_to_society(queryset, request)
    else:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if is_super_admin(request.user):
        pass
    elif is_society_admin(request.user):
        if audit_log.society_id != request.user.society_id:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    elif audit_log.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSocietyAdmin])
def global_search(request):
    """Global search across vendors, units, residents, invoices, visitors and events"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'vendors': [],
            'units': [],
            'residents': [],
            'invoices': [],
            'visitors': [],
            'events': [],
        })

    from societyhub.society.models import Unit
    from societyhub.society.filters import UnitFilter, MemberFilter
    from societyhub.society.serializers import UnitSerializer, MemberSerializer
    from societyhub.vendors.models import Vendor
    from societyhub.vendors.filters import VendorFilter
    from societyhub.vendors.serializers import VendorSerializer
    from societyhub.billing.models import Invoice
    from societyhub.billing.filters import InvoiceFilter
    from societyhub.billing.serializers import InvoiceSerializer
    from societyhub.visitors.models import Visitor
    from societyhub.visitors.filters import VisitorFilter
    from societyhub.visitors.serializers import VisitorSerializer
    from societyhub.events.models import Event
    from societyhub.events.filters import EventFilter
    from societyhub.events.serializers import EventSerializer

    results = {}
    params = {'search': query}

    vendors = VendorFilter(params, queryset=scope_to_society(Vendor.objects.all(), request)).qs[:20]
    results['vendors'] = VendorSerializer(vendors, many=True).data

    units = UnitFilter(params, queryset=scope_to_society(Unit.objects.all(), request)).qs[:20]
    results['units'] = UnitSerializer(units, many=True).data

    residents = MemberFilter(params, queryset=scope_to_society(
        User.objects.filter(role=RESIDENT).select_related('unit'), request)).qs[:20]
    results['residents'] = MemberSerializer(residents, many=True).data

    invoices = InvoiceFilter(params, queryset=scope_to_society(
        Invoice.objects.select_related('unit', 'resident'), request)).qs[:20]
    results['invoices'] = InvoiceSerializer(invoices, many=True).data

    visitors = VisitorFilter(params, queryset=scope_to_society(
        Visitor.objects.select_related('visiting_unit'), request)).qs[:20]
    results['visitors'] = VisitorSerializer(visitors, many=True).data

    events = EventFilter(params, queryset=scope_to_society(Event.objects.all(), request)).qs[:20]
    results['events'] = EventSerializer(events, many=True, context={'request': request}).data

    return Response(results)
