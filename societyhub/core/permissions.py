"""
Role based access control (RoleGuard) and society scoping helpers.

Every view declares the roles it admits with ``RoleGuard.for_roles(...)``.
Querysets are narrowed to the caller's society with ``scope_to_society``.
"""
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import BasePermission

from .models import User

SUPER_ADMIN = User.ROLE_SUPER_ADMIN
ADMIN = User.ROLE_ADMIN
COMMITTEE = User.ROLE_COMMITTEE
RESIDENT = User.ROLE_RESIDENT
GUARD = User.ROLE_GUARD
VENDOR = User.ROLE_VENDOR
INDIVIDUAL = User.ROLE_INDIVIDUAL

SOCIETY_ADMIN_ROLES = (SUPER_ADMIN, ADMIN, COMMITTEE)


def get_role(user):
    if not user or not user.is_authenticated:
        return None
    return user.effective_role


def has_role(user, *roles):
    """True when the user holds one of the given roles"""
    return get_role(user) in roles


def is_super_admin(user):
    return has_role(user, SUPER_ADMIN)


def is_society_admin(user):
    """Admins and committee members manage their society; super admins manage all"""
    return has_role(user, *SOCIETY_ADMIN_ROLES)


class RoleGuard(BasePermission):
    """Admit only users whose role is in ``allowed_roles``"""
    allowed_roles = ()
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        return has_role(request.user, *self.allowed_roles)

    @classmethod
    def for_roles(cls, *roles):
        name = 'RoleGuard_' + '_'.join(roles)
        return type(name, (cls,), {'allowed_roles': tuple(roles)})


IsSuperAdmin = RoleGuard.for_roles(SUPER_ADMIN)
IsSocietyAdmin = RoleGuard.for_roles(*SOCIETY_ADMIN_ROLES)
IsSocietyMember = RoleGuard.for_roles(*SOCIETY_ADMIN_ROLES, RESIDENT)
IsGateStaff = RoleGuard.for_roles(*SOCIETY_ADMIN_ROLES, GUARD)
IsGateUser = RoleGuard.for_roles(*SOCIETY_ADMIN_ROLES, GUARD, RESIDENT)


def parse_society_id(value):
    """Society id from a query string or payload; ``None`` when absent"""
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({'society': f"Invalid society id '{value}'"})


def scope_to_society(queryset, request, field='society'):
    """
    Restrict a queryset to the caller's society.

    Super admins see every society and may narrow with ``?society=<id>``.
    Anyone else without a society sees nothing.
    """
    user = request.user
    if is_super_admin(user):
        society_id = parse_society_id(request.query_params.get('society'))
        if society_id:
            return queryset.filter(**{f'{field}_id': society_id})
        return queryset
    if not user.society_id:
        return queryset.none()
    return queryset.filter(**{f'{field}_id': user.society_id})


def resolve_society(request):
    """
    Society that new records created by this request belong to.

    Super admins name it with ``society`` in the payload or query string,
    everyone else always writes into their own society.
    """
    from societyhub.society.models import Society

    user = request.user
    if is_super_admin(user):
        society_id = parse_society_id(request.data.get('society') or request.query_params.get('society'))
        if society_id:
            return Society.objects.filter(pk=society_id).first()
        return user.society
    return user.society


def can_access_society(user, society_id):
    if is_super_admin(user):
        return True
    return user.society_id is not None and user.society_id == society_id


def scoped_society_id(request):
    """Society id a scoped queryset was narrowed to, ``None`` for platform wide"""
    if is_super_admin(request.user):
        return parse_society_id(request.query_params.get('society'))
    return request.user.society_id
