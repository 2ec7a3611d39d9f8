import django_filters
from django.contrib.auth import get_user_model
from django.db.models import Q, Exists, OuterRef
from .models import Unit

User = get_user_model()


def split_unit_label(value):
    """Split a 'block-number' label such as 'A-101' into its parts"""
    if '-' not in value:
        return None, None
    block, _, number = value.partition('-')
    block, number = block.strip(), number.strip()
    if not block or not number:
        return None, None
    return block, number


def occupied_units_q():
    """Units with an active owner or tenant; matches Unit.occupancy"""
    return Exists(User.objects.filter(
        unit=OuterRef('pk'), is_active=True, role=User.ROLE_RESIDENT, resident_type__in=['owner', 'tenant']
    ))


class UnitFilter(django_filters.FilterSet):
    """Filter units by block, occupancy and free text"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    block = django_filters.CharFilter(field_name='block', lookup_expr='iexact')
    occupancy = django_filters.CharFilter(method='filter_occupancy', label='Occupancy')
    type = django_filters.CharFilter(field_name='type', lookup_expr='iexact')

    class Meta:
        model = Unit
        fields = ['search', 'block', 'occupancy', 'type']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        block, number = split_unit_label(value)
        query = Q(block__icontains=value) | Q(number__icontains=value)
        if block:
            query |= Q(block__iexact=block, number__iexact=number)
        return queryset.filter(query)

    def filter_occupancy(self, queryset, name, value):
        value = value.strip().lower()
        if value == 'occupied':
            return queryset.filter(occupied_units_q())
        if value == 'vacant':
            return queryset.exclude(occupied_units_q())
        return queryset


class MemberFilter(django_filters.FilterSet):
    """Filter the resident directory"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    block = django_filters.CharFilter(field_name='unit__block', lookup_expr='iexact')
    resident_type = django_filters.CharFilter(field_name='resident_type', lookup_expr='iexact')
    status = django_filters.CharFilter(method='filter_status', label='Status')

    class Meta:
        model = User
        fields = ['search', 'block', 'resident_type', 'status']

    def filter_search(self, queryset, name, value):
        """Search name, email, phone and the unit label (e.g. 'A-101')"""
        value = value.strip()
        if not value:
            return queryset
        query = (
            Q(first_name__icontains=value) |
            Q(last_name__icontains=value) |
            Q(username__icontains=value) |
            Q(email__icontains=value) |
            Q(phone__icontains=value)
        )
        block, number = split_unit_label(value)
        if block:
            query |= Q(unit__block__iexact=block, unit__number__iexact=number)
        else:
            query |= Q(unit__number__iexact=value)
        return queryset.filter(query)

    def filter_status(self, queryset, name, value):
        value = value.strip().lower()
        if value == 'active':
            return queryset.filter(is_active=True)
        if value == 'inactive':
            return queryset.filter(is_active=False)
        return queryset
