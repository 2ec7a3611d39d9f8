import django_filters
from django.db.models import Q
from .models import Visitor


class VisitorFilter(django_filters.FilterSet):
    """Filter visitors by status, day and free text"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    date = django_filters.DateFilter(method='filter_date', label='Date')
    unit = django_filters.NumberFilter(field_name='visiting_unit_id', lookup_expr='exact')

    class Meta:
        model = Visitor
        fields = ['search', 'status', 'date', 'unit']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(phone__icontains=value) |
            Q(vehicle_no__icontains=value) |
            Q(pass_code__iexact=value)
        )

    def filter_status(self, queryset, name, value):
        if not value or value.strip().lower() == 'all':
            return queryset
        return queryset.filter(status=Visitor.normalize_status(value))

    def filter_date(self, queryset, name, value):
        """Visitors registered, entering or leaving on the given day"""
        return queryset.filter(
            Q(created_at__date=value) | Q(entry_time__date=value) | Q(exit_time__date=value)
        )
