import django_filters
from django.db.models import Q
from django.utils import timezone
from .models import Event


def effective_event_status_q(value, today=None):
    """Match events by status as seen today"""
    today = today or timezone.localdate()
    if value == Event.STATUS_COMPLETED:
        return Q(status=Event.STATUS_COMPLETED) | Q(status=Event.STATUS_UPCOMING, date__lt=today)
    if value == Event.STATUS_UPCOMING:
        return Q(status=Event.STATUS_UPCOMING, date__gte=today)
    return Q(status=value)


class EventFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = Event
        fields = ['search', 'category', 'status', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(location__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        value = value.strip().upper()
        if not value or value == 'ALL':
            return queryset
        return queryset.filter(effective_event_status_q(value))
