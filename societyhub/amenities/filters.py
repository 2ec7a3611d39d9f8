import django_filters
from django.db.models import Q
from .models import Amenity, AmenityBooking


class AmenityFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.CharFilter(field_name='type', lookup_expr='iexact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')

    class Meta:
        model = Amenity
        fields = ['search', 'type', 'status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value))


class BookingFilter(django_filters.FilterSet):
    """Admin view of bookings by status, amenity and day"""
    status = django_filters.CharFilter(method='filter_status', label='Status')
    amenity = django_filters.NumberFilter(field_name='amenity_id', lookup_expr='exact')
    date = django_filters.DateFilter(field_name='date', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')

    class Meta:
        model = AmenityBooking
        fields = ['status', 'amenity', 'date', 'date_from', 'date_to']

    def filter_status(self, queryset, name, value):
        value = value.strip().upper()
        if not value or value == 'ALL':
            return queryset
        return queryset.filter(status=value)
