import django_filters
from django.conf import settings
from django.db.models import Q
from django.utils import timezone
from societyhub.core.utils import get_int_setting
from .contracts import CONTRACT_STATUSES, contract_end_bounds
from .models import Vendor


def get_contract_warning_days():
    return get_int_setting('contract_warning_days', settings.SOCIETYHUB_CONTRACT_WARNING_DAYS)


class VendorFilter(django_filters.FilterSet):
    """Filter vendors by text, service type, status and derived contract status"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.CharFilter(field_name='service_type', lookup_expr='iexact')
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')
    contract_status = django_filters.CharFilter(method='filter_contract_status', label='Contract status')

    class Meta:
        model = Vendor
        fields = ['search', 'type', 'status', 'contract_status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(company__icontains=value) |
            Q(contact_person__icontains=value) |
            Q(service_type__icontains=value) |
            Q(phone__icontains=value)
        )

    def filter_contract_status(self, queryset, name, value):
        value = value.strip().lower()
        if value not in CONTRACT_STATUSES:
            return queryset
        lookups, include_open_ended = contract_end_bounds(value, timezone.localdate(), get_contract_warning_days())
        query = Q(**lookups)
        if include_open_ended:
            query |= Q(contract_end__isnull=True)
        return queryset.filter(query)
