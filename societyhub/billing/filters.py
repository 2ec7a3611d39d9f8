import django_filters
from django.db.models import Q
from django.utils import timezone
from societyhub.society.filters import split_unit_label
from .models import Invoice


def effective_status_q(value, today=None):
    """Match invoices by status as seen today (pending past due counts as overdue)"""
    today = today or timezone.localdate()
    if value == 'overdue':
        return Q(status='overdue') | Q(status='pending', due_date__lt=today)
    if value == 'pending':
        return Q(status='pending', due_date__gte=today)
    return Q(status=value)


class InvoiceFilter(django_filters.FilterSet):
    """Filter invoices by effective status, block, unit, month and free text"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(method='filter_status', label='Status')
    block = django_filters.CharFilter(field_name='unit__block', lookup_expr='iexact')
    unit = django_filters.NumberFilter(field_name='unit_id', lookup_expr='exact')
    month = django_filters.CharFilter(field_name='month', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='issue_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='issue_date', lookup_expr='lte')

    class Meta:
        model = Invoice
        fields = ['search', 'status', 'block', 'unit', 'month', 'date_from', 'date_to']

    def filter_status(self, queryset, name, value):
        value = value.strip().lower()
        if not value or value == 'all':
            return queryset
        return queryset.filter(effective_status_q(value))

    def filter_search(self, queryset, name, value):
        """Search invoice number, resident name and unit label (e.g. 'A-101')"""
        value = value.strip()
        if not value:
            return queryset
        query = (
            Q(invoice_number__icontains=value) |
            Q(resident__first_name__icontains=value) |
            Q(resident__last_name__icontains=value) |
            Q(unit__number__iexact=value)
        )
        block, number = split_unit_label(value)
        if block:
            query |= Q(unit__block__iexact=block, unit__number__iexact=number)
        return queryset.filter(query)


class DefaulterFilter(django_filters.FilterSet):
    """Narrow the overdue invoices that make up the defaulters list"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    block = django_filters.CharFilter(field_name='unit__block', lookup_expr='iexact')

    class Meta:
        model = Invoice
        fields = ['search', 'block']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        query = (
            Q(resident__first_name__icontains=value) |
            Q(resident__last_name__icontains=value) |
            Q(resident__phone__icontains=value) |
            Q(unit__number__iexact=value)
        )
        block, number = split_unit_label(value)
        if block:
            query |= Q(unit__block__iexact=block, unit__number__iexact=number)
        return queryset.filter(query)
