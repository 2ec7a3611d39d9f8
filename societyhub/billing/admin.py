from django.contrib import admin
from .models import BillingConfig, Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'society', 'unit', 'resident', 'month', 'amount', 'status', 'due_date', 'paid_date']
    list_filter = ['society', 'status', 'month', 'payment_mode']
    search_fields = ['invoice_number', 'unit__block', 'unit__number', 'resident__first_name', 'resident__last_name']
    ordering = ['-issue_date', '-created_at']
    readonly_fields = ['invoice_number', 'created_at', 'updated_at']
    inlines = [InvoiceItemInline]


@admin.register(BillingConfig)
class BillingConfigAdmin(admin.ModelAdmin):
    list_display = ['society', 'maintenance_amount', 'utility_amount', 'late_fee', 'grace_period_days', 'due_day']
    readonly_fields = ['updated_at']
