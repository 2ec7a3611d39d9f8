from django.contrib import admin
from .models import Vendor, VendorPayment


class VendorPaymentInline(admin.TabularInline):
    model = VendorPayment
    extra = 0
    readonly_fields = ['created_at', 'paid_at']


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['name', 'society', 'service_type', 'contact_person', 'phone', 'status', 'contract_end', 'rating']
    list_filter = ['society', 'status', 'service_type']
    search_fields = ['name', 'company', 'contact_person', 'phone', 'email']
    ordering = ['name']
    readonly_fields = ['rating', 'rating_count', 'created_at', 'updated_at']
    inlines = [VendorPaymentInline]


@admin.register(VendorPayment)
class VendorPaymentAdmin(admin.ModelAdmin):
    list_display = ['vendor', 'amount', 'status', 'due_date', 'paid_at', 'created_at']
    list_filter = ['status', 'due_date']
    search_fields = ['vendor__name', 'reference']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
