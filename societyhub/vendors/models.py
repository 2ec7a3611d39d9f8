from django.db import models
from django.db.models import Sum
from decimal import Decimal
from django.utils import timezone
from societyhub.core.models import User
from societyhub.society.models import Society
from .contracts import contract_status, days_until


class Vendor(models.Model):
    """Service vendors under contract with a society"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='vendors')
    name = models.CharField(max_length=200)
    company = models.CharField(max_length=200, blank=True)
    service_type = models.CharField(max_length=100)
    contact_person = models.CharField(max_length=200)
    phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    emergency_contact = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    gst = models.CharField(max_length=20, blank=True)
    pan = models.CharField(max_length=20, blank=True)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    rating_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    contract_start = models.DateField(null=True, blank=True)
    contract_end = models.DateField(null=True, blank=True)
    contract_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_terms = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_contract_status(self, today=None, warning_days=None):
        return contract_status(self.contract_end, today or timezone.localdate(), warning_days)

    def get_days_remaining(self, today=None):
        if self.contract_end is None:
            return None
        return days_until(self.contract_end, today or timezone.localdate())

    def get_pending_amount(self):
        total = self.payments.filter(status='pending').aggregate(total=Sum('amount'))['total']
        return total or Decimal('0.00')

    class Meta:
        db_table = 'vendors'
        ordering = ['name']
        indexes = [
            models.Index(fields=['society', 'status'], name='vendors_society_status_idx'),
            models.Index(fields=['contract_end'], name='vendors_contract_end_idx'),
        ]


class VendorPayment(models.Model):
    """Payments due to or made to a vendor"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
    ]

    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    reference = models.CharField(max_length=100, blank=True)
    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='vendor_payments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.vendor.name} - {self.amount} ({self.status})"

    class Meta:
        db_table = 'vendor_payments'
        ordering = ['-created_at']
