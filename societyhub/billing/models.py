from django.db import models
from decimal import Decimal
from django.utils import timezone
from societyhub.core.models import User
from societyhub.society.models import Society, Unit


class BillingConfig(models.Model):
    """Per-society defaults used when generating maintenance invoices"""
    society = models.OneToOneField(Society, on_delete=models.CASCADE, related_name='billing_config')
    maintenance_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    utility_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    late_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    grace_period_days = models.PositiveIntegerField(default=0, help_text="Days after the due date before a late fee applies")
    due_day = models.PositiveSmallIntegerField(default=10, help_text="Day of the month generated invoices fall due")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Billing config - {self.society.name}"

    class Meta:
        db_table = 'billing_configs'


class Invoice(models.Model):
    """Maintenance and utility invoices raised against a unit"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    PAYMENT_MODE_CHOICES = [
        ('CASH', 'Cash'),
        ('UPI', 'UPI'),
        ('CARD', 'Card'),
        ('CHEQUE', 'Cheque'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('ONLINE', 'Online'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='invoices')
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name='invoices')
    resident = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    invoice_number = models.CharField(max_length=100, unique=True)
    month = models.CharField(max_length=7, blank=True, help_text="Billing month as YYYY-MM")
    maintenance = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    utilities = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    penalty = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    description = models.TextField(blank=True)
    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    paid_date = models.DateField(null=True, blank=True)
    payment_mode = models.CharField(max_length=20, choices=PAYMENT_MODE_CHOICES, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.invoice_number

    def get_effective_status(self, today=None):
        """A pending invoice past its due date is overdue even before it is persisted"""
        today = today or timezone.localdate()
        if self.status == 'pending' and self.due_date < today:
            return 'overdue'
        return self.status

    def get_days_overdue(self, today=None):
        today = today or timezone.localdate()
        if self.get_effective_status(today) != 'overdue':
            return 0
        return (today - self.due_date).days

    def calculate_amount(self):
        """Sum of line items when present, otherwise maintenance + utilities + penalty"""
        if self.pk and self.items.exists():
            return sum((item.amount for item in self.items.all()), Decimal('0.00')) + self.penalty
        return self.maintenance + self.utilities + self.penalty

    class Meta:
        db_table = 'maintenance_invoices'
        ordering = ['-issue_date', '-created_at']
        indexes = [
            models.Index(fields=['society', 'status'], name='invoices_society_status_idx'),
            models.Index(fields=['society', 'month'], name='invoices_society_month_idx'),
            models.Index(fields=['due_date'], name='invoices_due_date_idx'),
        ]


class InvoiceItem(models.Model):
    """Line items of a manually raised invoice"""
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=200)
    amount = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.name}"

    class Meta:
        db_table = 'maintenance_invoice_items'
