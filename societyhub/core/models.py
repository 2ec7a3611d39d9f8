from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model with society role and residence"""
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_ADMIN = 'admin'
    ROLE_COMMITTEE = 'committee'
    ROLE_RESIDENT = 'resident'
    ROLE_GUARD = 'guard'
    ROLE_VENDOR = 'vendor'
    ROLE_INDIVIDUAL = 'individual'

    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Admin'),
        (ROLE_ADMIN, 'Society Admin'),
        (ROLE_COMMITTEE, 'Committee Member'),
        (ROLE_RESIDENT, 'Resident'),
        (ROLE_GUARD, 'Guard'),
        (ROLE_VENDOR, 'Vendor'),
        (ROLE_INDIVIDUAL, 'Individual'),
    ]

    RESIDENT_TYPE_CHOICES = [
        ('owner', 'Owner'),
        ('tenant', 'Tenant'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_RESIDENT)
    phone = models.CharField(max_length=20, blank=True, null=True)
    society = models.ForeignKey('society.Society', on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    unit = models.ForeignKey('society.Unit', on_delete=models.SET_NULL, null=True, blank=True, related_name='residents')
    resident_type = models.CharField(max_length=10, choices=RESIDENT_TYPE_CHOICES, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def effective_role(self):
        """Superusers always act as the platform super admin"""
        if self.is_superuser:
            return self.ROLE_SUPER_ADMIN
        return self.role

    @property
    def display_name(self):
        return self.get_full_name() or self.username


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('society_approve', 'Society Approved'),
        ('society_suspend', 'Society Suspended'),
        ('vendor_status', 'Vendor Status Changed'),
        ('vendor_renew', 'Vendor Contract Renewed'),
        ('vendor_payment', 'Vendor Payment'),
        ('invoice_generate', 'Invoices Generated'),
        ('invoice_payment', 'Invoice Paid'),
        ('invoice_cancel', 'Invoice Cancelled'),
        ('late_fee', 'Late Fee Applied'),
        ('visitor_status', 'Visitor Status Changed'),
        ('booking_status', 'Booking Status Changed'),
        ('staff_status', 'Staff Status Changed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    society = models.ForeignKey('society.Society', on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., vendor name, visitor name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., invoice number, pass code)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_idx'),
            models.Index(fields=['action'], name='audit_logs_action_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_reference_idx'),
        ]
