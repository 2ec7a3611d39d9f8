from django.db import models
from django.utils import timezone
from societyhub.core.models import User
from societyhub.society.models import Society, Unit


class Visitor(models.Model):
    """A visitor passing through the society gate"""
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHECKED_IN = 'CHECKED_IN'
    STATUS_CHECKED_OUT = 'CHECKED_OUT'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_CHECKED_IN, 'Checked In'),
        (STATUS_CHECKED_OUT, 'Checked Out'),
    ]

    # Allowed status changes; REJECTED and CHECKED_OUT are final
    TRANSITIONS = {
        STATUS_PENDING: (STATUS_APPROVED, STATUS_REJECTED, STATUS_CHECKED_IN),
        STATUS_APPROVED: (STATUS_CHECKED_IN, STATUS_REJECTED),
        STATUS_CHECKED_IN: (STATUS_CHECKED_OUT,),
        STATUS_REJECTED: (),
        STATUS_CHECKED_OUT: (),
    }

    STATUS_ALIASES = {
        'EXITED': STATUS_CHECKED_OUT,
        'EXIT': STATUS_CHECKED_OUT,
        'CHECKIN': STATUS_CHECKED_IN,
        'CHECKOUT': STATUS_CHECKED_OUT,
    }

    ID_TYPE_CHOICES = [
        ('aadhaar', 'Aadhaar'),
        ('pan', 'PAN'),
        ('driving_license', 'Driving License'),
        ('voter_id', 'Voter ID'),
        ('passport', 'Passport'),
        ('other', 'Other'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='visitors')
    visiting_unit = models.ForeignKey(Unit, on_delete=models.SET_NULL, null=True, blank=True, related_name='visitors')
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20)
    vehicle_no = models.CharField(max_length=20, blank=True)
    purpose = models.CharField(max_length=200, blank=True)
    id_type = models.CharField(max_length=20, choices=ID_TYPE_CHOICES, blank=True)
    id_number = models.CharField(max_length=50, blank=True)
    pass_code = models.CharField(max_length=50, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    expected_at = models.DateTimeField(null=True, blank=True)
    entry_time = models.DateTimeField(null=True, blank=True)
    exit_time = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='registered_visitors')
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_visitors')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.pass_code})"

    @classmethod
    def normalize_status(cls, value):
        """'checked-in', 'Exited' etc. to the stored status value"""
        value = (value or '').strip().upper().replace('-', '_').replace(' ', '_')
        return cls.STATUS_ALIASES.get(value, value)

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, ())

    def transition_to(self, new_status, user=None, now=None):
        """
        Move to ``new_status``, stamping entry/exit times. Raises ValueError
        when the change is not allowed from the current status.
        """
        if not self.can_transition_to(new_status):
            raise ValueError(
                f"Cannot change visitor status from {self.status} to {new_status}"
            )
        now = now or timezone.now()
        if new_status == self.STATUS_APPROVED:
            self.approved_by = user
        elif new_status == self.STATUS_CHECKED_IN:
            self.entry_time = now
        elif new_status == self.STATUS_CHECKED_OUT:
            self.exit_time = now
        self.status = new_status
        self.save()
        return self

    class Meta:
        db_table = 'visitors'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['society', 'status'], name='visitors_society_status_idx'),
            models.Index(fields=['created_at'], name='visitors_created_idx'),
        ]
