from decimal import Decimal
from django.db import models
from societyhub.core.models import User
from societyhub.core.utils import all_weekdays, weekday_name
from societyhub.society.models import Society


class Staff(models.Model):
    """Guards and maids employed by a society"""
    ROLE_GUARD = 'GUARD'
    ROLE_MAID = 'MAID'

    ROLE_CHOICES = [
        (ROLE_GUARD, 'Guard'),
        (ROLE_MAID, 'Maid'),
    ]

    SHIFT_CHOICES = [
        ('MORNING', 'Morning'),
        ('EVENING', 'Evening'),
        ('NIGHT', 'Night'),
    ]

    STATUS_ON_DUTY = 'ON_DUTY'
    STATUS_OFF_DUTY = 'OFF_DUTY'
    STATUS_ON_LEAVE = 'ON_LEAVE'

    STATUS_CHOICES = [
        (STATUS_ON_DUTY, 'On Duty'),
        (STATUS_OFF_DUTY, 'Off Duty'),
        (STATUS_ON_LEAVE, 'On Leave'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='staff')
    user = models.OneToOneField(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='staff_profile')
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_GUARD)
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    shift = models.CharField(max_length=10, choices=SHIFT_CHOICES)
    gate = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OFF_DUTY)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    joining_date = models.DateField(null=True, blank=True)
    address = models.TextField(blank=True)
    emergency_contact = models.CharField(max_length=20, blank=True)
    id_proof = models.CharField(max_length=50, blank=True)
    id_number = models.CharField(max_length=50, blank=True)
    working_days = models.JSONField(default=all_weekdays, blank=True)
    check_in_time = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"

    def works_on(self, day):
        """Empty working_days means every day"""
        if not self.working_days:
            return True
        return weekday_name(day) in self.working_days

    class Meta:
        db_table = 'staff'
        ordering = ['name']
        verbose_name_plural = 'staff'
        indexes = [
            models.Index(fields=['society', 'role'], name='staff_society_role_idx'),
        ]


class Attendance(models.Model):
    STATUS_PRESENT = 'PRESENT'
    STATUS_ABSENT = 'ABSENT'
    STATUS_LEAVE = 'LEAVE'

    STATUS_CHOICES = [
        (STATUS_PRESENT, 'Present'),
        (STATUS_ABSENT, 'Absent'),
        (STATUS_LEAVE, 'Leave'),
    ]

    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name='attendance')
    date = models.DateField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PRESENT)
    check_in = models.DateTimeField(null=True, blank=True)
    check_out = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.staff.name} {self.date} {self.status}"

    class Meta:
        db_table = 'staff_attendance'
        ordering = ['-date']
        constraints = [
            models.UniqueConstraint(fields=['staff', 'date'], name='unique_attendance_per_day'),
        ]
