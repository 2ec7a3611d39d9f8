from datetime import time
from decimal import Decimal
from django.db import models
from societyhub.core.models import User
from societyhub.core.utils import all_weekdays, weekday_name
from societyhub.society.models import Society


class Amenity(models.Model):
    """Bookable common facility of a society"""
    TYPE_CHOICES = [
        ('clubhouse', 'Clubhouse'),
        ('gym', 'Gym'),
        ('pool', 'Swimming Pool'),
        ('hall', 'Party Hall'),
        ('court', 'Sports Court'),
        ('garden', 'Garden'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('available', 'Available'),
        ('maintenance', 'Under Maintenance'),
        ('closed', 'Closed'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='amenities')
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='other')
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField(default=0, help_text="Maximum guests per booking, 0 for no limit")
    charges_per_hour = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    available_days = models.JSONField(default=all_weekdays, blank=True, help_text="Weekdays open for booking, e.g. ['Mon', 'Sat']")
    open_time = models.TimeField(default=time(6, 0))
    close_time = models.TimeField(default=time(22, 0))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.society.code})"

    def is_open_on(self, day):
        """Empty available_days means every day"""
        if not self.available_days:
            return True
        return weekday_name(day) in self.available_days

    class Meta:
        db_table = 'amenities'
        ordering = ['name']
        verbose_name_plural = 'amenities'


class AmenityBooking(models.Model):
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    # Bookings in these states hold their slot
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_CONFIRMED)

    TRANSITIONS = {
        STATUS_PENDING: (STATUS_APPROVED, STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED),
        STATUS_APPROVED: (STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED),
        STATUS_CONFIRMED: (STATUS_CANCELLED,),
        STATUS_REJECTED: (),
        STATUS_CANCELLED: (),
    }

    amenity = models.ForeignKey(Amenity, on_delete=models.CASCADE, related_name='bookings')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='amenity_bookings')
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    purpose = models.CharField(max_length=200, blank=True)
    guests = models.PositiveIntegerField(default=1)
    hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.amenity.name} {self.date} {self.start_time}-{self.end_time}"

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, ())

    class Meta:
        db_table = 'amenity_bookings'
        ordering = ['-date', '-start_time']
        indexes = [
            models.Index(fields=['amenity', 'date'], name='bookings_amenity_date_idx'),
            models.Index(fields=['user', 'date'], name='bookings_user_date_idx'),
        ]
