from django.db import models
from django.utils import timezone
from societyhub.core.models import User
from societyhub.society.models import Society


class Event(models.Model):
    """Community event announced to the society's residents"""
    STATUS_UPCOMING = 'UPCOMING'
    STATUS_ONGOING = 'ONGOING'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (STATUS_UPCOMING, 'Upcoming'),
        (STATUS_ONGOING, 'Ongoing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    CATEGORY_CHOICES = [
        ('cultural', 'Cultural'),
        ('sports', 'Sports'),
        ('festival', 'Festival'),
        ('meeting', 'Meeting'),
        ('workshop', 'Workshop'),
        ('other', 'Other'),
    ]

    society = models.ForeignKey(Society, on_delete=models.CASCADE, related_name='events')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    date = models.DateField()
    time = models.TimeField()
    location = models.CharField(max_length=200)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='other')
    max_attendees = models.PositiveIntegerField(default=0, help_text="0 for no limit")
    organizer = models.CharField(max_length=200, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UPCOMING)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_events')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.date})"

    def get_effective_status(self, today=None):
        """An upcoming event whose date has passed is reported as completed"""
        today = today or timezone.localdate()
        if self.status == self.STATUS_UPCOMING and self.date < today:
            return self.STATUS_COMPLETED
        return self.status

    def get_attendee_count(self):
        if hasattr(self, 'attendee_count'):
            return self.attendee_count
        return self.rsvps.filter(status=EventRSVP.STATUS_RSVP).count()

    def is_full(self):
        return self.max_attendees > 0 and self.get_attendee_count() >= self.max_attendees

    class Meta:
        db_table = 'events'
        ordering = ['-date', '-time']
        indexes = [
            models.Index(fields=['society', 'date'], name='events_society_date_idx'),
        ]


class EventRSVP(models.Model):
    STATUS_RSVP = 'RSVP'
    STATUS_CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (STATUS_RSVP, 'Attending'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='rsvps')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='event_rsvps')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_RSVP)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username} - {self.event.title} ({self.status})"

    class Meta:
        db_table = 'event_rsvps'
        constraints = [
            models.UniqueConstraint(fields=['event', 'user'], name='unique_rsvp_per_user'),
        ]
