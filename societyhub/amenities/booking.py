"""
Booking time and price calculation, and the rules a booking must satisfy
before it is accepted.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from django.utils import timezone
from .models import AmenityBooking

TWO_PLACES = Decimal('0.01')


class BookingError(Exception):
    """A booking request that breaks one of the amenity's rules"""

    def __init__(self, message, field='non_field_errors'):
        super().__init__(message)
        self.field = field
        self.message = message


def booking_hours(start_time, end_time):
    """Length of the slot in hours, rounded to two decimals"""
    day = datetime(2000, 1, 1)
    delta = datetime.combine(day, end_time) - datetime.combine(day, start_time)
    hours = Decimal(int(delta.total_seconds())) / Decimal(3600)
    return hours.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def booking_amount(charges_per_hour, hours):
    return (charges_per_hour * hours).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def overlapping_bookings(amenity, date, start_time, end_time, exclude_id=None):
    queryset = AmenityBooking.objects.filter(
        amenity=amenity,
        date=date,
        status__in=AmenityBooking.ACTIVE_STATUSES,
        start_time__lt=end_time,
        end_time__gt=start_time,
    )
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset


def check_booking(amenity, date, start_time, end_time, guests=1, today=None, exclude_id=None):
    """
    Validate a requested slot and return ``(hours, amount)``.

    Raises BookingError for the first rule the request breaks.
    """
    today = today or timezone.localdate()

    hours = booking_hours(start_time, end_time)
    if hours <= 0:
        raise BookingError('End time must be after start time', 'end_time')
    if amenity.status != 'available':
        raise BookingError(f'{amenity.name} is {amenity.get_status_display().lower()}', 'amenity')
    if date < today:
        raise BookingError('Cannot book a date in the past', 'date')
    if not amenity.is_open_on(date):
        raise BookingError(f'{amenity.name} is not available on {date.strftime("%A")}', 'date')
    if start_time < amenity.open_time or end_time > amenity.close_time:
        raise BookingError(
            f'Booking must be between {amenity.open_time.strftime("%H:%M")} and {amenity.close_time.strftime("%H:%M")}',
            'start_time'
        )
    if amenity.capacity and guests > amenity.capacity:
        raise BookingError(f'Maximum {amenity.capacity} guests allowed', 'guests')
    if overlapping_bookings(amenity, date, start_time, end_time, exclude_id).exists():
        raise BookingError('This slot overlaps an existing booking', 'start_time')

    return hours, booking_amount(amenity.charges_per_hour, hours)
