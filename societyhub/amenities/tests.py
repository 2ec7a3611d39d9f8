"""
Test suite for the amenities module
Tests: booking rules and pricing, amenity management, bookings and their status workflow
"""
from datetime import time, timedelta
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.models import AuditLog
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.amenities.booking import BookingError, booking_hours, check_booking
from societyhub.amenities.models import AmenityBooking


def next_weekday(start, weekday):
    """First date strictly after ``start`` falling on ``weekday`` (Mon=0)"""
    days_ahead = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days_ahead)


class BookingRuleTests(TestCase):
    """Test slot validation and pricing"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.amenity = TestDataFactory.create_amenity(self.society, capacity=10, charges_per_hour=Decimal('300.00'))
        self.user = TestDataFactory.create_resident(self.society)
        self.today = timezone.localdate()
        self.day = self.today + timedelta(days=3)

    def test_booking_hours(self):
        self.assertEqual(booking_hours(time(10, 0), time(12, 30)), Decimal('2.50'))
        self.assertEqual(booking_hours(time(10, 0), time(10, 20)), Decimal('0.33'))
        self.assertEqual(booking_hours(time(12, 0), time(10, 0)), Decimal('-2.00'))

    def test_price_follows_hours(self):
        hours, amount = check_booking(self.amenity, self.day, time(18, 0), time(19, 30), 4, today=self.today)
        self.assertEqual(hours, Decimal('1.50'))
        self.assertEqual(amount, Decimal('450.00'))

    def test_rule_failures(self):
        cases = [
            ((self.day, time(12, 0), time(11, 0), 1), 'end_time'),
            ((self.today - timedelta(days=1), time(10, 0), time(11, 0), 1), 'date'),
            ((self.day, time(5, 0), time(7, 0), 1), 'start_time'),
            ((self.day, time(21, 0), time(23, 0), 1), 'start_time'),
            ((self.day, time(10, 0), time(11, 0), 11), 'guests'),
        ]
        for (day, start, end, guests), field in cases:
            with self.subTest(field=field, start=start):
                with self.assertRaises(BookingError) as ctx:
                    check_booking(self.amenity, day, start, end, guests, today=self.today)
                self.assertEqual(ctx.exception.field, field)

    def test_closed_weekday(self):
        self.amenity.available_days = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri']
        self.amenity.save()
        saturday = next_weekday(self.today, 5)
        with self.assertRaises(BookingError) as ctx:
            check_booking(self.amenity, saturday, time(10, 0), time(11, 0), today=self.today)
        self.assertEqual(ctx.exception.field, 'date')

    def test_empty_days_means_every_day(self):
        self.amenity.available_days = []
        self.amenity.save()
        sunday = next_weekday(self.today, 6)
        hours, _ = check_booking(self.amenity, sunday, time(10, 0), time(11, 0), today=self.today)
        self.assertEqual(hours, Decimal('1.00'))

    def test_unlimited_capacity(self):
        self.amenity.capacity = 0
        self.amenity.save()
        check_booking(self.amenity, self.day, time(10, 0), time(11, 0), 500, today=self.today)

    def test_amenity_under_maintenance(self):
        self.amenity.status = 'maintenance'
        self.amenity.save()
        with self.assertRaises(BookingError) as ctx:
            check_booking(self.amenity, self.day, time(10, 0), time(11, 0), today=self.today)
        self.assertEqual(ctx.exception.field, 'amenity')

    def test_overlap_with_active_booking_only(self):
        booking = AmenityBooking.objects.create(
            amenity=self.amenity, user=self.user, date=self.day,
            start_time=time(10, 0), end_time=time(12, 0), hours=Decimal('2.00'), amount=Decimal('600.00')
        )
        with self.assertRaises(BookingError):
            check_booking(self.amenity, self.day, time(11, 0), time(13, 0), today=self.today)

        # Back to back is fine
        check_booking(self.amenity, self.day, time(12, 0), time(13, 0), today=self.today)

        booking.status = AmenityBooking.STATUS_CANCELLED
        booking.save()
        check_booking(self.amenity, self.day, time(11, 0), time(13, 0), today=self.today)


class AmenityAPITests(TestCase):
    """Test amenity endpoints"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.resident = TestDataFactory.create_resident(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_amenity_normalizes_days(self):
        response = self.client.post('/api/v1/amenities/', {
            'name': 'Swimming Pool',
            'type': 'pool',
            'capacity': 20,
            'charges_per_hour': '150.00',
            'available_days': ['saturday', 'monday', 'SUN'],
            'open_time': '07:00',
            'close_time': '20:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['available_days'], ['Mon', 'Sat', 'Sun'])
        self.assertEqual(response.data['society'], self.society.id)

    def test_create_amenity_validation(self):
        response = self.client.post('/api/v1/amenities/', {
            'name': 'Gym',
            'type': 'gym',
            'available_days': ['Funday'],
            'open_time': '20:00',
            'close_time': '07:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('available_days', response.data)

    def test_resident_cannot_create(self):
        self.client.authenticate_user(self.resident)
        response = self.client.post('/api/v1/amenities/', {'name': 'Hall', 'type': 'hall'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_resident_lists_society_amenities(self):
        TestDataFactory.create_amenity(self.society, name='Clubhouse')
        TestDataFactory.create_amenity(TestDataFactory.create_society(), name='Elsewhere')
        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/amenities/')
        self.assertEqual([amenity['name'] for amenity in response.data], ['Clubhouse'])

    def test_quote(self):
        amenity = TestDataFactory.create_amenity(self.society, charges_per_hour=Decimal('200.00'))
        day = timezone.localdate() + timedelta(days=2)
        self.client.authenticate_user(self.resident)
        response = self.client.get(
            f'/api/v1/amenities/{amenity.id}/quote/?date={day.isoformat()}&start_time=09:00&end_time=11:30'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['hours'], '2.50')
        self.assertEqual(response.data['amount'], '500.00')
        self.assertEqual(AmenityBooking.objects.count(), 0)


class BookingAPITests(TestCase):
    """Test booking endpoints and the status workflow"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.resident = TestDataFactory.create_resident(self.society)
        self.amenity = TestDataFactory.create_amenity(self.society, charges_per_hour=Decimal('200.00'))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.resident)
        self.day = timezone.localdate() + timedelta(days=5)

    def book(self, start='10:00', end='12:00', **extra):
        data = {
            'amenity': self.amenity.id,
            'date': self.day.isoformat(),
            'start_time': start,
            'end_time': end,
            'guests': 4,
            'purpose': 'Birthday',
        }
        data.update(extra)
        return self.client.post('/api/v1/amenities/bookings/', data, format='json')

    def test_create_booking(self):
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], AmenityBooking.STATUS_PENDING)
        self.assertEqual(response.data['hours'], '2.00')
        self.assertEqual(response.data['amount'], '400.00')
        self.assertEqual(response.data['user'], self.resident.id)

    def test_overlapping_booking_rejected(self):
        self.book()
        response = self.book(start='11:00', end='13:00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_time', response.data)

    def test_amenity_of_other_society_rejected(self):
        foreign = TestDataFactory.create_amenity(TestDataFactory.create_society())
        response = self.book(amenity=foreign.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amenity', response.data)

    def test_my_bookings_upcoming_and_past(self):
        self.book()
        AmenityBooking.objects.create(
            amenity=self.amenity, user=self.resident, date=timezone.localdate() - timedelta(days=3),
            start_time=time(10, 0), end_time=time(11, 0), hours=Decimal('1.00'), amount=Decimal('200.00')
        )
        response = self.client.get('/api/v1/amenities/bookings/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/amenities/bookings/?when=upcoming')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['date'], self.day.isoformat())
        response = self.client.get('/api/v1/amenities/bookings/?when=past')
        self.assertEqual(len(response.data), 1)

    def test_admin_approves_then_confirms(self):
        booking_id = self.book().data['id']
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], AmenityBooking.STATUS_APPROVED)
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'CONFIRMED'}, format='json')
        self.assertEqual(response.data['status'], AmenityBooking.STATUS_CONFIRMED)
        self.assertEqual(AuditLog.objects.filter(action='booking_status', object_id=str(booking_id)).count(), 2)

    def test_rejected_booking_is_final(self):
        booking_id = self.book().data['id']
        self.client.authenticate_user(self.admin)
        self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'REJECTED'}, format='json')
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_may_only_cancel(self):
        booking_id = self.book().data['id']
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], AmenityBooking.STATUS_CANCELLED)

        # Cancelled slot can be booked again
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_other_resident_cannot_cancel(self):
        booking_id = self.book().data['id']
        self.client.authenticate_user(TestDataFactory.create_resident(self.society))
        response = self.client.patch(f'/api/v1/amenities/bookings/{booking_id}/status/', {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_all_with_filters(self):
        self.book()
        other = TestDataFactory.create_amenity(self.society)
        AmenityBooking.objects.create(
            amenity=other, user=self.admin, date=self.day, start_time=time(10, 0), end_time=time(11, 0),
            hours=Decimal('1.00'), amount=Decimal('200.00'), status=AmenityBooking.STATUS_CONFIRMED
        )
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/amenities/bookings/all/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/amenities/bookings/all/?status=pending')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/amenities/bookings/all/?amenity={other.id}')
        self.assertEqual(response.data[0]['status'], AmenityBooking.STATUS_CONFIRMED)

    def test_resident_cannot_list_all(self):
        response = self.client.get('/api/v1/amenities/bookings/all/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
