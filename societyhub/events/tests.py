"""
Test suite for the events module
Tests: event management, effective status, RSVP rules, attendees, stats, export
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.events.models import Event, EventRSVP


class EventModelTests(TestCase):

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.today = timezone.localdate()

    def test_past_upcoming_event_is_completed(self):
        event = TestDataFactory.create_event(self.society, date=self.today - timedelta(days=1))
        self.assertEqual(event.status, Event.STATUS_UPCOMING)
        self.assertEqual(event.get_effective_status(), Event.STATUS_COMPLETED)

    def test_event_today_is_still_upcoming(self):
        event = TestDataFactory.create_event(self.society, date=self.today)
        self.assertEqual(event.get_effective_status(), Event.STATUS_UPCOMING)

    def test_cancelled_stays_cancelled(self):
        event = TestDataFactory.create_event(
            self.society, date=self.today - timedelta(days=1), status=Event.STATUS_CANCELLED
        )
        self.assertEqual(event.get_effective_status(), Event.STATUS_CANCELLED)

    def test_is_full(self):
        event = TestDataFactory.create_event(self.society, max_attendees=1)
        self.assertFalse(event.is_full())
        EventRSVP.objects.create(event=event, user=TestDataFactory.create_resident(self.society))
        self.assertTrue(event.is_full())

        unlimited = TestDataFactory.create_event(self.society, max_attendees=0)
        EventRSVP.objects.create(event=unlimited, user=TestDataFactory.create_resident(self.society))
        self.assertFalse(unlimited.is_full())


class EventAPITests(TestCase):
    """Test event endpoints"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.resident = TestDataFactory.create_resident(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.today = timezone.localdate()

    def test_create_event(self):
        response = self.client.post('/api/v1/events/', {
            'title': 'Diwali Mela',
            'description': 'Food stalls and lights',
            'date': (self.today + timedelta(days=10)).isoformat(),
            'time': '18:30',
            'location': 'Central Lawn',
            'category': 'festival',
            'max_attendees': 200,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Event.STATUS_UPCOMING)
        self.assertEqual(response.data['attendees'], 0)
        self.assertFalse(response.data['is_rsvp'])
        self.assertEqual(response.data['created_by'], self.admin.id)

    def test_create_event_requires_title_and_location(self):
        response = self.client.post('/api/v1/events/', {
            'title': '  ',
            'date': self.today.isoformat(),
            'time': '10:00',
            'location': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('title', response.data)
        self.assertIn('location', response.data)

    def test_resident_cannot_create_or_delete(self):
        event = TestDataFactory.create_event(self.society)
        self.client.authenticate_user(self.resident)
        response = self.client.post('/api/v1/events/', {'title': 'Party'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/events/{event.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_status_filter_uses_effective_status(self):
        past = TestDataFactory.create_event(self.society, date=self.today - timedelta(days=2))
        future = TestDataFactory.create_event(self.society)
        response = self.client.get('/api/v1/events/?status=completed')
        self.assertEqual([event['id'] for event in response.data], [past.id])
        self.assertEqual(response.data[0]['status'], Event.STATUS_COMPLETED)
        response = self.client.get('/api/v1/events/?status=UPCOMING')
        self.assertEqual([event['id'] for event in response.data], [future.id])

    def test_category_and_search_filters(self):
        TestDataFactory.create_event(self.society, title='Cricket League', category='sports')
        TestDataFactory.create_event(self.society, title='AGM', category='meeting')
        response = self.client.get('/api/v1/events/?category=SPORTS')
        self.assertEqual(response.data[0]['title'], 'Cricket League')
        response = self.client.get('/api/v1/events/?search=agm')
        self.assertEqual(len(response.data), 1)

    def test_other_society_events_hidden(self):
        TestDataFactory.create_event(TestDataFactory.create_society())
        response = self.client.get('/api/v1/events/')
        self.assertEqual(response.data, [])


class RSVPTests(TestCase):
    """Test RSVP and withdrawal"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.resident = TestDataFactory.create_resident(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.resident)
        self.today = timezone.localdate()

    def test_rsvp_and_withdraw(self):
        event = TestDataFactory.create_event(self.society, max_attendees=10)
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['attendees'], 1)
        self.assertTrue(response.data['is_rsvp'])

        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['attendees'], 0)
        self.assertFalse(response.data['is_rsvp'])

        # Re-RSVP reuses the same record
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/', {'status': 'RSVP'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(EventRSVP.objects.filter(event=event, user=self.resident).count(), 1)

    def test_withdraw_without_rsvp(self):
        event = TestDataFactory.create_event(self.society)
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/', {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_full_event(self):
        event = TestDataFactory.create_event(self.society, max_attendees=1)
        EventRSVP.objects.create(event=event, user=TestDataFactory.create_resident(self.society))
        response = self.client.post(f'/api/v1/events/{event.id}/rsvp/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Event is full')

    def test_cannot_rsvp_to_past_or_cancelled_event(self):
        past = TestDataFactory.create_event(self.society, date=self.today - timedelta(days=1))
        response = self.client.post(f'/api/v1/events/{past.id}/rsvp/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        cancelled = TestDataFactory.create_event(self.society, status=Event.STATUS_CANCELLED)
        response = self.client.post(f'/api/v1/events/{cancelled.id}/rsvp/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_attendees(self):
        event = TestDataFactory.create_event(self.society)
        self.client.post(f'/api/v1/events/{event.id}/rsvp/')
        response = self.client.get(f'/api/v1/events/{event.id}/attendees/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['user_id'], self.resident.id)
        self.assertEqual(response.data[0]['unit_label'], self.resident.unit.label)

    def test_stats(self):
        soon = TestDataFactory.create_event(self.society, date=self.today + timedelta(days=5))
        TestDataFactory.create_event(self.society, date=self.today + timedelta(days=60))
        TestDataFactory.create_event(self.society, date=self.today - timedelta(days=5))
        self.client.post(f'/api/v1/events/{soon.id}/rsvp/')
        EventRSVP.objects.create(event=soon, user=TestDataFactory.create_resident(self.society))

        response = self.client.get('/api/v1/events/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['upcoming'], 1)
        self.assertEqual(response.data['total_attendees'], 2)
        self.assertEqual(response.data['my_rsvps'], 1)

    def test_export_requires_admin(self):
        response = self.client.get('/api/v1/events/export/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = TestDataFactory.create_admin(self.society)
        TestDataFactory.create_event(self.society, title='Holi Bash', max_attendees=50)
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/events/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lines = response.content.decode().splitlines()
        self.assertEqual(lines[0], 'Title,Date,Time,Location,Category,Organizer,Status,Attendees,Max Attendees')
        self.assertTrue(lines[1].startswith('Holi Bash,'))
        self.assertTrue(lines[1].endswith(',0,50'))
