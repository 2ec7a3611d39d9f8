"""
Test suite for the visitors module
Tests: registration by role, status transitions, check-in/out, passes, logs, guard dashboard
"""
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.models import AuditLog
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.visitors.models import Visitor


class VisitorTransitionTests(TestCase):
    """Test the visitor state machine on the model"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.guard = TestDataFactory.create_guard(self.society)

    def test_normalize_status_aliases(self):
        self.assertEqual(Visitor.normalize_status('exited'), Visitor.STATUS_CHECKED_OUT)
        self.assertEqual(Visitor.normalize_status('checked-in'), Visitor.STATUS_CHECKED_IN)
        self.assertEqual(Visitor.normalize_status('Checked Out'), Visitor.STATUS_CHECKED_OUT)

    def test_full_visit(self):
        visitor = TestDataFactory.create_visitor(self.society)
        visitor.transition_to(Visitor.STATUS_APPROVED, user=self.guard)
        self.assertEqual(visitor.approved_by, self.guard)
        visitor.transition_to(Visitor.STATUS_CHECKED_IN)
        self.assertIsNotNone(visitor.entry_time)
        visitor.transition_to(Visitor.STATUS_CHECKED_OUT)
        self.assertIsNotNone(visitor.exit_time)
        self.assertGreaterEqual(visitor.exit_time, visitor.entry_time)

    def test_invalid_transitions(self):
        visitor = TestDataFactory.create_visitor(self.society)
        with self.assertRaises(ValueError):
            visitor.transition_to(Visitor.STATUS_CHECKED_OUT)

        rejected = TestDataFactory.create_visitor(self.society, status=Visitor.STATUS_REJECTED)
        with self.assertRaises(ValueError):
            rejected.transition_to(Visitor.STATUS_CHECKED_IN)

        inside = TestDataFactory.create_visitor(self.society, status=Visitor.STATUS_CHECKED_IN)
        with self.assertRaises(ValueError):
            inside.transition_to(Visitor.STATUS_REJECTED)


class VisitorAPITests(TestCase):
    """Test visitor endpoints for guards, residents and admins"""

    def setUp(self):
        cache.clear()
        self.society = TestDataFactory.create_society()
        self.unit = TestDataFactory.create_unit(self.society, block='A', number='101')
        self.guard = TestDataFactory.create_guard(self.society)
        self.resident = TestDataFactory.create_resident(self.society, unit=self.unit)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.guard)

    def test_guard_registers_pending_visitor(self):
        response = self.client.post('/api/v1/visitors/', {
            'name': 'Courier',
            'phone': '9000011111',
            'purpose': 'Delivery',
            'vehicle_no': 'mh12ab1234',
            'visiting_unit': self.unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Visitor.STATUS_PENDING)
        self.assertEqual(response.data['unit_label'], 'A-101')
        self.assertEqual(response.data['vehicle_no'], 'MH12AB1234')
        self.assertTrue(response.data['pass_code'].startswith('GP-'))

    def test_guard_pre_approved_visitor(self):
        response = self.client.post('/api/v1/visitors/', {
            'name': 'Plumber',
            'phone': '9000011112',
            'visiting_unit': self.unit.id,
            'pre_approved': True,
        }, format='json')
        self.assertEqual(response.data['status'], Visitor.STATUS_APPROVED)
        self.assertEqual(response.data['approved_by'], self.guard.id)

    def test_phone_required(self):
        response = self.client.post('/api/v1/visitors/', {'name': 'No Phone', 'phone': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_unit_from_other_society_rejected(self):
        foreign_unit = TestDataFactory.create_unit(TestDataFactory.create_society())
        response = self.client.post('/api/v1/visitors/', {
            'name': 'Lost',
            'phone': '9000011113',
            'visiting_unit': foreign_unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('visiting_unit', response.data)

    def test_resident_visitor_is_approved_for_own_unit(self):
        other_unit = TestDataFactory.create_unit(self.society)
        self.client.authenticate_user(self.resident)
        response = self.client.post('/api/v1/visitors/', {
            'name': 'Guest',
            'phone': '9000011114',
            'visiting_unit': other_unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Visitor.STATUS_APPROVED)
        self.assertEqual(response.data['visiting_unit'], self.unit.id)

    def test_resident_cannot_move_visitor_to_other_unit(self):
        neighbour = TestDataFactory.create_unit(self.society, block='A', number='102')
        self.client.authenticate_user(self.resident)
        response = self.client.post('/api/v1/visitors/', {'name': 'Guest', 'phone': '9000011119'}, format='json')
        visitor_id = response.data['id']

        response = self.client.patch(f'/api/v1/visitors/{visitor_id}/', {
            'visiting_unit': neighbour.id,
            'purpose': 'Dinner',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['visiting_unit'], self.unit.id)
        self.assertEqual(response.data['purpose'], 'Dinner')
        self.assertEqual(Visitor.objects.get(pk=visitor_id).visiting_unit, self.unit)

    def test_resident_sees_only_own_unit(self):
        mine = TestDataFactory.create_visitor(self.society, unit=self.unit)
        TestDataFactory.create_visitor(self.society, unit=TestDataFactory.create_unit(self.society))
        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/visitors/')
        self.assertEqual([visitor['id'] for visitor in response.data], [mine.id])

    def test_check_in_walk_in(self):
        response = self.client.post('/api/v1/visitors/check-in/', {
            'name': 'Walk In',
            'phone': '9000011115',
            'visiting_unit': self.unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Visitor.STATUS_CHECKED_IN)
        self.assertIsNotNone(response.data['entry_time'])

    def test_resident_cannot_use_check_in(self):
        self.client.authenticate_user(self.resident)
        response = self.client.post('/api/v1/visitors/check-in/', {'name': 'X', 'phone': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_resident_approves_pending_visitor(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit)
        self.client.authenticate_user(self.resident)
        response = self.client.patch(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Visitor.STATUS_APPROVED)
        self.assertEqual(response.data['approved_by'], self.resident.id)
        self.assertTrue(AuditLog.objects.filter(action='visitor_status', object_id=str(visitor.id)).exists())

    def test_resident_cannot_check_in(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_APPROVED)
        self.client.authenticate_user(self.resident)
        response = self.client.patch(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'CHECKED_IN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_transition_returns_400(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_OUT)
        response = self.client.patch(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'CHECKED_IN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_status_rejected(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit)
        response = self.client.patch(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'LOST'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data)

    def test_exited_alias_checks_out(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_IN)
        response = self.client.patch(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'EXITED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Visitor.STATUS_CHECKED_OUT)
        self.assertIsNotNone(response.data['exit_time'])

    def test_check_out_requires_check_in(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_APPROVED)
        response = self.client.post(f'/api/v1/visitors/{visitor.id}/check-out/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        visitor.transition_to(Visitor.STATUS_CHECKED_IN)
        response = self.client.post(f'/api/v1/visitors/{visitor.id}/check-out/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Visitor.STATUS_CHECKED_OUT)

    def test_pass_image(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_APPROVED)
        response = self.client.get(f'/api/v1/visitors/{visitor.id}/pass/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))

    def test_no_pass_for_checked_out_visitor(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_OUT)
        response = self.client.get(f'/api/v1/visitors/{visitor.id}/pass/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filters(self):
        TestDataFactory.create_visitor(self.society, unit=self.unit, name='Anil Courier')
        TestDataFactory.create_visitor(self.society, unit=self.unit, name='Sunita', status=Visitor.STATUS_CHECKED_IN)
        response = self.client.get('/api/v1/visitors/?search=anil')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/visitors/?status=checked-in')
        self.assertEqual(response.data[0]['name'], 'Sunita')
        response = self.client.get('/api/v1/visitors/?status=all')
        self.assertEqual(len(response.data), 2)
        response = self.client.get(f'/api/v1/visitors/?date={timezone.localdate().isoformat()}')
        self.assertEqual(len(response.data), 2)

    def test_logs_only_checked_out(self):
        left = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_OUT)
        TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_IN)
        response = self.client.get('/api/v1/visitors/logs/')
        self.assertEqual([visitor['id'] for visitor in response.data], [left.id])

    def test_guard_stats(self):
        TestDataFactory.create_visitor(self.society, unit=self.unit)
        TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_IN)
        TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_OUT)
        TestDataFactory.create_visitor(TestDataFactory.create_society())

        response = self.client.get('/api/v1/guard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'visitors_today': 3,
            'pending_approvals': 1,
            'currently_inside': 1,
            'checked_out_today': 1,
        })

    def test_guard_stats_refresh_after_check_in(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_APPROVED)
        self.client.get('/api/v1/guard/stats/')
        self.client.post(f'/api/v1/visitors/{visitor.id}/status/', {'status': 'CHECKED_IN'}, format='json')
        response = self.client.get('/api/v1/guard/stats/')
        self.assertEqual(response.data['currently_inside'], 1)

    def test_guard_activity(self):
        visitor = TestDataFactory.create_visitor(self.society, unit=self.unit, status=Visitor.STATUS_CHECKED_IN)
        response = self.client.get('/api/v1/guard/activity/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['id'], visitor.id)
        self.assertEqual(response.data[0]['action'], 'Visitor checked in')
        self.assertEqual(response.data[0]['unit'], 'A-101')

    def test_resident_cannot_see_guard_stats(self):
        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/guard/stats/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
