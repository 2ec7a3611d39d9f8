"""
Test suite for the society module
Tests: societies (approve/suspend), units, occupancy, resident directory, stats, export
"""
from django.test import TestCase
from rest_framework import status
from societyhub.core.models import AuditLog, User
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.society.models import Society, Unit


class SocietyTests(TestCase):
    """Test society registration and lifecycle"""

    def setUp(self):
        self.super_admin = TestDataFactory.create_super_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.super_admin)

    def test_super_admin_registers_pending_society(self):
        response = self.client.post('/api/v1/societies/', {
            'name': 'Green Meadows',
            'code': 'GM01',
            'city': 'Pune',
            'status': 'active',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')

    def test_approve_then_suspend(self):
        society = TestDataFactory.create_society(status='pending')
        response = self.client.post(f'/api/v1/societies/{society.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'active')

        response = self.client.post(f'/api/v1/societies/{society.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/societies/{society.id}/suspend/', {'reason': 'Unpaid fees'}, format='json')
        self.assertEqual(response.data['status'], 'suspended')
        self.assertTrue(AuditLog.objects.filter(action='society_suspend', object_id=str(society.id)).exists())

        response = self.client.post(f'/api/v1/societies/{society.id}/suspend/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_sees_only_own_society(self):
        society = TestDataFactory.create_society()
        TestDataFactory.create_society()
        admin = TestDataFactory.create_admin(society)
        self.client.authenticate_user(admin)

        response = self.client.get('/api/v1/societies/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], society.id)

        response = self.client.post('/api/v1/societies/', {'name': 'X', 'code': 'X1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_approve(self):
        society = TestDataFactory.create_society(status='pending')
        admin = TestDataFactory.create_admin(society)
        self.client.authenticate_user(admin)
        response = self.client.post(f'/api/v1/societies/{society.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Society.objects.get(pk=society.id).status, 'pending')


class UnitTests(TestCase):
    """Test units and derived occupancy"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_unit(self):
        response = self.client.post('/api/v1/units/', {
            'block': 'A',
            'number': '101',
            'type': '3BHK',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['label'], 'A-101')
        self.assertEqual(response.data['occupancy'], 'vacant')
        self.assertEqual(response.data['society'], self.society.id)

    def test_duplicate_unit_rejected(self):
        TestDataFactory.create_unit(self.society, block='A', number='101')
        response = self.client.post('/api/v1/units/', {'block': 'a', 'number': '101'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_number_in_other_society_allowed(self):
        TestDataFactory.create_unit(TestDataFactory.create_society(), block='A', number='101')
        response = self.client.post('/api/v1/units/', {'block': 'A', 'number': '101'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_occupancy_prefers_tenant(self):
        unit = TestDataFactory.create_unit(self.society, block='B', number='202')
        owner = TestDataFactory.create_resident(self.society, unit=unit, resident_type='owner')
        self.assertEqual(unit.occupancy, 'owner')
        tenant = TestDataFactory.create_resident(self.society, unit=unit, resident_type='tenant')

        response = self.client.get(f'/api/v1/units/{unit.id}/')
        self.assertEqual(response.data['occupancy'], 'tenant')
        self.assertEqual(response.data['owner']['id'], owner.id)
        self.assertEqual(response.data['tenant']['id'], tenant.id)

    def test_filter_by_occupancy(self):
        occupied = TestDataFactory.create_unit(self.society, block='A', number='1')
        vacant = TestDataFactory.create_unit(self.society, block='A', number='2')
        TestDataFactory.create_resident(self.society, unit=occupied)

        response = self.client.get('/api/v1/units/?occupancy=occupied')
        self.assertEqual([unit['id'] for unit in response.data], [occupied.id])
        response = self.client.get('/api/v1/units/?occupancy=vacant')
        self.assertEqual([unit['id'] for unit in response.data], [vacant.id])

    def test_only_residents_occupy_units(self):
        unit = TestDataFactory.create_unit(self.society, block='C', number='303')
        TestDataFactory.create_guard(self.society, unit=unit, resident_type='owner')
        self.assertEqual(unit.occupancy, 'vacant')

        response = self.client.get(f'/api/v1/units/{unit.id}/')
        self.assertEqual(response.data['occupancy'], 'vacant')
        self.assertIsNone(response.data['owner'])
        response = self.client.get('/api/v1/units/?occupancy=occupied')
        self.assertEqual(response.data, [])
        response = self.client.get('/api/v1/units/?occupancy=vacant')
        self.assertEqual([row['id'] for row in response.data], [unit.id])
        response = self.client.get('/api/v1/members/stats/')
        self.assertEqual(response.data['occupied_units'], 0)
        self.assertEqual(response.data['vacant_units'], 1)

    def test_delete_unit_with_residents_conflicts(self):
        unit = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_resident(self.society, unit=unit)
        response = self.client.delete(f'/api/v1/units/{unit.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Unit.objects.filter(pk=unit.id).exists())


class MemberTests(TestCase):
    """Test the resident directory"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_member_creates_missing_unit(self):
        response = self.client.post('/api/v1/members/', {
            'name': 'Asha Rao',
            'email': 'asha@test.com',
            'phone': '9876500000',
            'resident_type': 'owner',
            'block': 'C',
            'number': '303',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['unit_label'], 'C-303')
        self.assertEqual(response.data['name'], 'Asha Rao')
        user = User.objects.get(email='asha@test.com')
        self.assertEqual(user.role, User.ROLE_RESIDENT)
        self.assertEqual(user.society, self.society)
        self.assertFalse(user.has_usable_password())
        self.assertTrue(Unit.objects.filter(society=self.society, block='C', number='303').exists())

    def test_create_member_uses_existing_unit(self):
        unit = TestDataFactory.create_unit(self.society, block='C', number='303')
        response = self.client.post('/api/v1/members/', {
            'name': 'Ravi',
            'email': 'ravi@test.com',
            'phone': '9876500001',
            'resident_type': 'tenant',
            'unit': unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['unit'], unit.id)
        self.assertEqual(Unit.objects.filter(society=self.society).count(), 1)

    def test_create_member_requires_fields(self):
        response = self.client.post('/api/v1/members/', {'name': 'Nobody'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('email', 'phone', 'resident_type'):
            self.assertIn(field, response.data)

    def test_create_member_requires_unit(self):
        response = self.client.post('/api/v1/members/', {
            'name': 'Homeless',
            'email': 'h@test.com',
            'phone': '9000000000',
            'resident_type': 'owner',
            'block': 'C',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit', response.data)

    def test_duplicate_email_rejected(self):
        TestDataFactory.create_resident(self.society, email='dup@test.com')
        response = self.client.post('/api/v1/members/', {
            'name': 'Dup',
            'email': 'dup@test.com',
            'phone': '9000000000',
            'resident_type': 'owner',
            'block': 'A',
            'number': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_filters_and_search(self):
        unit = TestDataFactory.create_unit(self.society, block='D', number='404')
        match = TestDataFactory.create_resident(self.society, unit=unit, resident_type='tenant', first_name='Meera')
        TestDataFactory.create_resident(self.society, resident_type='owner', first_name='Kiran')

        response = self.client.get('/api/v1/members/?search=D-404')
        self.assertEqual([member['id'] for member in response.data], [match.id])
        response = self.client.get('/api/v1/members/?resident_type=tenant')
        self.assertEqual([member['id'] for member in response.data], [match.id])
        response = self.client.get('/api/v1/members/?block=d')
        self.assertEqual([member['id'] for member in response.data], [match.id])

    def test_delete_deactivates(self):
        member = TestDataFactory.create_resident(self.society)
        response = self.client.delete(f'/api/v1/members/{member.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        member.refresh_from_db()
        self.assertFalse(member.is_active)

        response = self.client.get('/api/v1/members/?status=inactive')
        self.assertEqual([row['id'] for row in response.data], [member.id])

    def test_stats(self):
        unit = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_resident(self.society, unit=unit, resident_type='owner')
        TestDataFactory.create_resident(self.society, unit=unit, resident_type='tenant')
        TestDataFactory.create_unit(self.society)

        response = self.client.get('/api/v1/members/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'total': 2,
            'owners': 1,
            'tenants': 1,
            'units': 2,
            'occupied_units': 1,
            'vacant_units': 1,
        })

    def test_export_csv(self):
        unit = TestDataFactory.create_unit(self.society, block='E', number='505')
        TestDataFactory.create_resident(self.society, unit=unit, first_name='Zoya', last_name='Khan')
        response = self.client.get('/api/v1/members/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('residents-', response['Content-Disposition'])
        content = response.content.decode()
        self.assertTrue(content.startswith('Name,Email,Phone,Block,Unit,Type,Status'))
        self.assertIn('Zoya Khan', content)
        self.assertIn('505', content)
