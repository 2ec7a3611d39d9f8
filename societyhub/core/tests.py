"""
Test suite for the core module
Tests: authentication, role based access, users, settings, audit logs, search, stats cache
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from societyhub.core.cache_signals import stats_cache_key
from societyhub.core.models import AuditLog, Setting, User
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.core.utils import create_audit_log, get_int_setting, normalize_weekdays


class AuthTests(TestCase):
    """Test login, register and me"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        """Test login with valid credentials"""
        user = TestDataFactory.create_admin(self.society, username='secretary')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'secretary',
            'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['id'], user.id)
        self.assertEqual(response.data['user']['effective_role'], 'admin')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='resident1')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'resident1',
            'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_register_individual(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newbie',
            'email': 'newbie@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'individual')
        self.assertIn('access', response.data)

    def test_register_resident_requires_society(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newbie',
            'email': 'newbie@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
            'role': 'resident',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('society', response.data)

    def test_registered_resident_is_not_linked_to_a_unit(self):
        unit = TestDataFactory.create_unit(self.society, block='A', number='101')
        TestDataFactory.create_resident(self.society, unit=unit)
        TestDataFactory.create_invoice(self.society, unit=unit)
        TestDataFactory.create_visitor(self.society, unit=unit)

        response = self.client.post('/api/v1/auth/register/', {
            'username': 'claimer',
            'email': 'claimer@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
            'role': 'resident',
            'society': self.society.id,
            'unit': unit.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['user']['unit'])
        user = User.objects.get(username='claimer')
        self.assertIsNone(user.unit)
        self.assertEqual(user.society, self.society)

        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/invoices/my/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 0)
        response = self.client.get('/api/v1/visitors/')
        self.assertEqual(response.data, [])

    def test_register_cannot_claim_admin_role(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'sneaky',
            'email': 'sneaky@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='sneaky').exists())

    def test_me_flags_for_guard(self):
        guard = TestDataFactory.create_guard(self.society)
        self.client.authenticate_user(guard)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['can_access_gate'])
        self.assertFalse(response.data['can_manage_billing'])
        self.assertEqual(response.data['society']['code'], self.society.code)

    def test_superuser_acts_as_super_admin(self):
        root = TestDataFactory.create_user(role=User.ROLE_RESIDENT, is_superuser=True)
        self.client.authenticate_user(root)
        response = self.client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['is_super_admin'])
        self.assertTrue(response.data['can_access_platform'])

    def test_unauthenticated_request_rejected(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserTests(TestCase):
    """Test user management scoping"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.other_society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_admin_lists_only_own_society(self):
        TestDataFactory.create_resident(self.society)
        outsider = TestDataFactory.create_resident(self.other_society)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [user['id'] for user in response.data]
        self.assertIn(self.admin.id, ids)
        self.assertNotIn(outsider.id, ids)

    def test_admin_creates_user_in_own_society(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'guard1',
            'email': 'guard1@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
            'role': 'guard',
            'society': self.other_society.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['society'], self.society.id)

    def test_admin_cannot_create_super_admin(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'boss',
            'email': 'boss@test.com',
            'password': 'Str0ngPass!word',
            'password_confirm': 'Str0ngPass!word',
            'role': 'super_admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_link_unit_of_other_society(self):
        resident = TestDataFactory.create_resident(self.society)
        own_unit = resident.unit
        foreign_unit = TestDataFactory.create_unit(self.other_society)
        TestDataFactory.create_invoice(self.other_society, unit=foreign_unit)

        response = self.client.patch(f'/api/v1/users/{resident.id}/', {'unit': foreign_unit.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit', response.data)
        resident.refresh_from_db()
        self.assertEqual(resident.unit, own_unit)

        self.client.authenticate_user(resident)
        response = self.client.get('/api/v1/invoices/my/')
        self.assertEqual(response.data, [])

    def test_admin_links_unit_of_own_society(self):
        resident = TestDataFactory.create_resident(self.society)
        new_unit = TestDataFactory.create_unit(self.society)
        response = self.client.patch(f'/api/v1/users/{resident.id}/', {'unit': new_unit.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unit'], new_unit.id)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_society_user_not_found(self):
        outsider = TestDataFactory.create_resident(self.other_society)
        response = self.client.get(f'/api/v1/users/{outsider.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_resident_cannot_list_users(self):
        resident = TestDataFactory.create_resident(self.society)
        self.client.authenticate_user(resident)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SettingTests(TestCase):
    """Test runtime settings"""

    def setUp(self):
        self.super_admin = TestDataFactory.create_super_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.super_admin)

    def test_create_and_read_setting(self):
        response = self.client.post('/api/v1/settings/', {
            'key': 'contract_warning_days',
            'value': '45',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(get_int_setting('contract_warning_days', 30), 45)

    def test_int_setting_falls_back_to_settings_module(self):
        self.assertEqual(get_int_setting('contract_warning_days', 99), 30)

    def test_non_integer_setting_uses_default(self):
        Setting.objects.create(key='contract_warning_days', value='soon')
        self.assertEqual(get_int_setting('contract_warning_days', 30), 30)

    def test_admin_cannot_manage_settings(self):
        admin = TestDataFactory.create_admin(TestDataFactory.create_society())
        self.client.authenticate_user(admin)
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditLogTests(TestCase):
    """Test audit trail visibility"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.resident = TestDataFactory.create_resident(self.society)
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log_requires_fields(self):
        self.assertIsNone(create_audit_log(user=self.admin, action='create', model_name='Vendor'))
        log = create_audit_log(user=self.admin, action='create', model_name='Vendor', object_id=1)
        self.assertIsNotNone(log)
        self.assertEqual(log.society, self.society)

    def test_admin_sees_society_logs_resident_sees_own(self):
        create_audit_log(user=self.admin, action='create', model_name='Vendor', object_id=1)
        create_audit_log(user=self.resident, action='booking_status', model_name='AmenityBooking', object_id=2)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 2)

        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'AmenityBooking')

    def test_resident_cannot_read_others_log(self):
        log = create_audit_log(user=self.admin, action='create', model_name='Vendor', object_id=1)
        self.client.authenticate_user(self.resident)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(AuditLog.objects.count(), 1)


class GlobalSearchTests(TestCase):
    """Test search across modules"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['vendors'], [])
        self.assertEqual(response.data['events'], [])

    def test_search_finds_vendor_and_unit(self):
        TestDataFactory.create_vendor(self.society, name='Sparkle Cleaners')
        TestDataFactory.create_unit(self.society, block='B', number='204')
        TestDataFactory.create_vendor(TestDataFactory.create_society(), name='Sparkle Elsewhere')

        response = self.client.get('/api/v1/search/?q=Sparkle')
        self.assertEqual(len(response.data['vendors']), 1)
        self.assertEqual(response.data['vendors'][0]['name'], 'Sparkle Cleaners')

        response = self.client.get('/api/v1/search/?q=B-204')
        self.assertEqual(len(response.data['units']), 1)


class SocietyParamTests(TestCase):
    """Test the super admin ?society= narrowing"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.super_admin = TestDataFactory.create_super_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.super_admin)

    def test_narrow_to_society(self):
        TestDataFactory.create_vendor(self.society)
        TestDataFactory.create_vendor(TestDataFactory.create_society())
        response = self.client.get(f'/api/v1/vendors/?society={self.society.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_non_numeric_society_rejected(self):
        response = self.client.get('/api/v1/vendors/?society=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('society', response.data)

        response = self.client.get('/api/v1/vendors/stats/?society=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post('/api/v1/vendors/', {
            'society': 'abc',
            'name': 'Sparkle Cleaners',
            'service_type': 'housekeeping',
            'contact_person': 'Ravi',
            'phone': '9876500000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class StatsCacheTests(TestCase):
    """Test that saves drop cached dashboard stats"""

    def setUp(self):
        cache.clear()
        self.society = TestDataFactory.create_society()

    def test_vendor_save_invalidates_vendor_stats(self):
        key = stats_cache_key('vendor_stats', self.society.id)
        cache.set(key, {'total': 0})
        cache.set(stats_cache_key('vendor_stats', None), {'total': 0})
        TestDataFactory.create_vendor(self.society)
        self.assertIsNone(cache.get(key))
        self.assertIsNone(cache.get(stats_cache_key('vendor_stats', None)))

    def test_setting_change_invalidates_every_society(self):
        other = TestDataFactory.create_society()
        keys = [stats_cache_key('vendor_stats', self.society.id), stats_cache_key('vendor_stats', other.id)]
        for key in keys:
            cache.set(key, {'expiring_soon': 0})
        guard_key = stats_cache_key('guard_stats', self.society.id)
        cache.set(guard_key, {'visitors_today': 0})

        Setting.objects.create(key='contract_warning_days', value='45')
        for key in keys:
            self.assertIsNone(cache.get(key))
        self.assertEqual(cache.get(guard_key), {'visitors_today': 0})

    def test_unrelated_kind_survives(self):
        key = stats_cache_key('guard_stats', self.society.id)
        cache.set(key, {'visitors_today': 0})
        TestDataFactory.create_vendor(self.society)
        self.assertEqual(cache.get(key), {'visitors_today': 0})


class WeekdayTests(TestCase):

    def test_normalize_weekdays(self):
        self.assertEqual(normalize_weekdays(['saturday', 'MON', 'Mon']), ['Mon', 'Sat'])

    def test_unknown_weekday(self):
        with self.assertRaises(ValueError):
            normalize_weekdays(['Funday'])
