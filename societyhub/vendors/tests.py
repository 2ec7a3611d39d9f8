"""
Test suite for the vendors module
Tests: contract status derivation, renewal, CRUD, filters, rating, payments, stats, export
"""
from datetime import date, timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.models import AuditLog, Setting
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.vendors.contracts import contract_status, renewal_term, ACTIVE, EXPIRING, EXPIRED
from societyhub.vendors.models import Vendor, VendorPayment


class ContractStatusTests(TestCase):
    """Test the date arithmetic behind contract status"""

    def setUp(self):
        self.today = date(2024, 6, 15)

    def test_no_end_date_is_active(self):
        self.assertEqual(contract_status(None, self.today), ACTIVE)

    def test_past_end_is_expired(self):
        self.assertEqual(contract_status(self.today - timedelta(days=1), self.today), EXPIRED)

    def test_end_today_is_expiring(self):
        self.assertEqual(contract_status(self.today, self.today), EXPIRING)

    def test_warning_window_boundary(self):
        self.assertEqual(contract_status(self.today + timedelta(days=30), self.today), EXPIRING)
        self.assertEqual(contract_status(self.today + timedelta(days=31), self.today), ACTIVE)

    def test_custom_warning_window(self):
        self.assertEqual(contract_status(self.today + timedelta(days=45), self.today, warning_days=60), EXPIRING)

    def test_renewal_continues_after_current_end(self):
        start, end = renewal_term(date(2024, 1, 1), date(2024, 6, 30), self.today)
        self.assertEqual(start, date(2024, 7, 1))
        self.assertEqual(end, date(2024, 7, 1) + timedelta(days=181))

    def test_renewal_of_expired_contract_starts_today(self):
        start, end = renewal_term(date(2023, 1, 1), date(2023, 12, 31), self.today)
        self.assertEqual(start, self.today)
        self.assertEqual(end, self.today + timedelta(days=364))

    def test_renewal_without_dates_lasts_a_year(self):
        start, end = renewal_term(None, None, self.today)
        self.assertEqual(start, self.today)
        self.assertEqual(end, self.today + timedelta(days=365))

    def test_renewal_explicit_end_before_start(self):
        with self.assertRaises(ValueError):
            renewal_term(date(2024, 1, 1), date(2024, 6, 30), self.today, new_end=date(2024, 6, 1))


class VendorAPITests(TestCase):
    """Test vendor endpoints"""

    def setUp(self):
        cache.clear()
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.today = timezone.localdate()

    def test_create_vendor(self):
        response = self.client.post('/api/v1/vendors/', {
            'name': 'Aqua Pumps',
            'service_type': 'Plumbing',
            'contact_person': 'Raj',
            'phone': '9876543210',
            'status': 'Active',
            'contract_start': str(self.today),
            'contract_end': str(self.today + timedelta(days=10)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['contract_status'], 'expiring')
        self.assertEqual(response.data['days_remaining'], 10)
        self.assertEqual(response.data['society'], self.society.id)

    def test_create_vendor_required_fields(self):
        response = self.client.post('/api/v1/vendors/', {'name': 'Nameless'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('service_type', 'contact_person', 'phone'):
            self.assertIn(field, response.data)

    def test_contract_end_before_start_rejected(self):
        response = self.client.post('/api/v1/vendors/', {
            'name': 'Backwards',
            'service_type': 'Security',
            'contact_person': 'X',
            'phone': '1',
            'contract_start': '2024-06-01',
            'contract_end': '2024-05-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contract_end', response.data)

    def test_filter_by_contract_status(self):
        expired = TestDataFactory.create_vendor(self.society, contract_end=self.today - timedelta(days=2))
        expiring = TestDataFactory.create_vendor(self.society, contract_end=self.today + timedelta(days=5))
        open_ended = TestDataFactory.create_vendor(self.society)
        far = TestDataFactory.create_vendor(self.society, contract_end=self.today + timedelta(days=200))

        response = self.client.get('/api/v1/vendors/?contract_status=expired')
        self.assertEqual([v['id'] for v in response.data], [expired.id])
        response = self.client.get('/api/v1/vendors/?contract_status=expiring')
        self.assertEqual([v['id'] for v in response.data], [expiring.id])
        response = self.client.get('/api/v1/vendors/?contract_status=active')
        self.assertEqual(sorted(v['id'] for v in response.data), sorted([open_ended.id, far.id]))

    def test_warning_window_setting(self):
        vendor = TestDataFactory.create_vendor(self.society, contract_end=self.today + timedelta(days=45))
        response = self.client.get(f'/api/v1/vendors/{vendor.id}/')
        self.assertEqual(response.data['contract_status'], 'active')
        Setting.objects.create(key='contract_warning_days', value='60')
        response = self.client.get(f'/api/v1/vendors/{vendor.id}/')
        self.assertEqual(response.data['contract_status'], 'expiring')

    def test_search_and_type_filter(self):
        TestDataFactory.create_vendor(self.society, name='Shine Cleaners', service_type='Housekeeping')
        TestDataFactory.create_vendor(self.society, name='Volt Electric', service_type='Electrical')
        response = self.client.get('/api/v1/vendors/?search=shine')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/vendors/?type=electrical')
        self.assertEqual(response.data[0]['name'], 'Volt Electric')

    def test_other_society_vendor_hidden(self):
        vendor = TestDataFactory.create_vendor(TestDataFactory.create_society())
        response = self.client.get(f'/api/v1/vendors/{vendor.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_status_patch_case_insensitive(self):
        vendor = TestDataFactory.create_vendor(self.society)
        response = self.client.patch(f'/api/v1/vendors/{vendor.id}/status/', {'status': 'INACTIVE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'inactive')
        self.assertTrue(AuditLog.objects.filter(action='vendor_status', object_id=str(vendor.id)).exists())

        response = self.client.patch(f'/api/v1/vendors/{vendor.id}/status/', {'status': 'paused'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_renew_extends_and_reactivates(self):
        vendor = TestDataFactory.create_vendor(
            self.society,
            contract_start=self.today - timedelta(days=100),
            contract_end=self.today + timedelta(days=10),
            status='inactive',
        )
        response = self.client.post(f'/api/v1/vendors/{vendor.id}/renew/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        vendor.refresh_from_db()
        self.assertEqual(vendor.contract_start, self.today + timedelta(days=11))
        self.assertEqual(vendor.contract_end, self.today + timedelta(days=11 + 110))
        self.assertEqual(vendor.status, 'active')

    def test_rate_keeps_running_average(self):
        vendor = TestDataFactory.create_vendor(self.society)
        self.client.post(f'/api/v1/vendors/{vendor.id}/rate/', {'rating': 5}, format='json')
        self.client.post(f'/api/v1/vendors/{vendor.id}/rate/', {'rating': 4}, format='json')
        response = self.client.post(f'/api/v1/vendors/{vendor.id}/rate/', {'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        vendor.refresh_from_db()
        self.assertEqual(vendor.rating, Decimal('4.33'))
        self.assertEqual(vendor.rating_count, 3)

        response = self.client.post(f'/api/v1/vendors/{vendor.id}/rate/', {'rating': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payments_and_pending_amount(self):
        vendor = TestDataFactory.create_vendor(self.society)
        response = self.client.post(f'/api/v1/vendors/{vendor.id}/payments/', {
            'amount': '1500.00',
            'due_date': str(self.today),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        payment_id = response.data['id']

        response = self.client.get(f'/api/v1/vendors/{vendor.id}/')
        self.assertEqual(response.data['pending_amount'], '1500.00')

        response = self.client.post(f'/api/v1/vendors/{vendor.id}/payments/{payment_id}/pay/', {'reference': 'UTR123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        self.assertIsNotNone(response.data['paid_at'])

        response = self.client.post(f'/api/v1/vendors/{vendor.id}/payments/{payment_id}/pay/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_amount_must_be_positive(self):
        vendor = TestDataFactory.create_vendor(self.society)
        response = self.client.post(f'/api/v1/vendors/{vendor.id}/payments/', {'amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats(self):
        TestDataFactory.create_vendor(self.society, contract_end=self.today - timedelta(days=1))
        TestDataFactory.create_vendor(self.society, contract_end=self.today + timedelta(days=3), status='inactive')
        vendor = TestDataFactory.create_vendor(self.society)
        VendorPayment.objects.create(vendor=vendor, amount=Decimal('700.00'))

        response = self.client.get('/api/v1/vendors/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['active'], 2)
        self.assertEqual(response.data['inactive'], 1)
        self.assertEqual(response.data['expired'], 1)
        self.assertEqual(response.data['expiring_soon'], 1)
        self.assertEqual(response.data['pending_payment_amount'], '700.00')
        self.assertEqual(response.data['vendors_with_pending_payments'], 1)

    def test_stats_refresh_after_change(self):
        self.client.get('/api/v1/vendors/stats/')
        TestDataFactory.create_vendor(self.society)
        response = self.client.get('/api/v1/vendors/stats/')
        self.assertEqual(response.data['total'], 1)

    def test_stats_follow_warning_window_setting(self):
        TestDataFactory.create_vendor(self.society, contract_end=self.today + timedelta(days=45))
        response = self.client.get('/api/v1/vendors/stats/')
        self.assertEqual(response.data['expiring_soon'], 0)

        Setting.objects.create(key='contract_warning_days', value='60')
        response = self.client.get('/api/v1/vendors/stats/')
        self.assertEqual(response.data['expiring_soon'], 1)
        response = self.client.get('/api/v1/vendors/?contract_status=expiring')
        self.assertEqual(len(response.data), 1)

    def test_export_csv(self):
        TestDataFactory.create_vendor(self.society, name='Green Gardens', contract_end=self.today - timedelta(days=1))
        response = self.client.get('/api/v1/vendors/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(f'vendors-{self.today.isoformat()}.csv', response['Content-Disposition'])
        lines = response.content.decode().splitlines()
        self.assertEqual(lines[0], 'Name,Company,Type,Contact,Email,Status,Contract Status,Contract End,Address')
        self.assertIn('expired', lines[1])

    def test_resident_forbidden(self):
        resident = TestDataFactory.create_resident(self.society)
        self.client.authenticate_user(resident)
        response = self.client.get('/api/v1/vendors/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Vendor.objects.count(), 0)
