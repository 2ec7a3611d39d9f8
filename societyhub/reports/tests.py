"""
Test suite for the reports module
Tests: admin dashboard, platform statistics, monthly collection report
"""
from datetime import date, timedelta
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.amenities.models import AmenityBooking
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class AdminDashboardTests(TestCase):

    def setUp(self):
        cache.clear()
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.today = timezone.localdate()

    def test_dashboard_counts(self):
        occupied = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_unit(self.society)
        resident = TestDataFactory.create_resident(self.society, unit=occupied)
        TestDataFactory.create_vendor(self.society)
        TestDataFactory.create_vendor(self.society, status='inactive')
        TestDataFactory.create_invoice(self.society, unit=occupied)
        TestDataFactory.create_invoice(
            self.society, unit=occupied, issue_date=self.today - timedelta(days=30),
            due_date=self.today - timedelta(days=5)
        )
        paid = TestDataFactory.create_invoice(self.society, unit=occupied, status='paid')
        paid.paid_date = self.today
        paid.save()
        TestDataFactory.create_visitor(self.society, unit=occupied)
        amenity = TestDataFactory.create_amenity(self.society)
        AmenityBooking.objects.create(
            amenity=amenity, user=resident, date=self.today + timedelta(days=1),
            start_time=amenity.open_time, end_time=amenity.close_time
        )
        TestDataFactory.create_event(self.society)
        TestDataFactory.create_event(self.society, date=self.today - timedelta(days=3))

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'units': 2,
            'occupied_units': 1,
            'vacant_units': 1,
            'residents': 1,
            'vendors_active': 1,
            'pending_invoices': 2,
            'pending_amount': '5000.00',
            'month_collection': '2500.00',
            'visitors_today': 1,
            'pending_bookings': 1,
            'upcoming_events': 1,
        })

    def test_dashboard_is_scoped(self):
        TestDataFactory.create_unit(TestDataFactory.create_society())
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['units'], 0)

    def test_dashboard_refreshes_after_change(self):
        self.client.get('/api/v1/reports/dashboard/')
        TestDataFactory.create_unit(self.society)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['units'], 1)

    def test_resident_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_resident(self.society))
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PlatformStatsTests(TestCase):

    def setUp(self):
        self.super_admin = TestDataFactory.create_super_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.super_admin)

    def test_platform_totals(self):
        active = TestDataFactory.create_society()
        TestDataFactory.create_society(status='pending')
        TestDataFactory.create_admin(active)
        TestDataFactory.create_resident(active)
        TestDataFactory.create_invoice(active, status='paid')
        TestDataFactory.create_invoice(active)
        TestDataFactory.create_invoice(active, status='cancelled')

        response = self.client.get('/api/v1/reports/platform/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['societies']['total'], 2)
        self.assertEqual(response.data['societies']['active'], 1)
        self.assertEqual(response.data['societies']['pending'], 1)
        self.assertEqual(response.data['users']['super_admin'], 1)
        self.assertEqual(response.data['users']['admin'], 1)
        self.assertEqual(response.data['users']['resident'], 1)
        self.assertEqual(response.data['total_invoiced'], '5000.00')
        self.assertEqual(response.data['total_collected'], '2500.00')

    def test_society_admin_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_admin(TestDataFactory.create_society()))
        response = self.client.get('/api/v1/reports/platform/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CollectionReportTests(TestCase):

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_monthly_collection(self):
        unit = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_invoice(self.society, unit=unit, issue_date=date(2024, 3, 1), status='paid')
        TestDataFactory.create_invoice(self.society, unit=unit, issue_date=date(2024, 3, 2))
        TestDataFactory.create_invoice(self.society, unit=unit, issue_date=date(2024, 4, 1), status='paid')
        TestDataFactory.create_invoice(self.society, unit=unit, issue_date=date(2024, 4, 2), status='cancelled')

        response = self.client.get('/api/v1/reports/collection/?date_from=2024-03-01&date_to=2024-04-30')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        months = response.data['months']
        self.assertEqual([row['month'] for row in months], ['2024-03', '2024-04'])
        self.assertEqual(months[0]['invoiced'], '5000.00')
        self.assertEqual(months[0]['collected'], '2500.00')
        self.assertEqual(months[0]['collection_rate'], 50.0)
        self.assertEqual(months[1]['invoices'], 1)
        self.assertEqual(months[1]['collection_rate'], 100.0)
        self.assertEqual(response.data['total_invoiced'], '7500.00')

    def test_bad_dates(self):
        response = self.client.get('/api/v1/reports/collection/?date_from=March')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
