"""
Test suite for the billing module
Tests: invoices, bulk generation, payment, cancellation, overdue and late fees, defaulters, stats, exports
"""
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.models import AuditLog
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.billing.models import BillingConfig, Invoice
from societyhub.billing.services import (
    BillingError, apply_late_fees, cancel_invoice, default_due_date, generate_invoices, pay_invoice,
)


class BillingServiceTests(TestCase):
    """Test billing rules independent of the API"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.today = timezone.localdate()

    def test_default_due_date_clamped_to_month_end(self):
        self.assertEqual(default_due_date('2024-02', 31), date(2024, 2, 29))
        self.assertEqual(default_due_date('2024-12', 10), date(2024, 12, 10))

    def test_generate_skips_already_billed_units(self):
        unit_a = TestDataFactory.create_unit(self.society, block='A', number='1')
        TestDataFactory.create_unit(self.society, block='A', number='2')
        TestDataFactory.create_invoice(self.society, unit=unit_a, month='2024-05')

        created, skipped = generate_invoices(self.society, '2024-05', maintenance=Decimal('1000.00'),
                                             utilities=Decimal('0.00'))
        self.assertEqual(len(created), 1)
        self.assertEqual(skipped, 1)
        self.assertEqual(created[0].amount, Decimal('1000.00'))

    def test_generate_bills_cancelled_units_again(self):
        unit = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_invoice(self.society, unit=unit, month='2024-05', status='cancelled')
        created, skipped = generate_invoices(self.society, '2024-05')
        self.assertEqual(len(created), 1)
        self.assertEqual(skipped, 0)

    def test_generate_bills_tenant_over_owner(self):
        unit = TestDataFactory.create_unit(self.society)
        TestDataFactory.create_resident(self.society, unit=unit, resident_type='owner')
        tenant = TestDataFactory.create_resident(self.society, unit=unit, resident_type='tenant')
        created, _ = generate_invoices(self.society, '2024-05')
        self.assertEqual(created[0].resident, tenant)

    def test_pay_and_cancel_rules(self):
        invoice = TestDataFactory.create_invoice(self.society)
        pay_invoice(invoice, 'UPI')
        self.assertEqual(invoice.status, 'paid')
        self.assertEqual(invoice.paid_date, self.today)
        with self.assertRaises(BillingError):
            pay_invoice(invoice, 'UPI')
        with self.assertRaises(BillingError):
            cancel_invoice(invoice)

        cancelled = TestDataFactory.create_invoice(self.society, status='cancelled')
        with self.assertRaises(BillingError):
            pay_invoice(cancelled, 'CASH')

    def test_effective_status(self):
        invoice = TestDataFactory.create_invoice(
            self.society, issue_date=self.today - timedelta(days=20), due_date=self.today - timedelta(days=3)
        )
        self.assertEqual(invoice.status, 'pending')
        self.assertEqual(invoice.get_effective_status(), 'overdue')
        self.assertEqual(invoice.get_days_overdue(), 3)

    def test_late_fee_respects_grace_period(self):
        BillingConfig.objects.create(society=self.society, late_fee=Decimal('250.00'), grace_period_days=3)
        late = TestDataFactory.create_invoice(
            self.society, issue_date=self.today - timedelta(days=15), due_date=self.today - timedelta(days=5)
        )
        in_grace = TestDataFactory.create_invoice(
            self.society, issue_date=self.today - timedelta(days=15), due_date=self.today - timedelta(days=2)
        )

        updated = apply_late_fees(Invoice.objects.all())
        self.assertEqual([invoice.id for invoice in updated], [late.id])

        late.refresh_from_db()
        in_grace.refresh_from_db()
        self.assertEqual(late.penalty, Decimal('250.00'))
        self.assertEqual(late.amount, Decimal('2750.00'))
        self.assertEqual(late.status, 'overdue')
        self.assertEqual(in_grace.penalty, Decimal('0.00'))
        self.assertEqual(in_grace.status, 'overdue')

        # Applied once only
        self.assertEqual(apply_late_fees(Invoice.objects.all()), [])


class InvoiceAPITests(TestCase):
    """Test invoice endpoints"""

    def setUp(self):
        cache.clear()
        self.society = TestDataFactory.create_society()
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.today = timezone.localdate()
        self.unit = TestDataFactory.create_unit(self.society, block='A', number='101')
        self.resident = TestDataFactory.create_resident(self.society, unit=self.unit, first_name='Nisha')

    def test_create_invoice_with_bare_amount(self):
        response = self.client.post('/api/v1/invoices/', {
            'unit': self.unit.id,
            'amount': '3200.00',
            'due_date': str(self.today + timedelta(days=15)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '3200.00')
        self.assertEqual(response.data['maintenance'], '3200.00')
        self.assertEqual(response.data['resident'], self.resident.id)
        self.assertEqual(response.data['month'], self.today.strftime('%Y-%m'))
        self.assertTrue(response.data['invoice_number'].startswith('INV-'))

    def test_create_invoice_with_items(self):
        response = self.client.post('/api/v1/invoices/', {
            'unit': self.unit.id,
            'due_date': str(self.today + timedelta(days=15)),
            'items': [
                {'name': 'Water', 'amount': '300.00'},
                {'name': 'Parking', 'amount': '700.00'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['amount'], '1000.00')
        self.assertEqual(len(response.data['items']), 2)

    def test_create_invoice_validation(self):
        response = self.client.post('/api/v1/invoices/', {
            'unit': self.unit.id,
            'due_date': str(self.today + timedelta(days=15)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

        response = self.client.post('/api/v1/invoices/', {
            'unit': self.unit.id,
            'amount': '100.00',
            'issue_date': str(self.today),
            'due_date': str(self.today - timedelta(days=1)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('due_date', response.data)

    def test_create_invoice_for_other_society_unit(self):
        foreign_unit = TestDataFactory.create_unit(TestDataFactory.create_society())
        response = self.client.post('/api/v1/invoices/', {
            'unit': foreign_unit.id,
            'amount': '100.00',
            'due_date': str(self.today + timedelta(days=5)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit', response.data)

    def test_list_paginated_with_effective_status_filter(self):
        TestDataFactory.create_invoice(self.society, unit=self.unit)
        overdue = TestDataFactory.create_invoice(
            self.society, unit=self.unit, issue_date=self.today - timedelta(days=30),
            due_date=self.today - timedelta(days=1)
        )
        response = self.client.get('/api/v1/invoices/?status=overdue')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['id'], overdue.id)
        self.assertEqual(response.data['results'][0]['status'], 'overdue')

        response = self.client.get('/api/v1/invoices/?limit=1')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['next'], 2)

    def test_list_tolerates_bad_paging_params(self):
        TestDataFactory.create_invoice(self.society, unit=self.unit)
        TestDataFactory.create_invoice(self.society, unit=self.unit)

        response = self.client.get('/api/v1/invoices/?limit=0')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['page_size'], 1)
        self.assertEqual(response.data['total_pages'], 2)

        response = self.client.get('/api/v1/invoices/?limit=ten&page=first')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['page'], 1)
        self.assertEqual(response.data['page_size'], 50)
        self.assertEqual(len(response.data['results']), 2)

        response = self.client.get('/api/v1/invoices/?limit=100000&page=-3')
        self.assertEqual(response.data['page_size'], 200)
        self.assertEqual(response.data['page'], 1)

    def test_search_by_unit_label(self):
        TestDataFactory.create_invoice(self.society, unit=self.unit)
        TestDataFactory.create_invoice(self.society, unit=TestDataFactory.create_unit(self.society, block='B', number='101'))
        response = self.client.get('/api/v1/invoices/?search=A-101')
        self.assertEqual(response.data['count'], 1)

    def test_generate_month(self):
        TestDataFactory.create_unit(self.society, block='B', number='201')
        response = self.client.post('/api/v1/invoices/generate/', {
            'month': '2024-07',
            'maintenance_amount': '1800.00',
            'utility_amount': '200.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['skipped'], 0)
        self.assertEqual(response.data['invoices'][0]['amount'], '2000.00')
        self.assertEqual(response.data['invoices'][0]['due_date'], '2024-07-10')

        response = self.client.post('/api/v1/invoices/generate/', {'month': '2024-07'}, format='json')
        self.assertEqual(response.data['created'], 0)
        self.assertEqual(response.data['skipped'], 2)
        self.assertTrue(AuditLog.objects.filter(action='invoice_generate').exists())

    def test_generate_invalid_month(self):
        response = self.client.post('/api/v1/invoices/generate/', {'month': '2024-13'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('month', response.data)

    def test_resident_pays_own_invoice(self):
        invoice = TestDataFactory.create_invoice(self.society, unit=self.unit, resident=self.resident)
        self.client.authenticate_user(self.resident)
        response = self.client.patch(f'/api/v1/invoices/{invoice.invoice_number}/pay/', {
            'payment_mode': 'upi',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(response.data['payment_mode'], 'UPI')
        self.assertEqual(response.data['paid_date'], str(self.today))
        self.assertTrue(AuditLog.objects.filter(action='invoice_payment', object_id=str(invoice.id)).exists())

        response = self.client.patch(f'/api/v1/invoices/{invoice.invoice_number}/pay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_resident_cannot_pay_others_invoice(self):
        invoice = TestDataFactory.create_invoice(self.society)
        self.client.authenticate_user(self.resident)
        response = self.client.patch(f'/api/v1/invoices/{invoice.invoice_number}/pay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pay_unknown_invoice(self):
        response = self.client.patch('/api/v1/invoices/INV-NOPE/pay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_my_invoices(self):
        mine = TestDataFactory.create_invoice(self.society, unit=self.unit)
        TestDataFactory.create_invoice(self.society)
        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/invoices/my/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([invoice['id'] for invoice in response.data], [mine.id])

    def test_cancel(self):
        invoice = TestDataFactory.create_invoice(self.society, unit=self.unit)
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/cancel/', {'reason': 'Duplicate'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')

        response = self.client.post(f'/api/v1/invoices/{invoice.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_paid_invoice_is_locked(self):
        invoice = TestDataFactory.create_invoice(self.society, unit=self.unit, status='paid')
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.delete(f'/api/v1/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Invoice.objects.filter(pk=invoice.id).exists())

    def test_update_recalculates_amount(self):
        invoice = TestDataFactory.create_invoice(self.society, unit=self.unit)
        response = self.client.patch(f'/api/v1/invoices/{invoice.id}/', {'utilities': '1000.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], '3000.00')

    def test_apply_late_fees_endpoint(self):
        TestDataFactory.create_invoice(
            self.society, unit=self.unit, issue_date=self.today - timedelta(days=30),
            due_date=self.today - timedelta(days=10)
        )
        response = self.client.post('/api/v1/invoices/apply-late-fees/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(response.data['total_penalty'], '500.00')

    def test_defaulters(self):
        other_unit = TestDataFactory.create_unit(self.society, block='B', number='5')
        for days in (40, 10):
            TestDataFactory.create_invoice(
                self.society, unit=self.unit, resident=self.resident,
                issue_date=self.today - timedelta(days=days + 10), due_date=self.today - timedelta(days=days)
            )
        TestDataFactory.create_invoice(
            self.society, unit=other_unit, issue_date=self.today - timedelta(days=20),
            due_date=self.today - timedelta(days=5)
        )
        TestDataFactory.create_invoice(self.society, unit=other_unit)

        response = self.client.get('/api/v1/invoices/defaulters/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        top = response.data[0]
        self.assertEqual(top['unit_label'], 'A-101')
        self.assertEqual(top['invoice_count'], 2)
        self.assertEqual(top['total_due'], '5000.00')
        self.assertEqual(top['max_days_overdue'], 40)
        self.assertEqual(top['resident_name'], self.resident.display_name)

        response = self.client.get('/api/v1/invoices/defaulters/stats/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_outstanding'], '7500.00')
        self.assertEqual(response.data['average_due'], '3750.00')
        self.assertEqual(response.data['overdue_invoices'], 3)

    def test_stats(self):
        TestDataFactory.create_invoice(self.society, unit=self.unit, status='paid')
        TestDataFactory.create_invoice(self.society, unit=self.unit)
        TestDataFactory.create_invoice(
            self.society, unit=self.unit, issue_date=self.today - timedelta(days=30),
            due_date=self.today - timedelta(days=1)
        )
        TestDataFactory.create_invoice(self.society, unit=self.unit, status='cancelled')

        response = self.client.get('/api/v1/invoices/stats/')
        self.assertEqual(response.data['total'], 4)
        self.assertEqual(response.data['paid'], 1)
        self.assertEqual(response.data['pending'], 1)
        self.assertEqual(response.data['overdue'], 1)
        self.assertEqual(response.data['cancelled'], 1)
        self.assertEqual(response.data['total_collection'], '2500.00')
        self.assertEqual(response.data['overdue_amount'], '2500.00')

    def test_export_csv(self):
        TestDataFactory.create_invoice(self.society, unit=self.unit, resident=self.resident)
        response = self.client.get('/api/v1/invoices/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(f'invoices-{self.today.isoformat()}.csv', response['Content-Disposition'])
        lines = response.content.decode().splitlines()
        self.assertTrue(lines[0].startswith('Invoice No,Unit,Resident,Month'))
        self.assertIn('A-101', lines[1])

    def test_invoice_pdf(self):
        invoice = TestDataFactory.create_invoice(self.society, unit=self.unit, resident=self.resident)
        self.client.authenticate_user(self.resident)
        response = self.client.get(f'/api/v1/invoices/{invoice.id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))
        self.assertIn(invoice.invoice_number, response['Content-Disposition'])

    def test_billing_config(self):
        response = self.client.get('/api/v1/billing/config/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['late_fee'], '500.00')

        response = self.client.patch('/api/v1/billing/config/', {'due_day': 40}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch('/api/v1/billing/config/', {'maintenance_amount': '2200.00'}, format='json')
        self.assertEqual(response.data['maintenance_amount'], '2200.00')

    def test_resident_cannot_list_all(self):
        self.client.authenticate_user(self.resident)
        response = self.client.get('/api/v1/invoices/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ApplyLateFeesCommandTests(TestCase):
    """Test the apply_late_fees management command"""

    def setUp(self):
        self.society = TestDataFactory.create_society(code='LATE01')
        today = timezone.localdate()
        self.invoice = TestDataFactory.create_invoice(
            self.society, issue_date=today - timedelta(days=30), due_date=today - timedelta(days=10)
        )

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('apply_late_fees', '--dry-run', stdout=out)
        self.assertIn('1 invoice(s) would be charged', out.getvalue())
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.penalty, Decimal('0.00'))

    def test_apply_for_society(self):
        out = StringIO()
        call_command('apply_late_fees', '--society', 'LATE01', stdout=out)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.penalty, Decimal('500.00'))
        self.assertEqual(self.invoice.status, 'overdue')
