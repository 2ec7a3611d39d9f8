"""
Management command to mark past-due invoices overdue and add the society's
late fee once the grace period has run out.
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from societyhub.billing.models import Invoice
from societyhub.billing.services import apply_late_fees, late_fee_candidates
from societyhub.society.models import Society


class Command(BaseCommand):
    help = 'Apply late fees to overdue invoices past their grace period'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which invoices would be charged without saving anything',
        )
        parser.add_argument(
            '--society',
            type=str,
            help='Only process the society with this code',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        today = timezone.localdate()

        invoices = Invoice.objects.all()
        if options.get('society'):
            try:
                society = Society.objects.get(code=options['society'])
            except Society.DoesNotExist:
                raise CommandError(f"Society '{options['society']}' not found")
            invoices = invoices.filter(society=society)

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No invoices will be changed\n'))
            candidates = late_fee_candidates(invoices, today)
            for invoice, fee in candidates:
                self.stdout.write(f'  {invoice.invoice_number}: due {invoice.due_date}, late fee {fee}')
            self.stdout.write(self.style.SUCCESS(f'{len(candidates)} invoice(s) would be charged a late fee'))
            return

        with transaction.atomic():
            updated = apply_late_fees(invoices, today)

        for invoice in updated:
            self.stdout.write(f'  {invoice.invoice_number}: penalty {invoice.penalty}, new amount {invoice.amount}')
        self.stdout.write(self.style.SUCCESS(f'Applied late fees to {len(updated)} invoice(s)'))
