from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

User = get_user_model()


class Command(BaseCommand):
    help = 'Create or update the platform super admin account'

    def add_arguments(self, parser):
        parser.add_argument('--username', required=True, help='Login name of the super admin')
        parser.add_argument('--email', default='', help='Email address')
        parser.add_argument('--password', help='Password (required when creating the account)')

    def handle(self, *args, **options):
        username = options['username']
        password = options.get('password')

        with transaction.atomic():
            user = User.objects.filter(username=username).first()
            created = user is None
            if created:
                if not password:
                    raise CommandError('--password is required when creating a new super admin')
                user = User(username=username)

            user.email = options['email'] or user.email
            user.role = User.ROLE_SUPER_ADMIN
            user.is_staff = True
            user.is_superuser = True
            user.is_active = True
            user.society = None
            user.unit = None
            if password:
                user.set_password(password)
            user.save()

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created super admin '{username}'"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Updated super admin '{username}'"))
