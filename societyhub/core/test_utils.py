"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from societyhub.society.models import Society, Unit
from societyhub.vendors.models import Vendor
from societyhub.billing.models import Invoice
from societyhub.visitors.models import Visitor
from societyhub.amenities.models import Amenity
from societyhub.events.models import Event
from societyhub.staff.models import Staff
from datetime import time, timedelta
from decimal import Decimal
from django.utils import timezone
import random
import string
import uuid

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_society(name=None, code=None, status='active', guard_positions=0):
        """Create a test society (active unless told otherwise)"""
        if not name:
            name = f'Society_{TestDataFactory.random_string(6)}'
        if not code:
            code = f'SOC_{TestDataFactory.random_string(6).upper()}'
        return Society.objects.create(
            name=name,
            code=code,
            address=f'Test Address {name}',
            city='Pune',
            pincode='411001',
            status=status,
            guard_positions=guard_positions
        )

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=User.ROLE_RESIDENT,
                    society=None, unit=None, resident_type=None, phone=None, is_superuser=False,
                    first_name='', last_name=''):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            society=society,
            unit=unit,
            resident_type=resident_type,
            phone=phone or f'9{random.randint(100000000, 999999999)}',
            is_superuser=is_superuser,
            is_staff=is_superuser,
            first_name=first_name,
            last_name=last_name
        )

    @staticmethod
    def create_admin(society, **kwargs):
        return TestDataFactory.create_user(role=User.ROLE_ADMIN, society=society, **kwargs)

    @staticmethod
    def create_super_admin(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_SUPER_ADMIN, **kwargs)

    @staticmethod
    def create_guard(society, **kwargs):
        return TestDataFactory.create_user(role=User.ROLE_GUARD, society=society, **kwargs)

    @staticmethod
    def create_unit(society, block='A', number=None, unit_type='2BHK', status='active'):
        """Create a test unit"""
        if not number:
            number = str(random.randint(100, 9999))
        return Unit.objects.create(
            society=society,
            block=block,
            number=number,
            type=unit_type,
            status=status
        )

    @staticmethod
    def create_resident(society, unit=None, resident_type='owner', **kwargs):
        """Create a resident living in ``unit`` (a new unit when not given)"""
        if unit is None:
            unit = TestDataFactory.create_unit(society)
        return TestDataFactory.create_user(
            role=User.ROLE_RESIDENT,
            society=society,
            unit=unit,
            resident_type=resident_type,
            **kwargs
        )

    @staticmethod
    def create_vendor(society, name=None, contract_start=None, contract_end=None, status='active',
                      service_type='Housekeeping'):
        """Create a test vendor"""
        if not name:
            name = f'Vendor_{TestDataFactory.random_string(6)}'
        return Vendor.objects.create(
            society=society,
            name=name,
            company=f'{name} Pvt Ltd',
            service_type=service_type,
            contact_person='Test Contact',
            phone='9876543210',
            status=status,
            contract_start=contract_start,
            contract_end=contract_end
        )

    @staticmethod
    def create_invoice(society, unit=None, resident=None, maintenance=None, utilities=None, due_date=None,
                       issue_date=None, status='pending', month=None, user=None):
        """Create a test invoice"""
        if unit is None:
            unit = TestDataFactory.create_unit(society)
        if maintenance is None:
            maintenance = Decimal('2000.00')
        if utilities is None:
            utilities = Decimal('500.00')
        if not issue_date:
            issue_date = timezone.localdate()
        if not due_date:
            due_date = issue_date + timedelta(days=10)
        invoice_number = f"INV-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        return Invoice.objects.create(
            society=society,
            unit=unit,
            resident=resident,
            invoice_number=invoice_number,
            month=month or issue_date.strftime('%Y-%m'),
            maintenance=maintenance,
            utilities=utilities,
            amount=maintenance + utilities,
            issue_date=issue_date,
            due_date=due_date,
            status=status,
            created_by=user
        )

    @staticmethod
    def create_visitor(society, unit=None, name=None, status=Visitor.STATUS_PENDING, user=None):
        """Create a test visitor"""
        if not name:
            name = f'Visitor_{TestDataFactory.random_string(6)}'
        return Visitor.objects.create(
            society=society,
            visiting_unit=unit,
            name=name,
            phone='9123456780',
            purpose='Delivery',
            pass_code=f'GP-{TestDataFactory.random_string(10).upper()}',
            status=status,
            entry_time=timezone.now() if status in (Visitor.STATUS_CHECKED_IN, Visitor.STATUS_CHECKED_OUT) else None,
            exit_time=timezone.now() if status == Visitor.STATUS_CHECKED_OUT else None,
            created_by=user
        )

    @staticmethod
    def create_amenity(society, name=None, capacity=10, charges_per_hour=None, available_days=None,
                       open_time=None, close_time=None, status='available'):
        """Create a test amenity open 06:00-22:00 every day"""
        if not name:
            name = f'Amenity_{TestDataFactory.random_string(6)}'
        if charges_per_hour is None:
            charges_per_hour = Decimal('200.00')
        return Amenity.objects.create(
            society=society,
            name=name,
            type='clubhouse',
            capacity=capacity,
            charges_per_hour=charges_per_hour,
            available_days=available_days if available_days is not None else ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun'],
            open_time=open_time or time(6, 0),
            close_time=close_time or time(22, 0),
            status=status
        )

    @staticmethod
    def create_event(society, title=None, date=None, max_attendees=0, status=Event.STATUS_UPCOMING,
                     category='cultural', user=None):
        """Create a test event (a week from today by default)"""
        if not title:
            title = f'Event_{TestDataFactory.random_string(6)}'
        if not date:
            date = timezone.localdate() + timedelta(days=7)
        return Event.objects.create(
            society=society,
            title=title,
            description=f'Test event {title}',
            date=date,
            time=time(18, 0),
            location='Clubhouse',
            category=category,
            max_attendees=max_attendees,
            status=status,
            created_by=user
        )

    @staticmethod
    def create_staff(society, name=None, role=Staff.ROLE_GUARD, shift='MORNING', working_days=None,
                     user=None, joining_date=None, status=Staff.STATUS_OFF_DUTY):
        """Create a test guard or maid"""
        if not name:
            name = f'Staff_{TestDataFactory.random_string(6)}'
        return Staff.objects.create(
            society=society,
            user=user,
            role=role,
            name=name,
            phone=f'9{random.randint(100000000, 999999999)}',
            shift=shift,
            gate='Main Gate',
            status=status,
            joining_date=joining_date,
            working_days=working_days if working_days is not None else ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
