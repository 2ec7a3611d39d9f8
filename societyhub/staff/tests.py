"""
Test suite for the staff module
Tests: guards and maids, guard logins, duty status, attendance history, weekly roster
"""
from datetime import date, timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from societyhub.core.models import AuditLog, User
from societyhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from societyhub.staff.models import Attendance, Staff
from societyhub.staff.services import attendance_history, build_roster, set_duty_status


class DutyServiceTests(TestCase):
    """Test duty status changes and the attendance they record"""

    def setUp(self):
        self.society = TestDataFactory.create_society()
        self.staff = TestDataFactory.create_staff(self.society)
        self.today = timezone.localdate()

    def test_on_duty_marks_present(self):
        set_duty_status(self.staff, Staff.STATUS_ON_DUTY)
        attendance = Attendance.objects.get(staff=self.staff, date=self.today)
        self.assertEqual(attendance.status, Attendance.STATUS_PRESENT)
        self.assertIsNotNone(attendance.check_in)
        self.assertIsNotNone(self.staff.check_in_time)

    def test_off_duty_stamps_check_out(self):
        set_duty_status(self.staff, Staff.STATUS_ON_DUTY)
        set_duty_status(self.staff, Staff.STATUS_OFF_DUTY)
        attendance = Attendance.objects.get(staff=self.staff, date=self.today)
        self.assertIsNotNone(attendance.check_out)
        self.assertEqual(Staff.objects.get(pk=self.staff.pk).status, Staff.STATUS_OFF_DUTY)

    def test_leave_replaces_present(self):
        set_duty_status(self.staff, Staff.STATUS_ON_DUTY)
        set_duty_status(self.staff, Staff.STATUS_ON_LEAVE)
        attendance = Attendance.objects.get(staff=self.staff, date=self.today)
        self.assertEqual(attendance.status, Attendance.STATUS_LEAVE)
        self.assertIsNone(attendance.check_in)

    def test_attendance_history_fills_absences(self):
        self.staff.joining_date = self.today - timedelta(days=5)
        self.staff.save()
        Attendance.objects.create(staff=self.staff, date=self.today - timedelta(days=2), status=Attendance.STATUS_PRESENT)
        Attendance.objects.create(staff=self.staff, date=self.today - timedelta(days=1), status=Attendance.STATUS_LEAVE)

        history = attendance_history(self.staff, today=self.today)
        self.assertEqual(len(history['records']), 5)
        self.assertEqual(history['records'][0]['date'], (self.today - timedelta(days=1)).isoformat())
        self.assertEqual(history['summary'], {'present': 1, 'absent': 3, 'leave': 1})

    def test_attendance_history_skips_days_off(self):
        today = date(2030, 1, 9)  # Wednesday
        self.staff.working_days = ['Mon']
        self.staff.joining_date = date(2030, 1, 1)
        self.staff.save()
        history = attendance_history(self.staff, today=today)
        self.assertEqual([entry['date'] for entry in history['records']], ['2030-01-07'])

    def test_roster(self):
        week_start = date(2030, 1, 7)  # Monday
        guard = TestDataFactory.create_staff(
            self.society, name='Ramesh', shift='MORNING', working_days=['Mon', 'Tue', 'Wed', 'Thu', 'Fri']
        )
        maid = TestDataFactory.create_staff(self.society, name='Lata', role=Staff.ROLE_MAID, shift='EVENING')
        Attendance.objects.create(staff=maid, date=date(2030, 1, 8), status=Attendance.STATUS_LEAVE)

        roster = build_roster([guard, maid], week_start, today=self.today)
        self.assertEqual(len(roster), 7)
        monday, tuesday, saturday = roster[0], roster[1], roster[5]
        self.assertEqual(monday['day'], 'Mon')
        self.assertEqual([m['name'] for m in monday['shifts']['MORNING']], ['Ramesh'])
        self.assertEqual([m['name'] for m in monday['shifts']['EVENING']], ['Lata'])
        self.assertEqual(tuesday['shifts']['EVENING'], [])
        self.assertEqual(saturday['shifts']['MORNING'], [])
        self.assertEqual(saturday['shifts']['NIGHT'], [])


class StaffAPITests(TestCase):
    """Test staff endpoints"""

    def setUp(self):
        self.society = TestDataFactory.create_society(guard_positions=3)
        self.admin = TestDataFactory.create_admin(self.society)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_guard_with_login(self):
        response = self.client.post('/api/v1/staff/guards/', {
            'name': 'Suresh Patil',
            'phone': '9811111111',
            'email': 'suresh@test.com',
            'shift': 'NIGHT',
            'gate': 'Gate 2',
            'password': 'guardpass',
            'working_days': ['monday', 'tuesday'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], Staff.ROLE_GUARD)
        self.assertEqual(response.data['status'], Staff.STATUS_OFF_DUTY)
        self.assertEqual(response.data['working_days'], ['Mon', 'Tue'])
        self.assertEqual(response.data['username'], 'suresh@test.com')
        self.assertNotIn('password', response.data)

        user = User.objects.get(username='suresh@test.com')
        self.assertEqual(user.role, User.ROLE_GUARD)
        self.assertEqual(user.society, self.society)
        self.assertTrue(user.check_password('guardpass'))

    def test_maid_cannot_have_login(self):
        response = self.client.post('/api/v1/staff/maids/', {
            'name': 'Kamla',
            'phone': '9822222222',
            'shift': 'MORNING',
            'password': 'maidpass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_duplicate_login_username(self):
        TestDataFactory.create_user(username='9833333333')
        response = self.client.post('/api/v1/staff/guards/', {
            'name': 'Dup',
            'phone': '9833333333',
            'shift': 'MORNING',
            'password': 'guardpass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_shift_required(self):
        response = self.client.post('/api/v1/staff/', {'name': 'No Shift', 'phone': '1', 'role': 'guard'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('shift', response.data)

    def test_list_with_stats(self):
        TestDataFactory.create_staff(self.society, status=Staff.STATUS_ON_DUTY)
        TestDataFactory.create_staff(self.society, status=Staff.STATUS_ON_LEAVE)
        TestDataFactory.create_staff(self.society, role=Staff.ROLE_MAID)
        TestDataFactory.create_staff(TestDataFactory.create_society())

        response = self.client.get('/api/v1/staff/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 3)
        self.assertEqual(response.data['stats'], {'total': 3, 'on_duty': 1, 'on_leave': 1, 'vacant': 1})

        response = self.client.get('/api/v1/staff/guards/')
        self.assertEqual(response.data['stats']['total'], 2)
        response = self.client.get('/api/v1/staff/?type=maid')
        self.assertEqual(len(response.data['data']), 1)

    def test_delete_deactivates_login(self):
        guard_user = TestDataFactory.create_guard(self.society)
        member = TestDataFactory.create_staff(self.society, user=guard_user)
        response = self.client.delete(f'/api/v1/staff/{member.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        guard_user.refresh_from_db()
        self.assertFalse(guard_user.is_active)
        self.assertFalse(Staff.objects.filter(pk=member.id).exists())

    def test_admin_sets_leave(self):
        member = TestDataFactory.create_staff(self.society)
        response = self.client.patch(f'/api/v1/staff/{member.id}/status/', {'status': 'on leave'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Staff.STATUS_ON_LEAVE)
        self.assertTrue(AuditLog.objects.filter(action='staff_status', object_id=str(member.id)).exists())

    def test_guard_changes_own_duty_only(self):
        guard_user = TestDataFactory.create_guard(self.society)
        own = TestDataFactory.create_staff(self.society, user=guard_user)
        other = TestDataFactory.create_staff(self.society)
        self.client.authenticate_user(guard_user)

        response = self.client.patch(f'/api/v1/staff/{own.id}/status/', {'status': 'ON_DUTY'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['check_in_time'])

        response = self.client.patch(f'/api/v1/staff/{own.id}/status/', {'status': 'ON_LEAVE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.patch(f'/api/v1/staff/{other.id}/status/', {'status': 'ON_DUTY'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_attendance_endpoint(self):
        member = TestDataFactory.create_staff(self.society, joining_date=timezone.localdate())
        response = self.client.get(f'/api/v1/staff/{member.id}/attendance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['records'], [])
        self.assertEqual(response.data['summary'], {'present': 0, 'absent': 0, 'leave': 0})

    def test_roster_endpoint(self):
        TestDataFactory.create_staff(self.society, name='Night Owl', shift='NIGHT')
        response = self.client.get('/api/v1/staff/roster/?week_start=2030-01-07')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['week_start'], '2030-01-07')
        self.assertEqual(len(response.data['days']), 7)
        self.assertEqual(response.data['days'][0]['shifts']['NIGHT'][0]['name'], 'Night Owl')

        response = self.client.get('/api/v1/staff/roster/?week_start=next-week')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_resident_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_resident(self.society))
        response = self.client.get('/api/v1/staff/roster/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
