"""Duty status changes, attendance history and the weekly roster"""
import logging
from datetime import timedelta
from django.utils import timezone
from societyhub.core.utils import weekday_name
from .models import Attendance, Staff

logger = logging.getLogger(__name__)

ATTENDANCE_WINDOW_DAYS = 30


def set_duty_status(staff, new_status, now=None):
    """
    Change a staff member's duty status and record today's attendance.

    ON_DUTY marks today PRESENT with the check-in time, OFF_DUTY stamps
    the check-out, ON_LEAVE marks today as LEAVE.
    """
    now = now or timezone.now()
    today = timezone.localdate(now)
    attendance = Attendance.objects.filter(staff=staff, date=today).first()

    if new_status == Staff.STATUS_ON_DUTY:
        if attendance is None:
            attendance = Attendance(staff=staff, date=today)
        attendance.status = Attendance.STATUS_PRESENT
        if attendance.check_in is None:
            attendance.check_in = now
        attendance.check_out = None
        attendance.save()
        staff.check_in_time = now
    elif new_status == Staff.STATUS_OFF_DUTY:
        if attendance is not None and attendance.status == Attendance.STATUS_PRESENT:
            attendance.check_out = now
            attendance.save(update_fields=['check_out'])
    elif new_status == Staff.STATUS_ON_LEAVE:
        Attendance.objects.update_or_create(
            staff=staff, date=today,
            defaults={'status': Attendance.STATUS_LEAVE, 'check_in': None, 'check_out': None},
        )

    staff.status = new_status
    staff.save(update_fields=['status', 'check_in_time', 'updated_at'])
    logger.info(f"Staff {staff.id} is now {new_status}")
    return staff


def attendance_history(staff, today=None, days=ATTENDANCE_WINDOW_DAYS):
    """
    Day by day attendance for the last ``days`` days, newest first.

    Working days without a record count as ABSENT once the day is over;
    days before joining are left out.
    """
    today = today or timezone.localdate()
    start = today - timedelta(days=days - 1)
    records = {
        record.date: record
        for record in Attendance.objects.filter(staff=staff, date__gte=start, date__lte=today)
    }

    history = []
    day = today
    while day >= start:
        if staff.joining_date and day < staff.joining_date:
            break
        record = records.get(day)
        if record is not None:
            history.append({
                'date': day.isoformat(),
                'status': record.status,
                'check_in': record.check_in.isoformat() if record.check_in else None,
                'check_out': record.check_out.isoformat() if record.check_out else None,
            })
        elif day < today and staff.works_on(day):
            history.append({'date': day.isoformat(), 'status': Attendance.STATUS_ABSENT, 'check_in': None, 'check_out': None})
        day -= timedelta(days=1)

    summary = {
        'present': sum(1 for entry in history if entry['status'] == Attendance.STATUS_PRESENT),
        'absent': sum(1 for entry in history if entry['status'] == Attendance.STATUS_ABSENT),
        'leave': sum(1 for entry in history if entry['status'] == Attendance.STATUS_LEAVE),
    }
    return {
        'staff': staff.id,
        'from': start.isoformat(),
        'to': today.isoformat(),
        'records': history,
        'summary': summary,
    }


def week_start_of(day):
    return day - timedelta(days=day.weekday())


def build_roster(staff_members, week_start, today=None):
    """
    Who works which shift on each day of the week starting ``week_start``.
    Staff with a LEAVE attendance that day (or currently on leave, for
    today) are left off.
    """
    today = today or timezone.localdate()
    staff_members = list(staff_members)
    week = [week_start + timedelta(days=offset) for offset in range(7)]
    on_leave = set(
        Attendance.objects.filter(
            staff__in=staff_members, date__gte=week[0], date__lte=week[-1], status=Attendance.STATUS_LEAVE
        ).values_list('staff_id', 'date')
    )

    roster = []
    for day in week:
        shifts = {code: [] for code, _ in Staff.SHIFT_CHOICES}
        for member in staff_members:
            if not member.works_on(day):
                continue
            if (member.id, day) in on_leave:
                continue
            if day == today and member.status == Staff.STATUS_ON_LEAVE:
                continue
            shifts[member.shift].append({
                'id': member.id,
                'name': member.name,
                'role': member.role,
                'gate': member.gate,
                'phone': member.phone,
            })
        roster.append({'date': day.isoformat(), 'day': weekday_name(day), 'shifts': shifts})
    return roster
