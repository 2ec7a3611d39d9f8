from django.contrib import admin
from .models import Staff, Attendance


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ['name', 'society', 'role', 'phone', 'shift', 'gate', 'status']
    list_filter = ['society', 'role', 'shift', 'status']
    search_fields = ['name', 'phone', 'gate']


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ['staff', 'date', 'status', 'check_in', 'check_out']
    list_filter = ['status', 'date']
    search_fields = ['staff__name']
    ordering = ['-date']
