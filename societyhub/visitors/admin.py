from django.contrib import admin
from .models import Visitor


@admin.register(Visitor)
class VisitorAdmin(admin.ModelAdmin):
    list_display = ['name', 'society', 'visiting_unit', 'phone', 'status', 'entry_time', 'exit_time', 'created_at']
    list_filter = ['society', 'status']
    search_fields = ['name', 'phone', 'vehicle_no', 'pass_code']
    ordering = ['-created_at']
    readonly_fields = ['pass_code', 'entry_time', 'exit_time', 'created_at', 'updated_at']
