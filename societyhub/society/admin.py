from django.contrib import admin
from .models import Society, Unit


@admin.register(Society)
class SocietyAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'city', 'status', 'guard_positions', 'created_at']
    list_filter = ['status', 'city']
    search_fields = ['name', 'code', 'city', 'pincode']
    ordering = ['name']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['label', 'society', 'block', 'number', 'type', 'floor', 'status']
    list_filter = ['society', 'block', 'type', 'status']
    search_fields = ['block', 'number', 'society__name']
    ordering = ['society', 'block', 'number']
    readonly_fields = ['created_at', 'updated_at']
