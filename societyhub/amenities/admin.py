from django.contrib import admin
from .models import Amenity, AmenityBooking


@admin.register(Amenity)
class AmenityAdmin(admin.ModelAdmin):
    list_display = ['name', 'society', 'type', 'capacity', 'charges_per_hour', 'open_time', 'close_time', 'status']
    list_filter = ['society', 'type', 'status']
    search_fields = ['name']


@admin.register(AmenityBooking)
class AmenityBookingAdmin(admin.ModelAdmin):
    list_display = ['amenity', 'user', 'date', 'start_time', 'end_time', 'hours', 'amount', 'status']
    list_filter = ['status', 'date']
    search_fields = ['amenity__name', 'user__username', 'purpose']
    ordering = ['-date', '-start_time']
    readonly_fields = ['hours', 'amount', 'created_at', 'updated_at']
