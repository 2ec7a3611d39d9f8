from django.contrib import admin
from .models import Event, EventRSVP


class EventRSVPInline(admin.TabularInline):
    model = EventRSVP
    extra = 0
    readonly_fields = ['created_at']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'society', 'date', 'time', 'location', 'category', 'status']
    list_filter = ['society', 'category', 'status']
    search_fields = ['title', 'description', 'location']
    ordering = ['-date']
    inlines = [EventRSVPInline]
