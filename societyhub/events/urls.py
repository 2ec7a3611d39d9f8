from django.urls import path
from .views import event_list_create, event_detail, event_rsvp, event_attendees, event_stats, event_export

urlpatterns = [
    path('events/', event_list_create, name='event-list-create'),
    path('events/stats/', event_stats, name='event-stats'),
    path('events/export/', event_export, name='event-export'),
    path('events/<int:pk>/', event_detail, name='event-detail'),
    path('events/<int:pk>/rsvp/', event_rsvp, name='event-rsvp'),
    path('events/<int:pk>/attendees/', event_attendees, name='event-attendees'),
]
