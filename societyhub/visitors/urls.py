from django.urls import path
from .views import (
    visitor_list_create, visitor_check_in, visitor_detail, visitor_status, visitor_check_out,
    visitor_pass, visitor_logs, guard_stats, guard_activity,
)

urlpatterns = [
    path('visitors/', visitor_list_create, name='visitor-list-create'),
    path('visitors/check-in/', visitor_check_in, name='visitor-check-in'),
    path('visitors/logs/', visitor_logs, name='visitor-logs'),
    path('visitors/<int:pk>/', visitor_detail, name='visitor-detail'),
    path('visitors/<int:pk>/status/', visitor_status, name='visitor-status'),
    path('visitors/<int:pk>/check-out/', visitor_check_out, name='visitor-check-out'),
    path('visitors/<int:pk>/pass/', visitor_pass, name='visitor-pass'),
    path('guard/stats/', guard_stats, name='guard-stats'),
    path('guard/activity/', guard_activity, name='guard-activity'),
]
