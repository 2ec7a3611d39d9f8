from django.urls import path
from .views import (
    staff_list_create, guard_list_create, maid_list_create, staff_detail, staff_status, staff_attendance,
    staff_roster,
)

urlpatterns = [
    path('staff/', staff_list_create, name='staff-list-create'),
    path('staff/guards/', guard_list_create, name='staff-guards'),
    path('staff/maids/', maid_list_create, name='staff-maids'),
    path('staff/roster/', staff_roster, name='staff-roster'),
    path('staff/<int:pk>/', staff_detail, name='staff-detail'),
    path('staff/<int:pk>/status/', staff_status, name='staff-status'),
    path('staff/<int:pk>/attendance/', staff_attendance, name='staff-attendance'),
]
