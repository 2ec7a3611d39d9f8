from django.urls import path
from .views import (
    society_list_create, society_detail, society_approve, society_suspend,
    unit_list_create, unit_detail,
    member_list_create, member_detail, member_stats, member_export,
)

urlpatterns = [
    # Society endpoints
    path('societies/', society_list_create, name='society-list-create'),
    path('societies/<int:pk>/', society_detail, name='society-detail'),
    path('societies/<int:pk>/approve/', society_approve, name='society-approve'),
    path('societies/<int:pk>/suspend/', society_suspend, name='society-suspend'),

    # Unit endpoints
    path('units/', unit_list_create, name='unit-list-create'),
    path('units/<int:pk>/', unit_detail, name='unit-detail'),

    # Resident directory endpoints
    path('members/', member_list_create, name='member-list-create'),
    path('members/stats/', member_stats, name='member-stats'),
    path('members/export/', member_export, name='member-export'),
    path('members/<int:pk>/', member_detail, name='member-detail'),
]
