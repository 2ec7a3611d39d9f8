from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.admin_dashboard, name='admin-dashboard'),
    path('reports/platform/', views.platform_stats, name='platform-stats'),
    path('reports/collection/', views.collection_report, name='collection-report'),
]
