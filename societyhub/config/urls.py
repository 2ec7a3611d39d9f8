"""
URL configuration for the SocietyHub backend.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "SocietyHub Admin Panel"
admin.site.site_title = "SocietyHub Admin Portal"
admin.site.index_title = "Society management"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('societyhub.core.urls')),
    path('api/v1/', include('societyhub.society.urls')),
    path('api/v1/', include('societyhub.vendors.urls')),
    path('api/v1/', include('societyhub.billing.urls')),
    path('api/v1/', include('societyhub.visitors.urls')),
    path('api/v1/', include('societyhub.amenities.urls')),
    path('api/v1/', include('societyhub.events.urls')),
    path('api/v1/', include('societyhub.staff.urls')),
    path('api/v1/', include('societyhub.reports.urls')),
]
