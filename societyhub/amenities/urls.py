from django.urls import path
from .views import (
    amenity_list_create, amenity_detail, amenity_quote, booking_list_create, booking_list_all, booking_status,
)

urlpatterns = [
    path('amenities/', amenity_list_create, name='amenity-list-create'),
    path('amenities/bookings/', booking_list_create, name='booking-list-create'),
    path('amenities/bookings/all/', booking_list_all, name='booking-list-all'),
    path('amenities/bookings/<int:pk>/status/', booking_status, name='booking-status'),
    path('amenities/<int:pk>/', amenity_detail, name='amenity-detail'),
    path('amenities/<int:pk>/quote/', amenity_quote, name='amenity-quote'),
]
