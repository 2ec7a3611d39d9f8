from django.urls import path
from .views import (
    vendor_list_create, vendor_detail, vendor_status, vendor_renew, vendor_rate,
    vendor_payments, vendor_payment_pay, vendor_stats, vendor_export,
)

urlpatterns = [
    path('vendors/', vendor_list_create, name='vendor-list-create'),
    path('vendors/stats/', vendor_stats, name='vendor-stats'),
    path('vendors/export/', vendor_export, name='vendor-export'),
    path('vendors/<int:pk>/', vendor_detail, name='vendor-detail'),
    path('vendors/<int:pk>/status/', vendor_status, name='vendor-status'),
    path('vendors/<int:pk>/renew/', vendor_renew, name='vendor-renew'),
    path('vendors/<int:pk>/rate/', vendor_rate, name='vendor-rate'),
    path('vendors/<int:pk>/payments/', vendor_payments, name='vendor-payments'),
    path('vendors/<int:pk>/payments/<int:payment_id>/pay/', vendor_payment_pay, name='vendor-payment-pay'),
]
