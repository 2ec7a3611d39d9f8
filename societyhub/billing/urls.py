from django.urls import path
from .views import (
    invoice_list_create, my_invoices, invoice_detail, invoice_cancel, invoice_pay, invoice_generate,
    invoice_apply_late_fees, billing_stats, defaulter_list, defaulter_stats, invoice_export, invoice_pdf,
    billing_config,
)

urlpatterns = [
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/my/', my_invoices, name='invoice-my'),
    path('invoices/generate/', invoice_generate, name='invoice-generate'),
    path('invoices/apply-late-fees/', invoice_apply_late_fees, name='invoice-apply-late-fees'),
    path('invoices/stats/', billing_stats, name='invoice-stats'),
    path('invoices/export/', invoice_export, name='invoice-export'),
    path('invoices/defaulters/', defaulter_list, name='invoice-defaulters'),
    path('invoices/defaulters/stats/', defaulter_stats, name='invoice-defaulter-stats'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
    path('invoices/<int:pk>/cancel/', invoice_cancel, name='invoice-cancel'),
    path('invoices/<int:pk>/pdf/', invoice_pdf, name='invoice-pdf'),
    path('invoices/<str:invoice_number>/pay/', invoice_pay, name='invoice-pay'),
    path('billing/config/', billing_config, name='billing-config'),
]
