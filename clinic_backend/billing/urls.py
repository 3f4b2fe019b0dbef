"""Billing App URLs.

Prefix: /api/
Routes:
    GET/POST          /api/bills/                              - List (search/filter/paginate) / create
    GET/PATCH/DELETE  /api/bills/<id>/                         - Retrieve / record payment / delete
    GET               /api/patients/<patient_id>/bills/
    PATCH             /api/appointments/<id>/payment-status/   - Sync payment status via the bill
    GET/POST          /api/receipt-templates/                  - ?clinic_id=
    GET               /api/receipt-templates/default/          - ?clinic_id= (required)
    GET/PUT/DELETE    /api/receipt-templates/<id>/
    GET/POST          /api/packages/                           - Subscription packages
    GET/PUT/DELETE    /api/packages/<id>/                      - DELETE deactivates
    POST              /api/subscriptions/                      - Enroll a patient
    GET               /api/patients/<patient_id>/subscriptions/
    POST              /api/subscriptions/<id>/use-session/
"""

from django.urls import path

from .views import (
    AppointmentPaymentStatusView,
    BillDetailView,
    BillListCreateView,
    DefaultReceiptTemplateView,
    EnrollPatientView,
    PatientBillListView,
    PatientSubscriptionListView,
    ReceiptTemplateDetailView,
    ReceiptTemplateListCreateView,
    SubscriptionPackageDetailView,
    SubscriptionPackageListCreateView,
    UseSessionView,
)

app_name = 'billing'

urlpatterns = [
    path('bills/', BillListCreateView.as_view(), name='bill-list'),
    path('bills/<int:pk>/', BillDetailView.as_view(), name='bill-detail'),
    path('patients/<int:patient_id>/bills/', PatientBillListView.as_view(), name='patient-bills'),
    path('appointments/<int:pk>/payment-status/', AppointmentPaymentStatusView.as_view(), name='appointment-payment-status'),

    path('receipt-templates/', ReceiptTemplateListCreateView.as_view(), name='receipt-template-list'),
    path('receipt-templates/default/', DefaultReceiptTemplateView.as_view(), name='receipt-template-default'),
    path('receipt-templates/<int:pk>/', ReceiptTemplateDetailView.as_view(), name='receipt-template-detail'),

    path('packages/', SubscriptionPackageListCreateView.as_view(), name='package-list'),
    path('packages/<int:pk>/', SubscriptionPackageDetailView.as_view(), name='package-detail'),
    path('subscriptions/', EnrollPatientView.as_view(), name='enroll'),
    path('patients/<int:patient_id>/subscriptions/', PatientSubscriptionListView.as_view(), name='patient-subscriptions'),
    path('subscriptions/<int:pk>/use-session/', UseSessionView.as_view(), name='use-session'),
]
