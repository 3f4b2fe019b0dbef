"""Patients App URLs.

Prefix: /api/
Routes:
    GET/POST          /api/patients/                           - List (search/filter/paginate) / create
    POST              /api/patients/merge/                     - Merge duplicates into a primary record
    GET/PUT/DELETE    /api/patients/<id or uhid>/              - Retrieve / update / delete
    GET/POST          /api/patients/<patient_id>/allergies/    - Allergies
    GET/POST          /api/patients/<patient_id>/family-history/
    GET/POST          /api/patients/<patient_id>/vitals/
    GET/POST          /api/patients/<patient_id>/records/      - Medical record upload (multipart)
    GET/POST          /api/patients/<patient_id>/insurance/    - Insurance policies
"""

from django.urls import path

from clinic_backend.patients.views import (
    FamilyHistoryDetailView,
    FamilyHistoryListCreateView,
    InsurancePolicyDetailView,
    InsurancePolicyListCreateView,
    MedicalRecordDetailView,
    MedicalRecordListCreateView,
    PatientAllergyDetailView,
    PatientAllergyListCreateView,
    PatientDetailView,
    PatientListCreateView,
    PatientMergeView,
    VitalsListCreateView,
)

app_name = 'patients'

urlpatterns = [
    path('patients/', PatientListCreateView.as_view(), name='list'),
    path('patients/merge/', PatientMergeView.as_view(), name='merge'),
    path('patients/<int:patient_id>/allergies/', PatientAllergyListCreateView.as_view(), name='allergies'),
    path('patients/<int:patient_id>/family-history/', FamilyHistoryListCreateView.as_view(), name='family-history'),
    path('patients/<int:patient_id>/vitals/', VitalsListCreateView.as_view(), name='vitals'),
    path('patients/<int:patient_id>/records/', MedicalRecordListCreateView.as_view(), name='records'),
    path('patients/<int:patient_id>/insurance/', InsurancePolicyListCreateView.as_view(), name='insurance'),
    path('patients/<str:identifier>/', PatientDetailView.as_view(), name='detail'),

    path('allergies/<int:pk>/', PatientAllergyDetailView.as_view(), name='allergy-detail'),
    path('family-history/<int:pk>/', FamilyHistoryDetailView.as_view(), name='family-history-detail'),
    path('medical-records/<int:pk>/', MedicalRecordDetailView.as_view(), name='record-detail'),
    path('insurance/<int:pk>/', InsurancePolicyDetailView.as_view(), name='insurance-detail'),
]
