"""Prescriptions App URLs.

Prefix: /api/
Routes:
    GET/POST          /api/prescriptions/                              - Search / save a prescription
    GET               /api/prescriptions/<id>/                         - Detail with items and vitals
    GET               /api/prescriptions/patient/<patient_id>/         - Patient history (paginated)
    GET               /api/prescriptions/patient/<patient_id>/last/    - Most recent prescription
    GET               /api/medicines/                                  - Medicine master (?search=)
    GET/POST          /api/prescription-templates/                     - Active templates (?category=&search=)
    GET               /api/prescription-templates/by-category/
    GET/PUT/DELETE    /api/prescription-templates/<id>/                - DELETE deactivates
    POST              /api/prescription-templates/<id>/use/            - Prefill payload
    GET               /api/follow-ups/                                 - ?days=7&patient_id=
"""

from django.urls import path

from .views import (
    FollowUpListView,
    LastPrescriptionView,
    MedicineListView,
    PatientPrescriptionListView,
    PrescriptionDetailView,
    PrescriptionListCreateView,
    PrescriptionTemplateDetailView,
    PrescriptionTemplateListCreateView,
    PrescriptionTemplatesByCategoryView,
    PrescriptionTemplateUseView,
)

app_name = 'prescriptions'

urlpatterns = [
    path('prescriptions/', PrescriptionListCreateView.as_view(), name='list'),
    path('prescriptions/<int:pk>/', PrescriptionDetailView.as_view(), name='detail'),
    path('prescriptions/patient/<int:patient_id>/', PatientPrescriptionListView.as_view(), name='patient-list'),
    path('prescriptions/patient/<int:patient_id>/last/', LastPrescriptionView.as_view(), name='patient-last'),
    path('medicines/', MedicineListView.as_view(), name='medicines'),

    path('prescription-templates/', PrescriptionTemplateListCreateView.as_view(), name='template-list'),
    path('prescription-templates/by-category/', PrescriptionTemplatesByCategoryView.as_view(), name='template-by-category'),
    path('prescription-templates/<int:pk>/', PrescriptionTemplateDetailView.as_view(), name='template-detail'),
    path('prescription-templates/<int:pk>/use/', PrescriptionTemplateUseView.as_view(), name='template-use'),

    path('follow-ups/', FollowUpListView.as_view(), name='follow-ups'),
]
