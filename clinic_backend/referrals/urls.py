"""Referrals App URLs.

Prefix: /api/
Routes:
    GET/POST          /api/referrals/                       - List (?patient_id=&status=) / create
    GET/PUT/DELETE    /api/referrals/<id>/                  - PUT takes an allow-list of fields
    GET/POST          /api/referrals/network/doctors/       - Referral network
    GET/PUT/DELETE    /api/referrals/network/doctors/<id>/  - DELETE deactivates
"""

from django.urls import path

from .views import (
    ReferralDetailView,
    ReferralListCreateView,
    ReferralNetworkDetailView,
    ReferralNetworkListCreateView,
)

app_name = 'referrals'

urlpatterns = [
    path('referrals/', ReferralListCreateView.as_view(), name='list'),
    path('referrals/network/doctors/', ReferralNetworkListCreateView.as_view(), name='network-list'),
    path('referrals/network/doctors/<int:pk>/', ReferralNetworkDetailView.as_view(), name='network-detail'),
    path('referrals/<int:pk>/', ReferralDetailView.as_view(), name='detail'),
]
