"""OPD Queue URLs.

Prefix: /api/
Routes:
    GET/POST    /api/queue/               - Today's queue (?doctor_id=) / add patient
    GET         /api/queue/stats/         - Today's counts and average wait
    GET/DELETE  /api/queue/<id>/          - Entry / remove from queue
    PATCH       /api/queue/<id>/status/   - Status change (syncs the appointment)
"""

from django.urls import path

from .views import QueueEntryDetailView, QueueListCreateView, QueueStatsView, QueueStatusUpdateView

app_name = 'opd_queue'

urlpatterns = [
    path('queue/', QueueListCreateView.as_view(), name='list'),
    path('queue/stats/', QueueStatsView.as_view(), name='stats'),
    path('queue/<int:pk>/', QueueEntryDetailView.as_view(), name='detail'),
    path('queue/<int:pk>/status/', QueueStatusUpdateView.as_view(), name='status'),
]
