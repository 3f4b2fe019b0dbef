"""Appointments App URLs.

Prefix: /api/
Routes:
	GET/POST          /api/appointments/                        - List (filters) / book
	GET               /api/appointments/today-summary/          - Status counts for today
	GET               /api/appointments/booked-slots/           - ?doctor_id=&date=
	GET/PUT/DELETE    /api/appointments/<id>/                   - Retrieve / update / delete
	PATCH             /api/appointments/<id>/status/            - Status change (recorded in history)
	POST              /api/appointments/<id>/check-in|start|end/
	GET/PUT           /api/doctors/<doctor_id>/time-slots/      - Active slots / replace all slots
	POST              /api/doctors/<doctor_id>/time-slots/add/  - Add single slot
	DELETE            /api/time-slots/<id>/
	GET/PUT           /api/doctors/<doctor_id>/availability/    - Weekly availability
"""

from django.urls import path

from .views import (
	AppointmentCheckInView,
	AppointmentDetailView,
	AppointmentEndVisitView,
	AppointmentListCreateView,
	AppointmentStartVisitView,
	AppointmentStatusUpdateView,
	BookedSlotsView,
	DoctorAvailabilityView,
	DoctorTimeSlotAddView,
	DoctorTimeSlotDeleteView,
	DoctorTimeSlotsView,
	TodaySummaryView,
)

app_name = 'appointments'

urlpatterns = [
	path('appointments/', AppointmentListCreateView.as_view(), name='list'),
	path('appointments/today-summary/', TodaySummaryView.as_view(), name='today-summary'),
	path('appointments/booked-slots/', BookedSlotsView.as_view(), name='booked-slots'),
	path('appointments/<int:pk>/', AppointmentDetailView.as_view(), name='detail'),
	path('appointments/<int:pk>/status/', AppointmentStatusUpdateView.as_view(), name='status'),
	path('appointments/<int:pk>/check-in/', AppointmentCheckInView.as_view(), name='check-in'),
	path('appointments/<int:pk>/start/', AppointmentStartVisitView.as_view(), name='start'),
	path('appointments/<int:pk>/end/', AppointmentEndVisitView.as_view(), name='end'),

	path('doctors/<int:doctor_id>/time-slots/', DoctorTimeSlotsView.as_view(), name='time-slots'),
	path('doctors/<int:doctor_id>/time-slots/add/', DoctorTimeSlotAddView.as_view(), name='time-slot-add'),
	path('time-slots/<int:pk>/', DoctorTimeSlotDeleteView.as_view(), name='time-slot-delete'),
	path('doctors/<int:doctor_id>/availability/', DoctorAvailabilityView.as_view(), name='availability'),
]
