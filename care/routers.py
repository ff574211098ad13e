"""
URL mappings for the homecare API.

Paths carry no trailing slash to match the front-end
client.
"""
from django.urls import path, include

from .views import health
from .views.patients import patients_collection, patient_detail
from .views.medications import patient_medications, patient_medications_today, medication_detail
from .views.diseases import disease_search, disease_import, patient_diseases
from .views.physicians import (
    specializations_collection, specialization_detail, specialization_physicians,
    physicians_collection, physician_detail, physician_appointments, physician_free_times,
)
from .views.appointments import appointments_collection, appointment_detail, patient_appointments


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Patients
    path('api/patients', patients_collection, name='patients'),
    path('api/patients/<int:pk>', patient_detail, name='patient_detail'),
    # Medications
    path('api/patients/<int:pk>/medications', patient_medications, name='patient_medications'),
    path('api/patients/<int:pk>/medications/today', patient_medications_today, name='patient_medications_today'),
    path('api/medications/<int:pk>', medication_detail, name='medication_detail'),
    # Diseases & diagnoses
    path('api/patients/<int:pk>/diseases', patient_diseases, name='patient_diseases'),
    path('api/diseases/search', disease_search, name='disease_search'),
    path('api/diseases/import', disease_import, name='disease_import'),
    # Specializations & physicians
    path('api/specializations', specializations_collection, name='specializations'),
    path('api/specializations/<int:pk>', specialization_detail, name='specialization_detail'),
    path('api/specializations/<int:pk>/physicians', specialization_physicians, name='specialization_physicians'),
    path('api/physicians', physicians_collection, name='physicians'),
    path('api/physicians/<int:pk>', physician_detail, name='physician_detail'),
    path('api/physicians/<int:pk>/appointments', physician_appointments, name='physician_appointments'),
    path('api/physicians/<int:pk>/free-times', physician_free_times, name='physician_free_times'),
    # Appointments
    path('api/appointments', appointments_collection, name='appointments'),
    path('api/appointments/<uuid:pk>', appointment_detail, name='appointment_detail'),
    path('api/patients/<int:pk>/appointments', patient_appointments, name='patient_appointments'),
]
