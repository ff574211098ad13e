"""
Management command to populate the database with demo data.
"""
import datetime
import random
from decimal import Decimal

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from care.models import User, Patient, Medication, Disease, PatientDisease, Specialization, Physician, Appointment

STAFF = [
    ("admin1", "admin"),
    ("physician1", "physician"),
]

DISEASES = [
    ("E11", "Type 2 diabetes mellitus"),
    ("I10", "Essential (primary) hypertension"),
    ("J45", "Asthma"),
    ("M81", "Osteoporosis without current pathological fracture"),
]

MEDICATIONS = [
    ("Metformin", Decimal("500"), ["08:00", "20:00"]),
    ("Lisinopril", Decimal("10"), ["09:00"]),
    ("Salbutamol", Decimal("2.5"), ["07:30", "13:30", "21:30"]),
    ("Alendronate", Decimal("70"), ["06:45"]),
]

CITIES = ["Cairo", "Giza", "Alexandria", "Mansoura"]

SPECIALIZATIONS = [
    ("Internal Medicine", "Chronic disease follow-up at home"),
    ("Physiotherapy", "Home rehabilitation sessions"),
]


class Command(BaseCommand):
    help = 'Populate database with demo staff, physicians, patients, medications, diagnoses and appointments'

    def add_arguments(self, parser):
        parser.add_argument('--patients', type=int, default=10)
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        rnd = random.Random(options['seed'])
        self.create_staff()
        diseases = self.create_diseases()
        patients = self.create_patients(options['patients'], rnd)
        self.create_medications(patients, rnd)
        self.create_diagnoses(patients, diseases, rnd)
        physicians = self.create_physicians()
        self.create_appointments(patients, physicians)
        self.stdout.write(self.style.SUCCESS(f'Demo data created: {len(patients)} patients'))

    def create_staff(self):
        for username, role in STAFF:
            User.objects.get_or_create(
                username=username,
                defaults={"role": role, "password": make_password("123456"), "is_active": True},
            )

    def create_diseases(self):
        return [Disease.objects.get_or_create(icd=icd, defaults={'name': name})[0] for icd, name in DISEASES]

    def create_patients(self, count, rnd):
        patients = []
        for i in range(1, count + 1):
            patients.append(Patient.objects.create(
                name=f'Patient {i}',
                phone=f'010{rnd.randint(10000000, 99999999)}',
                gender=rnd.choice(['male', 'female']),
                address=f'{rnd.randint(1, 200)} Nile St',
                city=rnd.choice(CITIES),
            ))
        return patients

    def create_medications(self, patients, rnd):
        for p in patients:
            for name, dose, times in rnd.sample(MEDICATIONS, k=rnd.randint(1, 2)):
                m = Medication(patient=p, name=name, dose=dose, dose_frequency=len(times))
                m.set_usage_times(datetime.time.fromisoformat(t) for t in times)
                m.save()

    def create_diagnoses(self, patients, diseases, rnd):
        today = datetime.date.today()
        for p in patients:
            PatientDisease.objects.create(
                patient=p,
                disease=rnd.choice(diseases),
                diagnosis_date=today - datetime.timedelta(days=rnd.randint(30, 900)),
            )

    def create_physicians(self):
        physicians = []
        for i, (name, description) in enumerate(SPECIALIZATIONS, start=1):
            spec, _ = Specialization.objects.get_or_create(name=name, defaults={'description': description})
            p, _ = Physician.objects.get_or_create(
                name=f'Dr. Demo {i}',
                defaults={'specialization': spec, 'clinical_address': f'{i * 10} Tahrir Sq', 'session_price': Decimal('300')},
            )
            physicians.append(p)
        return physicians

    def create_appointments(self, patients, physicians):
        day = datetime.date.today() + datetime.timedelta(days=1)
        for i, p in enumerate(patients):
            start = datetime.time(9 + i % 8, 0)
            Appointment.objects.create(
                patient=p,
                physician=physicians[i % len(physicians)],
                appointment_date=day + datetime.timedelta(days=i // 8),
                start_time=start,
                end_time=start.replace(minute=45),
                meeting_address=p.address,
            )
