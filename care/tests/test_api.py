"""
Integration tests for the homecare API.

These tests exercise patient, medication and diagnosis endpoints
including role based access control and the unified error envelope.
They use Django REST Framework's APIClient within APITestCase.

To run the tests:

```
pytest -q care/tests
```
"""
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from care.models import User, Patient, Medication, Disease, PatientDisease, AuditEvent


class HomecareAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username="admin1", password="P@ssw0rd1", role="admin")
        self.physician = User.objects.create_user(username="doc1", password="P@ssw0rd1", role="physician")
        self.patient_user = User.objects.create_user(username="mona", password="P@ssw0rd1", role="patient")
        self.other_user = User.objects.create_user(username="omar", password="P@ssw0rd1", role="patient")

        self.patient = Patient.objects.create(
            name="Mona Adel", phone="01012345678", gender="female", city="Cairo", user=self.patient_user,
        )
        self.other = Patient.objects.create(
            name="Omar Said", phone="01198765432", gender="male", city="Giza", user=self.other_user,
        )

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------
    def test_staff_can_list_and_search_patients(self):
        client = self.authenticate(self.physician)
        response = client.get("/api/patients")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pagination"]["total"], 2)

        response = client.get("/api/patients", {"q": "omar"})
        ids = [p["id"] for p in response.data["data"]]
        self.assertEqual(ids, [self.other.id])

    def test_patient_role_cannot_list_patients(self):
        client = self.authenticate(self.patient_user)
        response = client.get("/api/patients")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIs(response.data["ok"], False)

    def test_anonymous_is_rejected(self):
        response = APIClient().get("/api/patients")
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_create_patient_records_audit_event(self):
        client = self.authenticate(self.admin)
        response = client.post(
            "/api/patients",
            {"name": "Hoda", "phone": "01055556666", "gender": "female", "address": "12 Nile St", "city": "Cairo"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        created = Patient.objects.get(id=response.data["id"])
        self.assertEqual(created.phone, "01055556666")
        self.assertTrue(AuditEvent.objects.filter(action="patient_create", object_id=created.id, user=self.admin).exists())

    def test_create_patient_validates_phone(self):
        client = self.authenticate(self.admin)
        response = client.post("/api/patients", {"name": "Hoda", "phone": "call me"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "api_error")

    def test_patient_can_read_own_record_only(self):
        client = self.authenticate(self.patient_user)
        response = client.get(f"/api/patients/{self.patient.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "Mona Adel")

        response = client.get(f"/api/patients/{self.other.id}")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_patient_cannot_modify_own_record(self):
        client = self.authenticate(self.patient_user)
        response = client.patch(f"/api/patients/{self.patient.id}", {"city": "Luxor"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_patch_updates_only_given_fields(self):
        client = self.authenticate(self.physician)
        response = client.patch(f"/api/patients/{self.patient.id}", {"city": "Alexandria"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.patient.refresh_from_db()
        self.assertEqual(self.patient.city, "Alexandria")
        self.assertEqual(self.patient.phone, "01012345678")
        self.assertTrue(AuditEvent.objects.filter(action="patient_update", object_id=self.patient.id).exists())

    def test_unknown_patient_returns_404(self):
        client = self.authenticate(self.admin)
        response = client.get("/api/patients/99999")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Wrong ID")

    def test_delete_patient_removes_medications(self):
        Medication.objects.create(patient=self.patient, name="Metformin", usage_times=["08:00:00"])
        client = self.authenticate(self.admin)
        response = client.delete(f"/api/patients/{self.patient.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Patient.objects.filter(id=self.patient.id).exists())
        self.assertFalse(Medication.objects.filter(name="Metformin").exists())
        self.assertTrue(AuditEvent.objects.filter(action="patient_delete").exists())

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------
    def test_add_medication_stores_usage_times(self):
        client = self.authenticate(self.physician)
        response = client.post(
            f"/api/patients/{self.patient.id}/medications",
            {"name": "Metformin", "dose": "500", "doseFrequency": 2, "usageTimes": ["08:00", "20:00"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["usageTimes"], ["08:00", "20:00"])
        med = Medication.objects.get(id=response.data["id"])
        self.assertEqual(med.usage_times, ["08:00:00", "20:00:00"])
        self.assertEqual(med.dose, Decimal("500"))
        self.assertEqual(med.patient_id, self.patient.id)

    def test_add_medication_rejects_invalid_time(self):
        client = self.authenticate(self.physician)
        response = client.post(
            f"/api/patients/{self.patient.id}/medications",
            {"name": "Metformin", "usageTimes": ["25:00"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIs(response.data["ok"], False)

    def test_patient_cannot_add_medication(self):
        client = self.authenticate(self.patient_user)
        response = client.post(
            f"/api/patients/{self.patient.id}/medications", {"name": "Candy"}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_medications_empty_is_404(self):
        client = self.authenticate(self.patient_user)
        response = client.get(f"/api/patients/{self.patient.id}/medications")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "No Medications")

    def test_patient_lists_own_medications(self):
        Medication.objects.create(patient=self.patient, name="Aspirin", dose=Decimal("1.5"), usage_times=["09:15:30"])
        client = self.authenticate(self.patient_user)
        response = client.get(f"/api/patients/{self.patient.id}/medications")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]["name"], "Aspirin")
        self.assertEqual(response.data[0]["usageTimes"], ["09:15:30"])

    def test_todays_schedule_is_sorted_by_time(self):
        Medication.objects.create(patient=self.patient, name="Night", usage_times=["21:00:00"])
        Medication.objects.create(patient=self.patient, name="Day", usage_times=["13:00:00", "07:30:00"])
        client = self.authenticate(self.patient_user)
        response = client.get(f"/api/patients/{self.patient.id}/medications/today")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [(s["time"], s["name"]) for s in response.data["data"]],
            [("07:30", "Day"), ("13:00", "Day"), ("21:00", "Night")],
        )

    def test_unreadable_usage_times_do_not_break_reads(self):
        Medication.objects.create(patient=self.patient, name="Legacy", usage_times=["soon", "08:00:00"])
        client = self.authenticate(self.physician)

        response = client.get(f"/api/patients/{self.patient.id}/medications")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]["usageTimes"], ["08:00"])

        response = client.get(f"/api/patients/{self.patient.id}/medications/today")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s["time"] for s in response.data["data"]], ["08:00"])

    def test_model_validation_rejects_bad_usage_times(self):
        med = Medication(patient=self.patient, name="Legacy", usage_times=["08:00:00", "soon"])
        with self.assertRaises(ValidationError) as ctx:
            med.full_clean()
        self.assertIn("usage_times", ctx.exception.message_dict)

        med.usage_times = "08:00"
        with self.assertRaises(ValidationError):
            med.full_clean()

        med.usage_times = ["08:00:00", "20:30"]
        med.full_clean()

    def test_unexpected_error_hides_internal_details(self):
        client = self.authenticate(self.physician)
        with mock.patch("care.views.medications.todays_schedule", side_effect=RuntimeError("db password=hunter2")):
            response = client.get(f"/api/patients/{self.patient.id}/medications/today")
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], {"code": "server_error", "message": "Internal server error"})

    def test_update_and_delete_medication(self):
        med = Medication.objects.create(patient=self.patient, name="Metformin", usage_times=["08:00:00"])
        client = self.authenticate(self.physician)
        response = client.patch(f"/api/medications/{med.id}", {"usageTimes": ["09:00", "21:00"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        med.refresh_from_db()
        self.assertEqual(med.usage_times, ["09:00:00", "21:00:00"])
        self.assertEqual(med.name, "Metformin")

        response = client.delete(f"/api/medications/{med.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Medication.objects.filter(id=med.id).exists())

    # ------------------------------------------------------------------
    # Diseases
    # ------------------------------------------------------------------
    def test_attach_diagnosis(self):
        Disease.objects.create(icd="E11", name="Type 2 diabetes mellitus")
        client = self.authenticate(self.physician)
        response = client.post(
            f"/api/patients/{self.patient.id}/diseases",
            {"icd": "e11", "diagnosisDate": "2024-03-01"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["diseaseName"], "Type 2 diabetes mellitus")

        response = self.authenticate(self.patient_user).get(f"/api/patients/{self.patient.id}/diseases")
        self.assertEqual([d["icd"] for d in response.data], ["E11"])

    def test_attach_unknown_icd_is_404(self):
        client = self.authenticate(self.physician)
        response = client.post(f"/api/patients/{self.patient.id}/diseases", {"icd": "Z99.9"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Wrong ICD Code")
        self.assertFalse(PatientDisease.objects.exists())

    def test_recovery_before_diagnosis_is_rejected(self):
        Disease.objects.create(icd="J45", name="Asthma")
        client = self.authenticate(self.physician)
        response = client.post(
            f"/api/patients/{self.patient.id}/diseases",
            {"icd": "J45", "diagnosisDate": "2024-03-01", "recoveredDate": "2024-01-01"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_disease_search(self):
        Disease.objects.create(icd="J45", name="Asthma")
        Disease.objects.create(icd="I10", name="Essential hypertension")
        response = self.authenticate(self.patient_user).get("/api/diseases/search", {"name": "asth"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [{"icd": "J45", "name": "Asthma"}])

    def test_admin_imports_icd_file(self):
        upload = SimpleUploadedFile(
            "icd.txt", b"A00 Cholera\nA01 Typhoid fever\n\nbad\n", content_type="text/plain",
        )
        response = self.authenticate(self.admin).post("/api/diseases/import", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["created"], 2)
        self.assertEqual(Disease.objects.get(icd="A01").name, "Typhoid fever")

    def test_import_rejects_non_text_files(self):
        upload = SimpleUploadedFile("icd.csv", b"A00,Cholera\n", content_type="text/csv")
        response = self.authenticate(self.admin).post("/api/diseases/import", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_physician_cannot_import(self):
        upload = SimpleUploadedFile("icd.txt", b"A00 Cholera\n", content_type="text/plain")
        response = self.authenticate(self.physician).post("/api/diseases/import", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_healthz(self):
        response = APIClient().get("/healthz")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True, "db": True})
