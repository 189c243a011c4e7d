import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from patient_cache.main import create_app
from patient_cache.services.patient_service import PatientService
from patient_cache.services.patient_table import PatientTable


@pytest.fixture()
def client(service, study1, study2):
    with TestClient(create_app(service)) as c:
        yield c


def _create(client, stable_id, study="STUDY1"):
    return client.post(
        "/api/v1/patients/",
        json={"stable_id": stable_id, "cancer_study_identifier": study},
    )


class TestPatientsAPI:
    def test_health_reports_cache_size(self, client):
        _create(client, "P01")
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["cached_patients"] == 1

    def test_create_and_fetch(self, client, study1):
        resp = _create(client, "P01")
        assert resp.status_code == 201
        body = resp.json()
        assert body["stable_id"] == "P01"
        assert body["cancer_study_identifier"] == "STUDY1"
        assert body["cancer_study_id"] == study1.internal_id

        by_id = client.get(f"/api/v1/patients/{body['internal_id']}")
        assert by_id.status_code == 200
        assert by_id.json() == body

        by_stable = client.get("/api/v1/patients/by-stable-id/P01")
        assert by_stable.json() == body

    def test_create_for_unknown_study_is_404(self, client):
        resp = _create(client, "P01", study="NOPE")
        assert resp.status_code == 404

    def test_duplicate_create_is_503(self, client):
        assert _create(client, "P01").status_code == 201
        assert _create(client, "P01").status_code == 503

    def test_list_by_study_in_insertion_order(self, client):
        for stable_id, study in (("A1", "STUDY1"), ("B1", "STUDY2"), ("A2", "STUDY1")):
            _create(client, stable_id, study)
        resp = client.get("/api/v1/patients/", params={"study": "STUDY1"})
        assert [p["stable_id"] for p in resp.json()] == ["A1", "A2"]
        assert len(client.get("/api/v1/patients/").json()) == 3

    def test_list_unknown_study_is_404(self, client):
        assert client.get("/api/v1/patients/", params={"study": "NOPE"}).status_code == 404

    def test_missing_patient_is_404(self, client):
        assert client.get("/api/v1/patients/999").status_code == 404
        assert client.get("/api/v1/patients/by-stable-id/nobody").status_code == 404

    def test_delete_all(self, client):
        created = _create(client, "P01").json()
        resp = client.delete("/api/v1/patients/")
        assert resp.status_code == 204
        assert client.get(f"/api/v1/patients/{created['internal_id']}").status_code == 404
        assert client.get("/api/v1/patients/").json() == []


def test_delete_all_failure_is_503(session_factory, studies):
    class FailingTable(PatientTable):
        def truncate(self):
            raise OperationalError("DELETE FROM patient", {}, Exception("connection lost"))

    service = PatientService(FailingTable(session_factory), studies)
    with TestClient(create_app(service)) as client:
        assert client.delete("/api/v1/patients/").status_code == 503


def test_create_responds_from_inserted_patient(session_factory, studies):
    """A wipe landing right after the insert must not turn a successful create into a 500."""

    class WipedAfterInsertService(PatientService):
        def get_by_internal_id(self, internal_id):
            return None

    service = WipedAfterInsertService(PatientTable(session_factory), studies)
    studies.add_study("STUDY1")
    with TestClient(create_app(service)) as client:
        resp = _create(client, "P01")
    assert resp.status_code == 201
    assert resp.json()["stable_id"] == "P01"
