"""
Demo data seeder for the patient cache.

Creates a demo cancer study with a handful of patients so the API has
something to serve right after a fresh start. Goes through the public write
paths, so the cache stays in sync with the table.

This seeder is idempotent; it is safe to call on every startup.
"""
import logging

from .models.cancer_study import CancerStudy
from .models.patient import Patient
from .services.patient_service import PatientService
from .services.study_registry import CancerStudyRegistry

logger = logging.getLogger(__name__)

DEMO_STUDY_ID = "demo_brca_2026"
DEMO_STUDY_NAME = "Demo Breast Invasive Carcinoma"
DEMO_PATIENT_IDS = ("DEMO-P01", "DEMO-P02", "DEMO-P03")


def seed_demo_data(studies: CancerStudyRegistry, patients: PatientService) -> None:
    """Create the demo study and patients if they do not already exist."""
    study = _seed_study(studies)
    _seed_patients(patients, study)


# ── helpers ──────────────────────────────────────────────────────────────────

def _seed_study(studies: CancerStudyRegistry) -> CancerStudy:
    study = studies.get_by_stable_id(DEMO_STUDY_ID)
    if study is None:
        study = studies.add_study(DEMO_STUDY_ID, DEMO_STUDY_NAME)
        logger.info("[seed] Created demo study  : %s (id: %s)", study.stable_id, study.internal_id)
    return study


def _seed_patients(patients: PatientService, study: CancerStudy) -> None:
    existing = {p.stable_id for p in patients.get_by_study(study.stable_id) or []}
    for stable_id in DEMO_PATIENT_IDS:
        if stable_id in existing:
            continue
        internal_id = patients.add_patient(Patient(stable_id=stable_id, cancer_study=study))
        logger.info("[seed] Created demo patient: %s (id: %s)", stable_id, internal_id)
