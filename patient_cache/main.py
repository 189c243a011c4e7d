"""
Patient Cache API.
Serves cancer-study patients from an in-memory, write-through mirror of the patient table.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api import patients
from .core.config import settings
from .models.base import Base, SessionLocal, engine
from .seed_demo import seed_demo_data
from .services.patient_service import PatientService
from .services.patient_table import PatientTable
from .services.study_registry import CancerStudyRegistry

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_services() -> tuple:
    """Create the process-wide study registry and patient service."""
    studies = CancerStudyRegistry(SessionLocal)
    service = PatientService(PatientTable(SessionLocal), studies)
    return studies, service


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "patient_service", None) is None:
        # NOTE: In production, manage the schema with migrations instead of create_all()
        Base.metadata.create_all(bind=engine)
        app.state.study_registry, app.state.patient_service = build_services()

    studies: CancerStudyRegistry = app.state.study_registry
    service: PatientService = app.state.patient_service
    studies.load()
    if settings.SEED_DEMO_DATA:
        seed_demo_data(studies, service)
    if settings.PATIENT_CACHE_EAGER_LOAD and not service.is_loaded:
        service.load()
    logger.info("%s %s ready", settings.APP_NAME, settings.VERSION)
    yield


def create_app(
    patient_service: Optional[PatientService] = None,
    study_registry: Optional[CancerStudyRegistry] = None,
) -> FastAPI:
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description=(
            "Write-through cache over the patient table with lookups by internal id, "
            "stable id and owning cancer study."
        ),
        version=settings.VERSION,
        lifespan=lifespan,
    )
    if patient_service is not None:
        app.state.patient_service = patient_service
        app.state.study_registry = study_registry or patient_service.studies

    app.include_router(patients.router, prefix="/api/v1")

    @app.get("/health")
    def health_check():
        service = app.state.patient_service
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "cached_patients": len(service.index),
        }

    return app


app = create_app()
