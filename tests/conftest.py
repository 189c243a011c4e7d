"""Shared fixtures: an isolated in-memory database and the services built on it."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from patient_cache.models.base import Base
from patient_cache.services.patient_service import PatientService
from patient_cache.services.patient_table import PatientTable
from patient_cache.services.study_registry import CancerStudyRegistry


@pytest.fixture()
def session_factory():
    """Provide an isolated in-memory SQLite database for each test."""
    test_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def studies(session_factory):
    registry = CancerStudyRegistry(session_factory)
    registry.load()
    return registry


@pytest.fixture()
def study1(studies):
    return studies.add_study("STUDY1", "First study")


@pytest.fixture()
def study2(studies):
    return studies.add_study("STUDY2", "Second study")


@pytest.fixture()
def service(session_factory, studies):
    svc = PatientService(PatientTable(session_factory), studies)
    svc.load()
    return svc
