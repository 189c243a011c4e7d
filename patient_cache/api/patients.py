from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List, Optional
from pydantic import BaseModel

from ..core.exceptions import NOT_FOUND, PersistenceError
from ..models.patient import Patient
from ..services.patient_service import PatientService
from ..services.study_registry import CancerStudyRegistry

router = APIRouter(prefix="/patients", tags=["patients"])


class PatientCreate(BaseModel):
    stable_id: str
    cancer_study_identifier: str


class PatientResponse(BaseModel):
    internal_id: int
    stable_id: str
    cancer_study_id: int
    cancer_study_identifier: str

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientResponse":
        return cls(
            internal_id=patient.internal_id,
            stable_id=patient.stable_id,
            cancer_study_id=patient.cancer_study.internal_id,
            cancer_study_identifier=patient.cancer_study.stable_id,
        )


def get_patient_service(request: Request) -> PatientService:
    return request.app.state.patient_service


def get_study_registry(request: Request) -> CancerStudyRegistry:
    return request.app.state.study_registry


@router.post("/", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    patient_in: PatientCreate,
    service: PatientService = Depends(get_patient_service),
    studies: CancerStudyRegistry = Depends(get_study_registry),
):
    study = studies.get_by_stable_id(patient_in.cancer_study_identifier)
    if study is None:
        raise HTTPException(status_code=404, detail="Cancer study not found")
    try:
        internal_id = service.add_patient(Patient(stable_id=patient_in.stable_id, cancer_study=study))
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if internal_id == NOT_FOUND:
        raise HTTPException(status_code=500, detail="Database did not return a patient id")
    return PatientResponse.from_patient(
        Patient(stable_id=patient_in.stable_id, cancer_study=study, internal_id=internal_id)
    )


@router.get("/", response_model=List[PatientResponse])
def list_patients(
    study: Optional[str] = None,
    service: PatientService = Depends(get_patient_service),
):
    """All cached patients, or the patients of one study in insertion order."""
    if study is None:
        patients = service.get_all()
    else:
        patients = service.get_by_study(study)
        if patients is None:
            raise HTTPException(status_code=404, detail="No patients for cancer study")
    return [PatientResponse.from_patient(p) for p in patients]


@router.get("/by-stable-id/{stable_id}", response_model=PatientResponse)
def get_patient_by_stable_id(
    stable_id: str,
    service: PatientService = Depends(get_patient_service),
):
    patient = service.get_by_stable_id(stable_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientResponse.from_patient(patient)


@router.get("/{internal_id}", response_model=PatientResponse)
def get_patient(
    internal_id: int,
    service: PatientService = Depends(get_patient_service),
):
    patient = service.get_by_internal_id(internal_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return PatientResponse.from_patient(patient)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def delete_all_patients(service: PatientService = Depends(get_patient_service)):
    try:
        service.delete_all_records()
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
