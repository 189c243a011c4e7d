from .base import Base
from .cancer_study import CancerStudy, CancerStudyRecord
from .patient import Patient, PatientRecord

__all__ = ["Base", "CancerStudy", "CancerStudyRecord", "Patient", "PatientRecord"]
