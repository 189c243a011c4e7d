from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from .base import Base
from .cancer_study import CancerStudy


class PatientRecord(Base):
    __tablename__ = "patient"
    __table_args__ = (
        UniqueConstraint("STABLE_ID", "CANCER_STUDY_ID", name="uq_patient_stable_id_study"),
    )

    internal_id = Column("INTERNAL_ID", Integer, primary_key=True, autoincrement=True)
    stable_id = Column("STABLE_ID", String(50), nullable=False)
    cancer_study_id = Column(
        "CANCER_STUDY_ID", Integer, ForeignKey("cancer_study.CANCER_STUDY_ID"), nullable=False, index=True
    )


@dataclass(frozen=True)
class Patient:
    """A patient belonging to a cancer study.

    ``internal_id`` is assigned by the database; candidates handed to
    ``PatientService.add_patient`` leave it unset.
    """
    stable_id: str
    cancer_study: CancerStudy
    internal_id: Optional[int] = None

    @property
    def study_stable_id(self) -> str:
        return self.cancer_study.stable_id
