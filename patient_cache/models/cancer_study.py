from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Column, Integer, String
from .base import Base


class CancerStudyRecord(Base):
    __tablename__ = "cancer_study"

    internal_id = Column("CANCER_STUDY_ID", Integer, primary_key=True, autoincrement=True)
    stable_id = Column("CANCER_STUDY_IDENTIFIER", String(255), unique=True, nullable=False, index=True)
    name = Column("NAME", String(255), nullable=True)


@dataclass(frozen=True)
class CancerStudy:
    """A cancer study as seen by the patient cache."""
    internal_id: int
    stable_id: str
    name: Optional[str] = None

    @classmethod
    def from_record(cls, record: CancerStudyRecord) -> "CancerStudy":
        return cls(internal_id=record.internal_id, stable_id=record.stable_id, name=record.name)
