"""
Thin persistence layer over the ``patient`` table.

Each call opens its own session through ``session_scope`` and releases it
before returning. SQLAlchemy errors propagate unchanged; the caching service
decides how to surface them.
"""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from ..models.base import SessionLocal, session_scope
from ..models.patient import PatientRecord


@dataclass(frozen=True)
class PatientRow:
    internal_id: int
    stable_id: str
    cancer_study_id: int


class PatientTable:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    def fetch_all(self) -> List[PatientRow]:
        """Return every row ordered by internal id (i.e. insertion order)."""
        with session_scope(self.session_factory) as db:
            records = db.execute(
                select(PatientRecord).order_by(PatientRecord.internal_id)
            ).scalars()
            return [
                PatientRow(
                    internal_id=r.internal_id,
                    stable_id=r.stable_id,
                    cancer_study_id=r.cancer_study_id,
                )
                for r in records
            ]

    def insert(self, stable_id: str, cancer_study_id: int) -> Optional[int]:
        """Insert one row and return the generated ``INTERNAL_ID`` (None if none was produced)."""
        with session_scope(self.session_factory) as db:
            record = PatientRecord(stable_id=stable_id, cancer_study_id=cancer_study_id)
            db.add(record)
            db.flush()
            return record.internal_id

    def truncate(self) -> None:
        with session_scope(self.session_factory) as db:
            db.execute(delete(PatientRecord))
