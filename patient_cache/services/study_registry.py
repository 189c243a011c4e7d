"""
Cancer study lookup used to resolve a patient's owning study.

Mirrors the whole ``cancer_study`` table in memory; must be loaded before the
patient cache is loaded.
"""
import logging
import threading
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.exceptions import PersistenceError
from ..models.base import SessionLocal, session_scope
from ..models.cancer_study import CancerStudy, CancerStudyRecord

logger = logging.getLogger(__name__)


class CancerStudyRegistry:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal
        self._lock = threading.RLock()
        self._by_internal_id: Dict[int, CancerStudy] = {}
        self._by_stable_id: Dict[str, CancerStudy] = {}

    def load(self) -> int:
        """Replace the cached studies with the current table contents."""
        try:
            with session_scope(self.session_factory) as db:
                studies = [
                    CancerStudy.from_record(r)
                    for r in db.execute(select(CancerStudyRecord)).scalars()
                ]
        except SQLAlchemyError as exc:
            logger.error("Loading cancer studies failed: %s", exc)
            raise PersistenceError("Could not load cancer studies") from exc

        with self._lock:
            self._by_internal_id = {s.internal_id: s for s in studies}
            self._by_stable_id = {s.stable_id: s for s in studies}
        logger.info("Cached %d cancer studies", len(studies))
        return len(studies)

    def add_study(self, stable_id: str, name: Optional[str] = None) -> CancerStudy:
        """Persist a new study and cache it."""
        try:
            with session_scope(self.session_factory) as db:
                record = CancerStudyRecord(stable_id=stable_id, name=name)
                db.add(record)
                db.flush()
                study = CancerStudy.from_record(record)
        except SQLAlchemyError as exc:
            logger.error("Adding cancer study %s failed: %s", stable_id, exc)
            raise PersistenceError(f"Could not add cancer study {stable_id!r}") from exc

        with self._lock:
            self._by_internal_id[study.internal_id] = study
            self._by_stable_id[study.stable_id] = study
        return study

    def get_by_internal_id(self, internal_id: int) -> Optional[CancerStudy]:
        with self._lock:
            return self._by_internal_id.get(internal_id)

    def get_by_stable_id(self, stable_id: str) -> Optional[CancerStudy]:
        with self._lock:
            return self._by_stable_id.get(stable_id)

    def all_studies(self) -> List[CancerStudy]:
        with self._lock:
            return list(self._by_internal_id.values())
