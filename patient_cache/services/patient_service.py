"""
Write-through cache in front of the ``patient`` table.

All reads are served from a PatientIndex. Inserts and the full-table wipe hit
the database first and only touch the index once the database call has
succeeded, so the cache never holds a patient the table does not.

Construct one instance at startup and share it; see ``main.create_app``.
"""
import logging
import threading
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import NOT_FOUND, DataIntegrityFault, PersistenceError
from ..models.patient import Patient
from .patient_index import PatientIndex
from .patient_table import PatientRow, PatientTable
from .study_registry import CancerStudyRegistry

logger = logging.getLogger(__name__)


class PatientService:
    def __init__(
        self,
        table: PatientTable,
        studies: CancerStudyRegistry,
        index: Optional[PatientIndex] = None,
    ):
        self.table = table
        self.studies = studies
        self.index = index or PatientIndex()
        # Held from each table write through the matching index update, and across loads
        self._write_lock = threading.RLock()
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Rebuild the cache from the table. Returns the number of patients cached.

        Raises PersistenceError if the table cannot be read and
        DataIntegrityFault if a row points at an unknown study. In both cases
        the previous cache contents are left as they were.
        """
        with self._write_lock:
            count = self._load()
            self._loaded = True
        return count

    reload = load

    def ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._write_lock:
            if not self._loaded:
                self._load()
                self._loaded = True

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def _load(self) -> int:
        try:
            rows = self.table.fetch_all()
        except SQLAlchemyError as exc:
            logger.error("Reading patient table failed: %s", exc)
            raise PersistenceError("Could not load patients") from exc

        count = self.index.replace(self._resolve(rows))
        logger.info("Cached %d patients", count)
        return count

    def _resolve(self, rows: List[PatientRow]) -> Iterator[Patient]:
        for row in rows:
            study = self.studies.get_by_internal_id(row.cancer_study_id)
            if study is None:
                logger.error(
                    "Patient %s (%s) references unknown cancer study %s",
                    row.internal_id, row.stable_id, row.cancer_study_id,
                )
                raise DataIntegrityFault(row.internal_id, row.cancer_study_id)
            yield Patient(stable_id=row.stable_id, cancer_study=study, internal_id=row.internal_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_patient(self, patient: Patient) -> int:
        """Persist ``patient`` and cache it. Returns the new internal id.

        ``patient.internal_id`` is ignored. Returns NOT_FOUND when the
        database produced no generated key; raises PersistenceError when the
        insert itself failed.
        """
        self.ensure_loaded()
        study = patient.cancer_study
        with self._write_lock:
            try:
                internal_id = self.table.insert(patient.stable_id, study.internal_id)
            except SQLAlchemyError as exc:
                logger.error(
                    "Inserting patient %s into study %s failed: %s",
                    patient.stable_id, study.stable_id, exc,
                )
                raise PersistenceError(
                    f"Could not add patient {patient.stable_id!r} to study {study.stable_id!r}"
                ) from exc

            if internal_id is None:
                logger.warning("No generated key returned for patient %s", patient.stable_id)
                return NOT_FOUND

            self.index.insert(Patient(stable_id=patient.stable_id, cancer_study=study, internal_id=internal_id))
        logger.debug("Cached patient %s (%s) in study %s", internal_id, patient.stable_id, study.stable_id)
        return internal_id

    def delete_all_records(self) -> None:
        """Wipe the patient table and empty the cache. Irreversible.

        An empty table is a complete load, so the cache counts as loaded afterwards.
        """
        with self._write_lock:
            try:
                self.table.truncate()
            except SQLAlchemyError as exc:
                logger.error("Truncating patient table failed: %s", exc)
                raise PersistenceError("Could not delete patient records") from exc

            self.index.clear()
            self._loaded = True
        logger.info("Deleted all patient records")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_internal_id(self, internal_id: int) -> Optional[Patient]:
        self.ensure_loaded()
        return self.index.get_by_internal_id(internal_id)

    def get_by_stable_id(self, stable_id: str) -> Optional[Patient]:
        self.ensure_loaded()
        return self.index.get_by_stable_id(stable_id)

    def get_by_study(self, study_stable_id: str) -> Optional[List[Patient]]:
        self.ensure_loaded()
        return self.index.get_by_study(study_stable_id)

    def get_all(self) -> List[Patient]:
        self.ensure_loaded()
        return self.index.all_patients()
