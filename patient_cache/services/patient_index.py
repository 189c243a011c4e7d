"""
In-memory indices over the cached patient set.

Three views over the same patients: by internal id, by stable id and by the
owning study's stable id. All three are mutated together under one lock so a
reader never sees a patient in one view but not in another.
"""
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models.patient import Patient


@dataclass
class _Maps:
    by_internal_id: Dict[int, Patient] = field(default_factory=dict)
    by_stable_id: Dict[str, Patient] = field(default_factory=dict)
    by_study: Dict[str, List[Patient]] = field(default_factory=dict)

    def add(self, patient: Patient) -> None:
        previous = self.by_internal_id.get(patient.internal_id)
        if previous is not None:
            self._discard(previous)

        self.by_internal_id[patient.internal_id] = patient
        self.by_stable_id[patient.stable_id] = patient
        group = self.by_study.get(patient.study_stable_id)
        if group is None:
            self.by_study[patient.study_stable_id] = [patient]
        else:
            group.append(patient)

    def _discard(self, patient: Patient) -> None:
        del self.by_internal_id[patient.internal_id]
        if self.by_stable_id.get(patient.stable_id) is patient:
            del self.by_stable_id[patient.stable_id]
        group = self.by_study.get(patient.study_stable_id, [])
        group[:] = [p for p in group if p.internal_id != patient.internal_id]
        if not group:
            self.by_study.pop(patient.study_stable_id, None)


class PatientIndex:
    """Thread-safe multi-index store for cached patients."""

    def __init__(self):
        self._lock = threading.RLock()
        self._maps = _Maps()

    def __len__(self) -> int:
        with self._lock:
            return len(self._maps.by_internal_id)

    def __contains__(self, internal_id: int) -> bool:
        with self._lock:
            return internal_id in self._maps.by_internal_id

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_internal_id(self, internal_id: int) -> Optional[Patient]:
        with self._lock:
            return self._maps.by_internal_id.get(internal_id)

    def get_by_stable_id(self, stable_id: str) -> Optional[Patient]:
        with self._lock:
            return self._maps.by_stable_id.get(stable_id)

    def get_by_study(self, study_stable_id: str) -> Optional[List[Patient]]:
        """Return a copy of the study's patients in insertion order, or None."""
        with self._lock:
            group = self._maps.by_study.get(study_stable_id)
            return list(group) if group is not None else None

    def all_patients(self) -> List[Patient]:
        with self._lock:
            return list(self._maps.by_stable_id.values())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, patient: Patient) -> None:
        if patient.internal_id is None:
            raise ValueError(f"Patient {patient.stable_id!r} has no internal id")
        with self._lock:
            self._maps.add(patient)

    def clear(self) -> None:
        with self._lock:
            self._maps = _Maps()

    def replace(self, patients: Iterable[Patient]) -> int:
        """Swap in a freshly built index containing exactly ``patients``.

        The new maps are built without holding the lock; readers keep seeing
        the previous contents until the swap.
        """
        fresh = _Maps()
        for patient in patients:
            if patient.internal_id is None:
                raise ValueError(f"Patient {patient.stable_id!r} has no internal id")
            fresh.add(patient)
        with self._lock:
            self._maps = fresh
        return len(fresh.by_internal_id)
