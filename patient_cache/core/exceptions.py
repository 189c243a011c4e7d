"""
Error taxonomy for the patient cache.

Lookups never raise: absence is returned as ``None``. Only the write paths
(insert, wipe) and the loader raise the errors defined here.
"""

# Returned by PatientService.add_patient when the store did not hand back a generated key
NOT_FOUND = -1


class PatientCacheError(Exception):
    """Base class for every error raised by this package."""


class PersistenceError(PatientCacheError):
    """A failure reported by the persistent store during insert, load or truncate.

    The original driver/ORM exception is available as ``__cause__``.
    """


class DataIntegrityFault(PatientCacheError):
    """A persisted patient row references a cancer study that cannot be resolved."""

    def __init__(self, patient_internal_id: int, cancer_study_id: int):
        self.patient_internal_id = patient_internal_id
        self.cancer_study_id = cancer_study_id
        super().__init__(
            f"Patient {patient_internal_id} references unknown cancer study {cancer_study_id}"
        )
