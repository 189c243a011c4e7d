import pytest
from sqlalchemy.exc import OperationalError

from patient_cache.core.exceptions import PersistenceError
from patient_cache.services.study_registry import CancerStudyRegistry


class TestCancerStudyRegistry:
    def test_add_study_is_cached_both_ways(self, studies):
        study = studies.add_study("brca_tcga", "Breast Invasive Carcinoma")
        assert study.internal_id is not None
        assert studies.get_by_internal_id(study.internal_id) == study
        assert studies.get_by_stable_id("brca_tcga") == study

    def test_unknown_study_is_none(self, studies):
        assert studies.get_by_internal_id(12345) is None
        assert studies.get_by_stable_id("missing") is None

    def test_load_reads_persisted_studies(self, session_factory, studies):
        a = studies.add_study("A")
        b = studies.add_study("B", "Study B")
        fresh = CancerStudyRegistry(session_factory)
        assert fresh.load() == 2
        assert sorted(s.stable_id for s in fresh.all_studies()) == ["A", "B"]
        assert fresh.get_by_internal_id(b.internal_id).name == "Study B"
        assert fresh.get_by_stable_id("A") == a

    def test_duplicate_stable_id_raises_persistence_error(self, studies):
        studies.add_study("A")
        with pytest.raises(PersistenceError):
            studies.add_study("A")
        assert len(studies.all_studies()) == 1

    def test_load_failure_raises_persistence_error(self, session_factory):
        class BrokenFactory:
            def __call__(self):
                raise OperationalError("connect", {}, Exception("database is down"))

        registry = CancerStudyRegistry(BrokenFactory())
        with pytest.raises(PersistenceError):
            registry.load()
