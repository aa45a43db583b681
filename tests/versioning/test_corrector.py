"""
Tests for merge-time trunk correction.

All tests in this file are marked as 'short' since they run against an
in-memory store.
"""

import logging

import pytest

from prversion.versioning.corrector import (
    CorrectionResult,
    MergeCorrector,
    correct,
    expected_next,
)
from prversion.versioning.exceptions import VersionOverflowError, VersionWriteError
from prversion.versioning.history import MarkerTag
from prversion.versioning.resolver import resolve
from prversion.versioning.store import MemoryVersionStore
from prversion.versioning.version import parse_version

V = parse_version


@pytest.mark.short
class TestCorrect:
    def test_sequential_merge_needs_no_correction(self):
        trunk = V("1.0.1")
        assert correct(trunk, resolve(trunk, set())) is None

    def test_out_of_order_merge(self):
        assert correct(V("1.0.1"), V("1.0.4")) == V("1.0.2")

    def test_correction_converges(self):
        for merged in ("1.0.1", "1.0.3", "1.0.9", "2.0.0", "0.9.0"):
            expected = expected_next(V("1.0.1"))
            assert correct(V("1.0.1"), V(merged)) == expected
            assert correct(V("1.0.1"), expected) is None

    def test_stale_merge_after_correction(self):
        # PR4 merged 1.0.4 and trunk was corrected to 1.0.2; PR2 then merges 1.0.2
        assert correct(V("1.0.1"), V("1.0.4")) == V("1.0.2")
        assert correct(V("1.0.2"), V("1.0.2")) == V("1.0.3")

    def test_carry(self):
        assert correct(V("1.0.99"), V("1.0.5")) == V("1.1.0")
        assert correct(V("1.0.99"), V("1.1.0")) is None

    def test_overflow(self):
        with pytest.raises(VersionOverflowError):
            correct(V("99.99.99"), V("99.99.99"))

    def test_effective_version(self):
        result = CorrectionResult(previous=V("1.0.1"), merged=V("1.0.4"))
        assert result.effective_version == V("1.0.4")
        result.corrected = V("1.0.2")
        assert result.effective_version == V("1.0.2")


@pytest.fixture
def store():
    store = MemoryVersionStore()
    store.seed("main", V("1.0.1"))
    return store


@pytest.mark.short
class TestMergeCorrector:
    def test_out_of_order_merges(self, store):
        corrector = MergeCorrector(store)

        # PR4 merges first with 1.0.4
        store.seed("main", V("1.0.4"))
        result = corrector.correct_trunk()
        assert result.corrected == V("1.0.2")
        assert result.effective_version == V("1.0.2")
        assert store.read_version_at("main") == V("1.0.2")
        assert store.trunk_history().head.marker is MarkerTag.AUTO_CORRECT

        # re-running on the corrected head changes nothing
        again = corrector.correct_trunk()
        assert again.corrected is None
        assert again.previous == V("1.0.1")
        assert again.merged == V("1.0.2")

        # PR2 merges later with the now stale 1.0.2
        store.seed("main", V("1.0.2"))
        result = corrector.correct_trunk()
        assert result.previous == V("1.0.2")
        assert result.corrected == V("1.0.3")
        assert store.read_version_at("main") == V("1.0.3")

    def test_sequential_merge_is_left_alone(self, store):
        store.seed("main", V("1.0.2"))
        result = MergeCorrector(store).correct_trunk()
        assert result.corrected is None
        assert result.commit is None
        assert len(store.trunk_history()) == 2

    def test_history_keeps_superseded_versions(self, store):
        store.seed("main", V("1.0.4"))
        MergeCorrector(store).correct_trunk()
        versions = [str(e.version) for e in store.trunk_history()]
        assert versions == ["1.0.1", "1.0.4", "1.0.2"]

    def test_single_version_history(self, store, caplog):
        caplog.set_level(logging.INFO, logger="prversion")
        assert MergeCorrector(store).correct_trunk() is None
        assert "fewer than two" in caplog.text

    def test_explicit_versions(self, store):
        result = MergeCorrector(store).correct_trunk(
            previous=V("1.0.1"), merged=V("1.0.7")
        )
        assert result.corrected == V("1.0.2")
        assert store.read_version_at("main") == V("1.0.2")

    def test_dry_run(self, store):
        store.seed("main", V("1.0.4"))
        result = MergeCorrector(store).correct_trunk(dry_run=True)
        assert result.corrected == V("1.0.2")
        assert result.commit is None
        assert store.read_version_at("main") == V("1.0.4")

    def test_write_failure_raises_alert(self, caplog):
        store = MemoryVersionStore(fail_writes=True)
        store.seed("main", V("1.0.1"))
        store.seed("main", V("1.0.4"))

        with pytest.raises(VersionWriteError):
            MergeCorrector(store).correct_trunk()

        assert "ALERT" in caplog.text
        assert store.read_version_at("main") == V("1.0.4")
