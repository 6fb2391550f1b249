"""Tests for the retention window selection."""
from __future__ import annotations

import pytest

from backup_service.tasks.backup import plan_prune


@pytest.mark.unit
class TestPlanPrune:
    """plan_prune selects the oldest files beyond the window."""

    def test_deletes_oldest(self):
        listing = [f"backup_f{i}.sql.gz" for i in range(1, 6)]

        plan = plan_prune(listing, keep=3, prefix="backup_")

        assert plan.to_delete == ["backup_f1.sql.gz", "backup_f2.sql.gz"]
        assert plan.skipped == []

    @pytest.mark.parametrize(("total", "keep"), [(10, 3), (9, 8), (4, 0), (1, 0)])
    def test_excess_count(self, total, keep):
        listing = [f"backup_{i:02d}" for i in range(total)]

        plan = plan_prune(listing, keep=keep, prefix="backup_")

        assert plan.to_delete == listing[: total - keep]
        assert all(name.startswith("backup_") for name in plan.to_delete)

    @pytest.mark.parametrize("keep", [5, 6, 100])
    def test_nothing_to_delete_when_within_window(self, keep):
        listing = [f"backup_{i}" for i in range(5)]

        plan = plan_prune(listing, keep=keep, prefix="backup_")

        assert plan.candidates == []
        assert plan.to_delete == []

    def test_empty_listing(self):
        assert plan_prune([], keep=0, prefix="backup_").to_delete == []

    def test_unprefixed_candidate_skipped_not_replaced(self):
        listing = ["backup_1", "notes.txt", "backup_3", "backup_4", "backup_5"]

        plan = plan_prune(listing, keep=3, prefix="backup_")

        assert plan.candidates == ["backup_1", "notes.txt"]
        assert plan.to_delete == ["backup_1"]
        assert plan.skipped == ["notes.txt"]

    def test_skip_logs_warning(self, caplog):
        plan_prune(["README.md", "backup_2"], keep=1, prefix="backup_")

        assert "Skipping deletion of suspicious file: README.md" in caplog.text

    def test_negative_keep_rejected(self):
        with pytest.raises(ValueError):
            plan_prune(["backup_1"], keep=-1, prefix="backup_")
