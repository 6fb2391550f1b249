"""Remote retention window selection."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PrunePlan:
    """Which remote files to delete after an upload.

    Attributes:
        candidates: The oldest files beyond the retention window.
        to_delete: Candidates carrying the backup prefix.
        skipped: Candidates without the prefix; never deleted.
    """

    candidates: list[str] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def plan_prune(listing: Sequence[str], keep: int, prefix: str) -> PrunePlan:
    """Select files to delete from a listing ordered oldest first.

    The ``max(0, len(listing) - keep)`` oldest entries are candidates. A
    candidate that does not start with ``prefix`` is skipped, not replaced by
    a newer file: the retention window is computed once over the full listing.

    Args:
        listing: Remote file names, ascending by modification time.
        keep: Number of most recent files to retain.
        prefix: Required name prefix for deletion.

    Returns:
        PrunePlan with the deletion set and skipped names.
    """
    if keep < 0:
        raise ValueError(f"keep must be >= 0, got {keep}")

    excess = max(0, len(listing) - keep)
    plan = PrunePlan(candidates=list(listing[:excess]))

    for name in plan.candidates:
        if name.startswith(prefix):
            plan.to_delete.append(name)
        else:
            logger.warning(
                "Skipping deletion of suspicious file: %s",
                name,
                extra={"expected_prefix": prefix},
            )
            plan.skipped.append(name)

    return plan
