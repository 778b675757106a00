"""Orphan sweep: delete attachment blobs that never got a metadata row."""

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from bugtracker.core.storage import BlobStore
from bugtracker.models import Attachment
from bugtracker.services.uploads import ATTACHMENTS_PREFIX

if TYPE_CHECKING:
    from bugtracker.core.config import Settings

logger = logging.getLogger(__name__)

# Keys checked per query; stays below SQLite's bound-parameter limit.
SWEEP_BATCH_SIZE = 500


def _batches(keys: Iterable[str], size: int) -> Iterator[list[str]]:
    batch: list[str] = []
    for key in keys:
        batch.append(key)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def run_orphan_sweep(
    session: Session,
    blobs: BlobStore,
    settings: "Settings",
    now: datetime | None = None,
    batch_size: int = SWEEP_BATCH_SIZE,
) -> int:
    """
    Delete attachment blobs older than ORPHAN_GRACE_HOURS with no attachments row.

    The grace period keeps uploads whose metadata insert is still in flight.
    Listing is streamed and keys are checked against the database batch_size at
    a time. Returns the number of blobs deleted. Idempotent: safe to run repeatedly.
    """
    if not settings.ORPHAN_SWEEP_ENABLED:
        logger.info("Orphan sweep is disabled (ORPHAN_SWEEP_ENABLED=false); skipping.")
        return 0

    cutoff = (now or datetime.now(UTC)) - timedelta(hours=settings.ORPHAN_GRACE_HOURS)
    candidates = (
        info.key
        for info in blobs.list(f"{ATTACHMENTS_PREFIX}/")
        if info.last_modified < cutoff
    )
    deleted = 0
    for batch in _batches(candidates, batch_size):
        known = {
            key
            for (key,) in session.query(Attachment.storage_key)
            .filter(Attachment.storage_key.in_(batch))
            .all()
        }
        for key in batch:
            if key in known:
                continue
            blobs.delete(key)
            deleted += 1

    if deleted > 0:
        logger.info(
            "Orphan sweep: cutoff=%s, blobs_deleted=%s",
            cutoff.isoformat(),
            deleted,
        )
    return deleted
