"""
CLI entrypoint for the orphaned-blob sweep. Run from cron, e.g.:

  python -m bugtracker.sweep

Or hourly: 0 * * * * cd /path/to/bugtracker && .venv/bin/python -m bugtracker.sweep
"""

import logging
import sys

from bugtracker.core.config import get_settings
from bugtracker.core.database import SessionLocal
from bugtracker.core.storage import build_blob_store
from bugtracker.services.orphans import run_orphan_sweep

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete attachment blobs with no metadata row older than ORPHAN_GRACE_HOURS."""
    settings = get_settings()
    db = SessionLocal()
    try:
        deleted = run_orphan_sweep(db, build_blob_store(settings), settings)
        logger.info("Orphan sweep completed: blobs_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Orphan sweep failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
