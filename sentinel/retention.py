"""
CLI entrypoint for the refresh-token retention job. Run from cron, e.g.:

  python -m sentinel.retention

Or hourly: 0 * * * * cd /path/to/sentinel && .venv/bin/python -m sentinel.retention
"""

import logging
import sys

from sentinel.core.config import get_settings
from sentinel.core.database import SessionLocal
from sentinel.core.errors import StorageUnavailableError
from sentinel.core.logging_config import configure_logging
from sentinel.services.retention import purge_expired_refresh_tokens

logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: delete expired refresh tokens."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        deleted = purge_expired_refresh_tokens(db, settings)
        logger.info("Retention completed: refresh_tokens_deleted=%s", deleted)
        return 0
    except StorageUnavailableError as e:
        logger.error("Retention job failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
