"""GCP Cloud Run Job entry point for the group membership sync.

Deployed as a Cloud Run Job triggered by Cloud Scheduler. Every run is a
scheduled invocation, so the result is always written to storage.

Usage:
  python -m scripts.groupsync.entrypoints.gcp_cloudrun
"""

from __future__ import annotations

import logging
import os
import sys

from scripts.groupsync.config import load_config
from scripts.groupsync.logging_config import configure_logging
from scripts.groupsync.synchronizer import ScheduledInvocation, handle_invocation

logger = logging.getLogger("groupsync.cloudrun")


def main() -> None:
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    logger.info("Cloud Run Job started")

    try:
        config = load_config()
        handle_invocation(ScheduledInvocation(), config)
    except Exception as exc:
        logger.error("Sync failed: %s", exc, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
