"""AWS Lambda handler for the group membership sync.

Deployed behind a Lambda function URL (direct invocations) and an
EventBridge schedule rule (scheduled invocations).

Event formats:
  function URL / API Gateway v2:  {"rawPath": "/", "requestContext": {...}}
  API Gateway v1:                 {"path": "/", "httpMethod": "GET", ...}
  EventBridge schedule:           {"source": "aws.events", "detail-type": "Scheduled Event"}
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from scripts.groupsync.config import SyncConfig, load_config
from scripts.groupsync.logging_config import configure_logging
from scripts.groupsync.synchronizer import (
    FAVICON_PATH,
    DirectInvocation,
    InvocationMode,
    Response,
    ScheduledInvocation,
    handle_invocation,
)

logger = logging.getLogger("groupsync.lambda")


def invocation_mode(event: dict) -> InvocationMode:
    """Map a Lambda event onto a direct or scheduled invocation."""
    if event.get("detail-type") == "Scheduled Event" or event.get("source") == "aws.events":
        return ScheduledInvocation()
    path = event.get("rawPath") or event.get("path") or "/"
    return DirectInvocation(path=path)


_config: Optional[SyncConfig] = None


def get_config() -> SyncConfig:
    """Load configuration once per warm container."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _proxy_response(response: Response) -> dict:
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.body,
    }


def handler(event: dict, context) -> dict | None:
    """Lambda entry point."""
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))

    mode = invocation_mode(event or {})
    if isinstance(mode, DirectInvocation) and mode.path == FAVICON_PATH:
        return _proxy_response(Response(204))

    logger.info("Lambda invoked (%s)", type(mode).__name__)

    try:
        response = handle_invocation(mode, get_config())
    except Exception as exc:
        logger.error("Sync failed: %s", exc, exc_info=True)
        if isinstance(mode, ScheduledInvocation):
            raise
        return {
            "statusCode": 500,
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps({"error": str(exc)}),
        }

    if response is None:
        return None
    return _proxy_response(response)
