"""Configuration via environment variables (and an optional .env file).

The API token may be a plain value or a cloud secret reference
(aws-secret://..., gcp-secret://...), see scripts.groupsync.secrets.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from scripts.groupsync.secrets import resolve_secret

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class OktaConfig:
    base_url: str
    api_token: str
    request_timeout: float = 30.0


@dataclass(frozen=True)
class StorageConfig:
    bucket: Optional[str] = None
    object_name: str = "okta-groups.json"
    endpoint_url: Optional[str] = None  # None = plain AWS S3
    region: str = "us-east-1"


@dataclass(frozen=True)
class SchedulerConfig:
    cron: str = "0 * * * *"
    misfire_grace_time: int = 300


@dataclass(frozen=True)
class SyncConfig:
    okta: OktaConfig
    target_groups: tuple[str, ...]
    store_on_request: bool = False
    storage: StorageConfig = field(default_factory=StorageConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)


def normalize_base_url(value: str) -> str:
    """Accept either a bare Okta host ("acme.okta.com") or a full URL."""
    value = value.strip().rstrip("/")
    if "://" not in value:
        value = f"https://{value}"
    return value


def parse_group_names(raw: str) -> tuple[str, ...]:
    """Parse OKTA_GROUPS as a JSON array or a comma-separated list.

    Order and duplicates are kept as given.
    """
    raw = raw.strip()
    if raw.startswith("["):
        try:
            names = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"OKTA_GROUPS is not valid JSON: {exc}") from exc
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError("OKTA_GROUPS must be a JSON array of strings")
        return tuple(names)
    return tuple(s.strip() for s in raw.split(",") if s.strip())


def _env_flag(*names: str) -> bool:
    for name in names:
        value = os.environ.get(name)
        if value is not None:
            return value.strip().lower() in _TRUE_VALUES
    return False


def _env_first(*names: str, default: str = "") -> str:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return default


def load_config() -> SyncConfig:
    """Load configuration from environment variables.

    Raises ValueError when a required value is missing.
    """
    load_dotenv()

    base_url = os.environ.get("OKTA_URL", "")
    if not base_url:
        raise ValueError("OKTA_URL environment variable is required")

    token_raw = _env_first("OKTA_API_TOKEN", "API_TOKEN")
    if not token_raw:
        raise ValueError("OKTA_API_TOKEN environment variable is required")

    target_groups = parse_group_names(os.environ.get("OKTA_GROUPS", ""))
    if not target_groups:
        raise ValueError("OKTA_GROUPS must name at least one group")

    okta = OktaConfig(
        base_url=normalize_base_url(base_url),
        api_token=resolve_secret(token_raw),
        request_timeout=float(os.environ.get("OKTA_REQUEST_TIMEOUT", "30")),
    )

    storage = StorageConfig(
        bucket=os.environ.get("STORAGE_BUCKET") or None,
        object_name=_env_first(
            "STORAGE_OBJECT_NAME", "R2_FILENAME", default="okta-groups.json"
        ),
        endpoint_url=os.environ.get("STORAGE_ENDPOINT_URL") or None,
        region=os.environ.get("AWS_REGION", "us-east-1"),
    )

    scheduler = SchedulerConfig(
        cron=os.environ.get("SYNC_SCHEDULE", "0 * * * *"),
        misfire_grace_time=int(os.environ.get("SYNC_MISFIRE_GRACE_TIME", "300")),
    )

    return SyncConfig(
        okta=okta,
        target_groups=target_groups,
        store_on_request=_env_flag("STORE_ON_REQUEST", "STORE_R2"),
        storage=storage,
        scheduler=scheduler,
    )
