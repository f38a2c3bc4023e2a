"""Shared fixtures: fake Okta HTTP session, fake S3 client, config factory."""
import json
import logging
from typing import Optional
from unittest.mock import MagicMock

import pytest

from scripts.groupsync.config import OktaConfig, StorageConfig, SyncConfig

OKTA_BASE = "https://acme.okta.com"
GROUPS_URL = f"{OKTA_BASE}/api/v1/groups"

_ENV_VARS = (
    "OKTA_URL", "OKTA_API_TOKEN", "API_TOKEN", "OKTA_GROUPS",
    "STORE_ON_REQUEST", "STORE_R2", "STORAGE_BUCKET", "STORAGE_OBJECT_NAME",
    "R2_FILENAME", "STORAGE_ENDPOINT_URL", "OKTA_REQUEST_TIMEOUT",
    "SYNC_SCHEDULE", "SYNC_MISFIRE_GRACE_TIME", "AWS_REGION", "GCP_PROJECT_ID",
)


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, headers: Optional[dict] = None, text: Optional[str] = None):
        self._payload = payload
        self.status_code = status_code
        self.headers = headers or {}
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Routes GET requests to canned responses keyed by URL."""

    def __init__(self, routes: Optional[dict] = None):
        self.headers: dict = {}
        self.routes = dict(routes or {})
        self.calls: list[str] = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        return route


def okta_group(name: str, group_id: str) -> dict:
    return {
        "id": group_id,
        "profile": {"name": name, "description": None},
        "_links": {"users": {"href": f"{GROUPS_URL}/{group_id}/users"}},
    }


def okta_user(email: str) -> dict:
    return {"id": email.split("@")[0], "profile": {"email": email, "login": email}}


def make_config(**overrides) -> SyncConfig:
    base = dict(
        okta=OktaConfig(base_url=OKTA_BASE, api_token="token-123"),
        target_groups=("Engineers",),
        store_on_request=False,
        storage=StorageConfig(bucket="exports", object_name="groups.json"),
    )
    base.update(overrides)
    return SyncConfig(**base)


@pytest.fixture(autouse=True)
def _reset_groupsync_logger():
    """configure_logging() detaches the logger from root; undo it so caplog works."""
    yield
    log = logging.getLogger("groupsync")
    log.handlers.clear()
    log.propagate = True
    log.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep load_dotenv() from reading a developer's .env
    monkeypatch.setattr("scripts.groupsync.config.load_dotenv", lambda: False)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def engineers_and_sales():
    """Two groups, one user each, as served by Okta."""
    return FakeSession({
        GROUPS_URL: FakeResponse([okta_group("Engineers", "g1"), okta_group("Sales", "g2")]),
        f"{GROUPS_URL}/g1/users": FakeResponse([okta_user("a@x.com")]),
        f"{GROUPS_URL}/g2/users": FakeResponse([okta_user("b@x.com")]),
    })


@pytest.fixture
def s3_client():
    return MagicMock(name="s3")
