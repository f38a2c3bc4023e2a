"""Group membership synchronizer and invocation responder.

One invocation lists the Okta groups, fetches the members of every group
named in the target set, flattens them into (email, group) records and,
depending on how it was invoked, persists and/or returns the JSON result.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from scripts.groupsync.config import SyncConfig
from scripts.groupsync.models import Group, MembershipRecord
from scripts.groupsync.okta import OktaApiError, OktaClient
from scripts.groupsync.storage import BlobStore, StorageError

logger = logging.getLogger("groupsync.sync")

FAVICON_PATH = "/favicon.ico"
JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class DirectInvocation:
    """Triggered by an inbound request; the caller expects a response."""

    path: str = "/"


@dataclass(frozen=True)
class ScheduledInvocation:
    """Triggered by a schedule; only side effects and logs."""


InvocationMode = Union[DirectInvocation, ScheduledInvocation]


@dataclass(frozen=True)
class Response:
    status_code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)


def serialize_records(records: Iterable[MembershipRecord]) -> str:
    """Render records as a pretty-printed JSON array, order preserved."""
    return json.dumps([r.to_dict() for r in records], indent=2)


def error_response(status_code: int, error) -> Response:
    return Response(status_code, json.dumps({"error": error}), dict(JSON_HEADERS))


class GroupMembershipSynchronizer:
    """Flattens the configured Okta groups into membership records."""

    def __init__(
        self,
        config: SyncConfig,
        client: Optional[OktaClient] = None,
        store: Optional[BlobStore] = None,
    ) -> None:
        self.config = config
        self.client = client or OktaClient(config.okta)
        self._store = store

    @property
    def store(self) -> BlobStore:
        if self._store is None:
            self._store = BlobStore(self.config.storage)
        return self._store

    def resolve_memberships(self, groups: list[Group]) -> list[MembershipRecord]:
        """Fetch members for every (group, target) name match.

        A failed member fetch is logged and skipped; later groups are still
        processed. Duplicate target names yield duplicate records.
        """
        records: list[MembershipRecord] = []
        for group in groups:
            for target in self.config.target_groups:
                if group.name != target:
                    continue
                try:
                    users = self.client.list_group_users(group)
                except OktaApiError as exc:
                    logger.warning(
                        "Error fetching user information for group %s: %s",
                        target,
                        exc,
                        extra={"group": target, "status_code": exc.status_code},
                    )
                    continue
                records.extend(MembershipRecord(email=u.email, group=target) for u in users)
        return records

    def sync(self) -> list[MembershipRecord]:
        """List groups and resolve memberships. Raises OktaApiError if listing fails."""
        groups = self.client.list_groups()
        return self.resolve_memberships(groups)

    def should_persist(self, mode: InvocationMode) -> bool:
        return isinstance(mode, ScheduledInvocation) or self.config.store_on_request

    def persist(self, payload: str) -> None:
        self.store.put_json(self.config.storage.object_name, payload)

    def run(self, mode: InvocationMode) -> Optional[Response]:
        """Run one invocation. Returns a Response for direct invocations, else None."""
        mode_name = "scheduled" if isinstance(mode, ScheduledInvocation) else "direct"
        started = time.monotonic()

        try:
            records = self.sync()
        except OktaApiError as exc:
            logger.error(
                "Error fetching groups: %s",
                json.dumps(exc.body, default=str),
                extra={"mode": mode_name, "status_code": exc.status_code},
            )
            if isinstance(mode, DirectInvocation):
                return error_response(exc.status_code, exc.body)
            return None

        payload = serialize_records(records)

        if self.should_persist(mode):
            try:
                self.persist(payload)
            except StorageError as exc:
                logger.error("Persisting sync output failed: %s", exc, extra={"mode": mode_name})
                if isinstance(mode, DirectInvocation):
                    return error_response(500, str(exc))
                raise

        logger.info(
            "Sync complete",
            extra={
                "mode": mode_name,
                "records": len(records),
                "duration_s": round(time.monotonic() - started, 3),
            },
        )

        if isinstance(mode, DirectInvocation):
            return Response(200, payload, dict(JSON_HEADERS))
        return None


def handle_invocation(
    mode: InvocationMode,
    config: SyncConfig,
    client: Optional[OktaClient] = None,
    store: Optional[BlobStore] = None,
) -> Optional[Response]:
    """Entry point shared by every trigger surface."""
    if isinstance(mode, DirectInvocation) and mode.path == FAVICON_PATH:
        return Response(204)
    return GroupMembershipSynchronizer(config, client=client, store=store).run(mode)
