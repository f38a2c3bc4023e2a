"""Okta API client: group listing and group member listing."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from scripts.groupsync.config import OktaConfig
from scripts.groupsync.models import Group, PayloadError, User

logger = logging.getLogger("groupsync.okta")

GROUPS_PATH = "/api/v1/groups"


class OktaApiError(Exception):
    """Okta answered with a non-OK status (or could not be reached)."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"Okta API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class InvalidResponseError(OktaApiError):
    """Okta answered OK but the payload does not have the expected shape."""

    def __init__(self, message: str) -> None:
        super().__init__(502, {"errorSummary": message})


def _response_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _next_link(resp: requests.Response) -> str:
    link = resp.headers.get("Link", "")
    for part in link.split(","):
        if 'rel="next"' in part:
            return part.split(";")[0].strip().strip("<>")
    return ""


class OktaClient:
    def __init__(self, config: OktaConfig, session: Optional[requests.Session] = None) -> None:
        self._base = config.base_url.rstrip("/")
        self._timeout = config.request_timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"SSWS {config.api_token}",
        })

    def _get_all(self, url: str) -> list[dict]:
        """GET a collection endpoint, following Link rel="next" pages."""
        items: list[dict] = []
        seen: set[str] = set()
        while url and url not in seen:
            seen.add(url)
            try:
                resp = self._session.get(url, timeout=self._timeout)
            except requests.RequestException as exc:
                raise OktaApiError(502, {"errorSummary": str(exc)}) from exc

            if not resp.ok:
                raise OktaApiError(resp.status_code, _response_body(resp))

            try:
                data = resp.json()
            except ValueError as exc:
                raise InvalidResponseError(f"non-JSON response from {url}") from exc
            if not isinstance(data, list):
                raise InvalidResponseError(f"expected a JSON array from {url}")
            items.extend(data)
            url = _next_link(resp)
        if url:
            logger.warning("Stopping pagination at repeated next link %s", url)
        return items

    def list_groups(self) -> list[Group]:
        """Return every group in provider order."""
        payload = self._get_all(f"{self._base}{GROUPS_PATH}")
        try:
            groups = [Group.from_api(g) for g in payload]
        except PayloadError as exc:
            raise InvalidResponseError(f"group record: {exc}") from exc
        logger.debug("Listed %d groups", len(groups), extra={"records": len(groups)})
        return groups

    def list_group_users(self, group: Group) -> list[User]:
        """Return the members of a group via its users link."""
        payload = self._get_all(group.users_href)
        try:
            return [User.from_api(u) for u in payload]
        except PayloadError as exc:
            raise InvalidResponseError(f"user record in {group.name}: {exc}") from exc
