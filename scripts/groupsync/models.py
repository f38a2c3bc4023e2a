"""Typed records for Okta groups, users and the flattened membership output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class PayloadError(ValueError):
    """A provider record is missing a field the sync depends on."""


def _dig(payload: Any, *path: str) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise PayloadError(f"missing field {'.'.join(path)!r}")
        node = node[key]
    return node


def _required_str(payload: Any, *path: str) -> str:
    value = _dig(payload, *path)
    if not isinstance(value, str) or not value:
        raise PayloadError(f"field {'.'.join(path)!r} must be a non-empty string")
    return value


@dataclass(frozen=True)
class Group:
    name: str
    users_href: str
    id: Optional[str] = None

    @classmethod
    def from_api(cls, payload: dict) -> "Group":
        return cls(
            name=_required_str(payload, "profile", "name"),
            users_href=_required_str(payload, "_links", "users", "href"),
            id=payload.get("id"),
        )


@dataclass(frozen=True)
class User:
    email: str
    id: Optional[str] = None
    login: Optional[str] = None

    @classmethod
    def from_api(cls, payload: dict) -> "User":
        profile = payload.get("profile") if isinstance(payload, dict) else None
        return cls(
            email=_required_str(payload, "profile", "email"),
            id=payload.get("id"),
            login=profile.get("login"),
        )


@dataclass(frozen=True)
class MembershipRecord:
    email: str
    group: str

    def to_dict(self) -> dict[str, str]:
        return {"email": self.email, "group": self.group}
