"""Follow relationships and the events raised when they change."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

RESOURCE_TYPE = "FOLLOW"


def _str_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")
    return data


@dataclass
class Follow:
    """One user following another."""

    id: str = ""
    follower_id: str = ""
    followed_id: str = ""
    created_at: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the JSON form of the follow."""
        return {
            "id": self.id,
            "followerId": self.follower_id,
            "followedId": self.followed_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Follow:
        """Build a follow from its JSON form; missing fields stay empty."""
        data = _require_mapping(data)
        return cls(
            id=_str_field(data, "id"),
            follower_id=_str_field(data, "followerId"),
            followed_id=_str_field(data, "followedId"),
            created_at=_str_field(data, "createdAt"),
        )


class EventType(str, enum.Enum):
    """Kinds of follow events."""

    FOLLOW_CREATED = "FOLLOW_CREATED"

    def __str__(self) -> str:
        return self.value


@dataclass
class Event:
    """A follow event as handed to a publisher."""

    type: EventType
    follow: Follow
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class FollowCreatedEvent:
    """The follow-created event as carried inside a notification."""

    type: str = ""
    follow: Follow = field(default_factory=Follow)
    metadata: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the event."""
        return {
            "Type": self.type,
            "Follow": self.follow.to_dict(),
            "Metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FollowCreatedEvent:
        """Build an event from its JSON form; missing fields stay empty."""
        data = _require_mapping(data)
        raw_follow = data.get("Follow")
        follow = Follow() if raw_follow is None else Follow.from_dict(raw_follow)
        return cls(
            type=_str_field(data, "Type"),
            follow=follow,
            metadata=data.get("Metadata"),
        )