"""Storage form of a follow and conversion to and from the domain model."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from twit.follow.domain import Follow

_TABLE_NAME = "follows"
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})\Z"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction = match.group(7)
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"offset out of range in {text!r}")
        offset = timedelta(hours=hours, minutes=minutes)
        tz = timezone(offset if zone[0] == "+" else -offset)
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def _format_rfc3339(moment: datetime, fractional: bool = False) -> str:
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if fractional and moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds()) // 60
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _string_attr(item: Mapping[str, Any], name: str) -> str:
    attr = item.get(name)
    if attr is None:
        return ""
    if "S" in attr:
        return attr["S"]
    if "N" in attr:
        return attr["N"]
    if attr.get("NULL"):
        return ""
    raise ValueError(f"attribute {name!r} cannot be read as a string: {attr!r}")


def _time_attr(item: Mapping[str, Any], name: str) -> datetime:
    attr = item.get(name)
    if attr is None or attr.get("NULL"):
        return _ZERO_TIME
    if "S" in attr:
        return _parse_rfc3339(attr["S"])
    if "N" in attr:
        return datetime.fromtimestamp(float(attr["N"]), tz=timezone.utc)
    raise ValueError(f"attribute {name!r} cannot be read as a time: {attr!r}")


@dataclass
class FollowDAO:
    """A follow as stored in the follows table."""

    id: str = ""
    follower_id: str = ""
    followed_id: str = ""
    created_at: datetime = _ZERO_TIME

    def table_name(self) -> str:
        """Name of the table that holds follows."""
        return _TABLE_NAME

    def to_item(self) -> dict[str, dict[str, str]]:
        """Return the typed attribute map written to the table."""
        return {
            "id": {"S": self.id},
            "follower_id": {"S": self.follower_id},
            "followed_id": {"S": self.followed_id},
            "created_at": {"S": _format_rfc3339(self.created_at, fractional=True)},
        }

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> FollowDAO:
        """Read a follow from a typed attribute map; absent attributes stay empty."""
        return cls(
            id=_string_attr(item, "id"),
            follower_id=_string_attr(item, "follower_id"),
            followed_id=_string_attr(item, "followed_id"),
            created_at=_time_attr(item, "created_at"),
        )


def to_follow_model(dao: FollowDAO) -> Follow:
    """Convert a stored follow to the domain model."""
    return Follow(
        id=dao.id,
        follower_id=dao.follower_id,
        followed_id=dao.followed_id,
        created_at=_format_rfc3339(dao.created_at),
    )


def to_follow_dao_model(follow: Follow) -> FollowDAO:
    """Convert a domain follow to its stored form.

    An empty or unparsable creation time is replaced by the current UTC time.
    """
    created_at = datetime.now(timezone.utc)
    if follow.created_at:
        try:
            created_at = _parse_rfc3339(follow.created_at)
        except ValueError:
            pass
    return FollowDAO(
        id=follow.id,
        follower_id=follow.follower_id,
        followed_id=follow.followed_id,
        created_at=created_at,
    )