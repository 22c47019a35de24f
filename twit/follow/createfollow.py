"""Use case: one user starts following another."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from twit.follow.domain import Follow
from twit.follow.repository import FollowNotFoundError

_ID_PREFIX = "flw-"


class SelfFollowError(ValueError):
    """Raised when a user tries to follow themselves."""

    def __init__(self) -> None:
        super().__init__("un usuario no puede seguirse a sí mismo")


class FollowAlreadyExistsError(ValueError):
    """Raised when the follow being created is already stored."""

    def __init__(self) -> None:
        super().__init__("el follow ya existe")


class FollowCreator(Protocol):
    """Service operations the use case relies on."""

    def create(self, follow: Follow) -> None: ...

    def get(self, follow_id: str) -> Follow: ...


def _is_not_found(exc: Exception) -> bool:
    return isinstance(exc, FollowNotFoundError) or "not found" in str(exc)


class CreateFollowUseCase:
    """Validates and records a new follow."""

    def __init__(self, service: FollowCreator, logger: logging.Logger | None = None) -> None:
        self._service = service
        self._logger = logger or logging.getLogger(__name__)

    def create_follow(self, follow: Follow) -> None:
        """Create ``follow``, giving it its canonical ID and a creation time if missing."""
        if follow.follower_id == follow.followed_id:
            raise SelfFollowError()

        created_at = follow.created_at or datetime.now(timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
        follow = replace(
            follow,
            created_at=created_at,
            id=f"{_ID_PREFIX}{follow.follower_id}-{follow.followed_id}",
        )

        existing = Follow()
        try:
            existing = self._service.get(follow.id)
        except Exception as exc:
            if not _is_not_found(exc):
                self._logger.error(
                    "Error al obtener follow con ID %s. Error: %s", follow.id, exc
                )
                raise

        if existing is not None and existing.id:
            error = FollowAlreadyExistsError()
            self._logger.error("Error al crear follow: %s", error)
            raise error

        self._logger.info(
            "Creando nuevo follow follower=%s followed=%s",
            follow.follower_id, follow.followed_id,
        )
        try:
            self._service.create(follow)
        except Exception as exc:
            self._logger.error("Error al persistir follow: %s", exc)
            raise
        self._logger.info(
            "Follow creado exitosamente follower=%s followed=%s",
            follow.follower_id, follow.followed_id,
        )