"""Use case: list followers and followed users."""

from __future__ import annotations

import logging
from typing import Protocol


class FollowLookup(Protocol):
    """Service operations the use case relies on."""

    def get_followers(self, followed_id: str) -> list[str] | None: ...

    def get_following(self, follower_id: str) -> list[str] | None: ...


class GetFollowUseCase:
    """Reads the follow graph around one user."""

    def __init__(self, service: FollowLookup, logger: logging.Logger | None = None) -> None:
        self._service = service
        self._logger = logger or logging.getLogger(__name__)

    def get_followers(self, user_id: str) -> list[str]:
        """IDs of the users following ``user_id``; never None."""
        self._logger.info("Obteniendo seguidores user_id=%s", user_id)
        try:
            followers = self._service.get_followers(user_id)
        except Exception as exc:
            self._logger.error("Error al obtener seguidores user_id=%s: %s", user_id, exc)
            raise
        followers = [] if followers is None else followers
        self._logger.debug("%d seguidores para user_id=%s", len(followers), user_id)
        return followers

    def get_following(self, user_id: str) -> list[str]:
        """IDs of the users ``user_id`` follows; never None."""
        self._logger.info("Obteniendo usuarios seguidos user_id=%s", user_id)
        try:
            following = self._service.get_following(user_id)
        except Exception as exc:
            self._logger.error(
                "Error al obtener usuarios seguidos user_id=%s: %s", user_id, exc
            )
            raise
        following = [] if following is None else following
        self._logger.debug("%d seguidos para user_id=%s", len(following), user_id)
        return following