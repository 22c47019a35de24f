"""Follow service: storage plus event publication."""

from __future__ import annotations

import logging
from typing import Protocol

from twit.follow.domain import Event, EventType, Follow

_TARGET = "follow_service"


class FollowRepository(Protocol):
    """Storage operations the service relies on."""

    def create(self, follow: Follow) -> None: ...

    def get(self, follow_id: str) -> Follow: ...

    def get_followers(self, followed_id: str) -> list[str]: ...

    def get_following(self, follower_id: str) -> list[str]: ...


class EventPublisher(Protocol):
    """Publishes follow events."""

    def publish(self, event: Event) -> None: ...


class FollowService:
    """Creates and looks up follows, announcing new ones to a publisher."""

    def __init__(
        self,
        repository: FollowRepository,
        publisher: EventPublisher,
        logger: logging.Logger,
    ) -> None:
        if logger is None:
            raise ValueError("logger cannot be nil")
        self._repository = repository
        self._publisher = publisher
        self._logger = logger.getChild(_TARGET)

    def create(self, follow: Follow) -> None:
        """Store a follow and publish a follow-created event for it."""
        self._logger.debug(
            "Servicio: Creando follow id=%s follower=%s followed=%s",
            follow.id, follow.follower_id, follow.followed_id,
        )
        try:
            self._repository.create(follow)
        except Exception as exc:
            self._logger.error("Error al crear follow id=%s: %s", follow.id, exc)
            raise
        try:
            self._publisher.publish(Event(type=EventType.FOLLOW_CREATED, follow=follow))
        except Exception as exc:
            self._logger.error(
                "Error publicando evento de follow creado id=%s: %s", follow.id, exc
            )
            raise

    def get(self, follow_id: str) -> Follow:
        """Fetch one follow by its ID."""
        self._logger.debug("Servicio: Obteniendo relacion de usuarios id=%s", follow_id)
        return self._repository.get(follow_id)

    def get_followers(self, followed_id: str) -> list[str]:
        """IDs of the users following ``followed_id``."""
        self._logger.debug("Servicio: Obteniendo seguidores de %s", followed_id)
        return self._repository.get_followers(followed_id)

    def get_following(self, follower_id: str) -> list[str]:
        """IDs of the users ``follower_id`` follows."""
        self._logger.debug("Servicio: Obteniendo usuarios seguidos por %s", follower_id)
        return self._repository.get_following(follower_id)

    def get_all_following(self, follower_id: str) -> list[str]:
        """IDs of every user ``follower_id`` follows."""
        self._logger.debug("Servicio: Obteniendo usuarios seguidos por %s", follower_id)
        return self._repository.get_following(follower_id)