"""Use case: after a new follow, queue the followed user's recent tweets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from twit.follow.domain import FollowCreatedEvent

_RECENT_TWEETS_LIMIT = 10


class FollowGraph(Protocol):
    """Follow lookups the use case relies on."""

    def get_followers(self, followed_id: str) -> list[str]: ...

    def get_following(self, follower_id: str) -> list[str]: ...


class TweetSearch(Protocol):
    """Tweet search the use case relies on; returns tweets and a cursor."""

    def search(self, options: Any) -> tuple[list[Any], str]: ...


class TimelineUpdatePublisher(Protocol):
    """Queues a tweet for insertion into a user's timeline."""

    def publish(self, tweet: Any, user_id: str) -> None: ...


class QueueSender(Protocol):
    """Anything that can send a payload to a queue."""

    def send(self, queue_url: str, payload: Any) -> None: ...


class ProcessFollowError(Exception):
    """Raised when a new follow cannot be processed."""


@dataclass(frozen=True)
class _SearchFilters:
    user_id: str | None = None


@dataclass(frozen=True)
class _SearchPagination:
    limit: int = 0
    offset: int = 0


@dataclass(frozen=True)
class _SearchOptions:
    filters: _SearchFilters = field(default_factory=_SearchFilters)
    pagination: _SearchPagination = field(default_factory=_SearchPagination)


class UpdateTimelinePublisher:
    """Sends timeline-update requests to a queue."""

    def __init__(
        self, client: QueueSender, queue_url: str, logger: logging.Logger | None = None
    ) -> None:
        self._client = client
        self._queue_url = queue_url
        self._logger = logger or logging.getLogger(__name__)

    def publish(self, tweet: Any, user_id: str) -> None:
        """Queue ``tweet`` for the timeline of ``user_id``."""
        self._client.send(self._queue_url, {"tweet": tweet, "user_id": user_id})


class ProcessNewFollowUseCase:
    """Reacts to follow-created events by queuing timeline updates."""

    def __init__(
        self,
        service: FollowGraph,
        logger: logging.Logger | None,
        tweet_service: TweetSearch,
        update_timeline_publisher: TimelineUpdatePublisher | None,
    ) -> None:
        self._service = service
        self._logger = logger or logging.getLogger(__name__)
        self._tweet_service = tweet_service
        self._publisher = update_timeline_publisher

    def process_new_follow(self, follow_event: FollowCreatedEvent) -> None:
        """Queue the followed user's latest tweets for timeline updates."""
        follow = follow_event.follow
        self._logger.info(
            "Procesando nuevo follow follower=%s followed=%s",
            follow.follower_id, follow.followed_id,
        )
        options = _SearchOptions(
            filters=_SearchFilters(user_id=follow.followed_id),
            pagination=_SearchPagination(limit=_RECENT_TWEETS_LIMIT, offset=0),
        )
        try:
            tweets, _cursor = self._tweet_service.search(options)
        except Exception as exc:
            self._logger.error(
                "Error al buscar tweets followed=%s: %s", follow.followed_id, exc
            )
            raise ProcessFollowError(f"error al buscar tweets: {exc}") from exc

        if self._publisher is None:
            self._logger.warning(
                "No se ha configurado publicador para actualización de timeline "
                "follower=%s followed=%s",
                follow.follower_id, follow.followed_id,
            )
            return

        for tweet in tweets or []:
            try:
                self._publisher.publish(tweet, follow.followed_id)
            except Exception as exc:
                self._logger.error(
                    "Error al publicar mensaje de actualización de timeline "
                    "follower=%s followed=%s: %s",
                    follow.follower_id, follow.followed_id, exc,
                )
                raise ProcessFollowError(f"error al publicar mensaje: {exc}") from exc
            self._logger.debug(
                "Mensaje enviado a cola de actualización de timeline follower=%s followed=%s",
                follow.follower_id, follow.followed_id,
            )

    def get_followers(self, user_id: str) -> list[str]:
        """IDs of the users following ``user_id``."""
        self._logger.info("Obteniendo seguidores user_id=%s", user_id)
        try:
            followers = self._service.get_followers(user_id)
        except Exception as exc:
            self._logger.error("Error al obtener seguidores user_id=%s: %s", user_id, exc)
            raise
        self._logger.debug("%d seguidores para user_id=%s", len(followers or []), user_id)
        return followers

    def get_following(self, user_id: str) -> list[str]:
        """IDs of the users ``user_id`` follows."""
        self._logger.info("Obteniendo usuarios seguidos user_id=%s", user_id)
        try:
            following = self._service.get_following(user_id)
        except Exception as exc:
            self._logger.error(
                "Error al obtener usuarios seguidos user_id=%s: %s", user_id, exc
            )
            raise
        self._logger.debug("%d seguidos para user_id=%s", len(following or []), user_id)
        return following