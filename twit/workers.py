"""Message handling for the worker that processes new follows."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from twit.adapters.sns import SNSMessage
from twit.follow.domain import FollowCreatedEvent


class FollowProcessor(Protocol):
    """Handles one follow-created event."""

    def process_new_follow(self, follow_event: FollowCreatedEvent) -> None: ...


def parse_follow_message(body: str | bytes) -> FollowCreatedEvent:
    """Unwrap a follow-created event from a notification delivered to a queue.

    Raises ValueError when the envelope or the event inside it is malformed.
    """
    envelope = SNSMessage.from_json(body)
    try:
        return FollowCreatedEvent.from_dict(json.loads(envelope.message))
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


def make_follow_handler(
    use_case: FollowProcessor, logger: logging.Logger | None = None
) -> Callable[[list[Mapping[str, Any]]], None]:
    """Build a batch handler that processes each message, skipping failures."""
    log = logger or logging.getLogger(__name__)

    def handle(messages: list[Mapping[str, Any]]) -> None:
        for message in messages:
            log.info("Procesando mensaje SNS messageId=%s", message.get("MessageId"))
            body = message.get("Body", "")
            log.info("Body del mensaje: %s", body)
            try:
                event = parse_follow_message(body)
            except ValueError as exc:
                log.error("Error al deserializar mensaje: %s", exc)
                continue
            follow = event.follow
            try:
                use_case.process_new_follow(event)
            except Exception as exc:
                log.error(
                    "Error al procesar follow creado followerId=%s followedId=%s: %s",
                    follow.follower_id, follow.followed_id, exc,
                )
                continue
            log.info(
                "Follow procesado correctamente followerId=%s followedId=%s",
                follow.follower_id, follow.followed_id,
            )

    return handle