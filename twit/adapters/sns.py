"""Notification topic publishing and the notification envelope."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from twit.adapters.queue import encode_payload
from twit.follow.domain import RESOURCE_TYPE, Event, EventType, FollowCreatedEvent


class TopicService(Protocol):
    """The topic operation the client needs."""

    def publish(self, **kwargs: Any) -> Any: ...


class PublishError(Exception):
    """Raised when a message cannot be encoded or published."""


class SNSClient:
    """Publishes JSON messages with string attributes to a topic."""

    def __init__(self, client: TopicService, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    def publish_message(
        self,
        topic_arn: str,
        message: Any,
        message_attributes: Mapping[str, str] | None = None,
    ) -> None:
        """Encode ``message`` as JSON and publish it to ``topic_arn``."""
        self._logger.debug("Preparando publicación en SNS topic_arn=%s", topic_arn)
        try:
            body = encode_payload(message)
        except (TypeError, ValueError) as exc:
            self._logger.error("Error serializando mensaje para SNS topic_arn=%s: %s", topic_arn, exc)
            raise PublishError(f"error serializando mensaje para SNS: {exc}") from exc

        attributes = {
            key: {"DataType": "String", "StringValue": value}
            for key, value in (message_attributes or {}).items()
        }
        try:
            self._client.publish(TopicArn=topic_arn, Message=body, MessageAttributes=attributes)
        except Exception as exc:
            self._logger.error("Error publicando mensaje en SNS topic_arn=%s: %s", topic_arn, exc)
            raise PublishError(f"error publicando mensaje en SNS: {exc}") from exc
        self._logger.debug("Mensaje publicado en SNS exitosamente topic_arn=%s", topic_arn)


_ENVELOPE_FIELDS = {
    "type": "Type",
    "message_id": "MessageId",
    "topic_arn": "TopicArn",
    "subject": "Subject",
    "message": "Message",
    "timestamp": "Timestamp",
    "signature_version": "SignatureVersion",
    "signature": "Signature",
    "signing_cert_url": "SigningCertURL",
    "unsubscribe_url": "UnsubscribeURL",
}


@dataclass
class SNSMessage:
    """The envelope a topic wraps around a message delivered to a queue."""

    type: str = ""
    message_id: str = ""
    topic_arn: str = ""
    subject: str = ""
    message: str = ""
    timestamp: str = ""
    signature_version: str = ""
    signature: str = ""
    signing_cert_url: str = ""
    unsubscribe_url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SNSMessage:
        """Build an envelope from its JSON form; keys match case-insensitively."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        lowered = {key.lower(): value for key, value in data.items()}
        values: dict[str, str] = {}
        for attr, key in _ENVELOPE_FIELDS.items():
            value = data[key] if key in data else lowered.get(key.lower())
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
            values[attr] = value
        return cls(**values)

    @classmethod
    def from_json(cls, text: str | bytes) -> SNSMessage:
        """Parse an envelope from JSON text."""
        return cls.from_dict(json.loads(text))


class FollowSNSPublisher:
    """Announces follow events on the follows topic."""

    def __init__(self, client: SNSClient, topic_arn: str, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._topic_arn = topic_arn
        self._logger = (logger or logging.getLogger(__name__)).getChild("follow_sns_publisher")

    def publish(self, event: Event) -> None:
        """Publish ``event`` as a follow-created notification."""
        follow = event.follow
        self._logger.debug(
            "Publicando evento de follow creado en SNS follow_id=%s follower=%s followed=%s topic=%s",
            follow.id, follow.follower_id, follow.followed_id, self._topic_arn,
        )
        payload = FollowCreatedEvent(follow=follow).to_dict()
        attributes = {
            "event_type": str(EventType.FOLLOW_CREATED),
            "resource_type": RESOURCE_TYPE,
        }
        try:
            self._client.publish_message(self._topic_arn, payload, attributes)
        except PublishError as exc:
            self._logger.error(
                "Error publicando evento de follow creado en SNS follow_id=%s topic=%s: %s",
                follow.id, self._topic_arn, exc,
            )
            raise PublishError(f"error publicando evento de follow: {exc}") from exc
        self._logger.info("Evento de follow creado publicado exitosamente follow_id=%s", follow.id)