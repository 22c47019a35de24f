"""Queue access: sending, receiving and consuming SQS messages."""

from __future__ import annotations

import dataclasses
import json
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Protocol

DEFAULT_MAX_MESSAGES = 10
DEFAULT_WAIT_TIME = 20
RETRY_DELAY_SECONDS = 5.0

Message = Mapping[str, Any]
MessageHandler = Callable[[list[Message]], None]


class QueueService(Protocol):
    """The queue operations the client needs."""

    def send_message(self, **kwargs: Any) -> Any: ...

    def receive_message(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def delete_message(self, **kwargs: Any) -> Any: ...


class QueueError(Exception):
    """Raised when a payload cannot be encoded or the queue service fails."""


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_payload(payload: Any) -> str:
    """Encode a payload as compact JSON; objects with ``to_dict`` use it."""
    return json.dumps(
        payload, default=_json_default, ensure_ascii=False, separators=(",", ":")
    )


class SQSClient:
    """Thin wrapper over an SQS service client that encodes and logs."""

    def __init__(self, client: QueueService, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    def publish(self, queue_url: str, payload: Any) -> None:
        """Encode ``payload`` as JSON and send it to ``queue_url``."""
        self._logger.debug("Preparando envío de mensaje a SQS queue_url=%s", queue_url)
        try:
            body = encode_payload(payload)
        except (TypeError, ValueError) as exc:
            self._logger.error("Error serializando payload para SQS: %s", exc)
            raise QueueError(f"error serializando payload: {exc}") from exc
        try:
            self._client.send_message(QueueUrl=queue_url, MessageBody=body)
        except Exception as exc:
            self._logger.error("Error enviando mensaje a SQS queue_url=%s: %s", queue_url, exc)
            raise QueueError(f"error enviando mensaje a SQS: {exc}") from exc
        self._logger.debug("Mensaje enviado a SQS exitosamente queue_url=%s", queue_url)

    def send(self, queue_url: str, payload: Any) -> None:
        """Same as :meth:`publish`."""
        self.publish(queue_url, payload)

    def receive_messages(
        self, queue_url: str, max_messages: int, wait_time_seconds: int
    ) -> list[Message]:
        """Long-poll ``queue_url`` for up to ``max_messages`` messages."""
        self._logger.debug(
            "Recibiendo mensajes de SQS queue_url=%s max=%d wait=%d",
            queue_url, max_messages, wait_time_seconds,
        )
        try:
            result = self._client.receive_message(
                QueueUrl=queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=wait_time_seconds,
            )
        except Exception as exc:
            self._logger.error("Error recibiendo mensajes de SQS queue_url=%s: %s", queue_url, exc)
            raise QueueError(f"error recibiendo mensajes de SQS: {exc}") from exc
        messages = list((result or {}).get("Messages") or [])
        self._logger.debug("Mensajes recibidos de SQS queue_url=%s count=%d", queue_url, len(messages))
        return messages

    def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        """Remove a handled message from ``queue_url``."""
        self._logger.debug(
            "Eliminando mensaje de SQS queue_url=%s receipt_handle=%s", queue_url, receipt_handle
        )
        try:
            self._client.delete_message(QueueUrl=queue_url, ReceiptHandle=receipt_handle)
        except Exception as exc:
            self._logger.error(
                "Error eliminando mensaje de SQS queue_url=%s receipt_handle=%s: %s",
                queue_url, receipt_handle, exc,
            )
            raise QueueError(f"error eliminando mensaje de SQS: {exc}") from exc
        self._logger.debug("Mensaje eliminado de SQS exitosamente receipt_handle=%s", receipt_handle)


class Adapter:
    """An SQS client together with the queue URLs the application uses."""

    def __init__(
        self,
        client: SQSClient,
        orchestrate_queue: str = "",
        update_queue: str = "",
        process_queue: str = "",
        populate_queue: str = "",
        rebuild_queue: str = "",
    ) -> None:
        self.client = client
        self.orchestrate_queue = orchestrate_queue
        self.update_queue = update_queue
        self.process_queue = process_queue
        self.populate_queue = populate_queue
        self.rebuild_queue = rebuild_queue

    def send(self, queue_url: str, payload: Any) -> None:
        """Send ``payload`` as JSON to ``queue_url``."""
        self.client.send(queue_url, payload)


class Consumer:
    """Polls one queue and hands each batch to a handler."""

    def __init__(
        self,
        adapter: Adapter,
        queue_url: str,
        handler: MessageHandler,
        logger: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self.queue_url = queue_url
        self._handler = handler
        self._logger = logger or logging.getLogger(__name__)
        self.max_messages = DEFAULT_MAX_MESSAGES
        self.wait_time = DEFAULT_WAIT_TIME
        self.retry_delay = RETRY_DELAY_SECONDS

    def poll_once(self) -> int:
        """Receive one batch, handle it and delete it once handled.

        Returns how many messages the handler accepted; raises
        :class:`QueueError` when receiving fails.
        """
        messages = self._adapter.client.receive_messages(
            self.queue_url, self.max_messages, self.wait_time
        )
        if not messages:
            return 0
        try:
            self._handler(messages)
        except Exception as exc:
            self._logger.error("Error procesando mensajes queue_url=%s: %s", self.queue_url, exc)
            return 0
        for message in messages:
            try:
                self._adapter.client.delete_message(self.queue_url, message["ReceiptHandle"])
            except (QueueError, KeyError) as exc:
                self._logger.error(
                    "Error eliminando mensaje procesado queue_url=%s message_id=%s: %s",
                    self.queue_url, message.get("MessageId"), exc,
                )
        return len(messages)

    def start(self, stop_event: threading.Event) -> None:
        """Poll until ``stop_event`` is set, pausing after receive failures."""
        self._logger.info("Iniciando consumo de mensajes queue_url=%s", self.queue_url)
        while not stop_event.is_set():
            try:
                self.poll_once()
            except QueueError as exc:
                self._logger.error("Error recibiendo mensajes queue_url=%s: %s", self.queue_url, exc)
                stop_event.wait(self.retry_delay)
        self._logger.info("Deteniendo consumo de mensajes queue_url=%s", self.queue_url)


class PopulateTimelineCachePublisher:
    """Queues a timeline so that the cache is filled with it."""

    def __init__(self, adapter: Adapter, queue_url: str, logger: logging.Logger | None = None) -> None:
        self._adapter = adapter
        self._queue_url = queue_url
        self._logger = logger or logging.getLogger(__name__)

    def publish(self, timeline: Any) -> None:
        """Send ``timeline`` to the populate-cache queue."""
        try:
            self._adapter.send(self._queue_url, timeline)
        except Exception as exc:
            self._logger.error("Error publicando timeline en cola: %s", exc)
            raise


class RebuildTimelinePublisher:
    """Queues a request to rebuild one user's timeline."""

    def __init__(self, adapter: Adapter, queue_url: str, logger: logging.Logger | None = None) -> None:
        self._adapter = adapter
        self._queue_url = queue_url
        self._logger = logger or logging.getLogger(__name__)

    def publish(self, user_id: str) -> None:
        """Send a rebuild request for ``user_id``.

        The request is a JSON document sent as a JSON string.
        """
        payload = json.dumps({"user_id": user_id}, ensure_ascii=False, separators=(",", ":"))
        try:
            self._adapter.send(self._queue_url, payload)
        except Exception as exc:
            self._logger.error("Error publicando solicitud de reconstrucción: %s", exc)
            raise