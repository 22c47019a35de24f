"""Key-value cache backed by Redis."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import redis

DEFAULT_TTL = timedelta(hours=1)
_CONNECT_TIMEOUT_SECONDS = 5


class CacheClient:
    """Byte-string cache with per-key expiry."""

    def __init__(self, client: Any, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def connect(
        cls,
        host: str,
        port: str | int,
        password: str | None = None,
        logger: logging.Logger | None = None,
    ) -> CacheClient:
        """Open a connection to database 0 and check it with a ping."""
        log = logger or logging.getLogger(__name__)
        client = redis.Redis(
            host=host,
            port=int(port),
            password=password or None,
            db=0,
            socket_connect_timeout=_CONNECT_TIMEOUT_SECONDS,
        )
        try:
            client.ping()
        except redis.RedisError as exc:
            log.error("Error conectando a Redis host=%s port=%s: %s", host, port, exc)
            raise
        log.info("Conexión a Redis establecida correctamente host=%s port=%s", host, port)
        return cls(client, log)

    def get(self, key: str) -> bytes | None:
        """Value stored under ``key``, or None if there is none."""
        try:
            value = self._client.get(key)
        except redis.RedisError as exc:
            self._logger.error("Error obteniendo valor de Redis key=%s: %s", key, exc)
            raise
        if value is None:
            return None
        return value.encode() if isinstance(value, str) else bytes(value)

    def set(self, key: str, value: bytes, ttl: timedelta | float | None = DEFAULT_TTL) -> None:
        """Store ``value`` under ``key``; a zero or missing ``ttl`` means no expiry."""
        if isinstance(ttl, timedelta):
            millis = int(ttl.total_seconds() * 1000)
        else:
            millis = int((ttl or 0) * 1000)
        options: dict[str, int] = {}
        if millis > 0:
            if millis % 1000:
                options["px"] = millis
            else:
                options["ex"] = millis // 1000
        try:
            self._client.set(key, value, **options)
        except redis.RedisError as exc:
            self._logger.error("Error estableciendo valor en Redis key=%s: %s", key, exc)
            raise

    def delete(self, *args: str) -> None:
        """Remove the given keys."""
        try:
            self._client.delete(*args)
        except redis.RedisError as exc:
            self._logger.error("Error eliminando clave(s) de Redis keys=%s: %s", list(args), exc)
            raise