"""Follow storage on a DynamoDB-style table client."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

from twit.follow.daos import FollowDAO, to_follow_dao_model, to_follow_model
from twit.follow.domain import Follow


class TableClient(Protocol):
    """The table operations the repository needs."""

    def get_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def put_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def query(self, **kwargs: Any) -> dict[str, Any]: ...


class FollowNotFoundError(LookupError):
    """Raised when no follow is stored under the requested ID."""

    def __init__(self, follow_id: str) -> None:
        super().__init__(f"follow with ID {follow_id} not found")
        self.follow_id = follow_id


class Repository:
    """Reads and writes follows in one table."""

    def __init__(
        self,
        client: TableClient,
        table_name: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._table_name = table_name
        self._logger = logger or logging.getLogger(__name__)

    def create(self, follow: Follow) -> None:
        """Store a follow, stamping the current time if it has none."""
        self._logger.debug(
            "Guardando follow id=%s follower=%s followed=%s table=%s",
            follow.id, follow.follower_id, follow.followed_id, self._table_name,
        )
        if not follow.created_at:
            now = datetime.now(timezone.utc)
            follow = replace(follow, created_at=now.strftime("%Y-%m-%dT%H:%M:%SZ"))

        item = to_follow_dao_model(follow).to_item()
        try:
            self._client.put_item(TableName=self._table_name, Item=item)
        except Exception as exc:
            self._logger.error(
                "Error al guardar follow id=%s table=%s: %s",
                follow.id, self._table_name, exc,
            )
            raise
        self._logger.debug("Follow guardado exitosamente id=%s", follow.id)

    def get(self, follow_id: str) -> Follow:
        """Fetch a follow by an ID of the form ``<prefix>-<follower>-<followed>``."""
        self._logger.debug("Obteniendo follow id=%s table=%s", follow_id, self._table_name)
        parts = follow_id.split("-")
        if len(parts) < 3:
            error = ValueError(f"formato de ID de follow inválido: {follow_id}")
            self._logger.error("Error al parsear ID de follow %s: %s", follow_id, error)
            raise error
        follower_id = parts[1]
        followed_id = "-".join(parts[2:])

        try:
            result = self._client.get_item(
                TableName=self._table_name,
                Key={
                    "follower_id": {"S": follower_id},
                    "followed_id": {"S": followed_id},
                },
            )
        except Exception as exc:
            self._logger.error("Error al obtener follow id=%s: %s", follow_id, exc)
            raise

        item = (result or {}).get("Item")
        if item is None:
            self._logger.warning("Follow no encontrado id=%s", follow_id)
            raise FollowNotFoundError(follow_id)

        try:
            dao = FollowDAO.from_item(item)
        except ValueError as exc:
            self._logger.error("Error al deserializar follow id=%s: %s", follow_id, exc)
            raise
        self._logger.debug("Follow obtenido exitosamente id=%s", dao.id)
        return to_follow_model(dao)

    def get_followers(self, followed_id: str) -> list[str]:
        """IDs of the users following ``followed_id``."""
        self._logger.debug("Obteniendo seguidores de %s", followed_id)
        return self._query_ids(
            index="followed_id-index",
            key_name="followed_id",
            placeholder=":followedID",
            key_value=followed_id,
            wanted="follower_id",
        )

    def get_following(self, follower_id: str) -> list[str]:
        """IDs of the users that ``follower_id`` follows."""
        self._logger.debug("Obteniendo usuarios seguidos por %s", follower_id)
        return self._query_ids(
            index="follower_id-index",
            key_name="follower_id",
            placeholder=":followerID",
            key_value=follower_id,
            wanted="followed_id",
        )

    def _query_ids(
        self, *, index: str, key_name: str, placeholder: str, key_value: str, wanted: str
    ) -> list[str]:
        try:
            result = self._client.query(
                TableName=self._table_name,
                IndexName=index,
                KeyConditionExpression=f"{key_name} = {placeholder}",
                ExpressionAttributeValues={placeholder: {"S": key_value}},
                ProjectionExpression=wanted,
            )
        except Exception as exc:
            self._logger.error("Error al consultar %s=%s: %s", key_name, key_value, exc)
            raise
        ids = [
            item[wanted]["S"]
            for item in (result or {}).get("Items") or []
            if wanted in item and "S" in item[wanted]
        ]
        self._logger.debug("%d resultados para %s=%s", len(ids), key_name, key_value)
        return ids