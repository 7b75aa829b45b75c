"""
Message Encoder — builds the queue-table row for one send.

Row layout:
  id             ordered-time UUID (GUID column)
  human_id       canonical UUID string
  published_at   ordering timestamp, 100 µs units
  body           message body, verbatim
  headers        JSON object
  properties     JSON object
  priority       nullable small int
  queue          destination queue name
  delayed_until  epoch seconds, only when a delay was requested
  time_to_live   epoch seconds of expiry, only when a TTL was requested
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import BigInteger, SmallInteger, String, Text, Uuid
from sqlalchemy.types import TypeEngine

from models.schemas import ResolvedMessage, TableDestination
from producer.identifiers import Identifier, from_ordered_bytes

FIELD_TYPES: dict[str, TypeEngine] = {
    "id": Uuid(),
    "human_id": String(36),
    "published_at": BigInteger(),
    "body": Text(),
    "headers": Text(),
    "properties": Text(),
    "priority": SmallInteger(),
    "queue": String(255),
    "delayed_until": BigInteger(),
    "time_to_live": BigInteger(),
}


@dataclass(frozen=True)
class QueueRow:
    id: bytes
    human_id: str
    published_at: int
    body: str
    headers: str
    properties: str
    priority: Optional[int]
    queue: str
    delayed_until: Optional[int] = None
    time_to_live: Optional[int] = None

    @property
    def time_uuid(self) -> uuid.UUID:
        """The standard version-1 UUID behind ``id``."""
        return from_ordered_bytes(self.id)

    def to_values(self) -> dict[str, Any]:
        """Insert field values; absent deadlines are left out entirely."""
        values: dict[str, Any] = {
            # GUID column holds the ordered layout so the index sorts by time.
            "id": uuid.UUID(bytes=self.id),
            "human_id": self.human_id,
            "published_at": self.published_at,
            "body": self.body,
            "headers": self.headers,
            "properties": self.properties,
            "priority": self.priority,
            "queue": self.queue,
        }
        if self.delayed_until is not None:
            values["delayed_until"] = self.delayed_until
        if self.time_to_live is not None:
            values["time_to_live"] = self.time_to_live
        return values


def encode(
    message: ResolvedMessage,
    destination: TableDestination,
    identifier: Identifier,
    published_at: int,
    delayed_until: Optional[int] = None,
    expires_at: Optional[int] = None,
) -> QueueRow:
    return QueueRow(
        id=identifier.binary,
        human_id=identifier.human,
        published_at=published_at,
        body=message.body,
        headers=json.dumps(message.headers),
        properties=json.dumps(message.properties),
        priority=message.priority,
        queue=destination.queue_name,
        delayed_until=delayed_until,
        time_to_live=expires_at,
    )
