"""
Core data models for the tablequeue producer.
These are the types shared between the producer, the encoder and callers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


Scalar = Union[str, int, float, bool, None]

# Delays and TTLs are stored as given, without coercion. The producer
# rejects anything but a positive int at send time, bools and numeric
# strings included.
Milliseconds = Any


# ──────────────────────────────────────────────────────────────
#  Destination — a named queue inside the queue table
# ──────────────────────────────────────────────────────────────

class TableDestination(BaseModel):
    """A queue backed by rows of the queue table."""
    queue_name: str

    @field_validator("queue_name")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("queue name must not be empty")
        return v

    @property
    def topic_name(self) -> str:
        return self.queue_name

    def get_queue_name(self) -> str:
        return self.queue_name


# ──────────────────────────────────────────────────────────────
#  Message — caller-owned input to the producer
# ──────────────────────────────────────────────────────────────

class TableMessage(BaseModel):
    """
    A message to be stored as one queue-table row.

    Well-known header keys (correlation_id, message_id, timestamp, reply_to)
    live in ``headers`` and are exposed as properties below.
    """
    body: str = ""
    headers: dict[str, Scalar] = Field(default_factory=dict)
    properties: dict[str, Scalar] = Field(default_factory=dict)
    priority: Optional[int] = None
    delivery_delay: Milliseconds = None
    time_to_live: Milliseconds = None
    published_at: Optional[int] = None
    redelivered: bool = False

    # ── headers / properties ──────────────────────────────────

    def get_header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)

    def set_header(self, name: str, value: Scalar) -> None:
        self.headers[name] = value

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def set_property(self, name: str, value: Scalar) -> None:
        self.properties[name] = value

    # ── header-backed conveniences ────────────────────────────

    @property
    def correlation_id(self) -> Optional[str]:
        return self.get_header("correlation_id")

    @correlation_id.setter
    def correlation_id(self, value: Optional[str]) -> None:
        self.set_header("correlation_id", value)

    @property
    def message_id(self) -> Optional[str]:
        return self.get_header("message_id")

    @message_id.setter
    def message_id(self, value: Optional[str]) -> None:
        self.set_header("message_id", value)

    @property
    def timestamp(self) -> Optional[int]:
        value = self.get_header("timestamp")
        return None if value is None else int(value)

    @timestamp.setter
    def timestamp(self, value: Optional[int]) -> None:
        self.set_header("timestamp", value)

    @property
    def reply_to(self) -> Optional[str]:
        return self.get_header("reply_to")

    @reply_to.setter
    def reply_to(self, value: Optional[str]) -> None:
        self.set_header("reply_to", value)


# ──────────────────────────────────────────────────────────────
#  Resolved message — message after producer defaults
# ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ResolvedMessage:
    """Snapshot of a TableMessage with producer defaults filled in."""
    body: str
    headers: dict[str, Any]
    properties: dict[str, Any]
    priority: Optional[int]
    delivery_delay: Any
    time_to_live: Any
    published_at: Optional[int]
