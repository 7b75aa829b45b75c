"""Defaults Applier — fill unset message settings from producer defaults."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models.schemas import ResolvedMessage, TableMessage


@dataclass
class ProducerDefaults:
    """Producer-wide fallbacks. ``None`` means no default."""
    priority: Optional[int] = None
    delivery_delay: Optional[int] = None
    time_to_live: Optional[int] = None


def _first_set(own, fallback):
    return own if own is not None else fallback


def resolve(defaults: ProducerDefaults, message: TableMessage) -> ResolvedMessage:
    """Return a snapshot of ``message`` with defaults applied; ``message`` is left as is."""
    return ResolvedMessage(
        body=message.body,
        headers=dict(message.headers),
        properties=dict(message.properties),
        priority=_first_set(message.priority, defaults.priority),
        delivery_delay=_first_set(message.delivery_delay, defaults.delivery_delay),
        time_to_live=_first_set(message.time_to_live, defaults.time_to_live),
        published_at=message.published_at,
    )
