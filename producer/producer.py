"""
TableProducer — turns a message into one queue-table row.

Pipeline for one send:
  check kinds → apply defaults → id + ordering timestamp
  → delay / TTL deadlines → encode row → gateway insert

Nothing is retried. A send either writes exactly one row or raises:
  InvalidDestinationKind / InvalidMessageKind   before any work
  ValidationError                               bad delay or TTL, no insert
  TransportSendError                            the insert failed
"""
from __future__ import annotations

import time
import structlog
from typing import Optional

from database.gateway import InsertGateway
from models.schemas import TableDestination, TableMessage
from producer.defaults import ProducerDefaults, resolve
from producer.encoder import FIELD_TYPES, QueueRow, encode
from producer.errors import (
    InvalidDestinationKind, InvalidMessageKind, TransportSendError, ValidationError,
)
from producer.identifiers import IdentifierGenerator, TimeUuidGenerator
from producer.scheduling import Clock, ordering_timestamp, resolve_deadline

logger = structlog.get_logger()


class TableProducer:

    def __init__(
        self,
        gateway: InsertGateway,
        table_name: str = "enqueue",
        id_generator: Optional[IdentifierGenerator] = None,
        clock: Clock = time.time,
        defaults: Optional[ProducerDefaults] = None,
    ):
        self.gateway = gateway
        self.table_name = table_name
        self.id_generator = id_generator or TimeUuidGenerator()
        self.clock = clock
        self._defaults = defaults or ProducerDefaults()

    # ── configuration ─────────────────────────────────────────

    def set_priority(self, priority: Optional[int] = None) -> TableProducer:
        self._defaults.priority = priority
        return self

    def get_priority(self) -> Optional[int]:
        return self._defaults.priority

    def set_delivery_delay(self, delivery_delay: Optional[int] = None) -> TableProducer:
        self._defaults.delivery_delay = delivery_delay
        return self

    def get_delivery_delay(self) -> Optional[int]:
        return self._defaults.delivery_delay

    def set_time_to_live(self, time_to_live: Optional[int] = None) -> TableProducer:
        self._defaults.time_to_live = time_to_live
        return self

    def get_time_to_live(self) -> Optional[int]:
        return self._defaults.time_to_live

    # ── send ──────────────────────────────────────────────────

    def build_row(self, destination: TableDestination, message: TableMessage) -> QueueRow:
        """Resolve, schedule and encode ``message`` without inserting it."""
        if not isinstance(destination, TableDestination):
            raise InvalidDestinationKind(destination)
        if not isinstance(message, TableMessage):
            raise InvalidMessageKind(message)

        resolved = resolve(self._defaults, message)
        identifier = self.id_generator.next()

        published_at = resolved.published_at
        if published_at is None:
            published_at = ordering_timestamp(self.clock)

        now = self.clock()
        deadlines = {}
        for field, value in (("delivery_delay", resolved.delivery_delay),
                             ("time_to_live", resolved.time_to_live)):
            result = resolve_deadline(field, value, now)
            if not result.ok:
                raise ValidationError(result.error, field=field, value=value)
            deadlines[field] = result.deadline

        return encode(
            resolved,
            destination,
            identifier,
            published_at,
            delayed_until=deadlines["delivery_delay"],
            expires_at=deadlines["time_to_live"],
        )

    async def send(self, destination: TableDestination, message: TableMessage) -> None:
        try:
            row = self.build_row(destination, message)
        except (InvalidDestinationKind, InvalidMessageKind, ValidationError) as e:
            logger.warning("send_rejected", error=str(e), error_type=type(e).__name__)
            raise

        try:
            values = row.to_values()
            await self.gateway.insert(self.table_name, values, FIELD_TYPES)
        except Exception as e:
            logger.error("send_failed",
                         table=self.table_name,
                         queue=row.queue,
                         message_id=row.human_id,
                         error=str(e))
            raise TransportSendError() from e

        logger.info("message_sent",
                    table=self.table_name,
                    queue=row.queue,
                    message_id=row.human_id,
                    priority=row.priority,
                    delayed_until=row.delayed_until,
                    expires_at=row.time_to_live)
