"""
TableContext — entry point tying a gateway and a table to producers,
destinations and messages.

Quick start:
    context = TableContext.from_settings(get_settings())
    queue = context.create_queue("emails")
    await context.create_producer().send(queue, context.create_message("hi"))
"""
from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import Settings
from database.gateway import InsertGateway, SqlInsertGateway
from database.session import get_database
from models.schemas import TableDestination, TableMessage
from producer.defaults import ProducerDefaults
from producer.identifiers import IdentifierGenerator, TimeUuidGenerator
from producer.producer import TableProducer
from producer.scheduling import Clock


class TableContext:

    def __init__(
        self,
        gateway: InsertGateway,
        table_name: str = "enqueue",
        id_generator: Optional[IdentifierGenerator] = None,
        clock: Clock = time.time,
        producer_defaults: Optional[ProducerDefaults] = None,
    ):
        self.gateway = gateway
        self.table_name = table_name
        self.id_generator = id_generator or TimeUuidGenerator()
        self.clock = clock
        self.producer_defaults = producer_defaults or ProducerDefaults()

    @classmethod
    def from_settings(cls, settings: Settings,
                      session: Optional[AsyncSession] = None) -> TableContext:
        cfg = settings.producer
        return cls(
            gateway=SqlInsertGateway(session, database=get_database(settings)),
            table_name=cfg.table_name,
            producer_defaults=ProducerDefaults(
                priority=cfg.priority,
                delivery_delay=cfg.delivery_delay,
                time_to_live=cfg.time_to_live,
            ),
        )

    def create_message(
        self,
        body: str = "",
        properties: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> TableMessage:
        return TableMessage(body=body, properties=properties or {}, headers=headers or {})

    def create_queue(self, queue_name: str) -> TableDestination:
        return TableDestination(queue_name=queue_name)

    def create_topic(self, topic_name: str) -> TableDestination:
        # Topics and queues share one table; the name is all that differs.
        return TableDestination(queue_name=topic_name)

    def create_producer(self, session: Optional[AsyncSession] = None) -> TableProducer:
        """New producer; pass ``session`` to insert inside the caller's transaction."""
        gateway = SqlInsertGateway(session) if session is not None else self.gateway
        return TableProducer(
            gateway,
            table_name=self.table_name,
            id_generator=self.id_generator,
            clock=self.clock,
            defaults=replace(self.producer_defaults),
        )
