"""
Insert Gateway — executes the single INSERT behind a producer send.

The gateway knows nothing about messages: it receives a table name, the
field values and a type hint per field, and writes one row. Errors are
propagated unchanged; translating them is the producer's job.

With a caller-supplied session the insert joins that session's
transaction and is not committed here. Without one, each insert runs in
its own session scope on the gateway's QueueDatabase, or on the database
named by the global settings when none was given.
"""
from __future__ import annotations

import structlog
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from sqlalchemy import column, insert, table
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import TypeEngine

from database.session import QueueDatabase, get_database

logger = structlog.get_logger()


@runtime_checkable
class InsertGateway(Protocol):
    async def insert(
        self,
        table_name: str,
        values: Mapping[str, Any],
        type_hints: Mapping[str, TypeEngine],
    ) -> None:
        ...


def build_insert(table_name: str, values: Mapping[str, Any],
                 type_hints: Mapping[str, TypeEngine]):
    """Compile-ready INSERT for an ad-hoc table with only the given columns."""
    target = table(
        table_name,
        *(column(name, type_hints.get(name)) for name in values),
    )
    return insert(target).values(dict(values))


class SqlInsertGateway:
    """InsertGateway backed by a SQLAlchemy async session."""

    def __init__(self, session: Optional[AsyncSession] = None,
                 database: Optional[QueueDatabase] = None):
        self._session = session
        self._database = database

    @property
    def database(self) -> QueueDatabase:
        return self._database or get_database()

    async def insert(
        self,
        table_name: str,
        values: Mapping[str, Any],
        type_hints: Mapping[str, TypeEngine],
    ) -> None:
        stmt = build_insert(table_name, values, type_hints)
        if self._session is not None:
            await self._session.execute(stmt)
            logger.debug("row_inserted", table=table_name, committed=False)
            return

        async with self.database.session() as db:
            await db.execute(stmt)
        logger.debug("row_inserted", table=table_name, committed=True)
