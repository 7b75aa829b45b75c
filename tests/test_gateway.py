"""
End-to-end tests against SQLite (aiosqlite).

Covers:
  - SqlInsertGateway inside a caller's session (no commit of its own)
  - SqlInsertGateway with its own session scope
  - Rows written by TableProducer read back through the ORM model
  - Database URL translation
"""
import json
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from database.gateway import InsertGateway, SqlInsertGateway, build_insert
from database.models import Base, QueueMessageRow
from models.schemas import TableDestination, TableMessage
from producer.encoder import FIELD_TYPES
from producer.errors import TransportSendError
from producer.identifiers import from_ordered_bytes
from producer.producer import TableProducer
from tests.doubles import NOW, RecordingGateway

T = int(NOW)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'queue.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


async def _rows(engine) -> list[QueueMessageRow]:
    async with AsyncSession(engine) as db:
        result = await db.execute(select(QueueMessageRow).order_by(QueueMessageRow.id))
        return list(result.scalars())


def _values() -> dict:
    producer = TableProducer(RecordingGateway(), clock=lambda: NOW)
    row = producer.build_row(TableDestination(queue_name="q"), TableMessage(body="x"))
    return row.to_values()


# ──────────────────────────────────────────────────────────────
#  Gateway in a caller-owned session
# ──────────────────────────────────────────────────────────────

class TestSqlInsertGatewayWithSession:
    def test_satisfies_protocol(self):
        assert isinstance(SqlInsertGateway(), InsertGateway)

    @pytest.mark.asyncio
    async def test_producer_row_persisted(self, engine, id_generator, clock):
        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), id_generator=id_generator, clock=clock)
            message = TableMessage(body="hello", headers={"a": "b"},
                                   properties={"k": 1}, priority=3,
                                   delivery_delay=2000, time_to_live=1500)
            await producer.send(TableDestination(queue_name="emails"), message)
            await db.commit()

        rows = await _rows(engine)
        assert len(rows) == 1
        row = rows[0]
        assert row.body == "hello"
        assert json.loads(row.headers) == {"a": "b"}
        assert json.loads(row.properties) == {"k": 1}
        assert row.priority == 3
        assert row.queue == "emails"
        assert row.delayed_until == T + 2
        assert row.time_to_live == T + 1
        assert row.published_at == 17_000_000_002_500
        assert from_ordered_bytes(row.id.bytes) == uuid.UUID(row.human_id)
        assert row.redelivered is None
        assert row.delivery_id is None

    @pytest.mark.asyncio
    async def test_optional_columns_null(self, engine, id_generator, clock):
        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), id_generator=id_generator, clock=clock)
            await producer.send(TableDestination(queue_name="q"), TableMessage(body="x"))
            await db.commit()

        row = (await _rows(engine))[0]
        assert row.priority is None
        assert row.delayed_until is None
        assert row.time_to_live is None

    @pytest.mark.asyncio
    async def test_joins_caller_transaction(self, engine, id_generator, clock):
        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), id_generator=id_generator, clock=clock)
            await producer.send(TableDestination(queue_name="q"), TableMessage(body="a"))
            await producer.send(TableDestination(queue_name="q"), TableMessage(body="b"))
            await db.rollback()

        assert await _rows(engine) == []

    @pytest.mark.asyncio
    async def test_rows_sort_by_id_in_send_order(self, engine, id_generator, clock):
        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), id_generator=id_generator, clock=clock)
            for i in range(10):
                await producer.send(TableDestination(queue_name="q"), TableMessage(body=str(i)))
            await db.commit()

        assert [r.body for r in await _rows(engine)] == [str(i) for i in range(10)]

    @pytest.mark.asyncio
    async def test_duplicate_id_wrapped(self, engine, clock):
        class ConstantIds:
            def __init__(self, ident):
                self.ident = ident

            def next(self):
                return self.ident

        from producer.identifiers import TimeUuidGenerator
        ident = TimeUuidGenerator(node=1, clock_seq=1).next()

        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), id_generator=ConstantIds(ident), clock=clock)
            await producer.send(TableDestination(queue_name="q"), TableMessage(body="a"))
            with pytest.raises(TransportSendError) as exc:
                await producer.send(TableDestination(queue_name="q"), TableMessage(body="b"))
            assert exc.value.__cause__ is not None
            await db.rollback()

    @pytest.mark.asyncio
    async def test_missing_table_wrapped(self, engine, id_generator, clock):
        async with AsyncSession(engine) as db:
            producer = TableProducer(SqlInsertGateway(db), table_name="no_such_table",
                                     id_generator=id_generator, clock=clock)
            with pytest.raises(TransportSendError):
                await producer.send(TableDestination(queue_name="q"), TableMessage(body="x"))


# ──────────────────────────────────────────────────────────────
#  Gateway with its own session scope
# ──────────────────────────────────────────────────────────────

class TestSqlInsertGatewayOwnSession:
    @pytest_asyncio.fixture
    async def configured_db(self, tmp_path):
        from config.settings import load_settings, reset_settings
        from database.session import close_db, init_db

        config = tmp_path / "settings.yaml"
        config.write_text(f"database:\n  url: sqlite:///{tmp_path / 'own.db'}\n")
        load_settings(str(config))
        await init_db()
        yield
        await close_db()
        reset_settings()

    @pytest.mark.asyncio
    async def test_commits_each_insert(self, configured_db, id_generator, clock):
        from database.session import get_session

        producer = TableProducer(SqlInsertGateway(), id_generator=id_generator, clock=clock)
        await producer.send(TableDestination(queue_name="q"), TableMessage(body="x"))

        async with get_session() as db:
            count = await db.scalar(select(func.count()).select_from(QueueMessageRow))
        assert count == 1


# ──────────────────────────────────────────────────────────────
#  Context built from a Settings object
# ──────────────────────────────────────────────────────────────

class TestContextFromSettingsDatabase:
    @pytest_asyncio.fixture
    async def target_settings(self, tmp_path):
        from config.settings import DatabaseConfig, ProducerConfig, Settings
        from database.session import close_db, get_database

        settings = Settings(
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'target.db'}"),
            producer=ProducerConfig(priority=4),
        )
        await get_database(settings).create_tables()
        yield settings
        await close_db()

    @pytest.mark.asyncio
    async def test_send_lands_in_settings_database(self, target_settings, id_generator, clock):
        from database.session import get_database
        from producer.context import TableContext

        context = TableContext.from_settings(target_settings)
        context.id_generator = id_generator
        context.clock = clock
        await context.create_producer().send(context.create_queue("billing"),
                                             context.create_message("x"))

        rows = await _rows(get_database(target_settings).engine)
        assert len(rows) == 1
        assert rows[0].queue == "billing"
        assert rows[0].priority == 4

    def test_gateway_bound_to_settings_database(self, tmp_path):
        from config.settings import DatabaseConfig, Settings
        from producer.context import TableContext

        context = TableContext.from_settings(Settings(
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'target.db'}"),
        ))
        assert context.gateway.database.url.endswith("target.db")
        assert context.gateway.database.url.startswith("sqlite+aiosqlite://")

    def test_debug_enables_echo(self, tmp_path):
        from config.settings import DatabaseConfig, Settings
        from database.session import QueueDatabase

        database = QueueDatabase(Settings(
            debug=True, database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'echo.db'}"),
        ))
        assert database.echo is True


# ──────────────────────────────────────────────────────────────
#  Insert logging
# ──────────────────────────────────────────────────────────────

class TestInsertLogging:
    @pytest.mark.asyncio
    async def test_logged_inside_caller_session(self, engine):
        from structlog.testing import capture_logs

        async with AsyncSession(engine) as db:
            with capture_logs() as logs:
                await SqlInsertGateway(db).insert("enqueue", _values(), FIELD_TYPES)
        inserted = [e for e in logs if e["event"] == "row_inserted"]
        assert inserted == [
            {"event": "row_inserted", "log_level": "debug", "table": "enqueue", "committed": False},
        ]

    @pytest.mark.asyncio
    async def test_logged_with_own_session(self, tmp_path):
        from structlog.testing import capture_logs
        from config.settings import DatabaseConfig, Settings
        from database.session import QueueDatabase

        database = QueueDatabase(Settings(
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'logged.db'}"),
        ))
        await database.create_tables()
        try:
            with capture_logs() as logs:
                await SqlInsertGateway(database=database).insert("enqueue", _values(), FIELD_TYPES)
        finally:
            await database.dispose()
        assert [e["committed"] for e in logs if e["event"] == "row_inserted"] == [True]


# ──────────────────────────────────────────────────────────────
#  Statement building
# ──────────────────────────────────────────────────────────────

class TestBuildInsert:
    def test_only_given_columns(self):
        stmt = build_insert("enqueue", {"body": "x", "queue": "q"}, FIELD_TYPES)
        sql = str(stmt.compile())
        assert sql.startswith("INSERT INTO enqueue")
        assert "body" in sql and "queue" in sql
        assert "delayed_until" not in sql

    def test_table_name_is_honoured(self):
        stmt = build_insert("jobs", {"body": "x"}, {})
        assert "INSERT INTO jobs" in str(stmt.compile())


class TestSessionUrlTranslation:
    def test_postgresql_url(self):
        from database.session import _to_async_url
        assert _to_async_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"

    def test_postgres_url(self):
        from database.session import _to_async_url
        assert _to_async_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"

    def test_mysql_url(self):
        from database.session import _to_async_url
        assert _to_async_url("mysql://u:p@h/db") == "mysql+aiomysql://u:p@h/db"

    def test_sqlite_url(self):
        from database.session import _to_async_url
        assert _to_async_url("sqlite:///./test.db") == "sqlite+aiosqlite:///./test.db"

    def test_already_async_url(self):
        from database.session import _to_async_url
        url = "postgresql+asyncpg://u:p@h/db"
        assert _to_async_url(url) == url


class TestQueueTableModel:
    def test_table_defined(self):
        assert set(Base.metadata.tables.keys()) == {"enqueue"}

    def test_deadlines_nullable(self):
        cols = QueueMessageRow.__table__.columns
        assert cols["delayed_until"].nullable
        assert cols["time_to_live"].nullable
        assert cols["priority"].nullable
        assert not cols["queue"].nullable
