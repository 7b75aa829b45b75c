"""Shared test fixtures for the tablequeue producer."""
import pytest

from models.schemas import TableDestination, TableMessage
from producer.identifiers import TimeUuidGenerator
from producer.producer import TableProducer
from tests.doubles import CLOCK_SEQ, NODE, FixedClock, RecordingGateway, SteppingClockNs


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def id_generator() -> TimeUuidGenerator:
    return TimeUuidGenerator(clock_ns=SteppingClockNs(), node=NODE, clock_seq=CLOCK_SEQ)


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def producer(gateway, id_generator, clock) -> TableProducer:
    return TableProducer(gateway, table_name="enqueue", id_generator=id_generator, clock=clock)


@pytest.fixture
def queue() -> TableDestination:
    return TableDestination(queue_name="invoices")


@pytest.fixture
def message() -> TableMessage:
    return TableMessage(
        body='{"invoice": "INV-2024-1234"}',
        headers={"content_type": "application/json"},
        properties={"tenant": "acme", "attempt": 1},
    )
