"""
Producer — writes messages to a relational queue table.

Each send becomes one row with a time-ordered id, an ordering timestamp,
JSON headers/properties and optional delay/expiry deadlines. Reading the
table back is left to a separate consumer.
"""
from producer.context import TableContext
from producer.defaults import ProducerDefaults, resolve
from producer.encoder import FIELD_TYPES, QueueRow, encode
from producer.errors import (
    QueueTransportError, InvalidDestinationKind, InvalidMessageKind,
    ValidationError, TransportSendError,
)
from producer.identifiers import (
    Identifier, IdentifierGenerator, TimeUuidGenerator,
    ordered_bytes, from_ordered_bytes,
)
from producer.producer import TableProducer
from producer.scheduling import ScheduleResult, ordering_timestamp, resolve_deadline

__all__ = [
    "TableContext", "TableProducer",
    "ProducerDefaults", "resolve",
    "FIELD_TYPES", "QueueRow", "encode",
    "QueueTransportError", "InvalidDestinationKind", "InvalidMessageKind",
    "ValidationError", "TransportSendError",
    "Identifier", "IdentifierGenerator", "TimeUuidGenerator",
    "ordered_bytes", "from_ordered_bytes",
    "ScheduleResult", "ordering_timestamp", "resolve_deadline",
]
