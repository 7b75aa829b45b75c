"""
Identifier Generator — time-ordered version-1 UUIDs.

Each identifier has two renderings:
  binary  16 bytes in "ordered time" layout
          time_hi_and_version | time_mid | time_low | clock_seq | node
          so plain byte comparison sorts by creation time
  human   canonical RFC 4122 string of the standard version-1 UUID

Uniqueness across processes comes from the node id and the random clock
sequence; ordering comes from the 60-bit timestamp. No shared counter or
lock is involved.
"""
from __future__ import annotations

import random
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, runtime_checkable

# 100 ns intervals between 1582-10-15 (Gregorian epoch) and 1970-01-01.
_GREGORIAN_OFFSET = 0x01B21DD213814000


@dataclass(frozen=True)
class Identifier:
    binary: bytes
    human: str

    @property
    def uuid(self) -> uuid.UUID:
        return uuid.UUID(self.human)


@runtime_checkable
class IdentifierGenerator(Protocol):
    def next(self) -> Identifier:
        ...


def ordered_bytes(value: uuid.UUID) -> bytes:
    """Rearrange a version-1 UUID so its bytes sort by timestamp."""
    b = value.bytes
    return b[6:8] + b[4:6] + b[0:4] + b[8:16]


def from_ordered_bytes(data: bytes) -> uuid.UUID:
    """Inverse of ``ordered_bytes``."""
    if len(data) != 16:
        raise ValueError(f"ordered uuid must be 16 bytes, got {len(data)}")
    return uuid.UUID(bytes=data[4:8] + data[2:4] + data[0:2] + data[8:16])


class TimeUuidGenerator:
    """
    Version-1 UUID factory with an injectable clock.

    Args:
        clock_ns: wall clock in nanoseconds since the Unix epoch
        node: 48-bit node id (defaults to the host's hardware address)
        clock_seq: fixed 14-bit clock sequence; random per call when None
    """

    def __init__(
        self,
        clock_ns: Callable[[], int] = time.time_ns,
        node: Optional[int] = None,
        clock_seq: Optional[int] = None,
    ):
        self._clock_ns = clock_ns
        self._node = uuid.getnode() if node is None else node
        self._clock_seq = clock_seq
        self._last_timestamp: Optional[int] = None

    def _timestamp(self) -> int:
        timestamp = self._clock_ns() // 100 + _GREGORIAN_OFFSET
        # Same tick or clock moved back: keep strictly increasing.
        if self._last_timestamp is not None and timestamp <= self._last_timestamp:
            timestamp = self._last_timestamp + 1
        self._last_timestamp = timestamp
        return timestamp

    def uuid1(self) -> uuid.UUID:
        timestamp = self._timestamp()
        clock_seq = self._clock_seq
        if clock_seq is None:
            clock_seq = random.getrandbits(14)

        time_low = timestamp & 0xFFFFFFFF
        time_mid = (timestamp >> 32) & 0xFFFF
        time_hi_version = (timestamp >> 48) & 0x0FFF
        clock_seq_low = clock_seq & 0xFF
        clock_seq_hi_variant = (clock_seq >> 8) & 0x3F
        return uuid.UUID(
            fields=(time_low, time_mid, time_hi_version,
                    clock_seq_hi_variant, clock_seq_low, self._node),
            version=1,
        )

    def next(self) -> Identifier:
        value = self.uuid1()
        return Identifier(binary=ordered_bytes(value), human=str(value))
