"""
Producer errors.

Kind and validation errors abort a send before anything is written.
Storage failures are always wrapped in TransportSendError with the
original exception chained as ``__cause__``.
"""
from __future__ import annotations

from typing import Any


class QueueTransportError(Exception):
    """Base exception for all producer operations."""


class InvalidDestinationKind(QueueTransportError):
    def __init__(self, destination: Any):
        self.destination = destination
        super().__init__(
            f'The destination must be an instance of TableDestination '
            f'but got {type(destination).__name__}.'
        )


class InvalidMessageKind(QueueTransportError):
    def __init__(self, message: Any):
        self.message = message
        super().__init__(
            f'The message must be an instance of TableMessage '
            f'but got {type(message).__name__}.'
        )


class ValidationError(QueueTransportError):
    """A resolved delivery delay or time to live is not a positive integer."""

    def __init__(self, message: str, field: str = "", value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)


class TransportSendError(QueueTransportError):
    DEFAULT_MESSAGE = "The transport fails to send the message due to some internal error."

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)
