"""Streambuffer exception hierarchy."""
from __future__ import annotations

from typing import Any

__all__ = [
    'StreamBufferError',
    'InvalidResourceType',
    'StreamBufferNotRegistered',
    'BufferNotFound',
    'StreamFilterError',
    'StreamWriteError',
]


class StreamBufferError(Exception):
    """Base exception for all streambuffer errors."""


class InvalidResourceType(StreamBufferError):
    """Raised when something other than a writable stream is intercepted."""

    @classmethod
    def from_stream_not_resource(cls, stream: Any) -> InvalidResourceType:
        return cls(
            'The stream to intercept MUST be a writable stream but provided '
            f'"{type(stream).__name__}".'
        )


class StreamBufferNotRegistered(StreamBufferError):
    """Raised when intercepting before the buffer filter is registered."""

    @classmethod
    def from_not_registered(cls) -> StreamBufferNotRegistered:
        return cls('StreamBuffer.register() MUST be called before intercepting a stream.')


class BufferNotFound(StreamBufferError):
    """Raised when an operation targets an interception that is not active.

    ``operation`` is one of ``'stop'``, ``'output'`` or ``'reset'`` and
    tells which call found no active buffer.
    """

    def __init__(self, message: str, operation: str | None = None,
                 identifier: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.identifier = identifier

    @classmethod
    def from_stop_intercepting_missing_buffer(cls, identifier: str | None = None) -> BufferNotFound:
        return cls(
            'Attempted to stop intercepting a buffer that is not currently intercepting '
            'any stream. Please only call Buffer.stop_intercepting once per Buffer.',
            operation='stop', identifier=identifier,
        )

    @classmethod
    def from_output_missing_buffer(cls, identifier: str | None = None) -> BufferNotFound:
        return cls(
            'Attempted to get output for a buffer that is not currently intercepting '
            'any stream. Please ensure Buffer.output is not called after '
            'Buffer.stop_intercepting.',
            operation='output', identifier=identifier,
        )

    @classmethod
    def from_reset_missing_buffer(cls, identifier: str | None = None) -> BufferNotFound:
        return cls(
            'Attempted to reset a buffer that is not currently intercepting any stream. '
            'Please ensure Buffer.reset is not called after Buffer.stop_intercepting.',
            operation='reset', identifier=identifier,
        )

    @classmethod
    def from_buffer_identifier_not_found(cls, identifier: str,
                                         operation: str | None = None) -> BufferNotFound:
        return cls(
            f'Unable to find a buffer matching identifier "{identifier}".',
            operation=operation, identifier=identifier,
        )


class StreamFilterError(StreamBufferError):
    """Raised when the stream filter layer is misused."""


class StreamWriteError(StreamBufferError, OSError):
    """Raised from a stream's write when a filter reports a fatal error."""
