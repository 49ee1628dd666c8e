"""Intercept writes to a stream and capture them in a queryable buffer.

Public API - users should only import from this module.

Usage:
    import io
    import streambuffer

    # One-time registration of the buffer stream filter
    streambuffer.register()

    stream = io.BytesIO()
    buffer = streambuffer.intercept(stream)
    stream.write(b'Content written to stream')
    assert buffer.output() == b'Content written to stream'
    assert stream.getvalue() == b''  # trapped by default

    # Let the data reach the stream as well
    options = streambuffer.InterceptOptions(streambuffer.ResponseStrategy.PASS_THROUGH)
    buffer = streambuffer.intercept(stream, options)

    buffer.reset()
    buffer.stop_intercepting()

Log output is disabled by default; enable it with
``loguru.logger.enable('streambuffer')`` or CONFIG_STREAMBUFFER_LOG_ENABLE.
"""
from typing import Any

from loguru import logger

from streambuffer import config
from streambuffer.exceptions import BufferNotFound, InvalidResourceType
from streambuffer.exceptions import StreamBufferError, StreamBufferNotRegistered
from streambuffer.exceptions import StreamFilterError, StreamWriteError
from streambuffer.handle import Buffer, BufferIdentifier
from streambuffer.registry import StreamBuffer, get_registry
from streambuffer.strategy import InterceptOptions, Outcome, ResponseStrategy

if not config.log.enable:
    logger.disable('streambuffer')


# Module-level convenience functions over the process-wide registry
def register() -> None:
    """Install the buffer stream filter. Safe to call more than once."""
    get_registry().register()


def intercept(stream: Any, options: InterceptOptions | None = None) -> Buffer:
    """Start capturing writes to ``stream``; see :meth:`StreamBuffer.intercept`."""
    return get_registry().intercept(stream, options)


def stop_intercepting(ref: Buffer | BufferIdentifier | str) -> None:
    get_registry().stop_intercepting(ref)


def output(ref: Buffer | BufferIdentifier | str) -> str | bytes:
    return get_registry().output(ref)


def reset(ref: Buffer | BufferIdentifier | str) -> None:
    get_registry().reset(ref)


def reset_all() -> None:
    """Empty every active buffer."""
    get_registry().reset_all()


def buffers() -> dict[str, str | bytes]:
    """Snapshot of identifier -> captured output."""
    return get_registry().buffers()


def handles() -> list[Buffer]:
    """Snapshot of the active buffer handles."""
    return get_registry().handles()


__all__ = [
    # Registration
    'register',
    'get_registry',
    'StreamBuffer',
    # Interception
    'intercept',
    'stop_intercepting',
    'output',
    'reset',
    'reset_all',
    'buffers',
    'handles',
    # Handles and options
    'Buffer',
    'BufferIdentifier',
    'InterceptOptions',
    'ResponseStrategy',
    'Outcome',
    # Errors
    'StreamBufferError',
    'InvalidResourceType',
    'StreamBufferNotRegistered',
    'BufferNotFound',
    'StreamFilterError',
    'StreamWriteError',
]
