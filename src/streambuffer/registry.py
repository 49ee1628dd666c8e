"""Interception registry - the source of truth for active interceptions.

A :class:`StreamBuffer` owns one record per active interception, keyed by
identifier. Records are added by :meth:`StreamBuffer.intercept` and removed
only by :meth:`StreamBuffer.stop_intercepting`; closing an intercepted stream
leaves its record (and captured output) in place.

Most code uses the process-wide instance from :func:`get_registry` through
the module-level functions in :mod:`streambuffer`. Tests build their own
instance with a private namespace so they never share state:

    >>> registry = StreamBuffer(namespace='mytests')  # doctest: +SKIP
    >>> registry.register()  # doctest: +SKIP
    >>> buffer = registry.intercept(stream)  # doctest: +SKIP
"""
from __future__ import annotations

import io
import secrets
import threading
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from streambuffer import config, streams
from streambuffer.exceptions import BufferNotFound, InvalidResourceType
from streambuffer.exceptions import StreamBufferNotRegistered, StreamFilterError
from streambuffer.handle import Buffer, BufferIdentifier
from streambuffer.hook import BufferFilter
from streambuffer.strategy import InterceptOptions

__all__ = ['InterceptionRecord', 'StreamBuffer', 'get_registry']

_MISSING_BUFFER = {
    'stop': BufferNotFound.from_stop_intercepting_missing_buffer,
    'output': BufferNotFound.from_output_missing_buffer,
    'reset': BufferNotFound.from_reset_missing_buffer,
}


@dataclass
class InterceptionRecord:
    """State of one active interception."""
    identifier: BufferIdentifier
    stream: Any
    options: InterceptOptions
    handle: Buffer
    token: streams.FilterToken | None = None
    chunks: list = field(default_factory=list)

    @property
    def empty(self) -> str | bytes:
        return '' if isinstance(self.stream, io.TextIOBase) else b''

    def contents(self) -> str | bytes:
        return self.empty.join(self.chunks)


class StreamBuffer:
    """Registry of stream interceptions.

    Args:
        namespace: Prefix of every identifier and of the filter name this
                   registry installs (``'<namespace>.*'``). Defaults to the
                   configured namespace.
    """

    def __init__(self, namespace: str | None = None) -> None:
        self.namespace = namespace or config.buffer.namespace
        self._records: dict[str, InterceptionRecord] = {}
        self._stopped: set[str] = set()
        self._lock = threading.RLock()

    @property
    def filtername(self) -> str:
        return f'{self.namespace}.*'

    def register(self) -> None:
        """Install the buffer filter. Later calls are no-ops."""
        if self.is_registered():
            return
        if not streams.register_filter(self.filtername, self._create_filter):
            raise StreamFilterError(
                f'Stream filter "{self.filtername}" is registered by another StreamBuffer.'
            )
        logger.debug(f'Registered StreamBuffer {self.namespace}')

    def is_registered(self) -> bool:
        return streams.get_filter_factory(self.filtername) == self._create_filter

    def unregister(self) -> None:
        """Stop every interception and remove the buffer filter."""
        self.clear()
        if self.is_registered():
            streams.unregister_filter(self.filtername)
            logger.debug(f'Unregistered StreamBuffer {self.namespace}')

    def _create_filter(self, filtername: str, stream: Any) -> BufferFilter:
        return BufferFilter(filtername, stream, self)

    def _mint(self) -> BufferIdentifier:
        while True:
            ident = f'{self.namespace}.{secrets.token_hex(config.buffer.id_bytes)}'
            if ident not in self._records and ident not in self._stopped:
                return BufferIdentifier(ident)

    def intercept(self, stream: Any, options: InterceptOptions | None = None) -> Buffer:
        """Start capturing everything written to ``stream``.

        Raises:
            InvalidResourceType: ``stream`` is not an open writable stream
            StreamBufferNotRegistered: :meth:`register` was not called
        """
        if not streams.is_filterable(stream):
            raise InvalidResourceType.from_stream_not_resource(stream)
        if not self.is_registered():
            raise StreamBufferNotRegistered.from_not_registered()
        options = options or InterceptOptions()

        with self._lock:
            identifier = self._mint()
            key = identifier.to_string()
            handle = Buffer(identifier, self)
            record = InterceptionRecord(identifier, stream, options, handle)
            self._records[key] = record
            try:
                record.token = streams.append_filter(stream, key)
            except Exception:
                del self._records[key]
                raise
        logger.debug(f'Intercepting {type(stream).__name__} as {key} '
                     f'({options.response_strategy})')
        return handle

    def _key(self, ref: Buffer | BufferIdentifier | str) -> str:
        if isinstance(ref, Buffer):
            ref = ref.identifier
        return str(ref)

    def _record(self, ref: Buffer | BufferIdentifier | str, operation: str) -> InterceptionRecord:
        key = self._key(ref)
        record = self._records.get(key)
        if record is None:
            if key in self._stopped:
                raise _MISSING_BUFFER[operation](key)
            raise BufferNotFound.from_buffer_identifier_not_found(key, operation)
        return record

    def is_active(self, ref: Buffer | BufferIdentifier | str) -> bool:
        return self._key(ref) in self._records

    def stop_intercepting(self, ref: Buffer | BufferIdentifier | str) -> None:
        """Remove the buffer filter from the stream and forget the buffer.

        Raises BufferNotFound if the interception was already stopped.
        """
        with self._lock:
            record = self._record(ref, 'stop')
            key = record.identifier.to_string()
            if record.token is not None and not record.token.removed:
                streams.remove_filter(record.token)
            del self._records[key]
            self._stopped.add(key)
        logger.debug(f'Stopped intercepting {key}')

    def output(self, ref: Buffer | BufferIdentifier | str) -> str | bytes:
        """Everything captured since the interception started or was reset."""
        with self._lock:
            return self._record(ref, 'output').contents()

    def reset(self, ref: Buffer | BufferIdentifier | str) -> None:
        with self._lock:
            self._record(ref, 'reset').chunks.clear()

    def reset_all(self) -> None:
        with self._lock:
            for record in self._records.values():
                record.chunks.clear()

    def buffers(self) -> dict[str, str | bytes]:
        """Snapshot of identifier -> captured output for every active buffer."""
        with self._lock:
            return {key: record.contents() for key, record in self._records.items()}

    def handles(self) -> list[Buffer]:
        """Snapshot of the handles of every active buffer."""
        with self._lock:
            return [record.handle for record in self._records.values()]

    def clear(self) -> None:
        """Stop every active interception."""
        for handle in self.handles():
            self.stop_intercepting(handle)

    def capture(self, identifier: str, chunks: list) -> InterceptOptions | None:
        """Append written chunks to a buffer, returning its options.

        Called by :class:`BufferFilter` from the stream's write path. Returns
        None when the interception was stopped while the write was running.
        """
        with self._lock:
            record = self._records.get(identifier)
            if record is None:
                return None
            record.chunks.extend(chunks)
            return record.options

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f'<StreamBuffer {self.namespace} active={len(self)}>'


# Process-wide registry
_registry: StreamBuffer | None = None


def get_registry() -> StreamBuffer:
    """Get the process-wide registry instance."""
    global _registry
    if _registry is None:
        _registry = StreamBuffer()
    return _registry
