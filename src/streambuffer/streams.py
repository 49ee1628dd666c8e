"""Named write filters for Python stream objects.

Python's io layer has no filter chain, so this module provides a small one:
filter factories are registered under a name (``'prefix.*'`` registers a
whole family), appended to a stream instance, and later removed by the
token returned from :func:`append_filter`.

The first filter on a stream patches the instance's ``write``,
``writelines`` and ``close`` so every write runs through the chain. Removing
the last filter restores them. Each filter sees the chunks forwarded by the
previous one and answers with a :class:`FilterStatus`:

- ``PASS_ON``: forward the outgoing chunks to the next filter or the stream
- ``FEED_ME``: the data was consumed, nothing is forwarded
- ``ERR_FATAL``: the write fails with :class:`StreamWriteError`
"""
from __future__ import annotations

import io
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from streambuffer import config
from streambuffer.exceptions import StreamFilterError, StreamWriteError

__all__ = [
    'FilterStatus',
    'StreamFilter',
    'FilterToken',
    'register_filter',
    'unregister_filter',
    'get_filters',
    'get_filter_factory',
    'append_filter',
    'remove_filter',
    'attached_filters',
    'is_filterable',
]

_CHAIN_ATTR = '_streambuffer_chain'
_PATCHED = ('write', 'writelines', 'close')

# guards attaching, detaching and reading filter chains
_lock = threading.RLock()


class FilterStatus(Enum):
    PASS_ON = 'pass_on'
    FEED_ME = 'feed_me'
    ERR_FATAL = 'err_fatal'


class StreamFilter:
    """Base class for filters attached with :func:`append_filter`.

    Subclasses override :meth:`filter`. ``filtername`` is the full name the
    filter was appended under, so one factory registered as ``'prefix.*'``
    can tell its instances apart.
    """

    def __init__(self, filtername: str, stream: Any) -> None:
        self.filtername = filtername
        self.stream = stream

    def on_create(self) -> bool:
        """Called once when appended. Returning False rejects the append."""
        return True

    def on_close(self) -> None:
        """Called when the stream closes while the filter is attached."""

    def filter(self, incoming: list, outgoing: list,
               closing: bool) -> tuple[FilterStatus, int]:
        """Move chunks from ``incoming`` to ``outgoing``.

        Returns the status and the number of items consumed.
        """
        raise NotImplementedError


@dataclass(eq=False)
class FilterToken:
    """Handle to one appended filter, needed to remove it again."""
    stream: Any
    filter: StreamFilter
    removed: bool = field(default=False, repr=False)

    @property
    def filtername(self) -> str:
        return self.filter.filtername


_factories: dict[str, Callable[[str, Any], StreamFilter]] = {}


def register_filter(name: str, factory: Callable[[str, Any], StreamFilter]) -> bool:
    """Register a filter factory under ``name``.

    Returns False, leaving the existing factory in place, if the name is
    already taken.
    """
    if name in _factories:
        return False
    _factories[name] = factory
    logger.debug(f'Registered stream filter {name}')
    return True


def unregister_filter(name: str) -> None:
    """Forget a filter factory. Filters already appended keep working."""
    _factories.pop(name, None)


def get_filters() -> list[str]:
    """Names of all registered filter factories."""
    return list(_factories)


def get_filter_factory(name: str) -> Callable[[str, Any], StreamFilter] | None:
    """The factory registered under exactly ``name``, if any."""
    return _factories.get(name)


def _resolve(filtername: str) -> Callable[[str, Any], StreamFilter]:
    """Find the factory for ``filtername``, trying wildcards from the most
    specific prefix outwards (``a.b.c`` -> ``a.b.*`` -> ``a.*``).
    """
    if filtername in _factories:
        return _factories[filtername]
    prefix = filtername
    while '.' in prefix:
        prefix = prefix.rsplit('.', 1)[0]
        wildcard = f'{prefix}.*'
        if wildcard in _factories:
            return _factories[wildcard]
    raise StreamFilterError(f'No stream filter registered for "{filtername}".')


def is_filterable(stream: Any) -> bool:
    """True for open, writable io streams that filters can be attached to."""
    if not isinstance(stream, io.IOBase):
        return False
    try:
        if stream.closed or not stream.writable():
            return False
    except ValueError:
        return False
    return hasattr(stream, '__dict__')


class _FilterChain:
    """The filters attached to one stream and the stream's own methods."""

    def __init__(self, stream: Any) -> None:
        self.stream = stream
        self.filters: list[StreamFilter] = []
        self._saved = {name: vars(stream).get(name, _MISSING) for name in _PATCHED}
        self._write = stream.write
        self._close = stream.close
        self._empty = '' if isinstance(stream, io.TextIOBase) else b''

    def install(self) -> None:
        setattr(self.stream, _CHAIN_ATTR, self)
        self.stream.write = self.write
        self.stream.writelines = self.writelines
        self.stream.close = self.close

    def uninstall(self) -> None:
        for name, saved in self._saved.items():
            if saved is _MISSING:
                vars(self.stream).pop(name, None)
            else:
                setattr(self.stream, name, saved)
        vars(self.stream).pop(_CHAIN_ATTR, None)

    def _run(self, chunks: list, closing: bool) -> list:
        with _lock:
            filters = list(self.filters)
        for stream_filter in filters:
            outgoing: list = []
            status, consumed = stream_filter.filter(chunks, outgoing, closing)
            expected = sum(len(chunk) for chunk in chunks)
            if consumed != expected:
                raise StreamFilterError(
                    f'Stream filter "{stream_filter.filtername}" consumed {consumed} '
                    f'of {expected} items, chunks must be consumed whole.'
                )
            if status is FilterStatus.ERR_FATAL:
                logger.warning(f'Stream filter {stream_filter.filtername} failed the write')
                raise StreamWriteError(
                    f'Stream filter "{stream_filter.filtername}" reported a fatal error.'
                )
            if status is FilterStatus.FEED_ME:
                return []
            chunks = outgoing
        return chunks

    def _coerce(self, data: Any) -> str | bytes:
        """Reject data the stream itself would refuse, with the same error."""
        if isinstance(self._empty, str):
            if not isinstance(data, str):
                raise TypeError(f'write() argument must be str, not {type(data).__name__}')
            return data
        if isinstance(data, str):
            raise TypeError("a bytes-like object is required, not 'str'")
        try:
            return bytes(memoryview(data))
        except TypeError:
            raise TypeError(
                f"a bytes-like object is required, not '{type(data).__name__}'"
            ) from None

    def write(self, data: Any) -> int:
        if self.stream.closed:
            raise ValueError('I/O operation on closed file.')
        data = self._coerce(data)
        if not data:
            return self._write(data)
        size = config.stream.chunk_size
        chunks = [data[i:i + size] for i in range(0, len(data), size)]
        forwarded = self._run(chunks, closing=False)
        if forwarded:
            self._write(self._empty.join(forwarded))
        return len(data)

    def writelines(self, lines: Iterable[Any]) -> None:
        if self.stream.closed:
            raise ValueError('I/O operation on closed file.')
        for line in lines:
            self.write(line)

    def close(self) -> None:
        if not self.stream.closed:
            forwarded = self._run([], closing=True)
            if forwarded:
                self._write(self._empty.join(forwarded))
            with _lock:
                filters = list(self.filters)
            for stream_filter in filters:
                stream_filter.on_close()
        self._close()


_MISSING = object()


def append_filter(stream: Any, filtername: str) -> FilterToken:
    """Attach a new instance of the filter registered for ``filtername``.

    Filters run in the order they were appended.
    """
    if not is_filterable(stream):
        raise StreamFilterError(
            f'Cannot attach a filter to "{type(stream).__name__}", '
            'it is not an open writable stream.'
        )
    factory = _resolve(filtername)
    stream_filter = factory(filtername, stream)
    if not stream_filter.on_create():
        raise StreamFilterError(f'Stream filter "{filtername}" refused to attach.')

    with _lock:
        chain = getattr(stream, _CHAIN_ATTR, None)
        if chain is None:
            chain = _FilterChain(stream)
            chain.install()
        chain.filters.append(stream_filter)
    logger.debug(f'Appended stream filter {filtername} to {type(stream).__name__}')
    return FilterToken(stream, stream_filter)


def remove_filter(token: FilterToken) -> None:
    """Detach exactly the filter behind ``token``."""
    with _lock:
        chain = getattr(token.stream, _CHAIN_ATTR, None)
        if token.removed or chain is None or token.filter not in chain.filters:
            raise StreamFilterError(
                f'Stream filter "{token.filtername}" is not attached to the stream.'
            )
        chain.filters.remove(token.filter)
        token.removed = True
        if not chain.filters:
            chain.uninstall()
    logger.debug(f'Removed stream filter {token.filtername}')


def attached_filters(stream: Any) -> list[str]:
    """Names of the filters currently attached to ``stream``, in order."""
    chain = getattr(stream, _CHAIN_ATTR, None)
    if chain is None:
        return []
    return [f.filtername for f in chain.filters]
