"""Caller-facing handles for a single interception."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streambuffer.registry import StreamBuffer

__all__ = ['Buffer', 'BufferIdentifier']


@dataclass(frozen=True)
class BufferIdentifier:
    """Opaque name of one interception.

    >>> ident = BufferIdentifier('streambuffer.00ff')
    >>> ident.to_string()
    'streambuffer.00ff'
    >>> str(ident)
    'streambuffer.00ff'
    """
    id: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError('BufferIdentifier must not be empty')

    def to_string(self) -> str:
        return self.id

    def __str__(self) -> str:
        return self.id


class Buffer:
    """Handle returned by :meth:`StreamBuffer.intercept`.

    Holds the identifier and the registry that minted it. All operations go
    through that registry, so once :meth:`stop_intercepting` succeeds every
    further call raises :class:`~streambuffer.exceptions.BufferNotFound`.

    Also works as a context manager that stops intercepting on exit:

    >>> import io, streambuffer  # doctest: +SKIP
    >>> with streambuffer.intercept(stream) as buffer:  # doctest: +SKIP
    ...     stream.write(b'hello')
    ...     assert buffer.output() == b'hello'
    """

    def __init__(self, identifier: BufferIdentifier, registry: StreamBuffer) -> None:
        self.identifier = identifier
        self._registry = registry

    @property
    def active(self) -> bool:
        """True until :meth:`stop_intercepting` has been called."""
        return self._registry.is_active(self.identifier)

    def output(self) -> str | bytes:
        return self._registry.output(self)

    def reset(self) -> None:
        self._registry.reset(self)

    def stop_intercepting(self) -> None:
        self._registry.stop_intercepting(self)

    def __enter__(self) -> Buffer:
        return self

    def __exit__(self, *exc) -> None:
        if self.active:
            self.stop_intercepting()

    def __repr__(self) -> str:
        state = 'active' if self.active else 'stopped'
        return f'<Buffer {self.identifier} {state}>'
