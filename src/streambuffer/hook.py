"""The write filter that captures intercepted stream data into a buffer."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from streambuffer.strategy import dispatch, to_filter_status
from streambuffer.streams import FilterStatus, StreamFilter

if TYPE_CHECKING:
    from streambuffer.registry import StreamBuffer

__all__ = ['BufferFilter']


class BufferFilter(StreamFilter):
    """Appends every chunk written to the stream to its interception's buffer.

    Chunks are always consumed whole and forwarded to the outgoing list; the
    response strategy of the interception decides whether the stream layer
    then writes them, drops them or fails the write.
    """

    def __init__(self, filtername: str, stream: Any, registry: StreamBuffer) -> None:
        super().__init__(filtername, stream)
        self.registry = registry

    def on_create(self) -> bool:
        return self.registry.is_active(self.filtername)

    def filter(self, incoming: list, outgoing: list,
               closing: bool) -> tuple[FilterStatus, int]:
        options = self.registry.capture(self.filtername, incoming)
        consumed = sum(len(chunk) for chunk in incoming)
        outgoing.extend(incoming)
        if options is None:
            # stopped mid-write, behave as if already detached
            return FilterStatus.PASS_ON, consumed
        if closing:
            return FilterStatus.FEED_ME, consumed
        return to_filter_status(dispatch(options.response_strategy)), consumed
