"""Response strategies and the dispatch from strategy to write outcome.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from streambuffer.streams import FilterStatus

__all__ = [
    'ResponseStrategy',
    'Outcome',
    'InterceptOptions',
    'dispatch',
    'to_filter_status',
]


class ResponseStrategy(StrEnum):
    """What happens to written data once it has been captured."""
    PASS_THROUGH = 'pass_through'
    TRAP = 'trap'
    FATAL_ERROR = 'fatal_error'


class Outcome(StrEnum):
    """Per-chunk control outcome, independent of the stream layer."""
    CONTINUE = 'continue'
    SUPPRESS = 'suppress'
    FAIL = 'fail'


@dataclass(frozen=True)
class InterceptOptions:
    """Options for a single interception."""
    response_strategy: ResponseStrategy = ResponseStrategy.TRAP

    def __post_init__(self) -> None:
        # accept the plain string values, e.g. from configuration
        object.__setattr__(self, 'response_strategy', ResponseStrategy(self.response_strategy))


_OUTCOMES: dict[ResponseStrategy, Outcome] = {
    ResponseStrategy.PASS_THROUGH: Outcome.CONTINUE,
    ResponseStrategy.TRAP: Outcome.SUPPRESS,
    ResponseStrategy.FATAL_ERROR: Outcome.FAIL,
}

_FILTER_STATUSES: dict[Outcome, FilterStatus] = {
    Outcome.CONTINUE: FilterStatus.PASS_ON,
    Outcome.SUPPRESS: FilterStatus.FEED_ME,
    Outcome.FAIL: FilterStatus.ERR_FATAL,
}


def dispatch(strategy: ResponseStrategy | str) -> Outcome:
    """Map a response strategy to its write outcome.

    >>> dispatch(ResponseStrategy.TRAP)
    <Outcome.SUPPRESS: 'suppress'>
    >>> dispatch('pass_through')
    <Outcome.CONTINUE: 'continue'>
    """
    return _OUTCOMES[ResponseStrategy(strategy)]


def to_filter_status(outcome: Outcome) -> FilterStatus:
    """Translate an outcome to the status the stream filter layer expects."""
    return _FILTER_STATUSES[outcome]


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
