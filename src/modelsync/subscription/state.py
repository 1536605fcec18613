"""Subscription lifecycle states.

::

    IDLE ──► STARTING ──► ACTIVE ──► COMPLETED
      │         │           │
      │         ├──► FAILED ◄┤
      │         │           │
      └─────────┴──► CANCELED ◄┘

The state only moves forward.  ``COMPLETED``, ``CANCELED`` and
``FAILED`` are terminal.
"""
from __future__ import annotations

from enum import Enum, auto


class SubscriptionState(Enum):
    """Lifecycle state of one subscription instance."""

    IDLE = auto()
    STARTING = auto()
    ACTIVE = auto()
    COMPLETED = auto()
    CANCELED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    def can_transition_to(self, target: "SubscriptionState") -> bool:
        """Return True if moving from this state to *target* is legal."""
        return target in _TRANSITIONS[self]


_TERMINAL = frozenset(
    {SubscriptionState.COMPLETED, SubscriptionState.CANCELED, SubscriptionState.FAILED}
)

_TRANSITIONS: dict[SubscriptionState, frozenset[SubscriptionState]] = {
    SubscriptionState.IDLE: frozenset({SubscriptionState.STARTING, SubscriptionState.CANCELED}),
    SubscriptionState.STARTING: frozenset(
        {SubscriptionState.ACTIVE, SubscriptionState.CANCELED, SubscriptionState.FAILED}
    ),
    SubscriptionState.ACTIVE: frozenset(
        {SubscriptionState.COMPLETED, SubscriptionState.CANCELED, SubscriptionState.FAILED}
    ),
    SubscriptionState.COMPLETED: frozenset(),
    SubscriptionState.CANCELED: frozenset(),
    SubscriptionState.FAILED: frozenset(),
}
