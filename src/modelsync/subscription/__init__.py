"""Live subscriptions across multiple authorization candidates."""
from __future__ import annotations

from modelsync.subscription.endpoint import SubscriptionEndpoint
from modelsync.subscription.orchestrator import (
    SubscriptionOrchestrator,
    subscribe,
)
from modelsync.subscription.state import SubscriptionState

__all__ = [
    "SubscriptionEndpoint",
    "SubscriptionOrchestrator",
    "SubscriptionState",
    "subscribe",
]
