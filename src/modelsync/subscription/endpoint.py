"""The subscription endpoint capability.

The endpoint owns the transport: it opens connections, performs the
subscription handshake and delivers data frames.  The orchestrator only
drives it through this interface.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from modelsync.auth.types import AuthorizationType
from modelsync.errors import EndpointError
from modelsync.request.request import GraphQLRequest

OnStarted = Callable[[str], None]
OnNext = Callable[[Any], None]
OnError = Callable[[EndpointError], None]
OnComplete = Callable[[], None]


class SubscriptionEndpoint(ABC):
    """Transport-level subscription capability.

    Implementations may invoke the hooks from any thread, and may invoke
    them before ``request_subscription`` returns.
    """

    @abstractmethod
    def request_subscription(
        self,
        request: GraphQLRequest,
        auth_type: AuthorizationType,
        on_started: OnStarted,
        on_next: OnNext,
        on_error: OnError,
        on_complete: OnComplete,
    ) -> None:
        """Open a subscription for *request* authorized with *auth_type*.

        Exactly one of ``on_started`` or ``on_error`` is expected to
        settle the attempt.  After ``on_started``, ``on_next`` delivers
        decoded items until ``on_error`` or ``on_complete`` ends the
        stream.  Implementations may also raise ``EndpointError``
        synchronously instead of calling ``on_error``.
        """

    @abstractmethod
    def release_subscription(self, subscription_id: str) -> None:
        """Close the subscription identified by *subscription_id*.

        Raises
        ------
        EndpointError
            If the backend could not be told to release it.
        """
