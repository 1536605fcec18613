"""Subscription orchestration across authorization candidates.

``SubscriptionOrchestrator`` owns one subscription: it walks the
authorization candidates in order, decorates the request where a
candidate needs it, hands it to the ``SubscriptionEndpoint`` and waits
for that attempt to settle.  The first candidate that starts wins; a
failed candidate is retried with the next one; when none remain the last
failure is reported.

Usage
-----
::

    orchestrator = SubscriptionOrchestrator(
        request=build_subscription_request(schema, SubscriptionType.ON_CREATE),
        endpoint=endpoint,
        candidates=candidates_for_schema(schema),
        on_start=lambda subscription_id: ...,
        on_next=lambda item: ...,
        on_error=lambda error: ...,
        on_complete=lambda: ...,
        decorator=AuthRuleRequestDecorator(claims),
    )
    orchestrator.start()
    ...
    orchestrator.cancel()

Delivery guarantees
-------------------
- ``on_start`` fires at most once, and ``on_next`` only after it.
- Nothing is delivered after ``on_error`` or ``on_complete`` except a
  release failure reported by ``cancel``.
- Errors are never raised to the caller of ``start`` or ``cancel``; they
  arrive through ``on_error``.
- Callbacks run while the orchestrator's lock is held, which keeps them
  ordered.  A callback may call back into the same orchestrator on its
  own thread, but must not block waiting on another thread that reads
  ``state`` or ``subscription_id`` or calls ``cancel``; that deadlocks.
"""
from __future__ import annotations

import concurrent.futures
import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Any

from modelsync.auth.candidates import AuthCandidate, CandidateSource, Fixed, candidates_for_schema
from modelsync.config import ModelSyncConfig
from modelsync.errors import (
    CandidateSourceError,
    DecorationError,
    EndpointError,
    ModelSyncError,
    SubscriptionError,
    UsageError,
)
from modelsync.request.builder import build_subscription_request
from modelsync.request.decorator import AuthRuleRequestDecorator, ClaimsProvider
from modelsync.request.request import GraphQLRequest, SubscriptionType
from modelsync.subscription.endpoint import SubscriptionEndpoint
from modelsync.subscription.state import SubscriptionState

if TYPE_CHECKING:
    from modelsync.schema.nodes import ModelSchema

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_EXHAUSTED = object()
_UNREAD = object()


class _CandidateCursor:
    """One-candidate lookahead over a candidate source.

    Any failure while enumerating the source, or a value that is not an
    ``AuthCandidate``, raises ``CandidateSourceError``.
    """

    def __init__(self, source: CandidateSource) -> None:
        self._source = source
        self._iterator: Iterator[AuthCandidate] | None = None
        self._peeked: object = _UNREAD

    def has_next(self) -> bool:
        if self._peeked is _UNREAD:
            self._peeked = self._advance()
        return self._peeked is not _EXHAUSTED

    def next_candidate(self) -> AuthCandidate:
        if not self.has_next():
            raise CandidateSourceError("No authorization candidates remain")
        candidate = self._peeked
        self._peeked = _UNREAD
        return candidate  # type: ignore[return-value]

    def _advance(self) -> object:
        try:
            if self._iterator is None:
                self._iterator = iter(self._source)
            candidate = next(self._iterator)
        except StopIteration:
            return _EXHAUSTED
        except Exception as exc:
            raise CandidateSourceError(
                f"Error while iterating through authorization candidates: {exc}"
            ) from exc
        if not isinstance(candidate, AuthCandidate):
            raise CandidateSourceError(
                f"Authorization candidate source yielded {candidate!r}, not an AuthCandidate"
            )
        return candidate


class _Attempt:
    """One submission of the request for one candidate.

    ``settled`` is set exactly once: by the endpoint's first outcome, or
    by ``cancel``.  ``error`` is set when the attempt failed.
    """

    __slots__ = ("candidate", "settled", "error")

    def __init__(self, candidate: AuthCandidate) -> None:
        self.candidate = candidate
        self.settled = threading.Event()
        self.error: SubscriptionError | None = None


def _as_endpoint_error(error: object) -> SubscriptionError:
    if isinstance(error, SubscriptionError):
        return error
    if isinstance(error, ModelSyncError):
        return EndpointError(error.message, error.recovery_suggestion)
    return EndpointError(str(error) or type(error).__name__)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class SubscriptionOrchestrator:
    """Drive one subscription across its authorization candidates.

    Parameters
    ----------
    request:
        The subscription request, undecorated.
    endpoint:
        Transport used to open and release subscriptions.
    candidates:
        ``Fixed`` or ``RuleDerived`` candidate source.
    on_start:
        Called with the subscription identifier once a candidate succeeds.
    on_next:
        Called with each item delivered while the subscription is active.
    on_error:
        Called with a ``ModelSyncError`` subclass on failure.
    on_complete:
        Called when the backend ends an active subscription.
    decorator:
        Decorates the request per candidate.  ``None`` submits the
        request unchanged for every candidate.
    executor:
        Runs the candidate loop.  When ``None``, each ``start`` runs the
        loop on a dedicated worker thread, so a pending handshake never
        holds up another subscription.
    config:
        Library configuration; defaults to ``ModelSyncConfig()``.
    """

    def __init__(
        self,
        request: GraphQLRequest,
        endpoint: SubscriptionEndpoint,
        candidates: CandidateSource,
        on_start: Callable[[str], None],
        on_next: Callable[[Any], None],
        on_error: Callable[[ModelSyncError], None],
        on_complete: Callable[[], None],
        decorator: AuthRuleRequestDecorator | None = None,
        executor: Executor | None = None,
        config: ModelSyncConfig | None = None,
    ) -> None:
        self._request = request
        self._endpoint = endpoint
        self._candidates = candidates
        self._on_start = on_start
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete
        self._decorator = decorator
        self._config = config if config is not None else ModelSyncConfig()
        self._executor = executor

        # Guards everything below.
        self._lock = threading.RLock()
        self._state = SubscriptionState.IDLE
        self._subscription_id: str | None = None
        self._future: Future[None] | None = None
        self._attempt: _Attempt | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SubscriptionState:
        with self._lock:
            return self._state

    @property
    def subscription_id(self) -> str | None:
        with self._lock:
            return self._subscription_id

    @property
    def request(self) -> GraphQLRequest:
        return self._request

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin trying candidates on a background task.

        Only valid once, from ``IDLE``.  Otherwise a ``UsageError`` is
        delivered to ``on_error`` before this method returns, and nothing
        else happens.
        """
        with self._lock:
            if self._state is not SubscriptionState.IDLE:
                if self._state is SubscriptionState.CANCELED:
                    error = UsageError(
                        "Operation already canceled.",
                        "Don't cancel the subscription before starting it!",
                    )
                else:
                    error = UsageError(
                        f"Subscription cannot be started while {self._state.name}."
                    )
                self._on_error(error)
                return
            self._transition(SubscriptionState.STARTING)

        # Submitted outside the lock so an inline executor cannot hold it
        # while the attempt waits on another thread.
        if self._executor is not None:
            executor = self._executor
        else:
            executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix=self._config.thread_name_prefix
            )
        try:
            future = executor.submit(self._run)
        except RuntimeError as exc:
            self._fail(SubscriptionError(f"Unable to schedule subscription: {exc}"))
            return
        finally:
            if executor is not self._executor:
                # The worker exits once the candidate loop returns.
                executor.shutdown(wait=False)
        with self._lock:
            self._future = future

    def cancel(self) -> None:
        """Cancel the subscription.  Idempotent; never raises.

        An active subscription is released at the endpoint.  A pending
        attempt is interrupted.  A subscription that was never started
        can no longer be started.  A finished one is left alone.
        """
        release_id: str | None = None
        with self._lock:
            state = self._state
            if state is SubscriptionState.ACTIVE:
                self._transition(SubscriptionState.CANCELED)
                release_id = self._subscription_id
            elif state is SubscriptionState.STARTING:
                self._transition(SubscriptionState.CANCELED)
                if self._attempt is not None:
                    self._attempt.settled.set()
                if self._future is not None and self._future.cancel():
                    logger.debug("Subscription attempt was canceled before it ran.")
                else:
                    logger.debug("Interrupted in-flight subscription attempt.")
            elif state is SubscriptionState.IDLE:
                self._transition(SubscriptionState.CANCELED)
                logger.debug("Subscription canceled before it was started.")
            else:
                logger.debug("Nothing to cancel. Subscription is already %s.", state.name)

        if release_id is not None:
            logger.debug("Cancelling subscription: %s", release_id)
            try:
                self._endpoint.release_subscription(release_id)
            except Exception as exc:
                self._on_error(_as_endpoint_error(exc))

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the candidate loop to finish.

        Returns ``True`` if the loop finished (or never ran) within
        *timeout* seconds.
        """
        with self._lock:
            future = self._future
        if future is None:
            return True
        done, _ = concurrent.futures.wait([future], timeout=timeout)
        return bool(done)

    # ------------------------------------------------------------------
    # Candidate loop (background task)
    # ------------------------------------------------------------------

    def _run(self) -> None:
        try:
            self._try_candidates()
        except CandidateSourceError as exc:
            self._fail(exc)
        except Exception as exc:
            logger.exception("Subscription loop failed unexpectedly")
            self._fail(SubscriptionError(f"Unexpected failure while starting subscription: {exc}"))

    def _try_candidates(self) -> None:
        cursor = _CandidateCursor(self._candidates)
        decorate_every_candidate = isinstance(self._candidates, Fixed)
        logger.debug("Requesting subscription: %s", self._request.document)
        logger.debug("Using auth types: %r", self._candidates)

        while True:
            with self._lock:
                if self._state is not SubscriptionState.STARTING:
                    return
            if not cursor.has_next():
                logger.debug("Authorization candidates exhausted.")
                return
            candidate = cursor.next_candidate()
            logger.debug("Attempting to set up subscription with authType = %s", candidate.auth_type.value)

            request = self._request
            if self._decorator is not None and (decorate_every_candidate or candidate.is_owner_strategy):
                try:
                    request = self._decorator.decorate(request, candidate.auth_type)
                except DecorationError as exc:
                    if cursor.has_next():
                        logger.debug("Unable to decorate request for %s; trying next candidate.", candidate.auth_type.value)
                        continue
                    self._fail(exc)
                    return

            attempt = _Attempt(candidate)
            with self._lock:
                if self._state is not SubscriptionState.STARTING:
                    return
                self._attempt = attempt
            try:
                self._endpoint.request_subscription(
                    request,
                    candidate.auth_type,
                    partial(self._handle_started, attempt),
                    partial(self._handle_next, attempt),
                    partial(self._handle_error, attempt),
                    partial(self._handle_complete, attempt),
                )
            except EndpointError as exc:
                self._handle_error(attempt, exc)
            attempt.settled.wait()

            if attempt.error is None:
                # Started, or interrupted by cancel().
                return
            if cursor.has_next():
                logger.debug("Subscription attempt with %s failed; trying next candidate.", candidate.auth_type.value)
                continue
            self._fail(attempt.error)
            return

    def _fail(self, error: ModelSyncError) -> None:
        with self._lock:
            if self._state is not SubscriptionState.STARTING:
                logger.debug("Not reporting %r; subscription is %s.", error, self._state.name)
                return
            self._transition(SubscriptionState.FAILED)
            self._on_error(error)

    # ------------------------------------------------------------------
    # Endpoint hooks
    # ------------------------------------------------------------------

    def _handle_started(self, attempt: _Attempt, subscription_id: str) -> None:
        with self._lock:
            if self._attempt is attempt and self._subscription_id == subscription_id:
                return
            if (
                self._state is SubscriptionState.STARTING
                and self._attempt is attempt
                and not attempt.settled.is_set()
            ):
                self._subscription_id = subscription_id
                self._transition(SubscriptionState.ACTIVE)
                attempt.settled.set()
                logger.debug("Subscription started: %s", subscription_id)
                self._on_start(subscription_id)
                return
        logger.debug("Releasing subscription %s that started after its attempt settled.", subscription_id)
        try:
            self._endpoint.release_subscription(subscription_id)
        except Exception as exc:
            logger.warning("Unable to release orphaned subscription %s: %s", subscription_id, exc)

    def _handle_next(self, attempt: _Attempt, item: Any) -> None:
        with self._lock:
            if self._state is SubscriptionState.ACTIVE and self._attempt is attempt:
                self._on_next(item)
                return
        logger.debug("Dropping item delivered outside an active subscription.")

    def _handle_error(self, attempt: _Attempt, error: object) -> None:
        with self._lock:
            if self._attempt is attempt:
                if self._state is SubscriptionState.STARTING and not attempt.settled.is_set():
                    attempt.error = _as_endpoint_error(error)
                    attempt.settled.set()
                    return
                if self._state is SubscriptionState.ACTIVE:
                    self._transition(SubscriptionState.FAILED)
                    self._on_error(_as_endpoint_error(error))
                    return
        logger.debug("Ignoring error from a settled subscription attempt: %s", error)

    def _handle_complete(self, attempt: _Attempt) -> None:
        with self._lock:
            if self._attempt is attempt:
                if self._state is SubscriptionState.ACTIVE:
                    self._transition(SubscriptionState.COMPLETED)
                    self._on_complete()
                    return
                if self._state is SubscriptionState.STARTING and not attempt.settled.is_set():
                    attempt.error = EndpointError("Subscription closed before it was acknowledged.")
                    attempt.settled.set()
                    return
        logger.debug("Ignoring completion of a settled subscription attempt.")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _transition(self, target: SubscriptionState) -> None:
        # Callers hold self._lock.
        if not self._state.can_transition_to(target):
            raise RuntimeError(
                f"Illegal subscription state transition {self._state.name} -> {target.name}"
            )
        logger.debug("Subscription state %s -> %s", self._state.name, target.name)
        self._state = target


def subscribe(
    schema: "ModelSchema",
    subscription_type: SubscriptionType,
    endpoint: SubscriptionEndpoint,
    on_start: Callable[[str], None],
    on_next: Callable[[Any], None],
    on_error: Callable[[ModelSyncError], None],
    on_complete: Callable[[], None],
    claims_provider: ClaimsProvider | None = None,
    executor: Executor | None = None,
    config: ModelSyncConfig | None = None,
) -> SubscriptionOrchestrator:
    """Build, wire and start a subscription to *schema* events.

    The request is built from *schema*, candidates are derived from its
    authorization rules, and owner claims are read from
    *claims_provider* when one is given.  Build errors are raised here;
    everything after ``start`` arrives through *on_error*.
    """
    config = config if config is not None else ModelSyncConfig()
    orchestrator = SubscriptionOrchestrator(
        request=build_subscription_request(schema, subscription_type),
        endpoint=endpoint,
        candidates=candidates_for_schema(schema, config.default_authorization_type),
        on_start=on_start,
        on_next=on_next,
        on_error=on_error,
        on_complete=on_complete,
        decorator=AuthRuleRequestDecorator(claims_provider) if claims_provider is not None else None,
        executor=executor,
        config=config,
    )
    orchestrator.start()
    return orchestrator
