"""modelsync — GraphQL request builder and multi-auth subscription orchestrator.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import modelsync
    from modelsync.predicate import QueryField
    from modelsync.request import SubscriptionType

    # Load a model schema from a YAML/JSON document
    schema = modelsync.load_schema("todo.yaml")

    # Compile a predicate into a filter
    modelsync.compile_predicate(QueryField("priority").gt(3))
    # {"priority": {"gt": 3}}

    # Build documents
    sync = modelsync.build_sync_request(schema, last_sync=123123123, limit=1000)
    create = modelsync.build_creation_request(schema, {"id": "1", "description": "Mop"})

    # Subscribe across the schema's authorization candidates
    subscription = modelsync.subscribe(
        schema, SubscriptionType.ON_CREATE, endpoint,
        on_start=..., on_next=..., on_error=..., on_complete=...,
    )
    subscription.cancel()

    modelsync.__version__
    '0.1.0'
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from modelsync.errors import ModelSyncError
    from modelsync.predicate.nodes import Predicate
    from modelsync.request.decorator import ClaimsProvider
    from modelsync.request.request import GraphQLRequest, SubscriptionType
    from modelsync.schema.nodes import ModelSchema
    from modelsync.subscription.endpoint import SubscriptionEndpoint
    from modelsync.subscription.orchestrator import SubscriptionOrchestrator


def load_schema(path: str | Path) -> "ModelSchema":
    """Load a ``ModelSchema`` from a YAML or JSON document.

    Raises
    ------
    modelsync.errors.SchemaIntrospectionError
        If the document is malformed.
    """
    from modelsync.schema.serializer import load_schema as _load_schema

    return _load_schema(path)


def compile_predicate(predicate: "Predicate") -> dict[str, Any] | None:
    """Compile a predicate tree into a filter mapping.

    Parameters
    ----------
    predicate:
        Any predicate node, or ``MATCH_ALL``.

    Returns
    -------
    dict[str, Any] | None
        The filter, or ``None`` for ``MATCH_ALL``.
    """
    from modelsync.predicate.compiler import compile_predicate as _compile

    return _compile(predicate)


def build_sync_request(
    schema: "ModelSchema",
    last_sync: int | None = None,
    limit: int | None = None,
    predicate: "Predicate | None" = None,
) -> "GraphQLRequest":
    """Build a base-sync (``last_sync=None``) or delta-sync query.

    ``predicate=None`` is the same as ``MATCH_ALL``.
    """
    from modelsync.predicate.nodes import MATCH_ALL
    from modelsync.request.builder import build_sync_request as _build

    return _build(schema, last_sync, limit, MATCH_ALL if predicate is None else predicate)


def build_creation_request(schema: "ModelSchema", model: object) -> "GraphQLRequest":
    """Build a ``create`` mutation for *model*."""
    from modelsync.request.builder import build_creation_request as _build

    return _build(schema, model)


def build_update_request(
    schema: "ModelSchema",
    model: object,
    expected_version: int,
    predicate: "Predicate | None" = None,
) -> "GraphQLRequest":
    """Build an ``update`` mutation guarded by *expected_version*."""
    from modelsync.predicate.nodes import MATCH_ALL
    from modelsync.request.builder import build_update_request as _build

    return _build(schema, model, expected_version, MATCH_ALL if predicate is None else predicate)


def build_deletion_request(
    schema: "ModelSchema",
    model_id: str,
    expected_version: int,
    predicate: "Predicate | None" = None,
) -> "GraphQLRequest":
    """Build a ``delete`` mutation for the model identified by *model_id*."""
    from modelsync.predicate.nodes import MATCH_ALL
    from modelsync.request.builder import build_deletion_request as _build

    return _build(schema, model_id, expected_version, MATCH_ALL if predicate is None else predicate)


def build_subscription_request(
    schema: "ModelSchema", subscription_type: "SubscriptionType"
) -> "GraphQLRequest":
    """Build an undecorated subscription to *subscription_type* events."""
    from modelsync.request.builder import build_subscription_request as _build

    return _build(schema, subscription_type)


def subscribe(
    schema: "ModelSchema",
    subscription_type: "SubscriptionType",
    endpoint: "SubscriptionEndpoint",
    on_start: Callable[[str], None],
    on_next: Callable[[Any], None],
    on_error: Callable[["ModelSyncError"], None],
    on_complete: Callable[[], None],
    claims_provider: "ClaimsProvider | None" = None,
) -> "SubscriptionOrchestrator":
    """Start a subscription to *schema* events and return its orchestrator.

    Candidates are derived from the schema's authorization rules.  Errors
    after the request is built arrive through *on_error*.
    """
    from modelsync.subscription.orchestrator import subscribe as _subscribe

    return _subscribe(
        schema,
        subscription_type,
        endpoint,
        on_start,
        on_next,
        on_error,
        on_complete,
        claims_provider=claims_provider,
    )


__all__ = [
    "__version__",
    "load_schema",
    "compile_predicate",
    "build_sync_request",
    "build_creation_request",
    "build_update_request",
    "build_deletion_request",
    "build_subscription_request",
    "subscribe",
]
