"""GraphQL request construction.

Public API
----------
``RequestBuilder`` and the ``build_*`` functions assemble documents;
``GraphQLRequest`` is the value they return; ``AuthRuleRequestDecorator``
adds owner arguments to subscriptions per authorization candidate.
"""
from __future__ import annotations

from modelsync.request.builder import (
    RequestBuilder,
    build_creation_request,
    build_deletion_request,
    build_subscription_request,
    build_sync_request,
    build_update_request,
)
from modelsync.request.decorator import (
    AuthRuleRequestDecorator,
    ClaimsProvider,
    StaticClaimsProvider,
)
from modelsync.request.request import GraphQLRequest, OperationType, SubscriptionType
from modelsync.request.selection import SelectionSet
from modelsync.request.values import model_to_input, remove_unset_owner_fields

__all__ = [
    "GraphQLRequest",
    "OperationType",
    "SubscriptionType",
    "SelectionSet",
    "RequestBuilder",
    "build_sync_request",
    "build_creation_request",
    "build_update_request",
    "build_deletion_request",
    "build_subscription_request",
    "model_to_input",
    "remove_unset_owner_fields",
    "AuthRuleRequestDecorator",
    "ClaimsProvider",
    "StaticClaimsProvider",
]
