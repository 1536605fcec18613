"""Per-candidate request decoration for owner-based authorization.

A subscription to a model guarded by an ``OWNER`` rule must name the
owner it listens for.  ``AuthRuleRequestDecorator`` adds that argument
for one authorization candidate::

    subscription OnCreateTodo($owner: String!) { onCreateTodo(owner: $owner) { ... } }

The owner's identity is read from the caller's token through a
``ClaimsProvider``.  Requests that are not subscriptions, candidates whose
credentials carry no identity, and callers that belong to a group granted
access by a ``GROUP`` rule are returned unchanged.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from modelsync.auth.types import AuthorizationType
from modelsync.errors import DecorationError
from modelsync.request.request import GraphQLRequest, OperationType
from modelsync.request.selection import check_name
from modelsync.schema.nodes import AuthRule, AuthStrategy, ModelSchema

logger = logging.getLogger(__name__)


class ClaimsProvider(ABC):
    """Source of identity claims for the signed-in caller."""

    @abstractmethod
    def get_claim(self, auth_type: AuthorizationType, claim: str) -> object | None:
        """Return the value of *claim* in the token used for *auth_type*.

        Returns ``None`` when the caller is not signed in or the token
        lacks the claim.
        """


class StaticClaimsProvider(ClaimsProvider):
    """Serve the same fixed claims for every identity-carrying auth type.

    Parameters
    ----------
    claims:
        Claim name → value, e.g. ``{"username": "johndoe"}``.
    """

    def __init__(self, claims: Mapping[str, object]) -> None:
        self._claims = dict(claims)

    def get_claim(self, auth_type: AuthorizationType, claim: str) -> object | None:
        if not auth_type.carries_identity:
            return None
        return self._claims.get(claim)


class AuthRuleRequestDecorator:
    """Add the owner argument required by ``OWNER`` rules to subscriptions.

    Parameters
    ----------
    claims_provider:
        Where the caller's identity claims are read from.
    """

    def __init__(self, claims_provider: ClaimsProvider) -> None:
        self._claims_provider = claims_provider

    def decorate(self, request: GraphQLRequest, auth_type: AuthorizationType) -> GraphQLRequest:
        """Return *request* decorated for *auth_type*.

        Raises
        ------
        DecorationError
            If the schema declares more than one owner rule for
            *auth_type*, or the caller's token lacks the identity claim.
        """
        schema = request.model_schema
        if (
            schema is None
            or request.operation_type is not OperationType.SUBSCRIPTION
            or not auth_type.carries_identity
        ):
            return request
        owner_rule = self._owner_rule(schema, auth_type)
        if owner_rule is None:
            return request
        if self._in_authorized_group(schema, auth_type):
            logger.debug("Caller is in an authorized group; not restricting %s to an owner", schema.name)
            return request

        identity = self._claims_provider.get_claim(auth_type, owner_rule.identity_claim)
        if identity is None or identity == "":
            raise DecorationError(
                f"Attempted to subscribe to {schema.name!r}, which uses owner-based "
                f"authorization, without the {owner_rule.identity_claim!r} identity claim"
            )
        owner_field = check_name(owner_rule.owner_field, schema.name)
        return request.with_variable(owner_field, "String!", str(identity))

    @staticmethod
    def _owner_rule(schema: ModelSchema, auth_type: AuthorizationType) -> AuthRule | None:
        rules = [rule for rule in schema.owner_rules() if rule.authorization_type is auth_type]
        if len(rules) > 1:
            raise DecorationError(
                f"{schema.name!r} declares {len(rules)} owner rules for {auth_type.value}",
                "Declare a single owner rule per identity provider.",
            )
        return rules[0] if rules else None

    def _in_authorized_group(self, schema: ModelSchema, auth_type: AuthorizationType) -> bool:
        for rule in schema.auth_rules:
            if rule.strategy is not AuthStrategy.GROUP or rule.authorization_type is not auth_type:
                continue
            claimed = self._claims_provider.get_claim(auth_type, rule.group_claim)
            if isinstance(claimed, str):
                claimed_groups = {claimed}
            elif isinstance(claimed, (list, tuple, set, frozenset)):
                claimed_groups = {str(group) for group in claimed}
            else:
                continue
            if claimed_groups & set(rule.groups):
                return True
        return False
