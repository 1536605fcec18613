"""Unit tests for modelsync.request.decorator — owner-claim decoration."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from modelsync.auth import AuthorizationType
from modelsync.errors import DecorationError
from modelsync.request import (
    AuthRuleRequestDecorator,
    ClaimsProvider,
    StaticClaimsProvider,
    SubscriptionType,
    build_subscription_request,
    build_sync_request,
)
from modelsync.schema import AuthProvider, AuthRule, AuthStrategy, ModelField, ModelSchema

USER_POOLS = AuthorizationType.AMAZON_COGNITO_USER_POOLS


def _decorator(**claims: object) -> AuthRuleRequestDecorator:
    return AuthRuleRequestDecorator(StaticClaimsProvider(claims))


def _schema(*rules: AuthRule) -> ModelSchema:
    return ModelSchema(
        name="Todo",
        fields=(ModelField("id", "ID", is_required=True), ModelField("author")),
        auth_rules=rules,
    )


class TestStaticClaimsProvider:
    def test_identity_auth_types_get_claims(self) -> None:
        provider = StaticClaimsProvider({"username": "johndoe"})
        assert provider.get_claim(USER_POOLS, "username") == "johndoe"
        assert provider.get_claim(AuthorizationType.OPENID_CONNECT, "username") == "johndoe"

    def test_other_auth_types_get_nothing(self) -> None:
        provider = StaticClaimsProvider({"username": "johndoe"})
        assert provider.get_claim(AuthorizationType.API_KEY, "username") is None
        assert provider.get_claim(AuthorizationType.AWS_IAM, "username") is None


class TestDecorate:
    def test_adds_owner_argument(self, todo_schema: ModelSchema) -> None:
        request = build_subscription_request(todo_schema, SubscriptionType.ON_CREATE)
        decorated = _decorator(username="johndoe").decorate(request, USER_POOLS)
        assert decorated.document.startswith(
            "subscription OnCreateTodo($owner: String!) { onCreateTodo(owner: $owner) {"
        )
        assert dict(decorated.variables) == {"owner": "johndoe"}
        assert dict(request.variables) == {}

    def test_custom_owner_field_and_claim(self) -> None:
        schema = _schema(AuthRule(AuthStrategy.OWNER, owner_field="author", identity_claim="sub"))
        request = build_subscription_request(schema, SubscriptionType.ON_UPDATE)
        decorated = _decorator(sub="abc-123").decorate(request, USER_POOLS)
        assert dict(decorated.variables) == {"author": "abc-123"}

    def test_api_key_is_unchanged(self, todo_schema: ModelSchema) -> None:
        request = build_subscription_request(todo_schema, SubscriptionType.ON_CREATE)
        assert _decorator().decorate(request, AuthorizationType.API_KEY) is request

    def test_non_subscription_is_unchanged(self, todo_schema: ModelSchema) -> None:
        request = build_sync_request(todo_schema)
        assert _decorator().decorate(request, USER_POOLS) is request

    def test_no_owner_rule_for_provider(self) -> None:
        schema = _schema(AuthRule(AuthStrategy.OWNER, provider=AuthProvider.OIDC))
        request = build_subscription_request(schema, SubscriptionType.ON_CREATE)
        assert _decorator().decorate(request, USER_POOLS) is request

    def test_missing_claim(self, todo_schema: ModelSchema) -> None:
        request = build_subscription_request(todo_schema, SubscriptionType.ON_CREATE)
        with pytest.raises(DecorationError, match="'username'"):
            _decorator().decorate(request, USER_POOLS)

    def test_empty_claim(self, todo_schema: ModelSchema) -> None:
        request = build_subscription_request(todo_schema, SubscriptionType.ON_CREATE)
        with pytest.raises(DecorationError):
            _decorator(username="").decorate(request, USER_POOLS)

    def test_two_owner_rules_for_one_provider(self) -> None:
        schema = _schema(
            AuthRule(AuthStrategy.OWNER),
            AuthRule(AuthStrategy.OWNER, owner_field="author"),
        )
        request = build_subscription_request(schema, SubscriptionType.ON_CREATE)
        with pytest.raises(DecorationError, match="2 owner rules"):
            _decorator(username="johndoe").decorate(request, USER_POOLS)

    def test_group_member_is_not_restricted(self) -> None:
        schema = _schema(
            AuthRule(AuthStrategy.OWNER),
            AuthRule(AuthStrategy.GROUP, groups=("Admins",)),
        )
        request = build_subscription_request(schema, SubscriptionType.ON_CREATE)
        claims = {"username": "johndoe", "cognito:groups": ["Users", "Admins"]}
        decorated = _decorator(**claims).decorate(request, USER_POOLS)
        assert decorated is request

    def test_non_member_is_restricted(self) -> None:
        schema = _schema(
            AuthRule(AuthStrategy.OWNER, owner_field="author"),
            AuthRule(AuthStrategy.GROUP, groups=("Admins",)),
        )
        request = build_subscription_request(schema, SubscriptionType.ON_CREATE)
        claims = {"username": "johndoe", "cognito:groups": "Users"}
        decorated = _decorator(**claims).decorate(request, USER_POOLS)
        assert dict(decorated.variables) == {"author": "johndoe"}

    def test_claims_are_read_for_the_candidate_auth_type(self, todo_schema: ModelSchema) -> None:
        provider = MagicMock(spec=ClaimsProvider)
        provider.get_claim.return_value = "johndoe"
        request = build_subscription_request(todo_schema, SubscriptionType.ON_DELETE)
        AuthRuleRequestDecorator(provider).decorate(request, USER_POOLS)
        provider.get_claim.assert_called_once_with(USER_POOLS, "username")
