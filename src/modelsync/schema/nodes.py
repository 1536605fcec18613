"""Model schema definitions consumed by the request builder.

A ``ModelSchema`` is the already-resolved description of one data model:
its fields, the embedded custom types those fields refer to, and the
ordered authorization rules that guard it.  Every node is a frozen
dataclass so that schemas are immutable and can be shared freely between
threads.

The schema is read-only input.  Nothing in this package derives a schema
from annotated classes; callers construct one directly or load it with
``SchemaSerializer``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping

from modelsync.auth.types import AuthorizationType

# Fields the backend adds to every synchronized model.
SYSTEM_FIELDS: tuple[str, ...] = ("_deleted", "_lastChangedAt", "_version")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FieldKind(Enum):
    """What a field's ``target_type`` refers to."""

    SCALAR = auto()
    ENUM = auto()
    CUSTOM_TYPE = auto()
    MODEL = auto()


class Association(Enum):
    """Relationship kind for fields that reference another model."""

    BELONGS_TO = auto()
    HAS_ONE = auto()
    HAS_MANY = auto()


class AuthProvider(Enum):
    """Identity provider backing an authorization rule."""

    USER_POOLS = "userPools"
    OIDC = "oidc"
    IAM = "iam"
    API_KEY = "apiKey"
    FUNCTION = "function"

    @property
    def authorization_type(self) -> AuthorizationType:
        """Return the authorization mechanism used for this provider."""
        return _PROVIDER_TO_AUTH_TYPE[self]


class AuthStrategy(Enum):
    """Who a rule grants access to."""

    OWNER = "owner"
    GROUP = "groups"
    PRIVATE = "private"
    PUBLIC = "public"

    @property
    def default_provider(self) -> AuthProvider:
        """Return the provider assumed when a rule does not name one."""
        if self is AuthStrategy.PUBLIC:
            return AuthProvider.API_KEY
        return AuthProvider.USER_POOLS


_PROVIDER_TO_AUTH_TYPE: dict[AuthProvider, AuthorizationType] = {
    AuthProvider.USER_POOLS: AuthorizationType.AMAZON_COGNITO_USER_POOLS,
    AuthProvider.OIDC: AuthorizationType.OPENID_CONNECT,
    AuthProvider.IAM: AuthorizationType.AWS_IAM,
    AuthProvider.API_KEY: AuthorizationType.API_KEY,
    AuthProvider.FUNCTION: AuthorizationType.AWS_LAMBDA,
}


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ModelField:
    """A single field declared on a model or custom type.

    Parameters
    ----------
    name:
        Field name as it appears in documents and mutation input.
    target_type:
        GraphQL type name, e.g. ``"String"``, ``"AWSDateTime"``, the name of
        a custom type, or the name of a referenced model.
    kind:
        What ``target_type`` refers to.
    is_required:
        Whether the field is non-nullable.
    is_list:
        Whether the field holds a list of ``target_type`` values.
    is_read_only:
        Read-only fields (e.g. ``createdAt``) are selected but never sent
        as mutation input.
    association:
        Relationship kind when ``kind`` is ``MODEL``.
    target_name:
        For ``BELONGS_TO`` associations, the input field that carries the
        referenced model's identifier, e.g. ``"postID"``.
    """

    name: str
    target_type: str = "String"
    kind: FieldKind = FieldKind.SCALAR
    is_required: bool = False
    is_list: bool = False
    is_read_only: bool = False
    association: Association | None = None
    target_name: str | None = None

    @property
    def is_custom_type(self) -> bool:
        return self.kind is FieldKind.CUSTOM_TYPE

    @property
    def is_model(self) -> bool:
        return self.kind is FieldKind.MODEL


@dataclass(frozen=True, slots=True)
class CustomTypeSchema:
    """An embedded, non-model type whose fields are inlined into documents."""

    name: str
    fields: tuple[ModelField, ...]


@dataclass(frozen=True, slots=True)
class AuthRule:
    """One authorization rule declared on a model.

    Parameters
    ----------
    strategy:
        Who the rule grants access to.
    owner_field:
        For ``OWNER`` rules, the model field holding the owner's identity.
    identity_claim:
        For ``OWNER`` rules, the token claim compared against ``owner_field``.
    group_claim:
        For ``GROUP`` rules, the token claim listing the caller's groups.
    groups:
        For ``GROUP`` rules, the groups that are granted access.
    provider:
        The identity provider; ``None`` means the strategy's default.
    """

    strategy: AuthStrategy
    owner_field: str = "owner"
    identity_claim: str = "username"
    group_claim: str = "cognito:groups"
    groups: tuple[str, ...] = ()
    provider: AuthProvider | None = None

    @property
    def effective_provider(self) -> AuthProvider:
        """Return the declared provider or the strategy's default."""
        return self.provider if self.provider is not None else self.strategy.default_provider

    @property
    def authorization_type(self) -> AuthorizationType:
        return self.effective_provider.authorization_type

    @property
    def is_owner(self) -> bool:
        return self.strategy is AuthStrategy.OWNER


@dataclass(frozen=True)
class ModelSchema:
    """Immutable description of a data model.

    Parameters
    ----------
    name:
        Singular model name, e.g. ``"BlogOwner"``.
    fields:
        Declared fields, in declaration order.
    plural_name:
        Plural used for sync operation names; defaults to ``name + "s"``.
    auth_rules:
        Authorization rules, in declaration order.
    custom_types:
        Custom types reachable from ``fields``, keyed by type name.
    """

    name: str
    fields: tuple[ModelField, ...]
    plural_name: str | None = None
    auth_rules: tuple[AuthRule, ...] = ()
    custom_types: Mapping[str, CustomTypeSchema] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "auth_rules", tuple(self.auth_rules))
        object.__setattr__(self, "custom_types", MappingProxyType(dict(self.custom_types)))

    @property
    def plural(self) -> str:
        """Return the plural model name."""
        return self.plural_name or f"{self.name}s"

    def field(self, name: str) -> ModelField | None:
        """Return the declared field called *name*, or ``None``."""
        for model_field in self.fields:
            if model_field.name == name:
                return model_field
        return None

    def custom_type(self, name: str) -> CustomTypeSchema | None:
        """Return the custom type called *name*, or ``None``."""
        return self.custom_types.get(name)

    def owner_rules(self) -> tuple[AuthRule, ...]:
        """Return every ``OWNER`` rule, in declaration order."""
        return tuple(rule for rule in self.auth_rules if rule.is_owner)

    def owner_fields(self) -> frozenset[str]:
        """Return the names of all fields used by ``OWNER`` rules."""
        return frozenset(rule.owner_field for rule in self.owner_rules())
