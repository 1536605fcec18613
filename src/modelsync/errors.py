"""Error taxonomy for modelsync.

Every error raised or reported by the library derives from
``ModelSyncError`` and carries a ``recovery_suggestion`` so that callers
and the CLI can show an actionable hint next to the message.

Build-time errors (``InvalidPredicateError``, ``SchemaIntrospectionError``,
``ModelFieldAccessError``) are raised synchronously from the build call.
Subscription errors are never raised to the caller of
``SubscriptionOrchestrator.start``; they are delivered through its
``on_error`` channel.
"""
from __future__ import annotations


class ModelSyncError(Exception):
    """Base class for all modelsync errors.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    recovery_suggestion:
        Short hint describing what the caller can do about it.
    """

    default_suggestion: str = "See the error message for details."

    def __init__(self, message: str, recovery_suggestion: str | None = None) -> None:
        self.message = message
        self.recovery_suggestion = recovery_suggestion or self.default_suggestion
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class UsageError(ModelSyncError):
    """The library was driven in an order it does not support."""

    default_suggestion = "Create a new subscription instead of reusing this one."


class InvalidPredicateError(ModelSyncError):
    """A predicate tree is structurally malformed."""

    default_suggestion = "Build predicates with QueryField and the and_/or_/not_ combinators."


class SchemaIntrospectionError(ModelSyncError):
    """A schema field cannot be rendered into a document."""

    default_suggestion = "Check the field names and types declared on the model schema."

    def __init__(
        self,
        message: str,
        schema_name: str | None = None,
        field_name: str | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        self.schema_name = schema_name
        self.field_name = field_name
        super().__init__(message, recovery_suggestion)


class ModelFieldAccessError(ModelSyncError):
    """A model instance cannot yield a value for a declared field."""

    default_suggestion = "Make sure the model exposes every required field of its schema."

    def __init__(
        self,
        schema_name: str,
        field_name: str,
        cause: BaseException | None = None,
    ) -> None:
        self.schema_name = schema_name
        self.field_name = field_name
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Unable to read field {field_name!r} of model {schema_name!r}{detail}"
        )


class SubscriptionError(ModelSyncError):
    """Base class for failures reported by the subscription orchestrator."""

    default_suggestion = "Check the subscription endpoint and authorization configuration."


class DecorationError(SubscriptionError):
    """A request could not be decorated for an authorization candidate."""

    default_suggestion = "Sign in, or make sure the identity claim is present in the token."


class EndpointError(SubscriptionError):
    """The subscription endpoint reported a transport-level failure."""

    default_suggestion = "Check network connectivity and the backend's authorization modes."


class CandidateSourceError(SubscriptionError):
    """The authorization candidate source could not be enumerated."""

    default_suggestion = "Check the authorization rules declared on the model schema."


__all__ = [
    "ModelSyncError",
    "UsageError",
    "InvalidPredicateError",
    "SchemaIntrospectionError",
    "ModelFieldAccessError",
    "SubscriptionError",
    "DecorationError",
    "EndpointError",
    "CandidateSourceError",
]
