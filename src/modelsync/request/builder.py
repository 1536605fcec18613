"""GraphQL document builder for model operations.

One entry point per operation kind.  Every entry point is pure: it reads
the schema, the model and the predicate and returns a new
``GraphQLRequest``; nothing is cached and nothing is sent.

Operation reference (schema ``BlogOwner``, plural ``BlogOwners``)
------------------------------------------------------------------

Entry point                     Document
------------------------------  ----------------------------------------------------
``build_sync_request``          ``query SyncBlogOwners { syncBlogOwners { items {..} nextToken startedAt } }``
``build_creation_request``      ``mutation CreateBlogOwner($input: CreateBlogOwnerInput!) {..}``
``build_update_request``        ``mutation UpdateBlogOwner($condition: .., $input: UpdateBlogOwnerInput!) {..}``
``build_deletion_request``      ``mutation DeleteBlogOwner($condition: .., $input: DeleteBlogOwnerInput!) {..}``
``build_subscription_request``  ``subscription OnCreateBlogOwner { onCreateBlogOwner {..} }``
"""
from __future__ import annotations

from typing import Any

from modelsync.predicate.compiler import PredicateCompiler
from modelsync.predicate.nodes import MATCH_ALL, Predicate
from modelsync.request.request import GraphQLRequest, OperationType, SubscriptionType
from modelsync.request.selection import check_name, model_selection, sync_selection
from modelsync.request.values import model_to_input, remove_unset_owner_fields
from modelsync.schema.nodes import ModelSchema


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def _upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


class RequestBuilder:
    """Assemble ``GraphQLRequest`` objects from a schema.

    Parameters
    ----------
    compiler:
        Compiler used for ``filter`` and ``condition`` variables.  Defaults
        to a fresh ``PredicateCompiler``.

    The builder holds no mutable state and may be shared between threads.
    """

    def __init__(self, compiler: PredicateCompiler | None = None) -> None:
        self._compiler = compiler if compiler is not None else PredicateCompiler()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def build_sync_request(
        self,
        schema: ModelSchema,
        last_sync: int | None = None,
        limit: int | None = None,
        predicate: Predicate = MATCH_ALL,
    ) -> GraphQLRequest:
        """Build a base-sync or delta-sync query.

        Parameters
        ----------
        schema:
            Schema of the model to sync.
        last_sync:
            Timestamp of the previous sync.  ``None`` builds a base sync;
            any value builds a delta sync carrying a ``lastSync`` variable.
        limit:
            Page size.  When set, a ``limit`` variable is declared.  The
            continuation token is attached later with
            ``request.with_variable("nextToken", "String", token)``.
        predicate:
            Filter applied by the backend; ``MATCH_ALL`` declares none.
        """
        plural = check_name(schema.plural, schema.name, what="plural model")
        variable_types: dict[str, str] = {}
        variables: dict[str, Any] = {}
        filter_ = self._compiler.compile(predicate)
        if filter_ is not None:
            variable_types["filter"] = f"Model{schema.name}FilterInput"
            variables["filter"] = filter_
        if last_sync is not None:
            variable_types["lastSync"] = "AWSTimestamp"
            variables["lastSync"] = last_sync
        if limit is not None:
            variable_types["limit"] = "Int"
            variables["limit"] = limit
        return GraphQLRequest(
            operation_type=OperationType.QUERY,
            operation_name=f"Sync{plural}",
            field_name=f"sync{plural}",
            selection_set=sync_selection(schema),
            variable_types=variable_types,
            variables=variables,
            model_schema=schema,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def build_creation_request(self, schema: ModelSchema, model: object) -> GraphQLRequest:
        """Build a ``create`` mutation whose input is read from *model*."""
        input_ = remove_unset_owner_fields(schema, model_to_input(schema, model))
        return self._mutation(schema, "create", input_, predicate=None)

    def build_update_request(
        self,
        schema: ModelSchema,
        model: object,
        expected_version: int,
        predicate: Predicate = MATCH_ALL,
    ) -> GraphQLRequest:
        """Build an ``update`` mutation guarded by *expected_version*.

        *predicate* becomes the ``condition`` variable unless it is
        ``MATCH_ALL``.
        """
        input_ = model_to_input(schema, model)
        input_["_version"] = expected_version
        input_ = remove_unset_owner_fields(schema, input_)
        return self._mutation(schema, "update", input_, predicate)

    def build_deletion_request(
        self,
        schema: ModelSchema,
        model_id: str,
        expected_version: int,
        predicate: Predicate = MATCH_ALL,
    ) -> GraphQLRequest:
        """Build a ``delete`` mutation for the model identified by *model_id*."""
        input_ = {"id": model_id, "_version": expected_version}
        return self._mutation(schema, "delete", input_, predicate)

    def _mutation(
        self,
        schema: ModelSchema,
        verb: str,
        input_: dict[str, Any],
        predicate: Predicate | None,
    ) -> GraphQLRequest:
        name = check_name(schema.name, schema.name, what="model")
        operation_name = f"{_upper_first(verb)}{name}"
        variable_types: dict[str, str] = {}
        variables: dict[str, Any] = {}
        if predicate is not None:
            condition = self._compiler.compile(predicate)
            if condition is not None:
                variable_types["condition"] = f"Model{name}ConditionInput"
                variables["condition"] = condition
        variable_types["input"] = f"{operation_name}Input!"
        variables["input"] = input_
        return GraphQLRequest(
            operation_type=OperationType.MUTATION,
            operation_name=operation_name,
            field_name=_lower_first(operation_name),
            selection_set=model_selection(schema),
            variable_types=variable_types,
            variables=variables,
            model_schema=schema,
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def build_subscription_request(
        self,
        schema: ModelSchema,
        subscription_type: SubscriptionType,
    ) -> GraphQLRequest:
        """Build a subscription to *subscription_type* events of *schema*.

        Owner claims are not part of the built document; they are added
        per authorization candidate by ``AuthRuleRequestDecorator``.
        """
        name = check_name(schema.name, schema.name, what="model")
        field_name = f"{subscription_type.value}{name}"
        return GraphQLRequest(
            operation_type=OperationType.SUBSCRIPTION,
            operation_name=_upper_first(field_name),
            field_name=field_name,
            selection_set=model_selection(schema),
            model_schema=schema,
        )


_BUILDER = RequestBuilder()


def build_sync_request(
    schema: ModelSchema,
    last_sync: int | None = None,
    limit: int | None = None,
    predicate: Predicate = MATCH_ALL,
) -> GraphQLRequest:
    """Build a sync query with a shared ``RequestBuilder``."""
    return _BUILDER.build_sync_request(schema, last_sync, limit, predicate)


def build_creation_request(schema: ModelSchema, model: object) -> GraphQLRequest:
    """Build a create mutation with a shared ``RequestBuilder``."""
    return _BUILDER.build_creation_request(schema, model)


def build_update_request(
    schema: ModelSchema,
    model: object,
    expected_version: int,
    predicate: Predicate = MATCH_ALL,
) -> GraphQLRequest:
    """Build an update mutation with a shared ``RequestBuilder``."""
    return _BUILDER.build_update_request(schema, model, expected_version, predicate)


def build_deletion_request(
    schema: ModelSchema,
    model_id: str,
    expected_version: int,
    predicate: Predicate = MATCH_ALL,
) -> GraphQLRequest:
    """Build a delete mutation with a shared ``RequestBuilder``."""
    return _BUILDER.build_deletion_request(schema, model_id, expected_version, predicate)


def build_subscription_request(
    schema: ModelSchema,
    subscription_type: SubscriptionType,
) -> GraphQLRequest:
    """Build a subscription with a shared ``RequestBuilder``."""
    return _BUILDER.build_subscription_request(schema, subscription_type)
