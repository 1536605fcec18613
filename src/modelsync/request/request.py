"""The ``GraphQLRequest`` value object and its document renderer.

A request keeps its document in structured form (operation, field,
selection set and typed variables) and renders the text on demand.  This
lets later stages add a variable, such as a continuation token or an
owner claim, without re-parsing text.

Document grammar
----------------
::

    <operation> <Name>($var: Type, ...) { <field>(var: $var, ...) { <selection> } }

The variable list and the argument list are omitted when the request
declares no variables.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from modelsync.request.selection import SelectionSet
    from modelsync.schema.nodes import ModelSchema


class OperationType(Enum):
    """Logical type tag of a GraphQL document."""

    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


class SubscriptionType(Enum):
    """Model events a subscription can listen to."""

    ON_CREATE = "onCreate"
    ON_UPDATE = "onUpdate"
    ON_DELETE = "onDelete"


@dataclass(frozen=True)
class GraphQLRequest:
    """An immutable GraphQL document plus its variables.

    Parameters
    ----------
    operation_type:
        Query, mutation or subscription.
    operation_name:
        Name of the operation, e.g. ``"SyncBlogOwners"``.
    field_name:
        Root field invoked by the operation, e.g. ``"syncBlogOwners"``.
    selection_set:
        Fields requested from the root field.
    variable_types:
        Declared variables, name → GraphQL type, in declaration order.
    variables:
        Variable values, name → JSON-compatible value.
    model_schema:
        Schema the request was built from, when there is one.  Used by
        request decorators; not part of equality.
    """

    operation_type: OperationType
    operation_name: str
    field_name: str
    selection_set: "SelectionSet"
    variable_types: Mapping[str, str] = field(default_factory=dict)
    variables: Mapping[str, Any] = field(default_factory=dict)
    model_schema: "ModelSchema | None" = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variable_types", MappingProxyType(dict(self.variable_types)))
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    @property
    def document(self) -> str:
        """Return the rendered document text."""
        declarations = ", ".join(f"${name}: {type_}" for name, type_ in self.variable_types.items())
        arguments = ", ".join(f"{name}: ${name}" for name in self.variable_types)
        header = f"{self.operation_type.value} {self.operation_name}"
        call = self.field_name
        if declarations:
            header = f"{header}({declarations})"
            call = f"{call}({arguments})"
        return f"{header} {{ {call} {{ {self.selection_set.render()} }} }}"

    @property
    def content(self) -> str:
        """Return the JSON envelope ``{"query": ..., "variables": ...}``."""
        return json.dumps(
            {"query": self.document, "variables": dict(self.variables)},
            ensure_ascii=False,
        )

    def with_variable(self, name: str, type_: str, value: Any) -> "GraphQLRequest":
        """Return a copy of this request with one more declared variable.

        Declarations stay sorted by name.  An existing variable with the
        same name is replaced.
        """
        variable_types = dict(self.variable_types)
        variable_types[name] = type_
        variables = dict(self.variables)
        variables[name] = value
        return GraphQLRequest(
            operation_type=self.operation_type,
            operation_name=self.operation_name,
            field_name=self.field_name,
            selection_set=self.selection_set,
            variable_types=dict(sorted(variable_types.items())),
            variables=variables,
            model_schema=self.model_schema,
        )
