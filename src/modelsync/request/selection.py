"""Selection sets derived from a model schema.

The selection for a model contains every declared field plus the system
fields, sorted by name.  Fields are rendered as follows:

- scalars and enums: the bare field name;
- custom types: ``address { city street ... }``, expanding nested custom
  types recursively;
- ``BELONGS_TO`` / ``HAS_ONE`` model references: ``post { id }``; the
  referenced model is never expanded further;
- ``HAS_MANY`` model references: omitted.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from modelsync.errors import SchemaIntrospectionError
from modelsync.schema.nodes import (
    SYSTEM_FIELDS,
    Association,
    CustomTypeSchema,
    ModelField,
    ModelSchema,
)

_NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")

# Fields appended after ``items`` in paginated sync responses.
PAGINATION_FIELDS: tuple[str, ...] = ("nextToken", "startedAt")


@dataclass(frozen=True, slots=True)
class SelectionSet:
    """A node in a selection set tree.

    The root node has ``name=None``; leaves have no children.
    """

    name: str | None
    children: tuple["SelectionSet", ...] = ()

    def render(self) -> str:
        """Render this node as document text.

        The root renders as its children only, a leaf as its bare name.
        """
        inner = " ".join(child.render() for child in self.children)
        if self.name is None:
            return inner
        if not self.children:
            return self.name
        return f"{self.name} {{ {inner} }}"

    def field_names(self) -> tuple[str, ...]:
        """Return the names of the direct children."""
        return tuple(child.name for child in self.children if child.name is not None)


def check_name(name: str, schema_name: str, what: str = "field") -> str:
    """Return *name* if it is a valid GraphQL name.

    Raises
    ------
    SchemaIntrospectionError
        If *name* cannot appear in a document.
    """
    if not isinstance(name, str) or not _NAME_PATTERN.match(name):
        raise SchemaIntrospectionError(
            f"{what.capitalize()} name {name!r} of {schema_name!r} is not a valid GraphQL name",
            schema_name=schema_name,
            field_name=name if isinstance(name, str) else None,
        )
    return name


def model_selection(schema: ModelSchema) -> SelectionSet:
    """Return the root selection for *schema*, including system fields."""
    check_name(schema.name, schema.name, what="model")
    nodes = [SelectionSet(name) for name in SYSTEM_FIELDS]
    for model_field in schema.fields:
        node = _field_node(schema, model_field, ())
        if node is not None:
            nodes.append(node)
    return SelectionSet(None, _sorted(nodes))


def sync_selection(schema: ModelSchema) -> SelectionSet:
    """Return ``items { ... } nextToken startedAt`` for *schema*."""
    items = SelectionSet("items", model_selection(schema).children)
    return SelectionSet(None, (items, *(SelectionSet(name) for name in PAGINATION_FIELDS)))


def _field_node(
    schema: ModelSchema,
    model_field: ModelField,
    expanding: tuple[str, ...],
) -> SelectionSet | None:
    name = check_name(model_field.name, schema.name)
    if model_field.is_model:
        if model_field.association is Association.HAS_MANY:
            return None
        return SelectionSet(name, (SelectionSet("id"),))
    if model_field.is_custom_type:
        custom = resolve_custom_type(schema, model_field)
        if custom.name in expanding:
            raise SchemaIntrospectionError(
                f"Custom type {custom.name!r} contains itself through {model_field.name!r}",
                schema_name=schema.name,
                field_name=model_field.name,
            )
        children = [
            node
            for child in custom.fields
            if (node := _field_node(schema, child, (*expanding, custom.name))) is not None
        ]
        return SelectionSet(name, _sorted(children))
    return SelectionSet(name)


def resolve_custom_type(schema: ModelSchema, model_field: ModelField) -> CustomTypeSchema:
    """Return the custom type referenced by *model_field*.

    Raises
    ------
    SchemaIntrospectionError
        If the schema does not declare that custom type.
    """
    custom = schema.custom_type(model_field.target_type)
    if custom is None:
        raise SchemaIntrospectionError(
            f"Field {model_field.name!r} of {schema.name!r} refers to unknown "
            f"custom type {model_field.target_type!r}",
            schema_name=schema.name,
            field_name=model_field.name,
        )
    return custom


def _sorted(nodes: list[SelectionSet]) -> tuple[SelectionSet, ...]:
    return tuple(sorted(nodes, key=lambda node: node.name or ""))
