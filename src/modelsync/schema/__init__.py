"""Model schema module.

Exports the schema node types and the serializer for loading schema
documents from JSON/YAML.
"""
from __future__ import annotations

from modelsync.schema.nodes import (
    SYSTEM_FIELDS,
    Association,
    AuthProvider,
    AuthRule,
    AuthStrategy,
    CustomTypeSchema,
    FieldKind,
    ModelField,
    ModelSchema,
)
from modelsync.schema.serializer import SchemaSerializer, load_schema

__all__ = [
    "SYSTEM_FIELDS",
    # Enums
    "FieldKind",
    "Association",
    "AuthStrategy",
    "AuthProvider",
    # Nodes
    "ModelField",
    "CustomTypeSchema",
    "AuthRule",
    "ModelSchema",
    # Serializer
    "SchemaSerializer",
    "load_schema",
]
