"""Model instance → mutation input conversion.

A model may be any object exposing its fields as attributes, or any
mapping keyed by field name.  Required fields must be readable; optional
fields that are missing read as ``None``.

Input construction
------------------
- read-only fields are skipped;
- ``BELONGS_TO`` references contribute ``target_name → referenced id``;
- ``HAS_ONE`` / ``HAS_MANY`` references are skipped;
- custom types become nested dicts (lists become lists of dicts);
- every other value goes through ``normalize_literal``.

The owner-field sanitizer then drops owner-authorization fields whose
value is ``None`` so that the backend fills them from the caller's
identity.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modelsync.errors import ModelFieldAccessError, SchemaIntrospectionError
from modelsync.literals import normalize_literal
from modelsync.request.selection import check_name, resolve_custom_type
from modelsync.schema.nodes import Association, CustomTypeSchema, ModelField, ModelSchema

_MISSING = object()


def read_value(model: object, owner_name: str, model_field: ModelField) -> Any:
    """Read the value of *model_field* from *model*.

    Raises
    ------
    ModelFieldAccessError
        If the field is required and *model* has no value for it, or if
        reading the value fails.
    """
    value = _lookup(model, model_field.name, owner_name)
    if value is _MISSING:
        if model_field.is_required:
            raise ModelFieldAccessError(owner_name, model_field.name)
        return None
    return value


def _lookup(model: object, name: str, owner_name: str) -> Any:
    if isinstance(model, Mapping):
        return model.get(name, _MISSING)
    try:
        return getattr(model, name)
    except AttributeError:
        return _MISSING
    except Exception as exc:  # property getters may raise anything
        raise ModelFieldAccessError(owner_name, name, exc) from exc


def model_to_input(schema: ModelSchema, model: object) -> dict[str, Any]:
    """Return the mutation input mapping for *model*."""
    result: dict[str, Any] = {}
    for model_field in schema.fields:
        check_name(model_field.name, schema.name)
        if model_field.is_read_only:
            continue
        if model_field.is_model:
            if model_field.association is Association.BELONGS_TO:
                key = _target_name(schema, model_field)
                reference = read_value(model, schema.name, model_field)
                result[key] = _reference_id(reference, schema.name, model_field)
            continue
        value = read_value(model, schema.name, model_field)
        if model_field.is_custom_type:
            custom = resolve_custom_type(schema, model_field)
            result[model_field.name] = _custom_to_input(schema, custom, value)
        else:
            result[model_field.name] = normalize_literal(value)
    return result


def remove_unset_owner_fields(schema: ModelSchema, input_: Mapping[str, Any]) -> dict[str, Any]:
    """Return *input_* without owner fields whose value is ``None``.

    Owner fields with a value are kept unchanged.
    """
    owner_fields = schema.owner_fields()
    return {
        key: value
        for key, value in input_.items()
        if not (key in owner_fields and value is None)
    }


def _target_name(schema: ModelSchema, model_field: ModelField) -> str:
    if not model_field.target_name:
        raise SchemaIntrospectionError(
            f"Reference {model_field.name!r} of {schema.name!r} declares no target name",
            schema_name=schema.name,
            field_name=model_field.name,
            recovery_suggestion="Set target_name to the input field that carries the reference id.",
        )
    return check_name(model_field.target_name, schema.name)


def _reference_id(reference: object, schema_name: str, model_field: ModelField) -> Any:
    if reference is None or isinstance(reference, str):
        return reference
    reference_id = _lookup(reference, "id", model_field.target_type)
    if reference_id is _MISSING:
        raise ModelFieldAccessError(schema_name, model_field.name)
    return reference_id


def _custom_to_input(schema: ModelSchema, custom: CustomTypeSchema, value: object) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_custom_to_input(schema, custom, item) for item in value]
    result: dict[str, Any] = {}
    for child in custom.fields:
        child_value = read_value(value, custom.name, child)
        if child.is_custom_type:
            result[child.name] = _custom_to_input(
                schema, resolve_custom_type(schema, child), child_value
            )
        else:
            result[child.name] = normalize_literal(child_value)
    return result
