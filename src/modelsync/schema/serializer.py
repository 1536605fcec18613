"""Schema document serialization.

Reads and writes ``ModelSchema`` objects as plain dict/list structures
that map naturally to both JSON and YAML.  The document describes an
already-resolved schema; no reflection happens here.

Document shape
--------------
::

    name: Todo
    pluralName: Todos              # optional
    fields:
      - {name: id, type: ID, required: true}
      - {name: description, type: String, required: true}
      - {name: owner, type: String}
      - {name: address, type: Address, kind: customType}
      - {name: post, type: Post, kind: model, association: belongsTo, targetName: postID}
    authRules:
      - {allow: owner, ownerField: owner, identityClaim: username}
    customTypes:
      Address:
        - {name: street, type: String}

Usage
-----
::

    from modelsync.schema.serializer import SchemaSerializer

    serializer = SchemaSerializer()
    schema = serializer.from_yaml(Path("todo.yaml").read_text())
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from modelsync.errors import SchemaIntrospectionError
from modelsync.schema.nodes import (
    Association,
    AuthProvider,
    AuthRule,
    AuthStrategy,
    CustomTypeSchema,
    FieldKind,
    ModelField,
    ModelSchema,
)

_KIND_NAMES: dict[str, FieldKind] = {
    "scalar": FieldKind.SCALAR,
    "enum": FieldKind.ENUM,
    "customType": FieldKind.CUSTOM_TYPE,
    "model": FieldKind.MODEL,
}

_ASSOCIATION_NAMES: dict[str, Association] = {
    "belongsTo": Association.BELONGS_TO,
    "hasOne": Association.HAS_ONE,
    "hasMany": Association.HAS_MANY,
}


def _reverse(mapping: dict[str, Any]) -> dict[Any, str]:
    return {value: key for key, value in mapping.items()}


class SchemaSerializer:
    """Converts between ``ModelSchema`` objects and plain Python dicts."""

    # ------------------------------------------------------------------
    # Serialization (schema → dict)
    # ------------------------------------------------------------------

    def to_dict(self, schema: ModelSchema) -> dict[str, object]:
        """Serialize a ``ModelSchema`` to a JSON-compatible dict."""
        data: dict[str, object] = {
            "name": schema.name,
            "fields": [self._field_to_dict(f) for f in schema.fields],
        }
        if schema.plural_name:
            data["pluralName"] = schema.plural_name
        if schema.auth_rules:
            data["authRules"] = [self._rule_to_dict(r) for r in schema.auth_rules]
        if schema.custom_types:
            data["customTypes"] = {
                name: [self._field_to_dict(f) for f in custom.fields]
                for name, custom in schema.custom_types.items()
            }
        return data

    def _field_to_dict(self, model_field: ModelField) -> dict[str, object]:
        data: dict[str, object] = {"name": model_field.name, "type": model_field.target_type}
        if model_field.kind is not FieldKind.SCALAR:
            data["kind"] = _reverse(_KIND_NAMES)[model_field.kind]
        if model_field.is_required:
            data["required"] = True
        if model_field.is_list:
            data["list"] = True
        if model_field.is_read_only:
            data["readOnly"] = True
        if model_field.association is not None:
            data["association"] = _reverse(_ASSOCIATION_NAMES)[model_field.association]
        if model_field.target_name is not None:
            data["targetName"] = model_field.target_name
        return data

    def _rule_to_dict(self, rule: AuthRule) -> dict[str, object]:
        data: dict[str, object] = {"allow": rule.strategy.value}
        if rule.strategy is AuthStrategy.OWNER:
            data["ownerField"] = rule.owner_field
            data["identityClaim"] = rule.identity_claim
        if rule.strategy is AuthStrategy.GROUP:
            data["groupClaim"] = rule.group_claim
            data["groups"] = list(rule.groups)
        if rule.provider is not None:
            data["provider"] = rule.provider.value
        return data

    # ------------------------------------------------------------------
    # Deserialization (dict → schema)
    # ------------------------------------------------------------------

    def from_dict(self, data: object) -> ModelSchema:
        """Deserialize a ``ModelSchema`` from a plain dict.

        Raises
        ------
        SchemaIntrospectionError
            If the document is missing required keys or names an unknown
            kind, association, strategy or provider.
        """
        if not isinstance(data, dict):
            raise SchemaIntrospectionError("Schema document must be a mapping")
        name = self._require_str(data, "name", context="schema")
        fields_data = data.get("fields")
        if not isinstance(fields_data, list):
            raise SchemaIntrospectionError(
                f"Schema {name!r} must declare a list of fields", schema_name=name
            )
        custom_data = data.get("customTypes") or {}
        if not isinstance(custom_data, dict):
            raise SchemaIntrospectionError(
                f"Custom types of {name!r} must be a mapping of type name to fields",
                schema_name=name,
            )
        custom_types: dict[str, CustomTypeSchema] = {}
        for type_name, type_fields in custom_data.items():
            if not isinstance(type_fields, list):
                raise SchemaIntrospectionError(
                    f"Custom type {type_name!r} must declare a list of fields",
                    schema_name=name,
                )
            custom_types[type_name] = CustomTypeSchema(
                name=type_name,
                fields=tuple(self._field_from_dict(f, type_name) for f in type_fields),
            )
        return ModelSchema(
            name=name,
            fields=tuple(self._field_from_dict(f, name) for f in fields_data),
            plural_name=data.get("pluralName"),
            auth_rules=tuple(self._rule_from_dict(r, name) for r in data.get("authRules") or ()),
            custom_types=custom_types,
        )

    def _field_from_dict(self, data: object, owner_name: str) -> ModelField:
        if not isinstance(data, dict):
            raise SchemaIntrospectionError(
                f"Field declarations of {owner_name!r} must be mappings", schema_name=owner_name
            )
        field_name = self._require_str(data, "name", context=owner_name)
        kind = self._lookup(_KIND_NAMES, data.get("kind", "scalar"), "kind", owner_name)
        association = None
        if "association" in data:
            association = self._lookup(
                _ASSOCIATION_NAMES, data["association"], "association", owner_name
            )
        return ModelField(
            name=field_name,
            target_type=str(data.get("type", "String")),
            kind=kind,
            is_required=bool(data.get("required", False)),
            is_list=bool(data.get("list", False)),
            is_read_only=bool(data.get("readOnly", False)),
            association=association,
            target_name=data.get("targetName"),
        )

    def _rule_from_dict(self, data: object, schema_name: str) -> AuthRule:
        if not isinstance(data, dict):
            raise SchemaIntrospectionError(
                f"Auth rules of {schema_name!r} must be mappings", schema_name=schema_name
            )
        strategies = {s.value: s for s in AuthStrategy}
        providers = {p.value: p for p in AuthProvider}
        strategy = self._lookup(strategies, data.get("allow"), "auth strategy", schema_name)
        provider = None
        if data.get("provider") is not None:
            provider = self._lookup(providers, data["provider"], "auth provider", schema_name)
        return AuthRule(
            strategy=strategy,
            owner_field=str(data.get("ownerField", "owner")),
            identity_claim=str(data.get("identityClaim", "username")),
            group_claim=str(data.get("groupClaim", "cognito:groups")),
            groups=self._groups(data.get("groups"), schema_name),
            provider=provider,
        )

    @staticmethod
    def _groups(value: object, schema_name: str) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, list) or not all(isinstance(g, str) for g in value):
            raise SchemaIntrospectionError(
                f"Groups of an auth rule in {schema_name!r} must be a list of names",
                schema_name=schema_name,
            )
        return tuple(value)

    @staticmethod
    def _require_str(data: dict[str, Any], key: str, context: str) -> str:
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise SchemaIntrospectionError(f"Missing {key!r} in {context} declaration")
        return value

    @staticmethod
    def _lookup(table: dict[str, Any], value: object, what: str, schema_name: str) -> Any:
        if not isinstance(value, str) or value not in table:
            available = ", ".join(sorted(table))
            raise SchemaIntrospectionError(
                f"Unknown {what} {value!r} in {schema_name!r}. Available: {available}",
                schema_name=schema_name,
            )
        return table[value]

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, schema: ModelSchema, indent: int = 2) -> str:
        """Serialize a ``ModelSchema`` to a JSON string."""
        return json.dumps(self.to_dict(schema), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> ModelSchema:
        """Deserialize a ``ModelSchema`` from a JSON string."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SchemaIntrospectionError(f"Invalid schema JSON: {exc}") from exc
        return self.from_dict(data)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, schema: ModelSchema) -> str:
        """Serialize a ``ModelSchema`` to a YAML string."""
        return yaml.dump(self.to_dict(schema), default_flow_style=False, allow_unicode=True, sort_keys=False)

    def from_yaml(self, text: str) -> ModelSchema:
        """Deserialize a ``ModelSchema`` from a YAML string."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SchemaIntrospectionError(f"Invalid schema YAML: {exc}") from exc
        return self.from_dict(data)


def load_schema(path: str | Path) -> ModelSchema:
    """Load a schema document from *path*.

    Files ending in ``.json`` are read as JSON; anything else as YAML
    (which also accepts JSON).
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    serializer = SchemaSerializer()
    if file_path.suffix.lower() == ".json":
        return serializer.from_json(text)
    return serializer.from_yaml(text)
