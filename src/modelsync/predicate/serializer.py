"""Filter document → predicate tree reader.

The inverse of ``PredicateCompiler``: reads a filter written in the wire
grammar (typically from a JSON or YAML file passed to the CLI) and
rebuilds the predicate tree.  ``None`` or an empty mapping read as
``MATCH_ALL``.
"""
from __future__ import annotations

import json

import yaml

from modelsync.errors import InvalidPredicateError
from modelsync.predicate.nodes import (
    MATCH_ALL,
    ComparisonPredicate,
    GroupType,
    Predicate,
    PredicateGroup,
    QueryOperator,
)

_OPERATORS: dict[str, QueryOperator] = {op.value: op for op in QueryOperator}


class PredicateSerializer:
    """Builds predicate trees from filter mappings."""

    def from_dict(self, data: object) -> Predicate:
        """Rebuild a predicate from a filter mapping.

        Raises
        ------
        InvalidPredicateError
            If *data* does not follow the filter grammar.
        """
        if data is None or data == {}:
            return MATCH_ALL
        return self._node(data)

    def from_json(self, text: str) -> Predicate:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidPredicateError(f"Invalid filter JSON: {exc}") from exc
        return self.from_dict(data)

    def from_yaml(self, text: str) -> Predicate:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise InvalidPredicateError(f"Invalid filter YAML: {exc}") from exc
        return self.from_dict(data)

    def _node(self, data: object) -> Predicate:
        if not isinstance(data, dict) or len(data) != 1:
            raise InvalidPredicateError(
                f"Each filter node must be a mapping with exactly one key, got {data!r}"
            )
        ((key, body),) = data.items()
        if key in ("and", "or"):
            if not isinstance(body, list):
                raise InvalidPredicateError(f"'{key}' must map to a list of filters")
            return PredicateGroup(GroupType(key), tuple(self._node(child) for child in body))
        if key == "not":
            return PredicateGroup(GroupType.NOT, (self._node(body),))
        return self._comparison(key, body)

    def _comparison(self, field_name: str, body: object) -> ComparisonPredicate:
        if not isinstance(body, dict) or len(body) != 1:
            raise InvalidPredicateError(
                f"Field {field_name!r} must map to exactly one operator, got {body!r}"
            )
        ((operator_name, value),) = body.items()
        operator = _OPERATORS.get(operator_name)
        if operator is None:
            available = ", ".join(sorted(_OPERATORS))
            raise InvalidPredicateError(
                f"Unknown operator {operator_name!r} on {field_name!r}. Available: {available}"
            )
        if operator is QueryOperator.BETWEEN and isinstance(value, list):
            value = tuple(value)
        return ComparisonPredicate(field_name, operator, value)
