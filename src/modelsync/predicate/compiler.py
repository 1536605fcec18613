"""Predicate tree → wire filter compiler.

Maps every predicate node to the nested filter grammar accepted by the
backend in ``filter`` and ``condition`` variables.

Mapping reference
-----------------

Predicate                            Filter
-----------------------------------  ----------------------------------------
``name.eq("Jane")``                  ``{"name": {"eq": "Jane"}}``
``age.between(18, 65)``              ``{"age": {"between": [18, 65]}}``
``and_(a, b, c)``                    ``{"and": [a', b', c']}``
``or_(a, b)``                        ``{"or": [a', b']}``
``not_(a)``                          ``{"not": a'}``
``MATCH_ALL``                        ``None`` (the variable is omitted)

Validation policy
-----------------
The compiler is permissive about types: it does not know the schema, so
an operator applied to a field of the wrong type (e.g. ``contains`` on
an ``Int``) is passed through and reported by the backend.  Only
structurally malformed trees raise ``InvalidPredicateError``.
"""
from __future__ import annotations

from typing import Any

from modelsync.errors import InvalidPredicateError
from modelsync.literals import normalize_literal
from modelsync.predicate.nodes import (
    ComparisonPredicate,
    GroupType,
    MatchAll,
    Predicate,
    PredicateGroup,
    QueryOperator,
)


class PredicateCompiler:
    """Translate a predicate tree into a filter mapping.

    Usage
    -----
    ::

        compiler = PredicateCompiler()
        filter_ = compiler.compile(QueryField("name").eq("Jane"))
        # {"name": {"eq": "Jane"}}

    The compiler is stateless; one instance can be shared between
    threads.
    """

    def compile(self, predicate: Predicate) -> dict[str, Any] | None:
        """Compile *predicate* into a filter mapping.

        Parameters
        ----------
        predicate:
            Any node of the predicate tree, or ``MATCH_ALL``.

        Returns
        -------
        dict[str, Any] | None
            The filter, or ``None`` for ``MATCH_ALL``.  Never an empty dict.

        Raises
        ------
        InvalidPredicateError
            If the tree is structurally malformed.
        """
        if isinstance(predicate, MatchAll):
            return None
        return self._dispatch(predicate)

    # ------------------------------------------------------------------
    # Internal dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, node: object) -> dict[str, Any]:
        if isinstance(node, ComparisonPredicate):
            return self._comparison(node)
        if isinstance(node, PredicateGroup):
            return self._group(node)
        if isinstance(node, MatchAll):
            raise InvalidPredicateError(
                "MATCH_ALL cannot be nested inside a predicate group",
                "Drop the MATCH_ALL operand; it does not restrict the group.",
            )
        raise InvalidPredicateError(f"Unsupported predicate node: {node!r}")

    def _comparison(self, node: ComparisonPredicate) -> dict[str, Any]:
        if not isinstance(node.field, str) or not node.field:
            raise InvalidPredicateError(f"Predicate field name must be a non-empty string: {node!r}")
        if not isinstance(node.operator, QueryOperator):
            raise InvalidPredicateError(f"Unsupported predicate operator: {node.operator!r}")
        if node.operator is QueryOperator.BETWEEN:
            bounds = node.value
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
                raise InvalidPredicateError(
                    f"'between' on {node.field!r} needs exactly two bounds, got {bounds!r}"
                )
            value: object = [normalize_literal(bounds[0]), normalize_literal(bounds[1])]
        else:
            value = normalize_literal(node.value)
        return {node.field: {node.operator.value: value}}

    def _group(self, node: PredicateGroup) -> dict[str, Any]:
        children = node.predicates
        if node.type is GroupType.NOT:
            if len(children) != 1:
                raise InvalidPredicateError(
                    f"'not' takes exactly one operand, got {len(children)}"
                )
            return {"not": self._dispatch(children[0])}
        if node.type in (GroupType.AND, GroupType.OR):
            if not children:
                raise InvalidPredicateError(f"'{node.type.value}' needs at least one operand")
            return {node.type.value: [self._dispatch(child) for child in children]}
        raise InvalidPredicateError(f"Unsupported predicate group type: {node.type!r}")


_COMPILER = PredicateCompiler()


def compile_predicate(predicate: Predicate) -> dict[str, Any] | None:
    """Compile *predicate* with a shared ``PredicateCompiler``."""
    return _COMPILER.compile(predicate)
