"""Query predicate tree.

A predicate is an immutable tree.  Leaves (``ComparisonPredicate``) bind
a field name to an operator and a literal value; internal nodes
(``PredicateGroup``) combine children with ``and``, ``or`` or ``not``.
``MATCH_ALL`` stands for "no filter".

Predicates are normally built through ``QueryField``::

    from modelsync.predicate import QueryField, and_

    name = QueryField("name")
    age = QueryField("age")

    predicate = and_(name.begins_with("A"), age.gt(40))
    predicate = name.eq("Jane") | ~age.lt(18)

Combinators never flatten, reorder or deduplicate their children: the
tree has exactly the shape the caller wrote.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class QueryOperator(Enum):
    """Comparison operators; values are the wire-format operator names."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    BEGINS_WITH = "beginsWith"
    BETWEEN = "between"


class GroupType(Enum):
    """Logical connective of a ``PredicateGroup``."""

    AND = "and"
    OR = "or"
    NOT = "not"


class _Combinable:
    """Operator overloads shared by every predicate node."""

    __slots__ = ()

    def __and__(self, other: "Predicate") -> "PredicateGroup":
        return PredicateGroup(GroupType.AND, (self, other))  # type: ignore[arg-type]

    def __or__(self, other: "Predicate") -> "PredicateGroup":
        return PredicateGroup(GroupType.OR, (self, other))  # type: ignore[arg-type]

    def __invert__(self) -> "PredicateGroup":
        return PredicateGroup(GroupType.NOT, (self,))  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class ComparisonPredicate(_Combinable):
    """A leaf comparing one field against a literal, e.g. ``age > 40``."""

    field: str
    operator: QueryOperator
    value: object


@dataclass(frozen=True, slots=True)
class PredicateGroup(_Combinable):
    """An ``and``/``or``/``not`` node over child predicates.

    ``NOT`` groups hold exactly one child.
    """

    type: GroupType
    predicates: tuple["Predicate", ...]


class MatchAll:
    """The predicate that matches every record.

    There is a single instance, ``MATCH_ALL``.  It compiles to no filter
    at all.
    """

    _instance: "MatchAll | None" = None

    def __new__(cls) -> "MatchAll":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MATCH_ALL"


MATCH_ALL = MatchAll()

Predicate = Union[ComparisonPredicate, PredicateGroup, MatchAll]


@dataclass(frozen=True, slots=True)
class QueryField:
    """A named model field used to build comparison predicates."""

    name: str

    def eq(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.EQ, value)

    def ne(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.NE, value)

    def gt(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.GT, value)

    def ge(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.GE, value)

    def lt(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.LT, value)

    def le(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.LE, value)

    def contains(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.CONTAINS, value)

    def not_contains(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.NOT_CONTAINS, value)

    def begins_with(self, value: object) -> ComparisonPredicate:
        return ComparisonPredicate(self.name, QueryOperator.BEGINS_WITH, value)

    def between(self, start: object, end: object) -> ComparisonPredicate:
        """Inclusive range comparison; the value is stored as ``(start, end)``."""
        return ComparisonPredicate(self.name, QueryOperator.BETWEEN, (start, end))


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def match_all() -> MatchAll:
    """Return the predicate that matches every record."""
    return MATCH_ALL


def and_(*predicates: Predicate) -> PredicateGroup:
    """Return an ``and`` group over *predicates*, in the given order."""
    return PredicateGroup(GroupType.AND, tuple(predicates))


def or_(*predicates: Predicate) -> PredicateGroup:
    """Return an ``or`` group over *predicates*, in the given order."""
    return PredicateGroup(GroupType.OR, tuple(predicates))


def not_(predicate: Predicate) -> PredicateGroup:
    """Return the negation of *predicate*."""
    return PredicateGroup(GroupType.NOT, (predicate,))
