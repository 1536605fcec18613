"""Query predicates and the predicate compiler.

Example
-------
::

    from modelsync.predicate import QueryField, compile_predicate

    compile_predicate(QueryField("age").gt(40))
    # {"age": {"gt": 40}}
"""
from __future__ import annotations

from modelsync.predicate.compiler import PredicateCompiler, compile_predicate
from modelsync.predicate.nodes import (
    MATCH_ALL,
    ComparisonPredicate,
    GroupType,
    MatchAll,
    Predicate,
    PredicateGroup,
    QueryField,
    QueryOperator,
    and_,
    match_all,
    not_,
    or_,
)
from modelsync.predicate.serializer import PredicateSerializer

__all__ = [
    # Nodes
    "Predicate",
    "ComparisonPredicate",
    "PredicateGroup",
    "MatchAll",
    "MATCH_ALL",
    "QueryField",
    "QueryOperator",
    "GroupType",
    # Combinators
    "match_all",
    "and_",
    "or_",
    "not_",
    # Compiler
    "PredicateCompiler",
    "compile_predicate",
    "PredicateSerializer",
]
