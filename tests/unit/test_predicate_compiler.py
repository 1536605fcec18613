"""Unit tests for modelsync.predicate — node construction, combinators and
the predicate compiler.
"""
from __future__ import annotations

import datetime
from decimal import Decimal
from enum import Enum

import pytest

from modelsync.errors import InvalidPredicateError
from modelsync.predicate import (
    MATCH_ALL,
    ComparisonPredicate,
    GroupType,
    MatchAll,
    PredicateCompiler,
    PredicateGroup,
    QueryField,
    QueryOperator,
    and_,
    compile_predicate,
    match_all,
    not_,
    or_,
)

_NAME = QueryField("name")
_AGE = QueryField("age")


class _Status(Enum):
    ACTIVE = "active"
    DONE = "done"


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class TestQueryField:
    def test_eq_builds_comparison(self) -> None:
        assert _NAME.eq("Jane") == ComparisonPredicate("name", QueryOperator.EQ, "Jane")

    @pytest.mark.parametrize(
        "method, operator",
        [
            ("ne", QueryOperator.NE),
            ("gt", QueryOperator.GT),
            ("ge", QueryOperator.GE),
            ("lt", QueryOperator.LT),
            ("le", QueryOperator.LE),
            ("contains", QueryOperator.CONTAINS),
            ("not_contains", QueryOperator.NOT_CONTAINS),
            ("begins_with", QueryOperator.BEGINS_WITH),
        ],
    )
    def test_operator_methods(self, method: str, operator: QueryOperator) -> None:
        predicate = getattr(_AGE, method)(3)
        assert predicate.operator is operator
        assert predicate.field == "age"
        assert predicate.value == 3

    def test_between_stores_bounds_as_tuple(self) -> None:
        assert _AGE.between(18, 65).value == (18, 65)

    def test_nodes_are_frozen(self) -> None:
        predicate = _NAME.eq("Jane")
        with pytest.raises(AttributeError):
            predicate.value = "John"  # type: ignore[misc]


class TestCombinators:
    def test_match_all_is_singleton(self) -> None:
        assert match_all() is MATCH_ALL
        assert MatchAll() is MATCH_ALL

    def test_and_keeps_order(self) -> None:
        a, b, c = _NAME.eq("a"), _NAME.eq("b"), _NAME.eq("c")
        group = and_(a, b, c)
        assert group.type is GroupType.AND
        assert group.predicates == (a, b, c)

    def test_operators_build_groups(self) -> None:
        a, b = _NAME.eq("a"), _AGE.gt(1)
        assert (a & b) == PredicateGroup(GroupType.AND, (a, b))
        assert (a | b) == PredicateGroup(GroupType.OR, (a, b))
        assert ~a == PredicateGroup(GroupType.NOT, (a,))

    def test_no_flattening(self) -> None:
        a, b, c = _NAME.eq("a"), _NAME.eq("b"), _NAME.eq("c")
        group = (a & b) & c
        assert len(group.predicates) == 2
        assert isinstance(group.predicates[0], PredicateGroup)

    def test_not_wraps_single_child(self) -> None:
        assert not_(_AGE.lt(18)).predicates == (_AGE.lt(18),)


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class TestCompileComparison:
    def test_match_all_compiles_to_none(self) -> None:
        assert compile_predicate(MATCH_ALL) is None

    def test_eq(self) -> None:
        assert compile_predicate(_NAME.eq("Jane")) == {"name": {"eq": "Jane"}}

    def test_operator_wire_names(self) -> None:
        assert compile_predicate(_NAME.not_contains("x")) == {"name": {"notContains": "x"}}
        assert compile_predicate(_NAME.begins_with("J")) == {"name": {"beginsWith": "J"}}

    def test_between_compiles_to_two_element_list(self) -> None:
        assert compile_predicate(_AGE.between(18, 65)) == {"age": {"between": [18, 65]}}

    def test_none_literal_is_kept(self) -> None:
        assert compile_predicate(_NAME.eq(None)) == {"name": {"eq": None}}

    def test_bool_literal_is_not_coerced(self) -> None:
        assert compile_predicate(QueryField("done").eq(True)) == {"done": {"eq": True}}

    def test_date_literal_is_iso_text(self) -> None:
        predicate = QueryField("dob").gt(datetime.date(2000, 1, 2))
        assert compile_predicate(predicate) == {"dob": {"gt": "2000-01-02"}}

    def test_decimal_literal(self) -> None:
        assert compile_predicate(_AGE.eq(Decimal("40"))) == {"age": {"eq": 40}}
        assert compile_predicate(_AGE.eq(Decimal("2.5"))) == {"age": {"eq": 2.5}}

    def test_enum_literal_uses_member_name(self) -> None:
        predicate = QueryField("status").eq(_Status.DONE)
        assert compile_predicate(predicate) == {"status": {"eq": "DONE"}}


class TestCompileGroups:
    def test_and_preserves_operand_order(self) -> None:
        predicate = and_(_NAME.eq("c"), _NAME.eq("a"), _NAME.eq("b"))
        assert compile_predicate(predicate) == {
            "and": [
                {"name": {"eq": "c"}},
                {"name": {"eq": "a"}},
                {"name": {"eq": "b"}},
            ]
        }

    def test_nested_or_and_not(self) -> None:
        predicate = _NAME.eq("Jane") | ~_AGE.lt(18)
        assert compile_predicate(predicate) == {
            "or": [
                {"name": {"eq": "Jane"}},
                {"not": {"age": {"lt": 18}}},
            ]
        }

    def test_single_operand_and(self) -> None:
        assert compile_predicate(and_(_NAME.eq("a"))) == {"and": [{"name": {"eq": "a"}}]}

    def test_compiler_instance_matches_module_function(self) -> None:
        predicate = and_(_NAME.eq("a"), or_(_AGE.gt(1), _AGE.lt(0)))
        assert PredicateCompiler().compile(predicate) == compile_predicate(predicate)


class TestCompileErrors:
    def test_match_all_inside_group(self) -> None:
        with pytest.raises(InvalidPredicateError, match="MATCH_ALL"):
            compile_predicate(and_(_NAME.eq("a"), MATCH_ALL))

    def test_not_with_two_operands(self) -> None:
        group = PredicateGroup(GroupType.NOT, (_NAME.eq("a"), _NAME.eq("b")))
        with pytest.raises(InvalidPredicateError, match="exactly one"):
            compile_predicate(group)

    def test_empty_and(self) -> None:
        with pytest.raises(InvalidPredicateError):
            compile_predicate(and_())

    def test_empty_field_name(self) -> None:
        with pytest.raises(InvalidPredicateError):
            compile_predicate(QueryField("").eq(1))

    def test_between_with_wrong_bounds(self) -> None:
        predicate = ComparisonPredicate("age", QueryOperator.BETWEEN, (1, 2, 3))
        with pytest.raises(InvalidPredicateError, match="two bounds"):
            compile_predicate(predicate)

    def test_unknown_node(self) -> None:
        with pytest.raises(InvalidPredicateError):
            compile_predicate(and_("age > 3"))  # type: ignore[arg-type]

    def test_error_carries_recovery_suggestion(self) -> None:
        with pytest.raises(InvalidPredicateError) as exc_info:
            compile_predicate(and_())
        assert exc_info.value.recovery_suggestion
