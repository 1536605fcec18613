"""Unit tests for modelsync.predicate.serializer — reading filter documents."""
from __future__ import annotations

import pytest

from modelsync.errors import InvalidPredicateError
from modelsync.predicate import (
    MATCH_ALL,
    GroupType,
    PredicateSerializer,
    QueryField,
    QueryOperator,
    and_,
    compile_predicate,
)


@pytest.fixture()
def serializer() -> PredicateSerializer:
    return PredicateSerializer()


class TestFromDict:
    def test_none_is_match_all(self, serializer: PredicateSerializer) -> None:
        assert serializer.from_dict(None) is MATCH_ALL

    def test_empty_mapping_is_match_all(self, serializer: PredicateSerializer) -> None:
        assert serializer.from_dict({}) is MATCH_ALL

    def test_comparison(self, serializer: PredicateSerializer) -> None:
        predicate = serializer.from_dict({"name": {"beginsWith": "J"}})
        assert predicate == QueryField("name").begins_with("J")

    def test_between_list_becomes_tuple(self, serializer: PredicateSerializer) -> None:
        predicate = serializer.from_dict({"age": {"between": [18, 65]}})
        assert predicate.operator is QueryOperator.BETWEEN
        assert predicate.value == (18, 65)

    def test_groups(self, serializer: PredicateSerializer) -> None:
        predicate = serializer.from_dict(
            {"and": [{"name": {"eq": "Jane"}}, {"not": {"age": {"lt": 18}}}]}
        )
        assert predicate.type is GroupType.AND
        assert predicate.predicates[1].type is GroupType.NOT

    def test_compiles_back_to_the_same_filter(self, serializer: PredicateSerializer) -> None:
        document = {"or": [{"name": {"eq": "Jane"}}, {"age": {"ge": 40}}]}
        assert compile_predicate(serializer.from_dict(document)) == document

    def test_unknown_operator(self, serializer: PredicateSerializer) -> None:
        with pytest.raises(InvalidPredicateError, match="Unknown operator"):
            serializer.from_dict({"name": {"like": "J%"}})

    def test_two_keys_in_one_node(self, serializer: PredicateSerializer) -> None:
        with pytest.raises(InvalidPredicateError):
            serializer.from_dict({"name": {"eq": "a"}, "age": {"eq": 1}})

    def test_and_requires_list(self, serializer: PredicateSerializer) -> None:
        with pytest.raises(InvalidPredicateError, match="list"):
            serializer.from_dict({"and": {"name": {"eq": "a"}}})


class TestTextFormats:
    def test_from_yaml(self, serializer: PredicateSerializer) -> None:
        text = "and:\n  - name: {eq: Jane}\n  - age: {gt: 40}\n"
        expected = and_(QueryField("name").eq("Jane"), QueryField("age").gt(40))
        assert serializer.from_yaml(text) == expected

    def test_from_json(self, serializer: PredicateSerializer) -> None:
        assert serializer.from_json('{"age": {"le": 3}}') == QueryField("age").le(3)

    def test_invalid_json(self, serializer: PredicateSerializer) -> None:
        with pytest.raises(InvalidPredicateError, match="JSON"):
            serializer.from_json("{not json")

    def test_invalid_yaml(self, serializer: PredicateSerializer) -> None:
        with pytest.raises(InvalidPredicateError, match="YAML"):
            serializer.from_yaml("a: [1, 2")
