"""Test that the quickstart API works for modelsync."""
from __future__ import annotations


def test_quickstart_import(expected_version: str) -> None:
    import modelsync

    assert modelsync.__version__ == expected_version
    assert callable(modelsync.build_sync_request)
    assert callable(modelsync.subscribe)


def test_quickstart_compile_predicate() -> None:
    import modelsync
    from modelsync.predicate import MATCH_ALL, QueryField

    assert modelsync.compile_predicate(QueryField("priority").gt(3)) == {"priority": {"gt": 3}}
    assert modelsync.compile_predicate(MATCH_ALL) is None


def test_quickstart_sync_and_mutations(todo_schema) -> None:
    import modelsync

    sync = modelsync.build_sync_request(todo_schema, last_sync=123123123, limit=1000)
    assert dict(sync.variables) == {"lastSync": 123123123, "limit": 1000}

    create = modelsync.build_creation_request(todo_schema, {"id": "1", "description": "Mop"})
    assert create.operation_name == "CreateTodo"

    update = modelsync.build_update_request(todo_schema, {"id": "1", "description": "Mop"}, 2)
    assert update.variables["input"]["_version"] == 2

    delete = modelsync.build_deletion_request(todo_schema, "1", 3)
    assert dict(delete.variables) == {"input": {"id": "1", "_version": 3}}


def test_quickstart_load_schema(tmp_path) -> None:
    import modelsync

    path = tmp_path / "note.yaml"
    path.write_text("name: Note\nfields:\n  - {name: id, type: ID, required: true}\n", encoding="utf-8")
    schema = modelsync.load_schema(path)
    request = modelsync.build_subscription_request(schema, _on_create())
    assert request.document == (
        "subscription OnCreateNote { onCreateNote { _deleted _lastChangedAt _version id } }"
    )


def _on_create():
    from modelsync.request import SubscriptionType

    return SubscriptionType.ON_CREATE
