"""Shared test fixtures for modelsync.

Fixtures defined here are available to all tests in the suite without
needing an explicit import.  The schemas mirror the models used across
the request-builder and subscription tests; keep domain-specific
fixtures close to the tests that use them.
"""
from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import pytest

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


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


@pytest.fixture()
def blog_owner_schema() -> ModelSchema:
    return ModelSchema(
        name="BlogOwner",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("name", "String", is_required=True),
            ModelField("blog", "Blog", kind=FieldKind.MODEL, association=Association.HAS_ONE),
            ModelField("createdAt", "AWSDateTime", is_read_only=True),
        ),
    )


@pytest.fixture()
def post_schema() -> ModelSchema:
    return ModelSchema(
        name="Post",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("title", "String", is_required=True),
            ModelField("comments", "Comment", kind=FieldKind.MODEL, is_list=True,
                       association=Association.HAS_MANY),
        ),
    )


@pytest.fixture()
def comment_schema() -> ModelSchema:
    return ModelSchema(
        name="Comment",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("content", "String", is_required=True),
            ModelField("post", "Post", kind=FieldKind.MODEL, association=Association.BELONGS_TO,
                       target_name="postID"),
        ),
    )


@pytest.fixture()
def parent_schema() -> ModelSchema:
    phone = CustomTypeSchema(
        "Phonenumber",
        (
            ModelField("code", "Int", is_required=True),
            ModelField("carrier", "String", is_required=True),
            ModelField("number", "String", is_required=True),
        ),
    )
    address = CustomTypeSchema(
        "Address",
        (
            ModelField("street", "String", is_required=True),
            ModelField("city", "String", is_required=True),
            ModelField("phoneNumber", "Phonenumber", kind=FieldKind.CUSTOM_TYPE),
        ),
    )
    child = CustomTypeSchema(
        "Child",
        (
            ModelField("name", "String", is_required=True),
            ModelField("address", "Address", kind=FieldKind.CUSTOM_TYPE),
        ),
    )
    return ModelSchema(
        name="Parent",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("name", "String", is_required=True),
            ModelField("address", "Address", kind=FieldKind.CUSTOM_TYPE),
            ModelField("children", "Child", kind=FieldKind.CUSTOM_TYPE, is_list=True),
        ),
        custom_types={"Phonenumber": phone, "Address": address, "Child": child},
    )


@pytest.fixture()
def todo_schema() -> ModelSchema:
    """A model guarded by a single owner rule."""
    return ModelSchema(
        name="Todo",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("description", "String", is_required=True),
            ModelField("owner", "String"),
        ),
        auth_rules=(AuthRule(AuthStrategy.OWNER),),
    )


@pytest.fixture()
def shared_todo_schema() -> ModelSchema:
    """An owner-guarded model that is also readable with an API key."""
    return ModelSchema(
        name="Todo",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("description", "String", is_required=True),
            ModelField("owner", "String"),
        ),
        auth_rules=(
            AuthRule(AuthStrategy.PUBLIC, provider=AuthProvider.API_KEY),
            AuthRule(AuthStrategy.OWNER),
        ),
    )


@pytest.fixture()
def person_schema() -> ModelSchema:
    return ModelSchema(
        name="Person",
        plural_name="People",
        fields=(
            ModelField("id", "ID", is_required=True),
            ModelField("first_name", "String", is_required=True),
            ModelField("last_name", "String", is_required=True),
            ModelField("age", "Int"),
            ModelField("dob", "AWSDate"),
            ModelField("relationship", "MaritalStatus", kind=FieldKind.ENUM),
        ),
    )


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


@pytest.fixture()
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="modelsync-test")
    yield pool
    pool.shutdown(wait=True)
