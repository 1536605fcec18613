#!/usr/bin/env python3
"""Example: Quickstart — modelsync

Minimal working example: load a schema, build sync and mutation
requests, then subscribe through an in-memory endpoint that accepts only
user-pool credentials.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install modelsync
"""
from __future__ import annotations

import modelsync
from modelsync.auth import AuthorizationType
from modelsync.errors import EndpointError
from modelsync.predicate import QueryField
from modelsync.request import StaticClaimsProvider, SubscriptionType
from modelsync.schema import SchemaSerializer
from modelsync.subscription import SubscriptionEndpoint

TODO_SCHEMA = """
name: Todo
fields:
  - {name: id, type: ID, required: true}
  - {name: description, type: String, required: true}
  - {name: priority, type: Int}
  - {name: owner, type: String}
authRules:
  - {allow: owner}
  - {allow: public}
"""


class UserPoolsOnlyEndpoint(SubscriptionEndpoint):
    """Rejects every mechanism except Cognito user pools."""

    def request_subscription(self, request, auth_type, on_started, on_next, on_error, on_complete):
        print(f"  -> {auth_type.value}: {request.document[:60]}...")
        if auth_type is not AuthorizationType.AMAZON_COGNITO_USER_POOLS:
            on_error(EndpointError(f"{auth_type.value} not allowed"))
            return
        on_started("subscription-1")
        on_next({"id": "1", "description": "Mop the floor"})

    def release_subscription(self, subscription_id):
        print(f"  released {subscription_id}")


def main() -> None:
    print(f"modelsync version: {modelsync.__version__}")

    # Step 1: Load the schema
    schema = SchemaSerializer().from_yaml(TODO_SCHEMA)
    print(f"Loaded model '{schema.name}' with {len(schema.fields)} fields")

    # Step 2: Build a filtered delta sync
    sync = modelsync.build_sync_request(
        schema, last_sync=123123123, limit=100, predicate=QueryField("priority").ge(3)
    )
    print(f"\nSync:\n{sync.content}")

    # Step 3: Build an update; the unset owner is left for the backend to fill
    update = modelsync.build_update_request(
        schema, {"id": "1", "description": "Mop the floor", "owner": None}, expected_version=1
    )
    print(f"\nUpdate input: {dict(update.variables)['input']}")

    # Step 4: Subscribe across the schema's authorization candidates
    print("\nSubscribing:")
    subscription = modelsync.subscribe(
        schema,
        SubscriptionType.ON_CREATE,
        UserPoolsOnlyEndpoint(),
        on_start=lambda sid: print(f"  started {sid}"),
        on_next=lambda item: print(f"  item {item}"),
        on_error=lambda error: print(f"  error {error}"),
        on_complete=lambda: print("  completed"),
        claims_provider=StaticClaimsProvider({"username": "johndoe"}),
    )
    subscription.join(timeout=5)
    subscription.cancel()


if __name__ == "__main__":
    main()
