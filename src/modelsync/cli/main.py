"""CLI entry point for modelsync.

Invoked as::

    modelsync [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m modelsync.cli.main

Every command reads a model schema document (YAML or JSON) and prints
the request the library would send for it.  Nothing is sent.

Commands
--------
sync        Render a base-sync or delta-sync query
create      Render a create mutation for a model file
update      Render an update mutation for a model file
delete      Render a delete mutation for a model id
subscribe   Render a subscription, optionally decorated for an auth type
candidates  List the authorization candidates derived from a schema
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from modelsync.errors import ModelSyncError, UsageError

if TYPE_CHECKING:
    from modelsync.config import ModelSyncConfig
    from modelsync.predicate.nodes import Predicate
    from modelsync.request.request import GraphQLRequest
    from modelsync.schema.nodes import ModelSchema

console = Console()
err_console = Console(stderr=True)

_LOG_LEVEL_CHOICES = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
_SUBSCRIPTION_TYPES = ["onCreate", "onUpdate", "onDelete"]


def _fail(exc: ModelSyncError) -> None:
    """Print a library error with its recovery suggestion and exit."""
    err_console.print(f"[red]Error:[/red] {escape(exc.message)}", soft_wrap=True)
    err_console.print(f"[dim]hint: {escape(exc.recovery_suggestion)}[/dim]", soft_wrap=True)
    sys.exit(1)


def _read_text(path: str) -> str:
    """Read a text file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {escape(path)}", soft_wrap=True)
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {escape(path)}: {escape(str(exc))}", soft_wrap=True)
        sys.exit(1)


def _read_document(path: str) -> Any:
    """Read a JSON or YAML document; JSON is chosen by the ``.json`` suffix."""
    text = _read_text(path)
    try:
        if Path(path).suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise UsageError(f"Cannot parse {path}: {exc}") from exc


def _load_schema(path: str) -> "ModelSchema":
    from modelsync.schema.serializer import SchemaSerializer

    return SchemaSerializer().from_dict(_read_document(path))


def _load_model(path: str) -> dict[str, Any]:
    data = _read_document(path)
    if not isinstance(data, dict):
        raise UsageError(f"Model file {path} must contain a mapping of field names to values")
    return data


def _load_predicate(path: str | None) -> "Predicate":
    from modelsync.predicate.nodes import MATCH_ALL
    from modelsync.predicate.serializer import PredicateSerializer

    if path is None:
        return MATCH_ALL
    return PredicateSerializer().from_dict(_read_document(path))


def _emit(request: "GraphQLRequest", as_json: bool) -> None:
    """Print *request* as a highlighted document, or as its raw envelope."""
    if as_json:
        click.echo(request.content)
        return
    console.print(Syntax(request.document, "graphql", word_wrap=True))
    if request.variables:
        variables = json.dumps(dict(request.variables), indent=2, ensure_ascii=False)
        console.print(Syntax(variables, "json"))


def _configure_logging(level: int) -> None:
    """Send ``modelsync`` log records to stderr through rich."""
    package_logger = logging.getLogger("modelsync")
    package_logger.handlers.clear()
    package_logger.addHandler(RichHandler(console=err_console, show_path=False))
    package_logger.setLevel(level)


def _parse_claims(claims: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for claim in claims:
        name, sep, value = claim.partition("=")
        if not sep or not name:
            raise UsageError(f"Claims must be written NAME=VALUE, got {claim!r}")
        parsed[name] = value
    return parsed


json_option = click.option(
    "--json", "as_json", is_flag=True, default=False, help="Print the raw request envelope"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="modelsync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVEL_CHOICES, case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """GraphQL request builder and multi-auth subscription orchestrator."""
    from dataclasses import replace

    from modelsync.config import load_config

    try:
        config = load_config(config_path)
        if log_level is not None:
            config = replace(config, log_level=log_level)
    except ModelSyncError as exc:
        _fail(exc)
    _configure_logging(config.logging_level)
    ctx.obj = config


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from modelsync import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]modelsync[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# sync command
# ---------------------------------------------------------------------------


@cli.command(name="sync")
@click.argument("schema_file", type=click.Path(exists=False))
@click.option("--last-sync", type=int, default=None, help="Timestamp of the previous sync (delta sync)")
@click.option("--limit", type=int, default=None, help="Page size")
@click.option("--next-token", default=None, help="Continuation token of the next page")
@click.option("--filter", "filter_file", default=None, help="Filter document (YAML/JSON)")
@json_option
def sync_command(
    schema_file: str,
    last_sync: int | None,
    limit: int | None,
    next_token: str | None,
    filter_file: str | None,
    as_json: bool,
) -> None:
    """Render a sync query.

    SCHEMA_FILE is the path to the model schema document.
    """
    from modelsync.request.builder import build_sync_request

    try:
        schema = _load_schema(schema_file)
        request = build_sync_request(schema, last_sync, limit, _load_predicate(filter_file))
        if next_token is not None:
            request = request.with_variable("nextToken", "String", next_token)
    except ModelSyncError as exc:
        _fail(exc)
    _emit(request, as_json)


# ---------------------------------------------------------------------------
# mutation commands
# ---------------------------------------------------------------------------


@cli.command(name="create")
@click.argument("schema_file", type=click.Path(exists=False))
@click.argument("model_file", type=click.Path(exists=False))
@json_option
def create_command(schema_file: str, model_file: str, as_json: bool) -> None:
    """Render a create mutation.

    MODEL_FILE holds the model's field values as a YAML/JSON mapping.
    """
    from modelsync.request.builder import build_creation_request

    try:
        request = build_creation_request(_load_schema(schema_file), _load_model(model_file))
    except ModelSyncError as exc:
        _fail(exc)
    _emit(request, as_json)


@cli.command(name="update")
@click.argument("schema_file", type=click.Path(exists=False))
@click.argument("model_file", type=click.Path(exists=False))
@click.option("--version", "expected_version", type=int, required=True, help="Expected model version")
@click.option("--condition", "condition_file", default=None, help="Condition document (YAML/JSON)")
@json_option
def update_command(
    schema_file: str,
    model_file: str,
    expected_version: int,
    condition_file: str | None,
    as_json: bool,
) -> None:
    """Render an update mutation guarded by the expected version."""
    from modelsync.request.builder import build_update_request

    try:
        request = build_update_request(
            _load_schema(schema_file),
            _load_model(model_file),
            expected_version,
            _load_predicate(condition_file),
        )
    except ModelSyncError as exc:
        _fail(exc)
    _emit(request, as_json)


@cli.command(name="delete")
@click.argument("schema_file", type=click.Path(exists=False))
@click.argument("model_id")
@click.option("--version", "expected_version", type=int, required=True, help="Expected model version")
@click.option("--condition", "condition_file", default=None, help="Condition document (YAML/JSON)")
@json_option
def delete_command(
    schema_file: str,
    model_id: str,
    expected_version: int,
    condition_file: str | None,
    as_json: bool,
) -> None:
    """Render a delete mutation for MODEL_ID."""
    from modelsync.request.builder import build_deletion_request

    try:
        request = build_deletion_request(
            _load_schema(schema_file),
            model_id,
            expected_version,
            _load_predicate(condition_file),
        )
    except ModelSyncError as exc:
        _fail(exc)
    _emit(request, as_json)


# ---------------------------------------------------------------------------
# subscribe command
# ---------------------------------------------------------------------------


@cli.command(name="subscribe")
@click.argument("schema_file", type=click.Path(exists=False))
@click.option(
    "--type",
    "subscription_type",
    type=click.Choice(_SUBSCRIPTION_TYPES),
    default="onCreate",
    help="Model event to subscribe to",
)
@click.option(
    "--auth-type",
    default=None,
    help="Decorate the request for this authorization type (e.g. AMAZON_COGNITO_USER_POOLS)",
)
@click.option("--claim", "claims", multiple=True, help="Identity claim NAME=VALUE; repeatable")
@json_option
def subscribe_command(
    schema_file: str,
    subscription_type: str,
    auth_type: str | None,
    claims: tuple[str, ...],
    as_json: bool,
) -> None:
    """Render a subscription request.

    With --auth-type, the owner argument required by owner rules is added
    from the given --claim values, as the orchestrator would for that
    candidate.

    Examples:

    \b
        modelsync subscribe todo.yaml --type onUpdate
        modelsync subscribe todo.yaml --auth-type AMAZON_COGNITO_USER_POOLS --claim username=johndoe
    """
    from modelsync.auth.types import AuthorizationType
    from modelsync.request.builder import build_subscription_request
    from modelsync.request.decorator import AuthRuleRequestDecorator, StaticClaimsProvider
    from modelsync.request.request import SubscriptionType

    try:
        request = build_subscription_request(
            _load_schema(schema_file), SubscriptionType(subscription_type)
        )
        if auth_type is not None:
            try:
                parsed = AuthorizationType.parse(auth_type)
            except ValueError as exc:
                raise UsageError(str(exc)) from exc
            decorator = AuthRuleRequestDecorator(StaticClaimsProvider(_parse_claims(claims)))
            request = decorator.decorate(request, parsed)
    except ModelSyncError as exc:
        _fail(exc)
    _emit(request, as_json)


# ---------------------------------------------------------------------------
# candidates command
# ---------------------------------------------------------------------------


@cli.command(name="candidates")
@click.argument("schema_file", type=click.Path(exists=False))
@click.pass_obj
def candidates_command(config: "ModelSyncConfig", schema_file: str) -> None:
    """List the authorization candidates a subscription would try, in order."""
    from modelsync.auth.candidates import Fixed, candidates_for_schema

    try:
        schema = _load_schema(schema_file)
    except ModelSyncError as exc:
        _fail(exc)
    source = candidates_for_schema(schema, config.default_authorization_type)

    table = Table(title=f"Authorization candidates: {schema.name}")
    table.add_column("#", justify="right")
    table.add_column("Auth type", style="bold")
    table.add_column("Strategy")
    table.add_column("Decorated")
    decorate_all = isinstance(source, Fixed)
    for index, candidate in enumerate(source, start=1):
        strategy = candidate.strategy.value if candidate.strategy is not None else "-"
        decorated = decorate_all or candidate.is_owner_strategy
        table.add_row(
            str(index),
            candidate.auth_type.value,
            strategy,
            "[green]yes[/green]" if decorated else "no",
        )
    console.print(table)


if __name__ == "__main__":
    cli()
