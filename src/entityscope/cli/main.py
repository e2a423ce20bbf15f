"""CLI interface for EntityScope."""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml

from entityscope.cli.formatters import OutputFormatter
from entityscope.core.config import USER_CONFIG_PATH, Config
from entityscope.core.errors import EntityScopeError
from entityscope.core.logging import configure_logging
from entityscope.core.session import Explorer
from entityscope.schemas.graph import EntityKind

REPO_PATH = click.Path(file_okay=True, dir_okay=True)


@click.group()
@click.version_option(package_name="entityscope")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (default: from config, INFO)",
)
@click.option(
    "--log-file",
    type=click.Path(),
    default=None,
    help="Write logs to this file as well as stderr",
)
@click.option(
    "--json-logging",
    is_flag=True,
    default=False,
    help="Emit logs as JSON",
)
@click.option(
    "--workers",
    "-w",
    type=int,
    default=None,
    help="Worker threads per parsing pass (default: sequential)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text)",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: Optional[str],
    log_file: Optional[str],
    json_logging: bool,
    workers: Optional[int],
    output_format: str,
):
    """
    EntityScope - explore the entities of a source repository.

    Parses a Go, Rust, Python or JavaScript/TypeScript repository, extracts
    its top-level declarations and links them with name-based call and
    reference edges. Relations are approximate.

    Use 'entityscope COMMAND --help' for details on each command.
    """
    cli_config: dict[str, Any] = {
        "log_level": log_level.upper() if log_level else None,
        "log_file": log_file,
        "json_logging": json_logging or None,
        "max_workers": workers,
    }
    config_obj = Config.load(cli_config)
    configure_logging(
        level=config_obj.log_level,
        json_output=config_obj.json_logging,
        log_file=config_obj.log_file,
    )

    ctx.obj = {
        "config": config_obj,
        "formatter": OutputFormatter(output_format=output_format.lower()),
    }


def _open(ctx: click.Context, repo_path: str) -> Explorer:
    explorer = Explorer(ctx.obj["config"])
    try:
        explorer.open_repo(repo_path)
    except EntityScopeError as e:
        _fail(ctx, e)
    return explorer


def _fail(ctx: click.Context, error: Exception) -> None:
    ctx.obj["formatter"].print_error(str(error))
    sys.exit(1)


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.pass_context
def info(ctx: click.Context, repo_path: str):
    """Show the summary of a repository."""
    explorer = _open(ctx, repo_path)
    ctx.obj["formatter"].print_repo_info(explorer.get_repo_info())


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.argument("query")
@click.option("--limit", "-n", type=int, default=None, help="Maximum results (default: 50)")
@click.pass_context
def search(ctx: click.Context, repo_path: str, query: str, limit: Optional[int]):
    """Search entities by name, kind, package or signature."""
    if limit is not None:
        ctx.obj["config"].search_limit = limit
    explorer = _open(ctx, repo_path)
    ctx.obj["formatter"].print_search_results(explorer.search_entities(query))


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.argument("entity_id")
@click.pass_context
def focus(ctx: click.Context, repo_path: str, entity_id: str):
    """Show callers, same-directory targets and cross-directory groups of an entity."""
    explorer = _open(ctx, repo_path)
    try:
        view = explorer.get_entity_focus(entity_id)
    except EntityScopeError as e:
        _fail(ctx, e)
    ctx.obj["formatter"].print_focus(view)


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.option(
    "--kind",
    "-k",
    type=click.Choice([k.label for k in EntityKind], case_sensitive=False),
    default=None,
    help="Only list entities of this kind",
)
@click.pass_context
def entities(ctx: click.Context, repo_path: str, kind: Optional[str]):
    """List every entity in graph order."""
    explorer = _open(ctx, repo_path)
    found = explorer.get_all_entities()
    if kind:
        found = [e for e in found if e.kind.label == kind.lower()]
    ctx.obj["formatter"].print_entities(found)


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.argument("entity_id")
@click.pass_context
def source(ctx: click.Context, repo_path: str, entity_id: str):
    """Print the exact source text of an entity."""
    explorer = _open(ctx, repo_path)
    try:
        text = explorer.get_entity_source(entity_id)
    except EntityScopeError as e:
        _fail(ctx, e)
    formatter = ctx.obj["formatter"]
    if formatter.as_json:
        formatter.print_json({"id": entity_id, "source": text})
    else:
        click.echo(text)


@main.command()
@click.argument("repo_path", type=REPO_PATH)
@click.pass_context
def graph(ctx: click.Context, repo_path: str):
    """Show the node/edge projection of the whole graph."""
    explorer = _open(ctx, repo_path)
    ctx.obj["formatter"].print_graph_data(explorer.get_graph_data())


@main.group()
def config():
    """Manage configuration."""
    pass


@config.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Export format",
)
@click.pass_context
def config_export(ctx: click.Context, output: Optional[str], format: str):
    """Export current configuration to file."""
    config_obj: Config = ctx.obj["config"]

    if output:
        output_path = Path(output)
        config_obj.save(output_path, format=format)
        click.echo(f"Configuration exported to: {output_path}")
    else:
        if format == "yaml":
            content = yaml.dump(config_obj.to_dict(), default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(config_obj.to_dict(), indent=2)
        click.echo(content)


@config.command("import")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--target",
    type=click.Path(),
    default=None,
    help=f"Where to save (default: {USER_CONFIG_PATH})",
)
def config_import(config_file: str, target: Optional[str]):
    """Import configuration from file into the user config."""
    config_obj = Config()
    config_obj._load_file(Path(config_file), config_obj)

    target_path = Path(target) if target else USER_CONFIG_PATH
    config_obj.save(target_path, format="yaml")
    click.echo(f"Configuration imported and saved to: {target_path}")


if __name__ == "__main__":
    main()
