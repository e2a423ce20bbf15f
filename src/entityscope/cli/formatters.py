"""Output formatting utilities with rich support."""

import json
import sys
from typing import Any, Iterable

import click
from pydantic import BaseModel
from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from entityscope.schemas.focus import FocusView, GraphData, SearchResult
from entityscope.schemas.graph import Entity, RepoInfo


def _location(entity: Entity) -> str:
    return f"{entity.file}:{entity.line}"


class OutputFormatter:
    """Renders query results as rich tables or as JSON documents."""

    def __init__(self, output_format: str = "text", force_color: bool = False):
        """Initialize formatter."""
        self.output_format = output_format
        self.console = Console(force_terminal=force_color or None, file=sys.stdout)

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    def print_json(self, data: Any, indent: int = 2) -> None:
        """Print JSON, highlighted on a terminal and verbatim otherwise."""
        json_str = json.dumps(data, indent=indent, ensure_ascii=False)
        if self.console.is_terminal:
            self.console.print(JSON(json_str))
        else:
            click.echo(json_str)

    def print_models(self, models: Iterable[BaseModel]) -> None:
        self.print_json([m.model_dump(mode="json") for m in models])

    def print_error(self, message: str) -> None:
        """Print error message."""
        click.echo(f"Error: {message}", err=True)

    def print_repo_info(self, info: RepoInfo) -> None:
        if self.as_json:
            self.print_json(info.model_dump(mode="json"))
            return

        table = Table(title=escape(info.name), show_header=True, header_style="bold magenta")
        table.add_column("Attribute", style="cyan")
        table.add_column("Value", style="green")
        for attribute in info.attributes:
            value = attribute.value if attribute.link is None else f"{attribute.value} ({attribute.link})"
            table.add_row(escape(attribute.label), escape(value))
        table.add_row("Entities", str(info.total_entities))
        self.console.print(table)
        if info.approximate:
            self.console.print("[dim]Relations are name-based and approximate.[/dim]")

    def print_search_results(self, results: list[SearchResult]) -> None:
        if self.as_json:
            self.print_models(results)
            return
        if not results:
            self.console.print("[yellow]No matches[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Score", justify="right")
        table.add_column("Kind", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Location")
        for result in results:
            entity = result.entity
            table.add_row(
                f"{result.score:.1f}",
                entity.kind.label,
                escape(entity.name),
                escape(_location(entity)),
            )
        self.console.print(table)

    def print_entities(self, entities: list[Entity]) -> None:
        if self.as_json:
            self.print_models(entities)
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Id", style="cyan", overflow="fold")
        table.add_column("Package")
        table.add_column("Line", justify="right")
        for entity in entities:
            table.add_row(escape(entity.id), escape(entity.package), str(entity.line))
        self.console.print(table)

    def print_focus(self, view: FocusView) -> None:
        if self.as_json:
            self.print_json(view.model_dump(mode="json"))
            return

        center = view.center
        header = f"[bold cyan]{escape(center.name)}[/bold cyan] ({center.kind.label})"
        body = escape(center.signature)
        if center.doc_comment:
            body = f"[dim]{escape(center.doc_comment)}[/dim]\n{body}"
        self.console.print(Panel(body, title=header, subtitle=escape(_location(center))))

        self.console.print(f"[bold]Incoming[/bold] ({len(view.incoming)})")
        for ref in view.incoming:
            self.console.print(f"  {ref.relation} {escape(ref.entity.id)}")

        self.console.print(f"[bold]Same directory[/bold] ({len(view.same_pkg)})")
        for entry in view.same_pkg:
            self.console.print(f"  {entry.kind:<9} {escape(entry.id)}")

        self.console.print(f"[bold]Other directories[/bold] ({len(view.same_module)})")
        for group in view.same_module:
            self.console.print(
                f"  {escape(group.pkg_dir)}: {group.fn_count} functions, {group.type_count} other"
            )

        if view.external_deps:
            self.console.print("[bold]External dependencies[/bold]")
            for dep in view.external_deps:
                self.console.print(f"  {escape(dep)}")

    def print_graph_data(self, data: GraphData) -> None:
        if self.as_json:
            self.print_json(data.model_dump(mode="json"))
            return

        table = Table(title="Graph", show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Nodes", str(len(data.nodes)))
        table.add_row("Edges", str(len(data.edges)))
        table.add_row("Packages", escape(", ".join(data.packages)))
        self.console.print(table)
