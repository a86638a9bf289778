"""CLI commands for the Atlassian Community tools."""

import asyncio
from enum import Enum
from typing import Annotated, Awaitable, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import settings
from ..models.search_result import SearchEnvelope
from ..search.query_builder import ContentStyle
from ..search.service import CommunitySearchService
from ..storage.json_writer import JsonWriter
from ..tools.server import build_service, create_server
from ..utils.logging import setup_logging

app = typer.Typer(
    name="atlassian-community",
    help="Query the Atlassian Community search API and serve it as MCP tools",
    add_completion=False,
)
console = Console()


class SortChoice(str, Enum):
    asc = "asc"
    desc = "desc"


class TransportChoice(str, Enum):
    stdio = "stdio"
    http = "http"


def _print_envelope(envelope: SearchEnvelope, title: str) -> None:
    """Render a result envelope as a table."""
    if not envelope.success:
        console.print(f"[yellow]{envelope.message}[/yellow]")
        return

    table = Table(title=title, show_header=True)
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("Author", style="magenta")
    table.add_column("Type")
    table.add_column("Views", justify="right", style="green")
    table.add_column("Replies", justify="right")
    table.add_column("Link", overflow="fold")

    for post in envelope.items:
        table.add_row(
            post.title,
            post.author,
            post.contentType,
            str(post.viewCount),
            str(post.replyCount),
            post.communityLink,
        )

    console.print(table)
    page = envelope.pagination
    console.print(
        f"{envelope.message} Page {page.currentPage} of {page.totalPages}."
    )


async def _run_and_report(
    title: str,
    call: Awaitable[SearchEnvelope],
    output_dir: Optional[str],
) -> None:
    envelope = await call
    _print_envelope(envelope, title)
    if output_dir:
        filepath = await JsonWriter(output_dir).write_envelope(envelope, title)
        console.print(f"[green]Saved:[/green] {filepath}")


def _execute(title: str, call: Awaitable[SearchEnvelope], output_dir: Optional[str]) -> None:
    try:
        asyncio.run(_run_and_report(title, call, output_dir))
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _output_dir(output_dir: Optional[str], save: bool) -> Optional[str]:
    return output_dir or (settings.output_dir if save else None)


def _service(verbose: bool) -> CommunitySearchService:
    setup_logging("DEBUG" if verbose else settings.log_level, json_output=settings.log_json)
    return build_service(settings)


@app.command()
def search(
    terms: Annotated[str, typer.Argument(help="Terms to search for in subjects and bodies")],
    tag: Annotated[
        Optional[list[str]],
        typer.Option("--tag", "-t", help="Restrict to a tag (repeatable)"),
    ] = None,
    style: Annotated[
        Optional[ContentStyle],
        typer.Option("--style", "-s", help="Restrict to Q&A threads or blog articles"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", min=1, max=100, help="Page size [default: configured default_limit]"),
    ] = None,
    offset: Annotated[int, typer.Option("--offset", min=0)] = 0,
    sort: Annotated[SortChoice, typer.Option("--sort", help="Sort by post date")] = SortChoice.desc,
    output_dir: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Directory to save the JSON result in"),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Save the JSON result in the configured output directory"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")] = False,
) -> None:
    """Search community posts by terms."""
    service = _service(verbose)
    if tag:
        if style is not None:
            console.print("[yellow]--style is ignored when --tag is given[/yellow]")
        call = service.search_by_query_and_tags(terms, tag, limit, offset, sort.value)
    else:
        call = service.search_by_query(terms, limit, offset, sort.value, style=style)
    _execute(terms, call, _output_dir(output_dir, save))


@app.command()
def recent(
    tag: Annotated[Optional[str], typer.Option("--tag", "-t", help="Restrict to a tag")] = None,
    style: Annotated[
        Optional[ContentStyle],
        typer.Option("--style", "-s", help="Restrict to Q&A threads or blog articles"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", min=1, max=100, help="Page size [default: configured default_limit]"),
    ] = None,
    offset: Annotated[int, typer.Option("--offset", min=0)] = 0,
    output_dir: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Directory to save the JSON result in"),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Save the JSON result in the configured output directory"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")] = False,
) -> None:
    """List the most recent community posts."""
    service = _service(verbose)
    call = service.get_most_recent_posts(limit, offset, style=style, tag=tag)
    _execute(f"recent {tag or 'posts'}", call, _output_dir(output_dir, save))


@app.command()
def tools() -> None:
    """List the MCP tools the server registers."""
    server = create_server(config=settings)
    registered = asyncio.run(server.list_tools())

    table = Table(title="MCP tools", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for tool in registered:
        table.add_row(tool.name, (tool.description or "").strip())
    console.print(table)


@app.command()
def serve(
    transport: Annotated[
        TransportChoice,
        typer.Option("--transport", help="stdio for local MCP clients, http for remote ones"),
    ] = TransportChoice.stdio,
    host: Annotated[str, typer.Option("--host", "-h", help="API host")] = settings.api_host,
    port: Annotated[int, typer.Option("--port", "-p", help="API port")] = settings.api_port,
    reload: Annotated[bool, typer.Option("--reload", "-r", help="Enable auto-reload")] = False,
) -> None:
    """Start the MCP server."""
    setup_logging(settings.log_level, json_output=settings.log_json)

    if transport is TransportChoice.stdio:
        # stdout carries the protocol; nothing may be printed here
        create_server(config=settings).run()
        return

    import uvicorn

    console.print(f"\n[bold blue]Starting Atlassian Community MCP Server[/bold blue]")
    console.print(f"MCP endpoint: http://{host}:{port}/mcp")
    console.print(f"Health: http://{host}:{port}/health")
    console.print()

    uvicorn.run(
        "atlassian_community.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__

    console.print(f"Atlassian Community MCP v{__version__}")


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
