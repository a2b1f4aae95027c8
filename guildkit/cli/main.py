"""
guildkit CLI Main Entry Point

Inspect the supported events and watch a bot's live event stream.
"""

import asyncio
import json
from typing import Annotated, Any, Optional

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from guildkit import __version__
from guildkit.client import BotClient, ClientEvents
from guildkit.config import ClientSettings
from guildkit.errors import GuildkitError
from guildkit.events import EVENT_DEFINITIONS, event_key

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)
console = Console()

app = typer.Typer(
    name="guildkit",
    help="guildkit - asyncio client for the Guilded API",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(
            Panel(
                Text.from_markup(
                    f"[bold cyan]guildkit[/bold cyan] v{__version__}\n"
                    "[dim]Real-time events, REST helpers and bot commands for Guilded[/dim]"
                ),
                title="Version",
                border_style="cyan",
            )
        )
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """
    guildkit - asyncio client for the Guilded API.
    """
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG)


def _stream_names() -> dict[str, str]:
    """Map event keys to client stream attribute names."""
    return {str(stream.key): name for name, stream in ClientEvents.event_streams().items()}


@app.command()
def events() -> None:
    """
    List every event the client understands.
    """
    streams = _stream_names()
    table = Table(title="Supported Events")
    table.add_column("Key", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Client stream")
    table.add_column("Transform", style="dim")

    for key, model, transform in EVENT_DEFINITIONS:
        resolved = str(event_key(key))
        table.add_row(
            resolved,
            model.__name__,
            streams.get(resolved, "-"),
            "yes" if transform else "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(EVENT_DEFINITIONS)} events[/dim]")


@app.command()
def listen(
    token: Annotated[
        Optional[str],
        typer.Option(
            "--token",
            "-t",
            help="Bot token (defaults to GUILDKIT_TOKEN).",
            envvar="GUILDKIT_TOKEN",
        ),
    ] = None,
    event: Annotated[
        Optional[list[str]],
        typer.Option(
            "--event",
            "-e",
            help="Only print these events (repeatable), e.g. ChatMessageCreated.",
        ),
    ] = None,
) -> None:
    """
    Connect and print events as they arrive, until Ctrl-C.

    Example: guildkit listen --event ChatMessageCreated
    """
    settings = ClientSettings()
    if not (token or settings.token):
        console.print("[red]No token given. Use --token or set GUILDKIT_TOKEN.[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(_listen(token, settings, event or []))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")
    except asyncio.TimeoutError:
        console.print("[red]Error:[/red] Timed out waiting for the server to welcome the connection")
        raise typer.Exit(1)
    except GuildkitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _listen(token: Optional[str], settings: ClientSettings, names: list[str]) -> None:
    async with BotClient(token, settings) as client:
        entries = [entry for entry in client.events if not names or str(entry.key) in names]
        unknown = set(names) - {str(entry.key) for entry in entries}
        for name in sorted(unknown):
            console.print(f"[yellow]Unknown event:[/yellow] {name}")

        for entry in entries:
            entry.channel.subscribe(_printer(str(entry.key)))

        client.websocket_event_error.subscribe(
            lambda error: console.print(f"[red]Event error:[/red] {error} ({error.__cause__})")
        )

        stopped: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def on_stopped(error: BaseException | None = None) -> None:
            if not stopped.done():
                if error is None:
                    stopped.set_result(None)
                else:
                    stopped.set_exception(error)

        await client.connect()
        client.transport.frames.subscribe(lambda _: None, on_error=on_stopped, on_complete=on_stopped)

        if not client.is_prepared:
            await client.prepared.wait_for(timeout=settings.request_timeout)
        name = client.me.name if client.me else "unknown"
        console.print(f"[green]Connected as[/green] [bold]{name}[/bold]. Press Ctrl-C to stop.")
        await stopped


def _printer(key: str) -> Any:
    def print_event(event: Any) -> None:
        data = event.model_dump(mode="json", by_alias=True, exclude_none=True)
        console.print(f"[cyan]{key}[/cyan] {json.dumps(data)}")

    return print_event


if __name__ == "__main__":
    app()
