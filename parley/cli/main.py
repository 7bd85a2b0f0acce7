"""
Parley CLI

Inspect the installed chat listeners and try messages against them without
a chat server.
"""

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from parley import __version__
from parley.chat.adapter import MemoryAdapter
from parley.chat.context import (
    CanonicalContext,
    ChatChannel,
    ChatPlatform,
    ChatUser,
    ChattingContext,
    PayloadKind,
)
from parley.chat.parser import parse_command
from parley.config import DispatchSettings
from parley.listeners.base import ListenerKind
from parley.listeners.dispatcher import Dispatcher
from parley.listeners.registry import ListenerRegistry
from parley.runtime import AppContext

console = Console()

app = typer.Typer(
    name="parley",
    help="Parley - chat bot listener registry and dispatch engine",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _load_registry(verbose: bool) -> tuple[AppContext, ListenerRegistry]:
    settings = DispatchSettings()
    if verbose:
        settings.log_level = "DEBUG"
    ctx = AppContext.create(settings)
    registry = ListenerRegistry(ctx)
    registry.discover_listeners()
    return ctx, registry


@app.command()
def version() -> None:
    """Print version and exit."""
    console.print(
        Panel(
            Text.from_markup(
                f"[bold cyan]Parley[/bold cyan] v{__version__}\n"
                "[dim]Chat bot listener registry and dispatch engine[/dim]"
            ),
            title="Version",
            border_style="cyan",
        )
    )


@app.command("listeners")
def list_listeners(
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="Filter by kind: message, event"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """
    List installed listeners in dispatch order.

    Example:
        parley listeners
        parley listeners --kind event
    """
    if kind:
        try:
            kinds = [ListenerKind(kind.lower())]
        except ValueError:
            console.print(f"[red]Invalid kind:[/red] {kind}")
            console.print("Valid kinds: message, event")
            raise typer.Exit(1)
    else:
        kinds = list(ListenerKind)

    _, registry = _load_registry(verbose)
    entries = [entry for k in kinds for entry in registry.list_entries(k)]

    if not entries:
        console.print("[yellow]No listeners found[/yellow]")
        return

    table = Table(
        title=f"Chat Listeners ({len(entries)} total)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind", style="magenta")
    table.add_column("Plugin", style="green")
    table.add_column("Version", style="white")
    table.add_column("Priority", style="yellow", justify="right")

    for position, entry in enumerate(entries, start=1):
        table.add_row(
            str(position),
            entry.name,
            entry.kind.value,
            entry.plugin_id,
            entry.plugin_version,
            str(entry.priority),
        )

    console.print(table)


@app.command("settings")
def show_settings() -> None:
    """Show the effective dispatch settings (PARLEY_* environment)."""
    settings = DispatchSettings()
    table = Table(title="Dispatch Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for name, value in settings.model_dump().items():
        table.add_row(name, "-" if value is None else str(value))
    console.print(table)


@app.command("try")
def try_message(
    text: Annotated[str, typer.Argument(help="Chat message, e.g. '@bot zos job list'")],
    platform: Annotated[
        str,
        typer.Option("--platform", "-p", help="mattermost, slack or msteams"),
    ] = ChatPlatform.MATTERMOST.value,
    user: Annotated[str, typer.Option("--user", "-u", help="Chat user name")] = "cli",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """
    Dispatch a message to the installed listeners and print the replies.

    Example:
        parley try "@bot zos job list"
    """
    try:
        chat_platform = ChatPlatform(platform.lower())
    except ValueError:
        console.print(f"[red]Invalid platform:[/red] {platform}")
        raise typer.Exit(1)

    ctx, registry = _load_registry(verbose)
    adapter = MemoryAdapter(chat_platform)
    dispatcher = Dispatcher(ctx, registry=registry)

    context = CanonicalContext(
        payload_kind=PayloadKind.MESSAGE,
        payload_data=parse_command(text),
        chatting=ChattingContext(
            platform=chat_platform,
            user=ChatUser(id=user, name=user),
            channel=ChatChannel(id="cli", name="cli"),
            bot=adapter,
        ),
    )

    result = asyncio.run(dispatcher.dispatch(context))

    console.print(
        f"[bold]State:[/bold] {result.state.value}  "
        f"[bold]Matched:[/bold] {', '.join(result.matched) or '-'}  "
        f"[bold]Failed:[/bold] {', '.join(result.failed) or '-'}"
    )
    for message in adapter.messages:
        body = message.payload if isinstance(message.payload, str) else json.dumps(
            message.payload, indent=2, default=str
        )
        console.print(Panel(body, title=message.type.value, border_style="cyan"))


if __name__ == "__main__":
    app()
