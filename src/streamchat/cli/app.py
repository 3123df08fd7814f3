"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..client.models import AVAILABLE_MODELS, DEFAULT_MODEL
from ..client.session import ChatSession
from ..logging_config import configure_logging
from ..messages.models import Role
from ..settings.models import DEFAULT_ENDPOINT_URL
from .providers import get_relay_config, get_relay_url, get_settings_store, get_transport

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="streamchat",
    help="Streaming chat relay and terminal client",
    no_args_is_help=True,
    add_completion=True,
)

settings_app = typer.Typer(help="Show or change the persisted endpoint URL", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

# Console for rich output
console = Console()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind host (default: RELAY_HOST or 127.0.0.1)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: RELAY_PORT or 8000)"),
    debug: bool = typer.Option(False, "--debug", help="Enable Quart debug mode"),
    log_level: str = typer.Option("info", "--log-level", "-l", help="Log level: debug, info, warning or error"),
    log_file: str | None = typer.Option(None, "--log-file", help="Also append logs to this file"),
):
    """Run the chat relay server."""
    from ..relay import serve as serve_relay

    configure_logging(log_level, log_file=log_file)
    config = get_relay_config(host=host, port=port, console=console)

    console.print(f"[bold cyan]StreamChat relay[/bold cyan] on http://{config.host}:{config.port}")
    console.print(f"[dim]Provider: {config.provider_name} ({config.provider_base_url})[/dim]")
    try:
        asyncio.run(serve_relay(config, debug=debug))
    except KeyboardInterrupt:
        console.print("\n[dim]Relay stopped.[/dim]")


@app.command()
def chat(
    relay_url: str | None = typer.Option(
        None,
        "--relay-url",
        "-r",
        help="Relay base URL (default: STREAMCHAT_RELAY_URL or http://127.0.0.1:8000)"
    ),
    model: str = typer.Option(DEFAULT_MODEL, "--model", "-m", help="Initial model"),
    system: str | None = typer.Option(None, "--system", help="System prompt sent with every request"),
    raw: bool = typer.Option(False, "--raw", help="Show the raw stream panel on start"),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Append logs to this file"),
):
    """Launch interactive TUI chat interface."""
    async def _tui():
        from ..ui import run_textual_tui

        store = get_settings_store()
        session = ChatSession(
            get_transport(relay_url),
            model=model,
            system=system,
            endpoint_url=store.get_endpoint_url(),
        )
        await run_textual_tui(
            session=session,
            settings_store=store,
            log_level=log_level,
            show_raw=raw,
        )

    # stdout belongs to the terminal renderer
    configure_logging(log_level or "warning", log_file=log_file, stream=False)
    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass
    console.print("\n[dim]Goodbye![/dim]")


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    relay_url: str | None = typer.Option(None, "--relay-url", "-r", help="Relay base URL"),
    model: str = typer.Option(DEFAULT_MODEL, "--model", "-m", help="Model to use"),
    system: str | None = typer.Option(None, "--system", help="System prompt"),
    raw: bool = typer.Option(False, "--raw", help="Print the raw stream instead of the reply"),
):
    """Send one message and stream the reply to the terminal."""
    async def _ask():
        store = get_settings_store()
        session = ChatSession(
            get_transport(relay_url),
            model=model,
            system=system,
            endpoint_url=store.get_endpoint_url(),
        )
        printed = 0

        def _print_text() -> None:
            nonlocal printed
            messages = session.messages
            if raw or not messages or messages[-1].role is not Role.ASSISTANT:
                return
            text = messages[-1].text
            console.print(text[printed:], end="", markup=False, highlight=False)
            printed = len(text)

        if raw:
            session.raw_buffer.add_listener(
                lambda text: console.print(text, end="", markup=False, highlight=False)
            )
        session.add_update_listener(_print_text)

        try:
            await session.submit(prompt)
            await session.wait()
        finally:
            await session.close()
        console.print()

        if session.error is not None:
            console.print(f"[red]Error: {session.error}[/red]")
            raise typer.Exit(code=1)
        usage = session.last_metadata.get("usage")
        if usage:
            console.print(f"[dim]tokens: {usage.get('total_tokens', 0)}[/dim]")

    configure_logging("warning", stream=False)
    try:
        asyncio.run(_ask())
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")


@app.command()
def models():
    """List the models offered by the client."""
    table = Table(title="Models")
    table.add_column("Model", style="cyan")
    table.add_column("Default", style="green")
    for name in AVAILABLE_MODELS:
        table.add_row(name, "yes" if name == DEFAULT_MODEL else "")
    console.print(table)


@settings_app.command("show")
def settings_show():
    """Show the persisted settings."""
    store = get_settings_store()
    settings = store.load()
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("endpoint_url", settings.endpoint_url)
    table.add_row("default", "yes" if settings.is_default else "no")
    table.add_row("updated_at", str(settings.updated_at) if settings.updated_at else "-")
    table.add_row("relay_url", get_relay_url())
    table.add_row("file", str(store.path))
    console.print(table)


@settings_app.command("set")
def settings_set(
    endpoint_url: str = typer.Argument(..., help="Provider endpoint URL"),
):
    """Persist a custom endpoint URL."""
    try:
        settings = get_settings_store().set_endpoint_url(endpoint_url)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Endpoint URL set to {settings.endpoint_url}[/green]")


@settings_app.command("reset")
def settings_reset():
    """Restore the default endpoint URL."""
    try:
        get_settings_store().reset()
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Endpoint URL reset to {DEFAULT_ENDPOINT_URL}[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
