"""relaybot CLI: serve, inspect plugins and dry-run messages locally."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from relaybot.config import get_config
from relaybot.logging import setup_logging
from relaybot.messages.models import GroupMetadata, InboundEvent, MessageKey, MessageKind, Participant
from relaybot.plugins.loader import load_plugins
from relaybot.transport.console import ConsoleTransport

app = typer.Typer(
    name="relaybot",
    help="relaybot: chat bot command dispatcher",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()

_DRY_RUN_BOT = "10000000000"
_DRY_RUN_GROUP = "120363000000000000@g.us"


@app.command()
def serve() -> None:
    """Run the HTTP ingress server."""
    from relaybot.main import main as run_server

    run_server()


@app.command()
def commands(
    plugins_dir: str = typer.Option("", "--plugins-dir", "-p", help="Override the configured plugins dir"),
) -> None:
    """List the commands the plugin loader finds."""
    config = get_config()
    setup_logging(level="WARNING", fmt="console")
    loaded = asyncio.run(load_plugins(plugins_dir or config.plugins_dir))

    if not loaded:
        console.print("[yellow]No commands found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"{len(loaded)} commands")
    table.add_column("Command", style="cyan")
    table.add_column("Category")
    table.add_column("Owner only")
    table.add_column("Description")
    table.add_column("Source", style="dim")
    for name in sorted(loaded):
        entry = loaded[name]
        table.add_row(
            name,
            entry.category,
            "yes" if entry.owner_only else "",
            entry.description,
            entry.source,
        )
    console.print(table)


@app.command("try")
def try_message(
    text: str = typer.Argument(..., help="Message text to dispatch"),
    sender: str = typer.Option("", "--sender", "-s", help="Sender number (default: first owner)"),
    group: bool = typer.Option(False, "--group", "-g", help="Deliver as a group message"),
    from_me: bool = typer.Option(False, "--from-me", help="Mark the message as sent by the bot"),
) -> None:
    """Dispatch one message through a console transport and print the replies."""
    from relaybot.main import build_dispatcher

    config = get_config()
    setup_logging(level=config.log_level, fmt="console")

    domain = config.jid_domain
    number = sender or (config.owners[0].number if config.owners else "620000000000")
    sender_jid = f"{number}@{domain}"
    bot_jid = f"{_DRY_RUN_BOT}@{domain}"

    groups = {
        _DRY_RUN_GROUP: GroupMetadata(
            id=_DRY_RUN_GROUP,
            subject="dry run",
            participants=(
                Participant(id=sender_jid, admin="superadmin"),
                Participant(id=bot_jid, admin="admin"),
            ),
        )
    }
    transport = ConsoleTransport(self_id=bot_jid, groups=groups, console=console)

    event = InboundEvent(
        kind=MessageKind.CONVERSATION,
        key=MessageKey(
            remote_jid=_DRY_RUN_GROUP if group else sender_jid,
            from_me=from_me,
            participant=sender_jid if group else None,
            id="dry-run",
        ),
        message={MessageKind.CONVERSATION.value: text},
        text=text,
        is_group=group,
    )

    async def _run() -> str:
        dispatcher = await build_dispatcher(config, transport)
        outcome = await dispatcher.dispatch(event)
        return outcome.value

    outcome = asyncio.run(_run())
    console.print(f"[dim]outcome: {outcome}  │  replies: {len(transport.replies)}[/dim]")


if __name__ == "__main__":
    app()
