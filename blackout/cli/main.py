"""
Blackout CLI entry point.

Commands:
    blackout run          — Start the Telegram bot
    blackout subscribers  — List stored subscribers
    blackout version      — Show version
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="blackout",
    help="Blackout — daily planned power-outage reports over Telegram.",
    add_completion=False,
)

console = Console()


def _load_config(config_path: Path | None):
    from blackout.core.config import BlackoutConfig
    from blackout.core.errors import ConfigError

    try:
        return BlackoutConfig.load(project_path=config_path)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def run(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to a blackout.toml"),
) -> None:
    """Start the bot and serve subscribers until interrupted."""
    from blackout.core.errors import ConfigError

    config = _load_config(config_path)
    try:
        token = config.require_token()
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(_run_bot(config, token, verbose))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


async def _run_bot(config, token: str, verbose: bool = False) -> None:
    """Wire the components together and poll until cancelled."""
    from blackout.bot.engine import SchedulingEngine
    from blackout.bot.texts import Texts
    from blackout.middleware.logging import setup_logging
    from blackout.notifications.telegram import TelegramNotifier
    from blackout.platforms.telegram.app import TelegramPlatform
    from blackout.platforms.telegram.client import TelegramClient
    from blackout.reports.saapa import SaapaReportSource
    from blackout.scheduler.jobs import JobScheduler
    from blackout.store.sqlite import SQLiteSubscriberStore

    setup_logging(
        log_dir=config.get_log_dir(),
        console_level=logging.DEBUG if verbose else logging.INFO,
    )
    logger = logging.getLogger("blackout")
    logger.info(
        f"Starting bot: language={config.language}, timezone={config.scheduler.timezone}"
    )

    store = SQLiteSubscriberStore(config.get_db_path())
    await store.initialize()

    texts = Texts(config.language, config.scheduler.timezone)
    client = TelegramClient(
        token,
        api_base=config.telegram.api_base,
        proxy=config.telegram.proxy,
    )
    notifier = TelegramNotifier(client, texts)
    source = SaapaReportSource(
        config.report.endpoint,
        timeout=config.report.timeout,
        user_agent=config.report.user_agent,
    )
    scheduler = JobScheduler(store, source, notifier, texts, config.scheduler.tzinfo)
    engine = SchedulingEngine(store, scheduler, notifier, texts)
    platform = TelegramPlatform(client, texts, poll_timeout=config.telegram.poll_timeout)

    try:
        installed = await engine.start()
        console.print(
            f"[green]Bot is running[/green] [dim]({len(installed)} daily jobs scheduled)[/dim]"
        )
        await platform.run(engine.handle)
    finally:
        await platform.stop()
        await engine.stop()
        await source.close()
        await client.close()
        await store.close()
        logger.info("Bot stopped")


@app.command()
def subscribers(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to a blackout.toml"),
) -> None:
    """List stored subscribers. Tokens are never shown."""
    config = _load_config(config_path)
    db_path = config.get_db_path()
    if not db_path.exists():
        console.print(f"[dim]No subscriber database at {db_path}[/dim]")
        raise typer.Exit(0)

    rows = asyncio.run(_list_subscribers(db_path))
    if not rows:
        console.print("[dim]No subscribers yet.[/dim]")
        raise typer.Exit(0)

    from blackout.bot.texts import TOKEN_PLACEHOLDER

    table = Table(title="Subscribers")
    table.add_column("Chat ID", style="cyan")
    table.add_column("Bill ID")
    table.add_column("Token")
    table.add_column("Time")
    table.add_column("Active")
    for sub in rows:
        table.add_row(
            str(sub.id),
            sub.billing_id or "-",
            TOKEN_PLACEHOLDER if sub.auth_token else "-",
            sub.schedule_time,
            "[green]yes[/green]" if sub.active else "[dim]no[/dim]",
        )
    console.print(table)


async def _list_subscribers(db_path: Path):
    from blackout.store.sqlite import SQLiteSubscriberStore

    store = SQLiteSubscriberStore(db_path)
    await store.initialize()
    try:
        return await store.list_all()
    finally:
        await store.close()


@app.command()
def version() -> None:
    """Show Blackout version."""
    from blackout import __version__
    console.print(f"Blackout v{__version__}")


if __name__ == "__main__":
    app()
