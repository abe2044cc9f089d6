"""
Command line entry point.

``vidforge serve`` runs the web back-office; ``vidforge bridge`` runs the
real-time download notification host for one user.
"""

import logging
import signal
import sys
import threading
from typing import Optional

import click
from rich.console import Console

from .core.config import load_config
from .core.event_bus import Events
from .utils.logging import setup_logging

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="vidforge")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (defaults to VIDFORGE_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Video downloader back-office and notification bridge."""
    config = load_config()
    setup_logging(level=log_level or config.log_level, log_file=config.log_file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the web application under uvicorn."""
    import uvicorn

    console.print(f"[green]Serving on http://{host}:{port}[/green]")
    uvicorn.run("vidforge.web.app:app", host=host, port=port, reload=reload, log_config=None)


@cli.command()
@click.option("--access-token", help="Mobile access token; resolves the user and messaging token")
@click.option("--user-id", help="User id to subscribe for (with --token)")
@click.option("--token", help="Messaging connection token (with --user-id)")
@click.pass_context
def bridge(ctx: click.Context, access_token: Optional[str], user_id: Optional[str], token: Optional[str]) -> None:
    """Run the real-time notification bridge until interrupted."""
    from .core.result import Err
    from .realtime import build_app_context

    if not access_token and not (user_id and token):
        raise click.UsageError("pass --access-token, or both --user-id and --token")

    app_ctx = build_app_context(ctx.obj["config"])
    app_ctx.event_bus.subscribe(
        Events.SERVICE_STATUS_CHANGED, lambda text: console.print(f"[cyan]{text}[/cyan]")
    )
    app_ctx.event_bus.subscribe(
        Events.NOTIFICATION_POSTED,
        lambda n: console.print(f"[bold]{n.title}[/bold] {n.body}") if not n.ongoing else None,
    )

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    try:
        if access_token:
            started = app_ctx.start_for(access_token)
            if isinstance(started, Err):
                console.print(f"[red]Cannot start bridge: {started.message}[/red]")
                sys.exit(1)
        else:
            app_ctx.bridge_service.start(user_id, token)
        stop.wait()
    except Exception as e:
        console.print(f"[red]Bridge failed: {e}[/red]")
        logger.exception("Bridge host failed")
        sys.exit(1)
    finally:
        app_ctx.shutdown()
        console.print("[yellow]Bridge stopped[/yellow]")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
