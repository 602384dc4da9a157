"""Entry point for the Inkwell API server and its admin commands."""

import asyncio
import logging
import sys

import structlog
import typer
from rich.console import Console

from inkwell import __version__
from inkwell import config as config_module

console = Console()

app = typer.Typer(
    name="inkwell",
    help="Inkwell - GitHub sign-in and scoped data API",
    add_completion=False,
    no_args_is_help=True,
)

db_app = typer.Typer(name="db", help="Database operations", no_args_is_help=True)
app.add_typer(db_app, name="db")


def configure_logging() -> None:
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        level=config_module.settings.log_level,
        stream=sys.stderr,
    )
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
            structlog.dev.ConsoleRenderer()
            if sys.stderr.isatty()
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Start the Inkwell API server.

    Examples:
        inkwell serve                  # Settings defaults (localhost:3000)
        inkwell serve -h 0.0.0.0       # Listen on all interfaces
    """
    import uvicorn

    configure_logging()
    settings = config_module.settings
    host = host or settings.server_host
    port = port or settings.server_port

    structlog.get_logger().info(
        "Starting Inkwell API",
        version=__version__,
        environment=settings.environment,
        host=host,
        port=port,
    )
    uvicorn.run(
        "inkwell.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@db_app.command("init")
def db_init() -> None:
    """Create all tables directly (development only; use alembic elsewhere)."""
    from inkwell.db.connection import close_db, init_db

    if config_module.settings.is_production:
        console.print("[red]✗[/red] Refusing to create tables in production, run alembic upgrade head")
        raise typer.Exit(code=1)

    async def _init() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    configure_logging()
    asyncio.run(_init())
    console.print("[green]✓[/green] Database tables created")


@app.command()
def version() -> None:
    """Show the installed version."""
    console.print(f"inkwell {__version__}")


if __name__ == "__main__":
    app()
