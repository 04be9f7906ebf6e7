"""Command line entry points for the catalog service and its terminal client."""

from __future__ import annotations

import logging

import click

from catalog.core.config import get_settings
from catalog.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="movie-catalog")
def main() -> None:
    """Personal movie catalog."""


@main.command()
@click.option("--host", default=None, help="Interface to bind (defaults to CATALOG_HOST).")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to CATALOG_PORT).")
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP/JSON catalog service."""
    import uvicorn

    settings = get_settings()
    configure_logging()
    host = host or settings.host
    port = port or settings.port
    logger.info("Serving catalog on %s:%s (database %s)", host, port, settings.database_url)
    uvicorn.run(
        "catalog.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command()
@click.option("--api-url", default=None, help="Catalog service URL (defaults to CATALOG_API_URL).")
def tui(api_url: str | None) -> None:
    """Browse and edit the catalog in the terminal."""
    from catalog.tui.app import build_app

    settings = get_settings()
    configure_logging(filename=settings.tui_log_file)
    if api_url:
        settings = settings.model_copy(update={"api_base_url": api_url})
    logger.info("Starting terminal client against %s", settings.api_base_url)
    build_app(settings).run()


if __name__ == "__main__":
    main()
