"""CLI command for the development server."""

from pathlib import Path

import click
import structlog

from folio.server.serve import DevServer
from folio.utils.config import Config
from folio.utils.exceptions import FolioError
from folio.utils.logger import configure_logging

logger = structlog.get_logger(__name__)


@click.command()
@click.option(
    "--site-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Site root holding config.toml, content/ and templates/ (default: .)",
)
@click.option(
    "--include-drafts",
    is_flag=True,
    help="Render pages marked as drafts",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="HTTP port (default: [server] port from config.toml, or 8080)",
)
def serve(site_dir: Path, include_drafts: bool, port: int | None) -> None:
    """Serve the site locally and rebuild it when files change.

    Pages are built into a temporary directory that is removed on exit.
    Open pages reload themselves after each rebuild.

    Examples:

        \b
        folio serve --site-dir my-site --include-drafts --port 3000
    """
    try:
        config = Config(site_dir)
    except FolioError as e:
        click.echo(f"  Configuration error: {e.message}", err=True)
        raise click.Abort() from e

    configure_logging(config.log_level, json_output=False)

    server = DevServer(config, include_drafts=include_drafts, port=port)
    click.echo(f"Serving {site_dir} at {server.url} (Ctrl+C to stop)")

    try:
        server.serve_forever()
    except OSError as e:
        click.echo(f"  Failed to start server: {e}", err=True)
        logger.error("serve_failed", error=str(e), exc_info=True)
        raise click.Abort() from e
