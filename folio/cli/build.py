"""CLI command for building a site."""

from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click
import structlog

from folio.generator.site import SiteGenerator
from folio.utils.config import Config
from folio.utils.exceptions import FolioError
from folio.utils.logger import configure_logging

if TYPE_CHECKING:
    from folio.generator.site import BuildStatistics

logger = structlog.get_logger(__name__)


def _display_configuration(config: Config) -> None:
    """Display build configuration to user."""
    click.echo(f"Site Directory: {config.site_dir}")
    click.echo(f"Output Directory: {config.output_dir}")
    click.echo(f"Base URL: {config.base_url}")
    click.echo(f"Include Drafts: {config.include_drafts}")
    click.echo()


def _display_summary(stats: "BuildStatistics") -> None:
    """Display build summary."""
    click.echo()
    click.echo("=" * 60)
    click.echo("Build Complete!")
    click.echo("=" * 60)
    click.echo(f"  Pages Rendered: {stats.pages_rendered}")
    click.echo(f"  Redirects Rendered: {stats.redirects_rendered}")
    click.echo(f"  Drafts Skipped: {stats.drafts_skipped}")
    click.echo(f"  Static Files Copied: {stats.static_files_copied}")
    click.echo(f"  Duration: {stats.duration_seconds:.2f}s")
    click.echo()


@click.command()
@click.option(
    "--site-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Site root holding config.toml, content/ and templates/ (default: .)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: output_dir from config.toml, or public/)",
)
@click.option(
    "--include-drafts",
    is_flag=True,
    help="Render pages marked as drafts",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: LOG_LEVEL or INFO)",
)
def build(
    site_dir: Path,
    output_dir: Path | None,
    include_drafts: bool,
    log_level: str | None,
) -> None:
    """Build the site into the output directory.

    The output directory is cleared before every build.

    Examples:

        \b
        # Build the site in the current directory
        folio build

        \b
        # Build another site, drafts included
        folio build --site-dir my-site --include-drafts
    """
    try:
        config = Config(site_dir, output_dir=output_dir)
    except FolioError as e:
        click.echo(f"  Configuration error: {e.message}", err=True)
        raise click.Abort() from e

    if include_drafts:
        config.include_drafts = True

    level = log_level or config.log_level
    configure_logging(level, json_output=False)

    _display_configuration(config)

    try:
        stats = SiteGenerator(config).build(
            datetime.now(UTC), show_progress=level.upper() in ("DEBUG", "INFO")
        )
    except KeyboardInterrupt:
        click.echo()
        click.echo("  Build interrupted by user", err=True)
        raise click.Abort() from None
    except FolioError as e:
        click.echo()
        click.echo(f"  {e.message}", err=True)
        logger.error("build_command_failed", error=str(e), exc_info=True)
        raise click.Abort() from e

    _display_summary(stats)


if __name__ == "__main__":
    build()
