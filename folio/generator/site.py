"""Site build orchestration: content in, rendered site out."""

import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from tqdm import tqdm

from folio.common.constants import ATOM_FILENAME, SITEMAP_FILENAME
from folio.content.loader import ContentLoader
from folio.content.parser import FrontMatterParser
from folio.generator.feed import AtomFeedBuilder
from folio.generator.hierarchy import ContentHierarchy
from folio.generator.output import DirectoryOutputSink
from folio.generator.page_generator import PageGenerator
from folio.generator.sitemap import build_sitemap
from folio.generator.templates import TemplateEngine
from folio.utils.config import Config
from folio.utils.exceptions import BuildCommandError, BuildError, FolioError

logger = structlog.get_logger(__name__)


@dataclass
class BuildStatistics:
    """Statistics for one site build.

    Attributes:
        pages_rendered: Canonical pages written
        redirects_rendered: Pagination redirect pages written
        drafts_skipped: Draft items left out of the output
        static_files_copied: Non-markdown files mirrored into the output
        start_time: Start time as unix timestamp
        end_time: End time as unix timestamp
        duration_seconds: Total build duration
    """

    pages_rendered: int = 0
    redirects_rendered: int = 0
    drafts_skipped: int = 0
    static_files_copied: int = 0
    start_time: float = 0.0
    end_time: float = 0.0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert statistics to dictionary for JSON serialization."""
        return {
            "pages_rendered": self.pages_rendered,
            "redirects_rendered": self.redirects_rendered,
            "drafts_skipped": self.drafts_skipped,
            "static_files_copied": self.static_files_copied,
            "duration_seconds": round(self.duration_seconds, 3),
        }


def run_build_command(command: str, config: Config, stage: str) -> None:
    """Run a pre- or post-build shell command from the site root.

    The command sees ``FOLIO_ROOT``, ``FOLIO_CONTENT`` and ``FOLIO_OUTPUT``
    in its environment.

    Raises:
        BuildCommandError: If the command exits with a non-zero status
    """
    env = {
        **os.environ,
        "FOLIO_ROOT": str(config.site_dir),
        "FOLIO_CONTENT": str(config.content_dir),
        "FOLIO_OUTPUT": str(config.output_dir),
    }
    logger.info("build_command_started", stage=stage, command=command)
    try:
        result = subprocess.run(shlex.split(command), cwd=config.site_dir, env=env, check=False)
    except OSError as e:
        raise BuildCommandError(command, -1) from e
    if result.returncode != 0:
        raise BuildCommandError(command, result.returncode)


class SiteGenerator:
    """Build a whole site from its configuration.

    One call to :meth:`build`:
    1. Run the pre-build command (outside dev mode)
    2. Clear the output directory
    3. Load content into a fresh hierarchy
    4. Render every page
    5. Mirror static files
    6. Write the Atom feed and the sitemap, when enabled
    7. Run the post-build command (outside dev mode)

    Every build starts from scratch; nothing is reused between builds.
    """

    def __init__(self, config: Config) -> None:
        """Initialize site generator.

        Args:
            config: Site configuration
        """
        self.config = config
        self.logger = logger.bind(site_dir=str(config.site_dir))
        self.hierarchy: ContentHierarchy | None = None
        self.rendered_paths: list[str] = []

    def build(self, now: datetime | None = None, show_progress: bool = False) -> BuildStatistics:
        """Build the site.

        Args:
            now: Build timestamp (default: current UTC time)
            show_progress: Show a progress bar while pages render

        Returns:
            BuildStatistics for the run

        Raises:
            BuildError: If any step fails; the original error is chained
        """
        now = now or datetime.now(UTC)
        stats = BuildStatistics(start_time=time.time())
        config = self.config

        self.logger.info(
            "build_started",
            output_dir=str(config.output_dir),
            include_drafts=config.include_drafts,
            dev_mode=config.dev_mode,
        )

        try:
            if config.pre_build_cmd and not config.dev_mode:
                run_build_command(config.pre_build_cmd, config, "pre_build")

            sink = DirectoryOutputSink(config.output_dir)
            sink.clear()

            loader = ContentLoader(
                config.content_dir,
                FrontMatterParser(smart_punctuation=config.smart_punctuation),
            )
            hierarchy = ContentHierarchy.build(loader.load_all())
            hierarchy.static_files = dict(loader.static_files)
            self.hierarchy = hierarchy

            generator = PageGenerator(
                hierarchy, TemplateEngine(config.templates_dir), sink, config, now
            )
            items = hierarchy.items()
            for item in tqdm(items, desc="Rendering", unit="page", disable=not show_progress):
                generator.generate_page(item)
            self.rendered_paths = list(generator.rendered_paths)

            for relative_path, source in sorted(hierarchy.static_files.items()):
                sink.copy_file(relative_path, source)
                stats.static_files_copied += 1

            if config.generate_feed:
                feed = AtomFeedBuilder(config).build(hierarchy, now)
                sink.write_file(ATOM_FILENAME, feed.decode("utf-8"))

            if config.sitemap:
                sitemap = build_sitemap(self.rendered_paths, config.full_url)
                sink.write_file(SITEMAP_FILENAME, sitemap.decode("utf-8"))

            if config.post_build_cmd and not config.dev_mode:
                run_build_command(config.post_build_cmd, config, "post_build")
        except FolioError as e:
            self.logger.error("build_failed", error=str(e), error_type=type(e).__name__)
            raise BuildError(f"Build failed: {e.message}") from e
        except Exception as e:
            self.logger.error("build_failed", error=str(e), error_type=type(e).__name__)
            raise BuildError(f"Build failed: {e}") from e

        stats.pages_rendered = generator.stats.pages_rendered
        stats.redirects_rendered = generator.stats.redirects_rendered
        stats.drafts_skipped = generator.stats.drafts_skipped
        stats.end_time = time.time()
        stats.duration_seconds = stats.end_time - stats.start_time

        self.logger.info("build_completed", **stats.to_dict())
        return stats
