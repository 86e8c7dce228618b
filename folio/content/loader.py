"""Content directory loader.

Walks the content root, parses every markdown file and records every other
file as a static asset to be mirrored into the output directory.
"""

import os
from collections.abc import Iterator
from pathlib import Path

import structlog

from folio.common.constants import MARKDOWN_EXTENSION
from folio.content.models import ContentItem
from folio.content.parser import FrontMatterParser
from folio.utils.exceptions import ContentParseError

logger = structlog.get_logger(__name__)


class ContentLoader:
    """Load content files from a site's content directory.

    Directories whose name starts with a dot are skipped entirely. Parse
    errors are not recovered from: the first malformed file stops the load.

    Example:
        >>> loader = ContentLoader(Path("site/content"))
        >>> for item in loader.load_all():
        ...     print(item.rendered_path)
        >>> loader.static_files
        {'images/logo.png': PosixPath('/abs/site/content/images/logo.png')}
    """

    def __init__(self, content_dir: str | Path, parser: FrontMatterParser | None = None) -> None:
        """Initialize loader.

        Args:
            content_dir: Content root directory
            parser: Parser for markdown files (default: FrontMatterParser())
        """
        self.content_dir = Path(content_dir)
        self.parser = parser or FrontMatterParser()
        self.logger = logger.bind(component="content_loader")
        self.static_files: dict[str, Path] = {}
        self.files_loaded = 0

    def load_all(self) -> Iterator[ContentItem]:
        """Parse every markdown file under the content root.

        Non-markdown files are collected into ``static_files`` as a side
        effect of the walk.

        Yields:
            ContentItem for each markdown file, in sorted path order

        Raises:
            FileNotFoundError: If the content directory doesn't exist
            NotADirectoryError: If the content path is not a directory
            ContentParseError: If a markdown file cannot be read or parsed
        """
        if not self.content_dir.exists():
            raise FileNotFoundError(f"Content directory not found: {self.content_dir}")

        if not self.content_dir.is_dir():
            raise NotADirectoryError(f"Content path is not a directory: {self.content_dir}")

        self.logger.info("loading_content", content_dir=str(self.content_dir))

        self.static_files = {}
        self.files_loaded = 0

        for file_path in self._walk():
            relative_path = file_path.relative_to(self.content_dir).as_posix()

            if file_path.suffix != MARKDOWN_EXTENSION:
                self.static_files[relative_path] = file_path
                continue

            yield self.load_file(file_path, relative_path)
            self.files_loaded += 1

        self.logger.info(
            "loading_complete",
            total_loaded=self.files_loaded,
            static_files=len(self.static_files),
        )

    def load_file(self, file_path: Path, relative_path: str) -> ContentItem:
        """Load and parse a single markdown file.

        Raises:
            ContentParseError: If the file cannot be read or parsed
        """
        self.logger.debug("processing_markdown_file", source_path=relative_path)
        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise ContentParseError(relative_path, f"unreadable ({e})") from e

        return self.parser.parse(relative_path, raw)

    def _walk(self) -> Iterator[Path]:
        """Yield every file below the content root in a stable order."""
        for root, dirs, files in os.walk(self.content_dir):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            for name in sorted(files):
                yield Path(root) / name
