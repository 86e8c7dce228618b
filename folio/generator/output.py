"""Output sinks for rendered pages and mirrored files."""

import shutil
from pathlib import Path
from typing import Protocol

import structlog

from folio.common.constants import OUTPUT_FILENAME
from folio.utils.exceptions import OutputWriteError

logger = structlog.get_logger(__name__)


class OutputSink(Protocol):
    """Destination for rendered pages, keyed by rendered path."""

    def write(self, rendered_path: str, content: str) -> None: ...


class DirectoryOutputSink:
    """Write pages into an output directory as ``<path>/index.html``."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    def destination(self, rendered_path: str) -> Path:
        return self.output_dir / rendered_path.strip("/") / OUTPUT_FILENAME

    def write(self, rendered_path: str, content: str) -> None:
        """Write a rendered page.

        Raises:
            OutputWriteError: If the directory or file cannot be written
        """
        destination = self.destination(rendered_path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(content, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(str(destination), str(e)) from e

    def write_file(self, relative_path: str, content: str) -> Path:
        """Write a file at a path relative to the output root (feeds, sitemaps).

        Raises:
            OutputWriteError: If the file cannot be written
        """
        destination = self.output_dir / relative_path
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(content, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(str(destination), str(e)) from e
        return destination

    def copy_file(self, relative_path: str, source: Path) -> Path:
        """Mirror a static file into the output directory.

        Raises:
            OutputWriteError: If the copy fails
        """
        destination = self.output_dir / relative_path
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as e:
            raise OutputWriteError(str(destination), str(e)) from e
        logger.debug("static_file_copied", source=str(source), destination=str(destination))
        return destination

    def clear(self) -> None:
        """Remove everything inside the output directory, creating it if needed.

        Raises:
            OutputWriteError: If an entry cannot be removed
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            for entry in self.output_dir.iterdir():
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
        except OSError as e:
            raise OutputWriteError(str(self.output_dir), str(e)) from e


class MemoryOutputSink:
    """Keep rendered pages in memory, keyed by rendered path."""

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}

    def write(self, rendered_path: str, content: str) -> None:
        self.pages[rendered_path.strip("/")] = content

