"""Front matter and markdown parsing for content files.

A content file starts with an optional front matter block, either YAML
between ``---`` lines or TOML between ``+++`` lines, followed by the
markdown body.
"""

import tomllib
from typing import Any

import markdown
import structlog
import yaml
from pydantic import ValidationError as PydanticValidationError

from folio.content.models import ContentItem, ContentMetadata
from folio.utils.exceptions import ContentParseError

logger = structlog.get_logger(__name__)

YAML_DELIMITER = "---"
TOML_DELIMITER = "+++"

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "footnotes"]


class FrontMatterParser:
    """Turn raw content file bytes into ContentItem objects.

    Example:
        >>> parser = FrontMatterParser()
        >>> item = parser.parse("blog/hello.md", b"---\\ntitle: Hello\\n---\\nHi *there*")
        >>> item.metadata.title
        'Hello'
    """

    def __init__(self, smart_punctuation: bool = False) -> None:
        """Initialize parser.

        Args:
            smart_punctuation: Convert quotes, dashes and ellipses to typographic forms
        """
        self._extensions = list(MARKDOWN_EXTENSIONS)
        if smart_punctuation:
            self._extensions.append("smarty")
        self._markdown = markdown.Markdown(extensions=self._extensions)

    def parse(self, source_path: str, raw: bytes) -> ContentItem:
        """Parse a content file.

        Args:
            source_path: Path relative to the content root
            raw: File contents

        Returns:
            ContentItem with validated metadata and rendered body

        Raises:
            ContentParseError: If the file is not UTF-8, the front matter is
                malformed, or the metadata fails validation
        """
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ContentParseError(source_path, f"not valid UTF-8 ({e})") from e

        try:
            front_matter, body = self._split_front_matter(text)
        except (yaml.YAMLError, tomllib.TOMLDecodeError, ValueError) as e:
            raise ContentParseError(source_path, str(e)) from e

        try:
            metadata = ContentMetadata.model_validate(front_matter)
        except PydanticValidationError as e:
            raise ContentParseError(source_path, f"invalid front matter: {e}") from e

        summary_source = metadata.summary or metadata.description
        item = ContentItem(
            source_path=source_path,
            metadata=metadata,
            body=self.render_markdown(body),
            summary=self.render_markdown(summary_source) if summary_source else "",
        )

        logger.debug(
            "content_parsed",
            source_path=source_path,
            title=metadata.title,
            listing=item.is_listing,
            draft=metadata.draft,
        )

        return item

    def render_markdown(self, text: str) -> str:
        """Render markdown text to an HTML fragment."""
        self._markdown.reset()
        return self._markdown.convert(text).strip()

    def _split_front_matter(self, content: str) -> tuple[dict[str, Any], str]:
        """Separate the front matter block from the markdown body.

        Args:
            content: Full file content

        Returns:
            Tuple of (front_matter_dict, markdown_body). Files without front
            matter yield an empty dict and the whole content.

        Raises:
            ValueError: If the block is not closed or is not a mapping
        """
        lines = content.split("\n")
        delimiter = lines[0].rstrip("\r").strip() if lines else ""
        if delimiter not in (YAML_DELIMITER, TOML_DELIMITER):
            return {}, content.strip()

        closing_index = None
        for i in range(1, len(lines)):
            if lines[i].rstrip("\r").strip() == delimiter:
                closing_index = i
                break

        if closing_index is None:
            raise ValueError(f"Front matter is missing its closing '{delimiter}'")

        block = "\n".join(line.rstrip("\r") for line in lines[1:closing_index])
        if delimiter == TOML_DELIMITER:
            front_matter: Any = tomllib.loads(block)
        else:
            front_matter = yaml.safe_load(block) or {}

        if not isinstance(front_matter, dict):
            raise ValueError("Front matter must be a mapping")

        body_lines = [line.rstrip("\r") for line in lines[closing_index + 1 :]]
        return front_matter, "\n".join(body_lines).strip()
