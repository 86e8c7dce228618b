"""Data models for content items and their front matter."""

import re
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from folio.common.constants import SUMMARY_MAX_WORDS
from folio.content.paths import canonical_url, rendered_path

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

FIRST_PARAGRAPH_PATTERN = re.compile(r"<p>(.+?)</p>", re.DOTALL)


class IndexDescriptor(BaseModel):
    """Listing behavior declared in a page's ``index`` front matter table.

    Attributes:
        sort_by: Sort key name. Only "date" (newest first) is implemented.
        template: Template for the listing page itself
        page_template: Template for child pages and per-term listing pages
        paginate_by: Items per listing page. Unset or <= 0 disables pagination.
        taxonomy: Taxonomy this listing indexes; makes the page a taxonomy root
    """

    model_config = ConfigDict(extra="ignore")

    sort_by: str = ""
    template: str = ""
    page_template: str = ""
    paginate_by: int | None = None
    taxonomy: str = ""


class ContentMetadata(BaseModel):
    """Front matter of a content file."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    date: datetime = EPOCH
    draft: bool = False
    summary: str | None = None
    taxonomies: dict[str, list[str]] = {}
    template: str = ""
    index: IndexDescriptor | None = None
    extra: dict[str, Any] = {}

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        """Accept bare dates and treat naive timestamps as UTC."""
        if value is None or value == "":
            return EPOCH
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min, tzinfo=UTC)
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("date", mode="after")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        """Parsed strings without an offset are UTC as well."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("taxonomies", mode="before")
    @classmethod
    def coerce_terms(cls, value: Any) -> Any:
        """Allow a single term string in place of a list."""
        if isinstance(value, dict):
            return {
                name: [terms] if isinstance(terms, str) else terms
                for name, terms in value.items()
            }
        return value


@dataclass
class ContentItem:
    """One ingested content document.

    Attributes:
        source_path: Path relative to the content root, extension included
        metadata: Parsed front matter
        body: Rendered HTML of the markdown body
        summary: Rendered HTML of the explicit summary or description, if any
        output_path: Rendered path set directly instead of derived from
            ``source_path``; used for synthesized term listings
    """

    source_path: str
    metadata: ContentMetadata = field(default_factory=ContentMetadata)
    body: str = ""
    summary: str = ""
    output_path: str | None = None

    def __post_init__(self) -> None:
        """Validate item data after initialization.

        Raises:
            ValueError: If the source path is empty or absolute
        """
        if not self.source_path or not self.source_path.strip():
            raise ValueError("Source path cannot be empty")
        self.source_path = self.source_path.replace("\\", "/")
        if self.source_path.startswith("/"):
            raise ValueError(f"Source path must be relative: {self.source_path}")

    @property
    def rendered_path(self) -> str:
        if self.output_path is not None:
            return self.output_path
        return rendered_path(self.source_path)

    @property
    def canonical_url(self) -> str:
        return canonical_url(self.rendered_path)

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> datetime:
        return self.metadata.date

    @property
    def is_draft(self) -> bool:
        return self.metadata.draft

    @property
    def index(self) -> IndexDescriptor | None:
        return self.metadata.index

    @property
    def is_listing(self) -> bool:
        """True for pages declaring an index descriptor (taxonomy roots included)."""
        return self.metadata.index is not None

    @property
    def taxonomy_name(self) -> str:
        if self.metadata.index is None:
            return ""
        return self.metadata.index.taxonomy.strip()

    @property
    def is_taxonomy_root(self) -> bool:
        return self.taxonomy_name != ""

    def summary_html(self) -> str:
        """Explicit summary when given, otherwise the body's first paragraph."""
        if self.summary:
            return self.summary
        return first_paragraph(self.body)


def first_paragraph(html: str) -> str:
    """Extract the first ``<p>`` element of an HTML fragment.

    Without a paragraph, the first words of the text are wrapped in one,
    with an ellipsis when the text was cut.
    """
    match = FIRST_PARAGRAPH_PATTERN.search(html)
    if match:
        return match.group(0)

    words = html.strip().split()
    if not words:
        return ""
    if len(words) >= SUMMARY_MAX_WORDS:
        words = words[:SUMMARY_MAX_WORDS] + ["..."]
    return "<p>" + " ".join(words) + "</p>"
