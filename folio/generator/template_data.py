"""Data passed to templates.

Every render receives exactly one of three shapes:

- ``PageData`` for a single page (optionally with sibling navigation),
- ``ListingData`` for one page of a paginated listing,
- ``RedirectData`` for the built-in pagination redirect page.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, ClassVar

from markupsafe import Markup

from folio.content.models import ContentItem, IndexDescriptor


@dataclass
class PageData:
    """Template data for a single page.

    Attributes:
        title: Page title
        description: Page description
        date: Publish timestamp
        draft: Draft flag
        taxonomies: Taxonomy name -> terms as written in the front matter
        template: Template override from the front matter
        index: Listing descriptor, if the page is a listing
        extra: Free-form front matter data
        content: Rendered body
        summary: Rendered summary (explicit or first paragraph)
        config: Site settings
        path: Rendered path ("" for the site root)
        root_path: Canonical URL (``/blog/a/``)
        permalink: Absolute URL
        prev: Canonical URL of the previous sibling, "" when unset
        next: Canonical URL of the next sibling, "" when unset
        prev_page: Previous sibling data
        next_page: Next sibling data
    """

    kind: ClassVar[str] = "page"

    title: str
    description: str
    date: datetime
    draft: bool
    taxonomies: dict[str, list[str]]
    template: str
    index: IndexDescriptor | None
    extra: dict[str, Any]
    content: Markup
    summary: Markup
    config: dict[str, Any]
    path: str
    root_path: str
    permalink: str
    prev: str = ""
    next: str = ""
    prev_page: "PageData | None" = None
    next_page: "PageData | None" = None

    @classmethod
    def from_item(
        cls,
        item: ContentItem,
        config: dict[str, Any],
        full_url: Callable[[str], str],
    ) -> "PageData":
        """Build page data for a content item.

        Args:
            item: Content item
            config: Site settings exposed to templates
            full_url: Turns a canonical URL into an absolute one
        """
        metadata = item.metadata
        return cls(
            title=metadata.title,
            description=metadata.description,
            date=metadata.date,
            draft=metadata.draft,
            taxonomies=metadata.taxonomies,
            template=metadata.template,
            index=metadata.index,
            extra=metadata.extra,
            content=Markup(item.body),
            summary=Markup(item.summary_html()),
            config=config,
            path=item.rendered_path,
            root_path=item.canonical_url,
            permalink=full_url(item.canonical_url),
        )

    def with_siblings(
        self, prev_page: "PageData | None", next_page: "PageData | None"
    ) -> "PageData":
        """Copy of this page data with sibling navigation set."""
        return replace(
            self,
            prev=prev_page.root_path if prev_page else "",
            prev_page=prev_page,
            next=next_page.root_path if next_page else "",
            next_page=next_page,
        )


@dataclass
class ListingData(PageData):
    """Template data for one page of a listing.

    Attributes:
        pages: Members shown on this page
        current_page: 1-based page number
        total_pages: Number of pages in the listing
    """

    kind: ClassVar[str] = "listing"

    pages: list[PageData] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1

    @classmethod
    def for_page(
        cls,
        listing: PageData,
        pages: list[PageData],
        prev: str,
        next: str,
        current_page: int,
        total_pages: int,
    ) -> "ListingData":
        """Wrap the listing's own page data with one page of members."""
        values = {f.name: getattr(listing, f.name) for f in fields(PageData)}
        values.update(
            pages=pages,
            prev=prev,
            next=next,
            current_page=current_page,
            total_pages=total_pages,
        )
        return cls(**values)


@dataclass
class RedirectData:
    """Template data for a redirect page.

    Attributes:
        url: Absolute URL to redirect to
    """

    kind: ClassVar[str] = "redirect"

    url: str
    path: str = ""

    def __str__(self) -> str:
        return self.url


TemplateData = PageData | ListingData | RedirectData
