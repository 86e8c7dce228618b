"""Atom feed of the site's pages."""

from datetime import datetime

import structlog
from lxml import etree

from folio import __version__
from folio.common.constants import ATOM_FILENAME, FEED_CONTENT_MAX_LENGTH
from folio.content.models import ContentItem
from folio.generator.hierarchy import ContentHierarchy
from folio.generator.templates import time_attr
from folio.utils.config import Config

logger = structlog.get_logger(__name__)

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def _sub(
    parent: etree._Element, tag: str, text: str | None = None, **attrib: str
) -> etree._Element:
    element = etree.SubElement(parent, f"{{{ATOM_NAMESPACE}}}{tag}", attrib)
    if text is not None:
        element.text = text
    return element


class AtomFeedBuilder:
    """Build the site-wide Atom feed.

    Entries are the site's leaf pages, newest first. Listings and taxonomy
    roots are left out, and so are drafts unless the build includes them.
    Short pages carry their full content; long or empty ones carry the
    summary instead.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    @property
    def feed_url(self) -> str:
        return self.config.full_url(ATOM_FILENAME)

    def entries(self, hierarchy: ContentHierarchy) -> list[ContentItem]:
        """Items that belong in the feed, newest first, capped by ``feed_limit``."""
        entries = [
            item
            for item in hierarchy.all_items_sorted_by_date()
            if not item.is_listing and (self.config.include_drafts or not item.is_draft)
        ]
        if self.config.feed_limit > 0:
            entries = entries[: self.config.feed_limit]
        return entries

    def build(self, hierarchy: ContentHierarchy, now: datetime) -> bytes:
        """Serialize the feed.

        Args:
            hierarchy: Finalized content hierarchy
            now: Build timestamp, used as the feed's ``updated`` value

        Returns:
            UTF-8 encoded XML document
        """
        config = self.config
        feed = etree.Element(f"{{{ATOM_NAMESPACE}}}feed", nsmap={None: ATOM_NAMESPACE})
        feed.set(XML_LANG, config.default_language)

        _sub(feed, "title", config.title)
        _sub(feed, "subtitle", config.description)
        _sub(feed, "id", self.feed_url)
        _sub(feed, "link", rel="self", type="application/atom+xml", href=self.feed_url)
        _sub(
            feed,
            "link",
            rel="alternate",
            type="text/html",
            href=config.base_url_no_trailing_slash(),
        )
        _sub(feed, "generator", "Folio", version=__version__)
        _sub(feed, "updated", time_attr(now))

        entries = self.entries(hierarchy)
        for item in entries:
            self._add_entry(feed, item)

        logger.debug("feed_built", entries=len(entries))
        return etree.tostring(feed, xml_declaration=True, encoding="UTF-8", pretty_print=True)

    def _add_entry(self, feed: etree._Element, item: ContentItem) -> None:
        config = self.config
        url = config.full_url(item.canonical_url)

        entry = _sub(feed, "entry")
        entry.set(XML_LANG, config.default_language)
        _sub(entry, "title", item.title)
        _sub(entry, "id", url)
        _sub(entry, "published", time_attr(item.date))
        _sub(entry, "updated", time_attr(item.date))

        body = item.body.strip()
        if len(body) > FEED_CONTENT_MAX_LENGTH or not body:
            _sub(entry, "summary", item.summary_html(), type="html")
        else:
            _sub(entry, "content", body, type="html")

        author = _sub(entry, "author")
        _sub(author, "name", config.author)
        _sub(entry, "link", rel="alternate", type="text/html", href=url)
