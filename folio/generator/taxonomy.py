"""Presentation-ready taxonomy term summaries for templates."""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from folio.content.paths import canonical_url, dash_spaces, join_path
from folio.generator.hierarchy import ContentHierarchy

logger = structlog.get_logger(__name__)


@dataclass
class TaxonomyTerm:
    """One term of a taxonomy as shown in templates.

    Attributes:
        term: Term as written in front matter (spaces kept)
        page_count: Number of pages carrying the term
        root_path: Canonical URL of the term's listing (spaces become hyphens)
        permalink: Absolute URL of the term's listing
    """

    term: str
    page_count: int
    root_path: str
    permalink: str


class TaxonomyViewCache:
    """Lazily built term summaries, one table per taxonomy.

    Templates may query the same taxonomy any number of times while a site is
    rendered; each taxonomy's table is built on its first query and reused
    until the cache is discarded with its build.
    """

    def __init__(
        self,
        hierarchy: ContentHierarchy,
        full_url: Callable[[str], str],
        include_drafts: bool = True,
    ) -> None:
        """Initialize cache.

        Args:
            hierarchy: Finalized content hierarchy
            full_url: Turns a canonical URL into an absolute one
            include_drafts: Count draft pages as term members
        """
        self.hierarchy = hierarchy
        self.full_url = full_url
        self.include_drafts = include_drafts
        self._cache: dict[str, dict[str, TaxonomyTerm]] = {}

    def terms(self, taxonomy: str) -> dict[str, TaxonomyTerm]:
        """Term -> summary table for ``taxonomy``, built on first use."""
        cached = self._cache.get(taxonomy)
        if cached is not None:
            return cached

        root = self.hierarchy.root_of(taxonomy)
        root_path = root.rendered_path if root else ""
        if root is None:
            logger.warning("taxonomy_root_missing", taxonomy=taxonomy)

        table: dict[str, TaxonomyTerm] = {}
        for term, members in self.hierarchy.terms_of(taxonomy).items():
            count = len(
                members if self.include_drafts else [m for m in members if not m.is_draft]
            )
            if count == 0:
                continue
            term_url = canonical_url(join_path(root_path, dash_spaces(term)))
            table[term] = TaxonomyTerm(
                term=term,
                page_count=count,
                root_path=term_url,
                permalink=self.full_url(term_url),
            )

        self._cache[taxonomy] = table
        return table

    def all_terms(self, taxonomy: str) -> list[TaxonomyTerm]:
        """Every term of a taxonomy, alphabetically."""
        return sorted(self.terms(taxonomy).values(), key=lambda t: t.term)

    def terms_for_item(self, path: str, taxonomy: str) -> list[TaxonomyTerm]:
        """Terms one page carries for a taxonomy, alphabetically.

        Args:
            path: Rendered path of the page
            taxonomy: Taxonomy name

        Returns:
            Term summaries; empty if the page doesn't exist
        """
        item = self.hierarchy.get(path)
        if item is None:
            logger.warning("page_not_found", path=path, lookup="terms_for_item")
            return []

        table = self.terms(taxonomy)
        found: dict[str, TaxonomyTerm] = {}
        for term in item.metadata.taxonomies.get(taxonomy, []):
            if term in table:
                found[term] = table[term]
        return sorted(found.values(), key=lambda t: t.term)
