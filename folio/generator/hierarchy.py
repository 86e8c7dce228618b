"""Content hierarchy: path-derived page tree and taxonomy index."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog

from folio.content.models import ContentItem
from folio.content.paths import parent_path
from folio.utils.exceptions import DuplicatePathError

logger = structlog.get_logger(__name__)


@dataclass
class ContentNode:
    """A registered content item and its computed parent.

    Attributes:
        item: The content item
        parent: Rendered path of the parent node, or None
    """

    item: ContentItem
    parent: str | None = None


def sort_by_date(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Newest first; items with equal dates keep their given order."""
    return sorted(items, key=lambda item: item.date, reverse=True)


class ContentHierarchy:
    """All content items of one build, linked into a tree by their paths.

    The hierarchy is built in two phases. Every item is registered with
    :meth:`add_item`, then :meth:`finalize` links each node to its parent and
    sorts the taxonomy index. A node's parent is the node found at its path
    minus the last segment, if such a node exists; physical directory nesting
    alone does not make a parent.

    Lookups (children, siblings, date-sorted items) are computed on first
    use and cached for the lifetime of the hierarchy. A hierarchy is built
    once per site build and discarded afterwards, so caches are never
    invalidated.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, ContentNode] = {}
        self._taxonomy_index: dict[str, dict[str, list[ContentItem]]] = defaultdict(dict)
        self._taxonomy_roots: dict[str, ContentItem] = {}
        self._children_cache: dict[str, list[ContentItem]] = {}
        self._sorted_items: list[ContentItem] | None = None
        self._finalized = False
        self.static_files: dict[str, Path] = {}

    @classmethod
    def build(cls, items: Iterable[ContentItem]) -> "ContentHierarchy":
        """Register all items and finalize the hierarchy."""
        hierarchy = cls()
        for item in items:
            hierarchy.add_item(item)
        hierarchy.finalize()
        return hierarchy

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def add_item(self, item: ContentItem) -> None:
        """Register an item under its rendered path.

        Args:
            item: Content item to register

        Raises:
            DuplicatePathError: If another item already renders to the same path
            RuntimeError: If the hierarchy has already been finalized
        """
        if self._finalized:
            raise RuntimeError("Cannot add items to a finalized hierarchy")

        path = item.rendered_path
        existing = self._nodes.get(path)
        if existing is not None:
            raise DuplicatePathError(path, existing.item.source_path, item.source_path)

        self._nodes[path] = ContentNode(item=item)

        for taxonomy, terms in item.metadata.taxonomies.items():
            term_index = self._taxonomy_index[taxonomy]
            for term in terms:
                members = term_index.setdefault(term, [])
                # Repeating a term on one page does not list the page twice
                if not members or members[-1] is not item:
                    members.append(item)

        if item.is_taxonomy_root:
            taxonomy = item.taxonomy_name
            previous = self._taxonomy_roots.get(taxonomy)
            if previous is not None:
                logger.warning(
                    "taxonomy_root_replaced",
                    taxonomy=taxonomy,
                    previous=previous.source_path,
                    current=item.source_path,
                )
            self._taxonomy_roots[taxonomy] = item

    def finalize(self) -> None:
        """Link every node to its parent and sort the taxonomy index.

        Parents are resolved only after all items are known, so the order in
        which items were added has no effect on the result.
        """
        for path, node in self._nodes.items():
            candidate = parent_path(path)
            node.parent = candidate if candidate in self._nodes else None

        for term_index in self._taxonomy_index.values():
            for term, members in term_index.items():
                term_index[term] = sort_by_date(members)

        self._children_cache = {}
        self._sorted_items = None
        self._finalized = True

        logger.debug(
            "hierarchy_finalized",
            pages=len(self._nodes),
            taxonomies=sorted(self._taxonomy_index),
        )

    def _require_finalized(self) -> None:
        if not self._finalized:
            raise RuntimeError("Content hierarchy has not been finalized")

    def items(self) -> list[ContentItem]:
        """All items in the order they were added."""
        return [node.item for node in self._nodes.values()]

    def get(self, path: str) -> ContentItem | None:
        """Item registered at a rendered path, if any."""
        node = self._nodes.get(path.strip("/"))
        return node.item if node else None

    def parent_of(self, item: ContentItem) -> ContentItem | None:
        """The item's parent node, or None."""
        self._require_finalized()
        node = self._nodes.get(item.rendered_path)
        if node is None or node.parent is None:
            return None
        return self._nodes[node.parent].item

    def children_of(self, path: str, include_drafts: bool = True) -> list[ContentItem]:
        """Items whose parent is ``path``, newest first.

        Args:
            path: Rendered path of the parent
            include_drafts: When False, draft items are left out

        Returns:
            Date-sorted children (ties keep ingestion order)
        """
        self._require_finalized()
        children = self._children_cache.get(path)
        if children is None:
            children = sort_by_date(
                node.item for node in self._nodes.values() if node.parent == path
            )
            self._children_cache[path] = children

        if include_drafts:
            return list(children)
        return [child for child in children if not child.is_draft]

    def next_sibling(
        self, parent: ContentItem, item: ContentItem, include_drafts: bool = True
    ) -> ContentItem | None:
        """The sibling listed right after ``item`` under ``parent`` (an older one)."""
        return self._sibling(parent, item, 1, include_drafts)

    def previous_sibling(
        self, parent: ContentItem, item: ContentItem, include_drafts: bool = True
    ) -> ContentItem | None:
        """The sibling listed right before ``item`` under ``parent`` (a newer one)."""
        return self._sibling(parent, item, -1, include_drafts)

    def _sibling(
        self, parent: ContentItem, item: ContentItem, offset: int, include_drafts: bool
    ) -> ContentItem | None:
        siblings = self.children_of(parent.rendered_path, include_drafts=include_drafts)
        for position, sibling in enumerate(siblings):
            if sibling is item:
                target = position + offset
                if 0 <= target < len(siblings):
                    return siblings[target]
                return None
        return None

    def all_items_sorted_by_date(self) -> list[ContentItem]:
        """Every item, newest first; items with equal dates keep ingestion order."""
        if self._sorted_items is None:
            self._sorted_items = sort_by_date(self.items())
        return list(self._sorted_items)

    def terms_of(self, taxonomy: str) -> dict[str, list[ContentItem]]:
        """Term -> member items (newest first) for one taxonomy."""
        self._require_finalized()
        return dict(self._taxonomy_index.get(taxonomy, {}))

    def root_of(self, taxonomy: str) -> ContentItem | None:
        """The page declared as root of ``taxonomy``, if any."""
        return self._taxonomy_roots.get(taxonomy)
