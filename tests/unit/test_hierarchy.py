"""Unit tests for the content hierarchy."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from folio.content.models import ContentItem
from folio.generator.hierarchy import ContentHierarchy, sort_by_date
from folio.utils.exceptions import ConfigurationError, DuplicatePathError

MakeItem = Callable[..., ContentItem]


def _day(n: int) -> datetime:
    return datetime(2024, 1, n, tzinfo=UTC)


class TestHierarchyConstruction:
    """Test cases for registering and finalizing items."""

    def test_duplicate_rendered_path_rejected(self, make_item: MakeItem) -> None:
        """Test that two items rendering to the same path fail loudly."""
        hierarchy = ContentHierarchy()
        hierarchy.add_item(make_item("blog/a.md"))

        with pytest.raises(DuplicatePathError) as exc_info:
            hierarchy.add_item(make_item("blog/a.markdown"))

        assert exc_info.value.rendered_path == "blog/a"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_add_after_finalize_rejected(self, make_item: MakeItem) -> None:
        """Test that a finalized hierarchy is read-only."""
        hierarchy = ContentHierarchy.build([make_item("a.md")])

        with pytest.raises(RuntimeError):
            hierarchy.add_item(make_item("b.md"))

    def test_queries_require_finalize(self, make_item: MakeItem) -> None:
        """Test that relationship queries before finalize are rejected."""
        hierarchy = ContentHierarchy()
        hierarchy.add_item(make_item("a.md"))

        with pytest.raises(RuntimeError):
            hierarchy.children_of("")

    def test_parent_resolution_independent_of_order(self, make_item: MakeItem) -> None:
        """Test that a child added before its parent still finds it."""
        child = make_item("blog/a.md")
        parent = make_item("blog.md", index={})

        hierarchy = ContentHierarchy.build([child, parent])

        assert hierarchy.parent_of(child) is parent

    def test_items_keep_ingestion_order(self, make_item: MakeItem) -> None:
        """Test that items() returns items in the order they were added."""
        items = [make_item("c.md"), make_item("a.md"), make_item("b.md")]

        hierarchy = ContentHierarchy.build(items)

        assert hierarchy.items() == items
        assert len(hierarchy) == 3
        assert "a" in hierarchy


class TestParents:
    """Test cases for parent lookup."""

    def test_top_level_items_have_no_parent(self, make_item: MakeItem) -> None:
        """Test that the site root is never a parent."""
        home = make_item("index.md", index={})
        about = make_item("about.md")

        hierarchy = ContentHierarchy.build([home, about])

        assert hierarchy.parent_of(about) is None
        assert hierarchy.parent_of(home) is None
        assert hierarchy.children_of("") == []

    def test_deep_item_without_parent_node(self, make_item: MakeItem) -> None:
        """Test that directory nesting alone does not make a parent."""
        deep = make_item("a/b/c.md")
        hierarchy = ContentHierarchy.build([make_item("a.md"), deep])

        assert hierarchy.parent_of(deep) is None
        assert hierarchy.children_of("a") == []

    def test_nested_index_file_is_a_child(self, make_item: MakeItem) -> None:
        """Test that blog/index.md is a child of blog, not the blog listing."""
        listing = make_item("blog.md", index={})
        nested = make_item("blog/index.md")

        hierarchy = ContentHierarchy.build([listing, nested])

        assert hierarchy.parent_of(nested) is listing


class TestChildrenAndSiblings:
    """Test cases for children and sibling queries."""

    @pytest.fixture
    def blog(self, make_item: MakeItem) -> dict[str, ContentItem]:
        return {
            "listing": make_item("blog.md", index={}),
            "old": make_item("blog/old.md", _day(1)),
            "new": make_item("blog/new.md", _day(3)),
            "mid": make_item("blog/mid.md", _day(2)),
            "draft": make_item("blog/draft.md", _day(4), draft=True),
        }

    @pytest.fixture
    def hierarchy(self, blog: dict[str, ContentItem]) -> ContentHierarchy:
        return ContentHierarchy.build(blog.values())

    def test_children_newest_first(
        self, hierarchy: ContentHierarchy, blog: dict[str, ContentItem]
    ) -> None:
        """Test that children are sorted by date, newest first."""
        children = hierarchy.children_of("blog")

        assert children == [blog["draft"], blog["new"], blog["mid"], blog["old"]]

    def test_children_without_drafts(
        self, hierarchy: ContentHierarchy, blog: dict[str, ContentItem]
    ) -> None:
        """Test that drafts can be left out of children."""
        children = hierarchy.children_of("blog", include_drafts=False)

        assert children == [blog["new"], blog["mid"], blog["old"]]

    def test_children_returns_copy(self, hierarchy: ContentHierarchy) -> None:
        """Test that callers cannot corrupt the cached children."""
        hierarchy.children_of("blog").clear()

        assert len(hierarchy.children_of("blog")) == 4

    def test_siblings(self, hierarchy: ContentHierarchy, blog: dict[str, ContentItem]) -> None:
        """Test that next is the older sibling and previous the newer one."""
        listing = blog["listing"]

        assert hierarchy.next_sibling(listing, blog["new"]) is blog["mid"]
        assert hierarchy.previous_sibling(listing, blog["new"]) is blog["draft"]
        assert hierarchy.next_sibling(listing, blog["old"]) is None

    def test_siblings_skip_drafts(
        self, hierarchy: ContentHierarchy, blog: dict[str, ContentItem]
    ) -> None:
        """Test that drafts are skipped when excluded."""
        listing = blog["listing"]

        assert hierarchy.previous_sibling(listing, blog["new"], include_drafts=False) is None

    def test_equal_dates_keep_ingestion_order(self, make_item: MakeItem) -> None:
        """Test that the date sort is stable."""
        first = make_item("blog/first.md", _day(5))
        second = make_item("blog/second.md", _day(5))

        hierarchy = ContentHierarchy.build([make_item("blog.md", index={}), first, second])

        assert hierarchy.children_of("blog") == [first, second]

    def test_all_items_sorted_by_date(self, make_item: MakeItem) -> None:
        """Test the site-wide date order."""
        a = make_item("a.md", _day(1))
        b = make_item("b.md", _day(9))
        c = make_item("c.md", _day(1))

        hierarchy = ContentHierarchy.build([a, b, c])

        assert hierarchy.all_items_sorted_by_date() == [b, a, c]


class TestTaxonomyIndex:
    """Test cases for the taxonomy index."""

    def test_terms_collected(self, make_item: MakeItem) -> None:
        """Test that every term maps to its items, newest first."""
        a = make_item("a.md", _day(1), taxonomies={"tags": ["rust", "web"]})
        b = make_item("b.md", _day(2), taxonomies={"tags": ["rust"]})

        hierarchy = ContentHierarchy.build([a, b])

        assert hierarchy.terms_of("tags") == {"rust": [b, a], "web": [a]}

    def test_repeated_term_counts_once(self, make_item: MakeItem) -> None:
        """Test that repeating a term on one page lists the page once."""
        a = make_item("a.md", taxonomies={"tags": ["rust", "rust"]})

        hierarchy = ContentHierarchy.build([a])

        assert hierarchy.terms_of("tags") == {"rust": [a]}

    def test_unknown_taxonomy(self, make_item: MakeItem) -> None:
        """Test that an unused taxonomy has no terms."""
        hierarchy = ContentHierarchy.build([make_item("a.md")])

        assert hierarchy.terms_of("categories") == {}
        assert hierarchy.root_of("categories") is None

    def test_last_root_wins(self, make_item: MakeItem) -> None:
        """Test that a second root for the same taxonomy replaces the first."""
        first = make_item("tags.md", index={"taxonomy": "tags"})
        second = make_item("labels.md", index={"taxonomy": "tags"})

        hierarchy = ContentHierarchy.build([first, second])

        assert hierarchy.root_of("tags") is second


def test_sort_by_date_is_stable(make_item: MakeItem) -> None:
    """Test that sort_by_date keeps the relative order of equal dates."""
    items = [make_item(f"{n}.md", _day(1)) for n in range(5)]

    assert sort_by_date(items) == items
