"""Page generation: classify each content item and render its pages."""

import io
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import inflect
import structlog
from markupsafe import Markup, escape

from folio.common.constants import (
    ATOM_FILENAME,
    DEFAULT_TEMPLATE,
    PAGE_SEGMENT,
    RELOAD_ENDPOINT,
    REDIRECT_TEMPLATE,
)
from folio.content.models import ContentItem, ContentMetadata
from folio.content.paths import canonical_url, dash_spaces, join_path, page_path, slash_path
from folio.generator.hierarchy import ContentHierarchy
from folio.generator.output import OutputSink
from folio.generator.pagination import paginate
from folio.generator.taxonomy import TaxonomyTerm, TaxonomyViewCache
from folio.generator.template_data import ListingData, PageData, RedirectData, TemplateData
from folio.generator.templates import TemplateEngine
from folio.utils.config import Config
from folio.utils.exceptions import TemplateResolutionError

logger = structlog.get_logger(__name__)

_inflect = inflect.engine()

_WORD_BREAK = re.compile(r"([\s-]+)")

RELOAD_SCRIPT = """<script>
(function () {{
  var build = null;
  setInterval(function () {{
    fetch("{endpoint}").then(function (r) {{ return r.json(); }}).then(function (data) {{
      if (build !== null && data.build !== build) {{ location.reload(); }}
      build = data.build;
    }}).catch(function () {{}});
  }}, 1000);
}})();
</script>"""


def title_case(text: str) -> str:
    """Capitalize each word, hyphenated parts included (``rust-lang`` -> ``Rust-Lang``)."""
    return "".join(part.capitalize() for part in _WORD_BREAK.split(text))


def singularize(word: str) -> str:
    """Singular form of a noun; words already singular are returned as is."""
    return _inflect.singular_noun(word) or word


def pager_url(listing_url: str, number: int) -> str:
    """URL of page ``number`` of a listing (``/blog/`` -> ``/blog/page/3/``)."""
    return slash_path(f"{slash_path(listing_url)}{PAGE_SEGMENT}/{number}")


@dataclass
class GenerationStatistics:
    """Counters for one generation run.

    Attributes:
        pages_rendered: Canonical pages written (listing pages included)
        redirects_rendered: Pagination redirect pages written
        drafts_skipped: Draft items left out of the output
        term_listings: Per-term listings generated for taxonomy roots
    """

    pages_rendered: int = 0
    redirects_rendered: int = 0
    drafts_skipped: int = 0
    term_listings: int = 0


class PageGenerator:
    """Render every content item of a hierarchy through the template engine.

    Each item is handled by one of three strategies:

    - taxonomy root: the root page itself, then one paginated listing per term
    - listing: the item's children, paginated
    - leaf: a single page, with links to its siblings when it has a parent

    Rendering errors are not caught; the first failure ends generation.
    """

    def __init__(
        self,
        hierarchy: ContentHierarchy,
        engine: TemplateEngine,
        sink: OutputSink,
        config: Config,
        now: datetime,
    ) -> None:
        """Initialize generator.

        Args:
            hierarchy: Finalized content hierarchy
            engine: Template engine
            sink: Destination for rendered pages
            config: Site configuration
            now: Build timestamp, used as the date of per-term listings
        """
        self.hierarchy = hierarchy
        self.engine = engine
        self.sink = sink
        self.config = config
        self.now = now
        self.include_drafts = config.include_drafts
        self.taxonomy_cache = TaxonomyViewCache(
            hierarchy, config.full_url, include_drafts=self.include_drafts
        )
        self.rendered_paths: list[str] = []
        self.stats = GenerationStatistics()
        self._template_config = config.to_template_dict()
        self._page_data_cache: dict[str, PageData] = {}

        self.engine.register_helpers(self.template_helpers())

    def template_helpers(self) -> dict[str, Any]:
        """Callables available to every template."""
        return {
            "section_pages": self.section_pages,
            "section_index": self.section_index,
            "taxonomy_terms": self.taxonomy_terms,
            "page_taxonomy": self.page_taxonomy,
            "atom_url": self.atom_url,
            "atom_link": self.atom_link,
            "dev_scripts": self.dev_scripts,
        }

    def generate_all(self) -> None:
        """Generate pages for every item, in hierarchy order."""
        for item in self.hierarchy.items():
            self.generate_page(item)

    def generate_page(self, item: ContentItem) -> None:
        """Generate the page or pages of one content item.

        Raises:
            TemplateResolutionError: If the item's template does not exist
            OutputWriteError: If a page cannot be written
            jinja2.TemplateError: If a template fails to render
        """
        log = logger.bind(source_path=item.source_path)

        if item.is_draft and not self.include_drafts:
            log.debug("draft_skipped")
            self.stats.drafts_skipped += 1
            return

        template = self.resolve_template(item)
        data = self.page_data(item)
        log.debug("generating_page", template=template, destination=item.rendered_path)

        if item.is_taxonomy_root:
            self._generate_taxonomy_pages(item, data, template)
        elif item.is_listing:
            children = self.hierarchy.children_of(
                item.rendered_path, include_drafts=self.include_drafts
            )
            page_size = item.index.paginate_by if item.index else None
            self._generate_listing_pages(
                item, data, template, paginate(children, page_size, self.page_data)
            )
        else:
            self._generate_leaf_page(item, data, template)

    def resolve_template(self, item: ContentItem) -> str:
        """Pick the template for an item.

        The item's own ``template`` (or, for listings, its index template)
        wins; otherwise the parent listing's ``page_template``; otherwise
        the default template.

        Raises:
            TemplateResolutionError: If the chosen template does not exist
        """
        template = item.metadata.template
        if not template and item.index is not None:
            template = item.index.template

        if not template:
            parent = self.hierarchy.parent_of(item)
            if parent is not None and parent.index is not None and parent.index.page_template:
                template = parent.index.page_template

        return self._require_template(item, template or DEFAULT_TEMPLATE)

    def _require_template(self, item: ContentItem, template: str) -> str:
        if not self.engine.exists(template):
            raise TemplateResolutionError(item.source_path, template)
        return template

    def page_data(self, item: ContentItem) -> PageData:
        """Template data for an item (cached per source path)."""
        data = self._page_data_cache.get(item.source_path)
        if data is None:
            data = PageData.from_item(item, self._template_config, self.config.full_url)
            self._page_data_cache[item.source_path] = data
        return data

    def _generate_leaf_page(self, item: ContentItem, data: PageData, template: str) -> None:
        parent = self.hierarchy.parent_of(item)
        if parent is not None:
            logger.debug("child_page", source_path=item.source_path, parent=parent.source_path)
            prev_item = self.hierarchy.previous_sibling(
                parent, item, include_drafts=self.include_drafts
            )
            next_item = self.hierarchy.next_sibling(
                parent, item, include_drafts=self.include_drafts
            )
            data = data.with_siblings(
                self.page_data(prev_item) if prev_item else None,
                self.page_data(next_item) if next_item else None,
            )

        self._render(data, item.rendered_path, template, canonical=True)

    def _generate_listing_pages(
        self,
        item: ContentItem,
        data: PageData,
        template: str,
        groups: list[list[PageData]],
    ) -> None:
        """Render every page of a listing.

        Page 1 lives at the listing's own path and pages 2..N at
        ``<path>/page/<n>/``. With more than one page, ``<path>/page/1/``
        redirects to the listing's own URL.
        """
        path = item.rendered_path
        total = len(groups)

        if total > 1:
            redirect_path = page_path(path, 1)
            redirect = RedirectData(
                url=self.config.full_url(item.canonical_url), path=redirect_path
            )
            self._render(redirect, redirect_path, REDIRECT_TEMPLATE, canonical=False)

        for number, group in enumerate(groups, start=1):
            destination = path if number == 1 else page_path(path, number)

            if number == 1:
                prev = ""
            elif number == 2:
                prev = item.canonical_url
            else:
                prev = pager_url(item.canonical_url, number - 1)

            next = pager_url(item.canonical_url, number + 1) if number < total else ""

            listing = ListingData.for_page(
                data,
                pages=group,
                prev=prev,
                next=next,
                current_page=number,
                total_pages=total,
            )
            self._render(listing, destination, template, canonical=True)

    def _generate_taxonomy_pages(self, root: ContentItem, data: PageData, template: str) -> None:
        """Render a taxonomy root page, then one listing per term."""
        taxonomy = root.taxonomy_name
        logger.debug("generating_taxonomy_pages", taxonomy=taxonomy, source_path=root.source_path)

        self._render(data, root.rendered_path, template, canonical=True)

        index = root.index
        page_size = index.paginate_by if index else None
        term_template = (index.page_template if index else "") or DEFAULT_TEMPLATE
        singular = singularize(title_case(taxonomy))

        terms = self.hierarchy.terms_of(taxonomy)
        for term in sorted(terms):
            members = terms[term]
            if not self.include_drafts:
                members = [member for member in members if not member.is_draft]
            if not members:
                continue

            term_item = self._term_item(root, term, singular, term_template)
            self._require_template(term_item, term_template)
            self._generate_listing_pages(
                term_item,
                PageData.from_item(term_item, self._template_config, self.config.full_url),
                term_template,
                paginate(members, page_size, self.page_data),
            )
            self.stats.term_listings += 1

    def _term_item(
        self, root: ContentItem, term: str, singular: str, template: str
    ) -> ContentItem:
        """Synthesize the listing item of one taxonomy term."""
        title = title_case(term)
        metadata = ContentMetadata(
            title=title,
            description=f"{singular}: {title}",
            date=self.now,
            index=root.index.model_copy() if root.index else None,
            template=template,
        )
        output_path = join_path(root.rendered_path, dash_spaces(term))
        return ContentItem(
            source_path=f"{output_path}.md", metadata=metadata, output_path=output_path
        )

    def _render(
        self, data: TemplateData, path: str, template: str, canonical: bool
    ) -> None:
        """Render one page and hand it to the output sink.

        Canonical pages are recorded in ``rendered_paths`` for the sitemap;
        redirects are not.
        """
        buffer = io.StringIO()
        self.engine.render(template, data, buffer)
        self.sink.write(path, buffer.getvalue())

        if canonical:
            self.rendered_paths.append(canonical_url(path))
            self.stats.pages_rendered += 1
        else:
            self.stats.redirects_rendered += 1

        logger.debug("page_rendered", path=canonical_url(path), kind=data.kind)

    # Template helpers

    def section_pages(self, path: str, max: int = 10, offset: int = 0) -> list[PageData]:
        """Children of a section, newest first, windowed by ``offset``/``max``."""
        section = self.hierarchy.get(path)
        if section is None:
            logger.warning("page_not_found", path=path, lookup="section_pages")
            return []

        children = self.hierarchy.children_of(
            section.rendered_path, include_drafts=self.include_drafts
        )
        return [self.page_data(child) for child in children[offset : offset + max]]

    def section_index(self, path: str) -> PageData | None:
        """Page data of the section at ``path``."""
        section = self.hierarchy.get(path)
        if section is None:
            logger.warning("page_not_found", path=path, lookup="section_index")
            return None
        return self.page_data(section)

    def taxonomy_terms(self, taxonomy: str) -> list[TaxonomyTerm]:
        return self.taxonomy_cache.all_terms(taxonomy)

    def page_taxonomy(self, path: str, taxonomy: str) -> list[TaxonomyTerm]:
        return self.taxonomy_cache.terms_for_item(path, taxonomy)

    def atom_url(self) -> str:
        return self.config.full_url(ATOM_FILENAME)

    def atom_link(self) -> Markup:
        return Markup(
            '<link rel="alternate" type="application/atom+xml" href="{}">'
        ).format(escape(self.atom_url()))

    def dev_scripts(self) -> Markup:
        """Live reload script in dev mode, nothing otherwise.

        The script polls the dev server's reload endpoint and reloads the
        page once the build number changes.
        """
        if not self.config.dev_mode:
            return Markup("")
        return Markup(RELOAD_SCRIPT).format(endpoint=RELOAD_ENDPOINT)
