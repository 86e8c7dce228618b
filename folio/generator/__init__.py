"""Site generation: hierarchy, pagination, rendering and build orchestration."""

from folio.generator.hierarchy import ContentHierarchy
from folio.generator.page_generator import PageGenerator
from folio.generator.pagination import chunk, paginate
from folio.generator.site import BuildStatistics, SiteGenerator
from folio.generator.taxonomy import TaxonomyTerm, TaxonomyViewCache

__all__ = [
    "BuildStatistics",
    "ContentHierarchy",
    "PageGenerator",
    "SiteGenerator",
    "TaxonomyTerm",
    "TaxonomyViewCache",
    "chunk",
    "paginate",
]
