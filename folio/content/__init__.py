"""Content models, parsing and loading."""

from folio.content.loader import ContentLoader
from folio.content.models import ContentItem, ContentMetadata, IndexDescriptor
from folio.content.parser import FrontMatterParser

__all__ = [
    "ContentItem",
    "ContentLoader",
    "ContentMetadata",
    "FrontMatterParser",
    "IndexDescriptor",
]
