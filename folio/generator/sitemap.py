"""XML sitemap of every canonically rendered page."""

from collections.abc import Callable, Iterable

from lxml import etree

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"


def build_sitemap(paths: Iterable[str], full_url: Callable[[str], str]) -> bytes:
    """Serialize a sitemap ``urlset``.

    Args:
        paths: Canonical URLs of the rendered pages
        full_url: Turns a canonical URL into an absolute one

    Returns:
        UTF-8 encoded XML document, URLs sorted
    """
    urlset = etree.Element(f"{{{SITEMAP_NAMESPACE}}}urlset", nsmap={None: SITEMAP_NAMESPACE})
    for path in sorted(set(paths)):
        url = etree.SubElement(urlset, f"{{{SITEMAP_NAMESPACE}}}url")
        loc = etree.SubElement(url, f"{{{SITEMAP_NAMESPACE}}}loc")
        loc.text = full_url(path)
    return etree.tostring(urlset, xml_declaration=True, encoding="UTF-8", pretty_print=True)
