"""Rendered path and URL derivation for content items."""

import posixpath

from folio.common.constants import PAGE_SEGMENT, ROOT_INDEX_SOURCE


def to_posix(path: str) -> str:
    """Normalize path separators to forward slashes."""
    return path.replace("\\", "/")


def rendered_path(source_path: str) -> str:
    """Derive the output-identifying path of a content file.

    The file extension is stripped. Only the literal home page source
    (``index.md``) maps to the site root; ``blog/index.md`` renders to
    ``blog/index``, not ``blog``.

    Args:
        source_path: Path relative to the content root, extension included

    Returns:
        Rendered path without leading or trailing slash ("" for the site root)
    """
    source_path = to_posix(source_path)
    if source_path == ROOT_INDEX_SOURCE:
        return ""

    stem, _ = posixpath.splitext(source_path)
    return stem


def canonical_url(path: str) -> str:
    """Wrap a rendered path in slashes (``blog/a`` -> ``/blog/a/``)."""
    url = f"/{to_posix(path)}/"
    if url == "//":
        return "/"
    return url


def slash_path(path: str) -> str:
    """Ensure a path ends with a slash."""
    path = to_posix(path)
    if path and not path.endswith("/"):
        return path + "/"
    return path


def dash_spaces(term: str) -> str:
    """Replace spaces with hyphens for use as a path segment."""
    return term.replace(" ", "-")


def join_path(*parts: str) -> str:
    """Join rendered path segments, skipping empty ones."""
    return posixpath.join(*[p for p in parts if p]) if any(parts) else ""


def parent_path(path: str) -> str | None:
    """Candidate parent of a rendered path, or None for top-level paths.

    ``blog/2024/post`` -> ``blog/2024``. Top-level paths (and the site root)
    have no candidate; the site root is never a parent.
    """
    parent = posixpath.dirname(path)
    return parent or None


def page_path(listing_path: str, page_number: int) -> str:
    """Rendered path of page ``page_number`` of a listing."""
    return join_path(listing_path, PAGE_SEGMENT, str(page_number))
