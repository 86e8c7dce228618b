"""Splitting ordered sequences into fixed-size pages."""

from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def chunk(items: Sequence[T], size: int, transform: Callable[[T], R]) -> list[list[R]]:
    """Split ``items`` into groups of ``size``, transforming each element.

    Args:
        items: Ordered elements
        size: Group size
        transform: Applied to every element, in order

    Returns:
        ``ceil(len(items) / size)`` groups; the last one holds the remainder.
        A size of zero or less yields no groups at all.
    """
    if size <= 0:
        return []

    groups: list[list[R]] = []
    group: list[R] = []
    for item in items:
        group.append(transform(item))
        if len(group) == size:
            groups.append(group)
            group = []

    if group:
        groups.append(group)

    return groups


def paginate(
    items: Sequence[T], page_size: int | None, transform: Callable[[T], R]
) -> list[list[R]]:
    """Split listing members into pages.

    Unlike :func:`chunk`, a missing or non-positive page size means "no
    pagination": every element lands on a single page. A listing always has
    at least one page, even with no members.

    Args:
        items: Listing members, already in display order
        page_size: Members per page, or None
        transform: Applied to every member, in order

    Returns:
        List of pages, never empty
    """
    if page_size is None or page_size <= 0:
        return [[transform(item) for item in items]]

    return chunk(items, page_size, transform) or [[]]
