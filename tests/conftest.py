"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from folio.content.models import ContentItem, ContentMetadata, IndexDescriptor
from folio.utils.config import Config

BUILD_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

BASIC_CONFIG = """\
base_url = "https://example.com"
title = "Example Site"
description = "An example"
author = "Ada"
"""

# Prints every value the page tests assert on, one per line
DEFAULT_TEMPLATE_HTML = """\
kind={{ page.kind }}
title={{ title }}
description={{ description }}
path={{ root_path }}
permalink={{ permalink }}
prev={{ prev }}
next={{ next }}
{% if page.kind == "listing" %}page={{ current_page }}/{{ total_pages }}
{% for member in pages %}member={{ member.root_path }}
{% endfor %}{% endif %}{{ content }}
"""


def day(n: int, month: int = 1) -> datetime:
    """UTC midnight of a day in 2024."""
    return datetime(2024, month, n, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the host environment and any .env file out of Config."""
    for name in ("FOLIO_BASE_URL", "FOLIO_INCLUDE_DRAFTS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    with patch("folio.utils.config.load_dotenv"):
        yield


@pytest.fixture
def build_time() -> datetime:
    return BUILD_TIME


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Factory for content items with the given front matter."""

    def _make(
        source_path: str,
        date: datetime | None = None,
        *,
        title: str | None = None,
        draft: bool = False,
        taxonomies: dict[str, list[str]] | None = None,
        template: str = "",
        index: dict[str, Any] | None = None,
        body: str = "",
    ) -> ContentItem:
        metadata = ContentMetadata(
            title=title if title is not None else source_path,
            date=date or day(1),
            draft=draft,
            taxonomies=taxonomies or {},
            template=template,
            index=IndexDescriptor(**index) if index is not None else None,
        )
        return ContentItem(source_path=source_path, metadata=metadata, body=body)

    return _make


@pytest.fixture
def make_site(tmp_path: Path) -> Callable[..., Path]:
    """Factory for a site directory on disk.

    Content and template files are given as relative path -> text.
    """

    def _make(
        content: dict[str, str] | None = None,
        templates: dict[str, str] | None = None,
        config: str = BASIC_CONFIG,
    ) -> Path:
        site_dir = tmp_path / "site"
        (site_dir / "content").mkdir(parents=True, exist_ok=True)
        (site_dir / "templates").mkdir(parents=True, exist_ok=True)
        (site_dir / "config.toml").write_text(config, encoding="utf-8")

        for relative_path, text in (content or {}).items():
            path = site_dir / "content" / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        if templates is None:
            templates = {"default.html": DEFAULT_TEMPLATE_HTML}
        for name, text in templates.items():
            path = site_dir / "templates" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        return site_dir

    return _make


@pytest.fixture
def site_config(make_site: Callable[..., Path]) -> Config:
    """Configuration of an empty site with the default test template."""
    return Config(make_site())
