"""End-to-end site builds against a site directory on disk."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest
from lxml import etree

from folio.generator.sitemap import SITEMAP_NAMESPACE
from folio.generator.site import SiteGenerator, run_build_command
from folio.utils.config import Config
from folio.utils.exceptions import BuildCommandError, BuildError

MakeSite = Callable[..., Path]

pytestmark = pytest.mark.integration

FEED_CONFIG = """\
base_url = "https://example.com"
title = "Example Site"
author = "Ada"
generate_feed = true
"""

BLOG_CONTENT = {
    "index.md": "---\ntitle: Home\n---\nWelcome.\n",
    "blog.md": (
        "+++\n"
        'title = "Blog"\n'
        "[index]\n"
        'sort_by = "date"\n'
        "paginate_by = 1\n"
        "+++\n"
    ),
    "blog/a.md": "---\ntitle: A\ndate: 2024-01-02\ntaxonomies:\n  tags: [python]\n---\nFirst.\n",
    "blog/b.md": "---\ntitle: B\ndate: 2024-01-01\ntaxonomies:\n  tags: [python]\n---\nSecond.\n",
    "blog/draft.md": "---\ntitle: Draft\ndate: 2024-01-03\ndraft: true\n---\nWIP.\n",
    "tags.md": "---\ntitle: Tags\nindex:\n  taxonomy: tags\n---\n",
    "images/logo.png": "PNG",
}


def _sitemap_urls(output_dir: Path) -> list[str]:
    root = etree.parse(str(output_dir / "sitemap.xml")).getroot()
    return [loc.text for loc in root.iter(f"{{{SITEMAP_NAMESPACE}}}loc")]


class TestSiteBuild:
    """Test full builds of a small blog."""

    @pytest.fixture
    def config(self, make_site: MakeSite) -> Config:
        return Config(make_site(BLOG_CONTENT, config=FEED_CONFIG))

    def test_blog_scenario(self, config: Config, build_time: datetime) -> None:
        """Test the rendered pages of a paginated blog."""
        stats = SiteGenerator(config).build(build_time)
        out = config.output_dir

        assert "title=Home" in (out / "index.html").read_text()

        first = (out / "blog" / "index.html").read_text()
        assert "member=/blog/a/" in first
        assert "member=/blog/b/" not in first

        second = (out / "blog" / "page" / "2" / "index.html").read_text()
        assert "member=/blog/b/" in second
        assert "prev=/blog/\nnext=\n" in second

        redirect = (out / "blog" / "page" / "1" / "index.html").read_text()
        assert 'url=https://example.com/blog/"' in redirect

        assert "prev=\nnext=/blog/b/" in (out / "blog" / "a" / "index.html").read_text()
        assert (out / "tags" / "python" / "index.html").exists()
        assert (out / "images" / "logo.png").read_text() == "PNG"

        assert stats.redirects_rendered == 1
        assert stats.drafts_skipped == 1
        assert stats.static_files_copied == 1

    def test_drafts_absent_from_output_and_sitemap(
        self, config: Config, build_time: datetime
    ) -> None:
        """Test that drafts are neither written nor listed."""
        generator = SiteGenerator(config)
        generator.build(build_time)

        assert generator.hierarchy is not None
        assert generator.hierarchy.get("blog/draft") is not None
        assert not (config.output_dir / "blog" / "draft").exists()

        urls = _sitemap_urls(config.output_dir)
        assert "https://example.com/blog/draft/" not in urls
        assert "https://example.com/blog/page/1/" not in urls
        assert "https://example.com/blog/page/2/" in urls
        assert "https://example.com/tags/python/" in urls

    def test_drafts_included(self, config: Config, build_time: datetime) -> None:
        """Test that an include-drafts build renders drafts."""
        config.include_drafts = True

        SiteGenerator(config).build(build_time)

        assert (config.output_dir / "blog" / "draft" / "index.html").exists()

    def test_feed_written(self, config: Config, build_time: datetime) -> None:
        """Test that the Atom feed lists published leaf pages."""
        SiteGenerator(config).build(build_time)

        feed = (config.output_dir / "atom.xml").read_text()
        assert "https://example.com/blog/a/" in feed
        assert "https://example.com/blog/draft/" not in feed

    def test_output_cleared_between_builds(self, config: Config, build_time: datetime) -> None:
        """Test that stale files are removed by the next build."""
        config.output_dir.mkdir(parents=True, exist_ok=True)
        stale = config.output_dir / "stale.html"
        stale.write_text("old")

        SiteGenerator(config).build(build_time)

        assert not stale.exists()

    def test_nested_index_keeps_its_name(self, make_site: MakeSite, build_time: datetime) -> None:
        """Test that only the top-level index.md becomes the home page."""
        config = Config(
            make_site(
                {
                    "blog.md": "---\nindex: {}\n---\n",
                    "blog/index.md": "---\ntitle: Inner\n---\n",
                }
            )
        )

        SiteGenerator(config).build(build_time)

        inner = config.output_dir / "blog" / "index" / "index.html"
        assert "title=Inner" in inner.read_text()
        assert "member=/blog/index/" in (config.output_dir / "blog" / "index.html").read_text()
        assert not (config.output_dir / "index.html").exists()


class TestBuildFailures:
    """Test builds that must abort."""

    def test_missing_template(self, make_site: MakeSite, build_time: datetime) -> None:
        """Test that a missing template aborts with a BuildError."""
        config = Config(make_site({"a.md": "---\ntemplate: gone.html\n---\n"}))

        with pytest.raises(BuildError, match="gone.html"):
            SiteGenerator(config).build(build_time)

    def test_malformed_front_matter(self, make_site: MakeSite, build_time: datetime) -> None:
        """Test that a parse error aborts with a BuildError."""
        config = Config(make_site({"a.md": "---\ntitle: [oops\n---\n"}))

        with pytest.raises(BuildError) as exc_info:
            SiteGenerator(config).build(build_time)

        assert "a.md" in str(exc_info.value)

    def test_missing_content_directory(self, make_site: MakeSite, build_time: datetime) -> None:
        """Test that a site without content/ fails to build."""
        site_dir = make_site()
        (site_dir / "content").rmdir()

        with pytest.raises(BuildError, match="Content directory not found"):
            SiteGenerator(Config(site_dir)).build(build_time)


class TestBuildCommands:
    """Test pre- and post-build commands."""

    def test_commands_run_with_site_environment(
        self, make_site: MakeSite, build_time: datetime
    ) -> None:
        """Test that build commands see FOLIO_* variables and run in the site root."""
        site_dir = make_site(
            {"index.md": "Home"},
            config=(
                'base_url = "https://example.com"\n'
                "pre_build_cmd = \"sh -c 'echo $FOLIO_OUTPUT > pre.txt'\"\n"
                "post_build_cmd = \"sh -c 'ls $FOLIO_OUTPUT > post.txt'\"\n"
            ),
        )
        config = Config(site_dir)

        SiteGenerator(config).build(build_time)

        assert (site_dir / "pre.txt").read_text().strip() == str(config.output_dir)
        assert "index.html" in (site_dir / "post.txt").read_text()

    def test_commands_skipped_in_dev_mode(
        self, make_site: MakeSite, build_time: datetime, tmp_path: Path
    ) -> None:
        """Test that the dev server does not run build commands."""
        site_dir = make_site(
            {"index.md": "Home"},
            config=(
                'base_url = "https://example.com"\n'
                "pre_build_cmd = \"sh -c 'touch ran.txt'\"\n"
            ),
        )
        config = Config(site_dir).for_dev_server(tmp_path / "serve")

        SiteGenerator(config).build(build_time)

        assert not (site_dir / "ran.txt").exists()

    def test_failing_command(self, site_config: Config) -> None:
        """Test that a non-zero exit raises BuildCommandError."""
        with pytest.raises(BuildCommandError) as exc_info:
            run_build_command("sh -c 'exit 3'", site_config, "pre_build")

        assert exc_info.value.returncode == 3
