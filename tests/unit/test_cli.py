"""Unit tests for the folio CLI."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from folio.cli.main import cli
from folio.generator.site import BuildStatistics
from folio.utils.exceptions import BuildError

MakeSite = Callable[..., Path]


class TestBuildCLI:
    """Test build CLI command."""

    def test_build_displays_summary(self, make_site: MakeSite) -> None:
        """Test that build reports statistics from the site generator."""
        runner = CliRunner()
        site_dir = make_site()

        with patch("folio.cli.build.SiteGenerator") as mock_generator_class:
            mock_generator = MagicMock()
            mock_generator_class.return_value = mock_generator
            mock_generator.build.return_value = BuildStatistics(
                pages_rendered=7, redirects_rendered=1, drafts_skipped=2
            )

            result = runner.invoke(cli, ["build", "--site-dir", str(site_dir)])

        assert result.exit_code == 0, result.output
        assert "Build Complete!" in result.output
        assert "Pages Rendered: 7" in result.output
        assert "Drafts Skipped: 2" in result.output

    def test_build_include_drafts_flag(self, make_site: MakeSite) -> None:
        """Test that --include-drafts reaches the configuration."""
        runner = CliRunner()
        site_dir = make_site()

        with patch("folio.cli.build.SiteGenerator") as mock_generator_class:
            mock_generator_class.return_value.build.return_value = BuildStatistics()

            runner.invoke(cli, ["build", "--site-dir", str(site_dir), "--include-drafts"])

        config = mock_generator_class.call_args.args[0]
        assert config.include_drafts is True

    def test_build_failure_aborts(self, make_site: MakeSite) -> None:
        """Test that a failed build exits non-zero with the error shown."""
        runner = CliRunner()
        site_dir = make_site()

        with patch("folio.cli.build.SiteGenerator") as mock_generator_class:
            mock_generator_class.return_value.build.side_effect = BuildError("Build failed: boom")

            result = runner.invoke(cli, ["build", "--site-dir", str(site_dir)])

        assert result.exit_code != 0
        assert "Build failed: boom" in result.output

    def test_build_missing_config(self, tmp_path: Path) -> None:
        """Test that a directory without config.toml is rejected."""
        runner = CliRunner()

        result = runner.invoke(cli, ["build", "--site-dir", str(tmp_path)])

        assert result.exit_code != 0
        assert "Configuration error" in result.output


class TestCLIOptions:
    """Test CLI command options."""

    def test_build_help_shows_options(self) -> None:
        """Test that build --help shows all expected options."""
        result = CliRunner().invoke(cli, ["build", "--help"])

        assert result.exit_code == 0
        assert "--site-dir" in result.output
        assert "--output-dir" in result.output
        assert "--include-drafts" in result.output
        assert "--log-level" in result.output

    def test_serve_help_shows_options(self) -> None:
        """Test that serve --help shows all expected options."""
        result = CliRunner().invoke(cli, ["serve", "--help"])

        assert result.exit_code == 0
        assert "--site-dir" in result.output
        assert "--include-drafts" in result.output
        assert "--port" in result.output

    def test_serve_runs_dev_server(self, make_site: MakeSite) -> None:
        """Test that serve hands its options to the dev server."""
        site_dir = make_site()

        with patch("folio.cli.serve.DevServer") as mock_server_class:
            mock_server_class.return_value.url = "http://localhost:3000"

            result = CliRunner().invoke(
                cli, ["serve", "--site-dir", str(site_dir), "--include-drafts", "--port", "3000"]
            )

        assert result.exit_code == 0, result.output
        assert mock_server_class.call_args.kwargs == {"include_drafts": True, "port": 3000}
        mock_server_class.return_value.serve_forever.assert_called_once()
