"""Site configuration loaded from config.toml and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from folio.common.constants import DEFAULT_SERVER_PORT, WATCH_IGNORE
from folio.utils.exceptions import ConfigurationError

CONFIG_FILENAME = "config.toml"


class ServerConfig:
    """Dev server settings from the [server] table."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.port = int(data.get("port", DEFAULT_SERVER_PORT))
        self.watch_ignore: list[str] = list(data.get("watch_ignore", []))

    def ignore_list(self, output_dir: Path) -> list[str]:
        """Directory names the watcher must skip, output directory included."""
        return [*WATCH_IGNORE, output_dir.name, *self.watch_ignore]


class Config:
    """Site configuration.

    Settings come from ``config.toml`` in the site root. A ``.env`` file in
    the working directory and the process environment may override a few of
    them (``FOLIO_BASE_URL``, ``FOLIO_INCLUDE_DRAFTS``, ``LOG_LEVEL``).
    """

    def __init__(self, site_dir: str | Path = ".", output_dir: str | Path | None = None) -> None:
        """Load configuration for the site rooted at ``site_dir``.

        Args:
            site_dir: Site root holding config.toml, content/ and templates/
            output_dir: Output directory override (default: <site_dir>/public)

        Raises:
            ConfigurationError: If config.toml is missing, invalid or lacks base_url
        """
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)

        self.site_dir = Path(site_dir).resolve()
        data = self._read_config_file(self.site_dir / CONFIG_FILENAME)

        self.base_url = os.getenv("FOLIO_BASE_URL") or self._get_required(data, "base_url")
        self.title: str = data.get("title", "")
        self.description: str = data.get("description", "")
        self.author: str = data.get("author", "")
        self.default_language: str = data.get("default_language", "en")

        self.generate_feed = bool(data.get("generate_feed", False))
        self.feed_limit = int(data.get("feed_limit", 0))
        self.sitemap = bool(data.get("sitemap", True))
        self.smart_punctuation = bool(data.get("markdown", {}).get("smart_punctuation", False))

        self.content_dir = self.site_dir / data.get("content_dir", "content")
        self.templates_dir = self.site_dir / data.get("templates_dir", "templates")
        self.output_dir = (
            Path(output_dir).resolve()
            if output_dir
            else self.site_dir / data.get("output_dir", "public")
        )

        self.include_drafts = self._parse_bool(
            os.getenv("FOLIO_INCLUDE_DRAFTS"), bool(data.get("include_drafts", False))
        )
        self.dev_mode = False
        self.pre_build_cmd: str = data.get("pre_build_cmd", "")
        self.post_build_cmd: str = data.get("post_build_cmd", "")

        self.server = ServerConfig(data.get("server", {}))
        self.extra: dict[str, Any] = dict(data.get("extra", {}))

        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    @staticmethod
    def _read_config_file(config_path: Path) -> dict[str, Any]:
        """Read and decode config.toml.

        Raises:
            ConfigurationError: If the file is missing or is not valid TOML
        """
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid configuration file {config_path}: {e}") from e

    @staticmethod
    def _get_required(data: dict[str, Any], key: str) -> str:
        """Get required configuration value or raise error.

        Args:
            data: Decoded config.toml
            key: Setting name

        Returns:
            Setting value

        Raises:
            ConfigurationError: If setting is missing or empty
        """
        value = data.get(key)
        if not value:
            raise ConfigurationError(f"{key} is not set in {CONFIG_FILENAME}")
        return str(value)

    @staticmethod
    def _parse_bool(value: str | None, default: bool) -> bool:
        """Parse boolean from environment value."""
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def for_dev_server(self, serve_dir: Path, port: int | None = None) -> "Config":
        """Switch this configuration to dev server mode.

        Output goes to ``serve_dir`` and URLs point at localhost.
        """
        if port is not None:
            self.server.port = port
        self.dev_mode = True
        self.output_dir = serve_dir
        self.base_url = f"http://localhost:{self.server.port}"
        return self

    def base_url_no_trailing_slash(self) -> str:
        return self.base_url.rstrip("/")

    def full_url(self, path: str) -> str:
        """Absolute URL for a site-relative path."""
        return self.base_url_no_trailing_slash() + "/" + path.replace("\\", "/").lstrip("/")

    def to_template_dict(self) -> dict[str, Any]:
        """Settings exposed to templates as ``config``."""
        return {
            "base_url": self.base_url,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "default_language": self.default_language,
            "generate_feed": self.generate_feed,
            "dev_mode": self.dev_mode,
            "extra": self.extra,
        }

