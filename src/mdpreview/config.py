"""Configuration management for mdpreview.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from mdpreview.core.search import SearchMatcher

CONFIG_FILENAME = "mdpreview.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class SearchConfig:
    """In-document search configuration."""

    matcher: SearchMatcher = SearchMatcher.SMART_CASE


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for mdpreview.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            server=cls._parse_server(data.get("server")),
            search=cls._parse_search(data.get("search")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        """Parse server configuration section.

        Args:
            data: Raw server section data

        Returns:
            ServerConfig instance
        """
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_search(cls, data: object) -> SearchConfig:
        """Parse search configuration section.

        Args:
            data: Raw search section data

        Returns:
            SearchConfig instance
        """
        if data is None:
            return SearchConfig()

        if not isinstance(data, dict):
            raise ValueError("search section must be a dictionary")

        matcher = data.get("matcher", SearchMatcher.SMART_CASE.value)
        if not isinstance(matcher, str):
            raise ValueError("search.matcher must be a string")

        return SearchConfig(matcher=parse_matcher(matcher))

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        matcher: SearchMatcher | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            matcher: Override search.matcher

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        search = self.search
        if matcher is not None:
            search = replace(self.search, matcher=matcher)

        return replace(self, server=server, search=search)


def parse_matcher(value: str) -> SearchMatcher:
    """Parse a search matcher name such as ``SmartCase``.

    Raises:
        ValueError: If the name is not a known matcher
    """
    try:
        return SearchMatcher(value)
    except ValueError:
        names = ", ".join(m.value for m in SearchMatcher)
        raise ValueError(f"search.matcher must be one of {names}, got {value!r}") from None
