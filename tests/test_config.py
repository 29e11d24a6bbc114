"""Tests for configuration loading."""

from pathlib import Path

import pytest
from monotone.config import (
    Config,
    ContentConfig,
    LiveReloadConfig,
    ServerConfig,
    default_content_dir,
)
from monotone.core.resolver import DEFAULT_TIMEOUT


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "monotone.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 3000

[content]
source_dir = "content"
index_file = "catalog.toml"
base_url = "https://example.com/tutorials"
timeout = 2.5

[live_reload]
enabled = true
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.content.source_dir == tmp_path / "content"
        assert config.content.index_file == tmp_path / "catalog.toml"
        assert config.content.base_url == "https://example.com/tutorials"
        assert config.content.timeout == 2.5
        assert config.live_reload.enabled is True
        assert config.config_path == config_file

    def test__missing_sections__use_defaults(self, tmp_path: Path) -> None:
        """Fill missing sections with defaults."""
        config_file = tmp_path / "monotone.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server == ServerConfig()
        assert config.content.source_dir == default_content_dir()
        assert config.content.timeout == DEFAULT_TIMEOUT
        assert config.live_reload == LiveReloadConfig()

    def test__source_dir_only__index_defaults_inside_it(self, tmp_path: Path) -> None:
        """Default the index file to source_dir/index.toml."""
        config_file = tmp_path / "monotone.toml"
        config_file.write_text('[content]\nsource_dir = "content"\n')

        config = Config.load(config_file)

        assert config.content.index_file == tmp_path / "content" / "index.toml"

    def test__explicit_missing_path__raises(self, tmp_path: Path) -> None:
        """Raise when an explicit config file doesn't exist."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "missing.toml")

    def test__discovers_config_in_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Discover monotone.toml in a parent directory."""
        (tmp_path / "monotone.toml").write_text("[server]\nport = 9000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.server.port == 9000
        assert config.config_path == tmp_path / "monotone.toml"

    def test__no_config__uses_bundled_content(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Fall back to the bundled tutorial set without a config file."""
        monkeypatch.chdir(tmp_path)

        config = Config.load()

        assert config.config_path is None
        assert config.content == ContentConfig()
        assert (config.content.source_dir / "1.md").exists()

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('server = "x"', "server section must be a dictionary"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ("[content]\nsource_dir = 1", "content.source_dir must be a string"),
            ("[content]\nbase_url = 1", "content.base_url must be a string"),
            ("[content]\ntimeout = 0", "content.timeout must be a positive number"),
            ('[live_reload]\nenabled = "yes"', "live_reload.enabled must be a boolean"),
        ],
    )
    def test__invalid_values__raise(self, tmp_path: Path, content: str, message: str) -> None:
        """Reject ill-typed configuration values."""
        config_file = tmp_path / "monotone.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestConfigWithOverrides:
    """Tests for Config.with_overrides()."""

    def test__overrides__applied_without_mutation(self, test_config: Config, tmp_path: Path) -> None:
        """Apply overrides to a copy."""
        new_dir = tmp_path / "other"

        config = test_config.with_overrides(
            port=9999,
            source_dir=new_dir,
            base_url="https://example.com",
            live_reload_enabled=True,
        )

        assert config.server.port == 9999
        assert config.server.host == test_config.server.host
        assert config.content.source_dir == new_dir
        assert config.content.index_file == new_dir / "index.toml"
        assert config.content.base_url == "https://example.com"
        assert config.live_reload.enabled is True
        assert test_config.server.port == 8080
        assert test_config.live_reload.enabled is False

    def test__no_overrides__returns_equal_config(self, test_config: Config) -> None:
        """Return an equal config when nothing is overridden."""
        assert test_config.with_overrides() == test_config
