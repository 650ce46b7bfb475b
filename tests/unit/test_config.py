"""Unit tests for settings and blocklist config loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import platformdirs
import pytest

from blockmerge.config import (
    _DEFAULT_CACHE_DIR,
    CacheSettings,
    Settings,
    load_blocklist_config,
    load_settings,
)
from blockmerge.errors import BlocklistError, ErrorCode
from blockmerge.models.host import Host

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_default_cache_dir_matches_platformdirs(self) -> None:
        assert platformdirs.user_cache_dir("blockmerge") == _DEFAULT_CACHE_DIR
        assert CacheSettings().dir == _DEFAULT_CACHE_DIR

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.fetcher.timeout_seconds == 5.0
        assert settings.fetcher.user_agent.startswith("blockmerge/")
        assert settings.merge.throttle_seconds == 0.5
        assert settings.logging.level == "INFO"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKMERGE__FETCHER__TIMEOUT_SECONDS", "10")
        monkeypatch.setenv("BLOCKMERGE__MERGE__THROTTLE_SECONDS", "0")
        monkeypatch.setenv("BLOCKMERGE__LOGGING__FORMAT", "json")
        settings = Settings()
        assert settings.fetcher.timeout_seconds == 10.0
        assert settings.merge.throttle_seconds == 0.0
        assert settings.logging.format == "json"

    def test_constructor_args_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKMERGE__CACHE__DIR", "/from/env")
        settings = Settings(cache={"dir": "/from/args"})
        assert settings.cache.dir == "/from/args"

    def test_load_settings_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCKMERGE__LOGGING__LEVEL", "DEBUG")
        assert load_settings().logging.level == "DEBUG"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("BLOCKMERGE__FETCHER__TIMEOUT_SECONDS", "abc"),
            ("BLOCKMERGE__LOGGING__LEVEL", "LOUD"),
        ],
    )
    def test_load_settings_bad_env_raises_config_error(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)
        with pytest.raises(BlocklistError) as exc_info:
            load_settings()
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert str(exc_info.value).startswith("Invalid blockmerge settings: ")


# ---------------------------------------------------------------------------
# load_blocklist_config
# ---------------------------------------------------------------------------


class TestLoadBlocklistConfig:
    def test_json(self, write_config: Callable[..., Path]) -> None:
        path = write_config(
            {
                "host_whitelist": ["good.example"],
                "host_blacklist": ["bad.example"],
                "blocklists": ["https://lists.example/hosts.txt"],
            }
        )
        config = load_blocklist_config(path)
        assert config.host_whitelist == frozenset({Host("good.example")})
        assert config.host_blacklist == frozenset({Host("bad.example")})
        assert config.blocklists == frozenset({"https://lists.example/hosts.txt"})

    def test_yaml(self, write_config: Callable[..., Path]) -> None:
        path = write_config(
            "host_blacklist:\n  - bad.example\nblocklists:\n  - https://lists.example/hosts\n",
            name="blocklists.yaml",
        )
        config = load_blocklist_config(path)
        assert config.host_blacklist == frozenset({Host("bad.example")})
        assert config.host_whitelist == frozenset()
        assert config.sources() == ["https://lists.example/hosts"]

    def test_empty_yaml_is_empty_config(self, write_config: Callable[..., Path]) -> None:
        config = load_blocklist_config(write_config("", name="blocklists.yml"))
        assert config.blocklists == frozenset()

    def test_duplicates_collapse(self, write_config: Callable[..., Path]) -> None:
        path = write_config({"blocklists": ["https://a.example/x", "https://a.example/x"]})
        assert load_blocklist_config(path).sources() == ["https://a.example/x"]

    @pytest.mark.parametrize("bad", ["", "has space.example", "a/b", 'quo"te'])
    def test_invalid_host_names_value(self, write_config: Callable[..., Path], bad: str) -> None:
        path = write_config({"host_blacklist": ["ok.example", bad]})
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert exc_info.value.recoverable is False
        assert f"Can't parse {path}" in str(exc_info.value)
        assert "not a valid domain name" in str(exc_info.value)

    def test_invalid_url(self, write_config: Callable[..., Path]) -> None:
        path = write_config({"blocklists": ["not-a-url"]})
        with pytest.raises(BlocklistError, match="Invalid blocklist URL: 'not-a-url'"):
            load_blocklist_config(path)

    @pytest.mark.parametrize(
        "url",
        ["http://lists.example:notaport/hosts", "https://lists.example/ho\x00sts", "http:///hosts"],
    )
    def test_unrequestable_url_rejected(self, write_config: Callable[..., Path], url: str) -> None:
        path = write_config({"blocklists": ["https://lists.example/ok", url]})
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert "Invalid blocklist URL" in str(exc_info.value)

    def test_unknown_key_rejected(self, write_config: Callable[..., Path]) -> None:
        path = write_config({"host_whitelist": [], "hosts_whitelist": []})
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR

    def test_malformed_json(self, write_config: Callable[..., Path]) -> None:
        path = write_config('{"host_whitelist": [')
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR

    def test_malformed_yaml(self, write_config: Callable[..., Path]) -> None:
        path = write_config("host_whitelist: [unclosed\n", name="blocklists.yaml")
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nope.json"
        with pytest.raises(BlocklistError) as exc_info:
            load_blocklist_config(path)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert str(exc_info.value).startswith(f"Can't read {path}")
