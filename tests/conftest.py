"""Shared test fixtures for the blockmerge test suite."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from blockmerge.cache import BlocklistCache
from blockmerge.models.config import BlocklistConfig

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture()
def cache(tmp_path: Path) -> BlocklistCache:
    """A file cache rooted in a not-yet-created directory under tmp_path."""
    return BlocklistCache(tmp_path / "cache")


@pytest.fixture()
def sample_config() -> BlocklistConfig:
    return BlocklistConfig(
        host_whitelist=["good.example"],
        host_blacklist=["bad.example"],
        blocklists=["https://lists.example/hosts.txt"],
    )


@pytest.fixture()
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write a blocklist config file and return its path."""

    def _write(data: dict | str, name: str = "blocklists.json") -> Path:
        path = tmp_path / name
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
