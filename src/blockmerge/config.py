"""Configuration loading.

Two kinds of configuration exist:

* ``Settings``: how blockmerge runs (cache directory, timeouts, logging).
  Loaded in priority order (highest first):
    1. Environment variables  (BLOCKMERGE__FETCHER__TIMEOUT_SECONDS=10)
    2. blockmerge.yaml        (searched in cwd, then platform config dir)
    3. Hardcoded defaults
  The settings file is optional; all fields have sensible defaults.

* ``BlocklistConfig``: what to merge. Read from the file given on the
  command line by ``load_blocklist_config``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from blockmerge import __version__
from blockmerge.errors import BlocklistError, ErrorCode
from blockmerge.models.config import BlocklistConfig

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("blockmerge")
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _find_config_file() -> str | None:
    """Return the path of the first blockmerge.yaml found, or None."""
    candidates = [
        Path("blockmerge.yaml"),
        Path(platformdirs.user_config_dir("blockmerge")) / "blockmerge.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    dir: str = _DEFAULT_CACHE_DIR


class FetcherSettings(BaseModel):
    timeout_seconds: float = 5.0
    user_agent: str = f"blockmerge/{__version__}"


class MergeSettings(BaseModel):
    # Blocking pause between consecutive sources
    throttle_seconds: float = 0.5


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: BLOCKMERGE__CACHE__DIR=/var/cache/blockmerge
        env_prefix="BLOCKMERGE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    merge: MergeSettings = MergeSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )


def load_settings() -> Settings:
    """Build ``Settings`` from the environment and blockmerge.yaml.

    Bad values raise ``BlocklistError`` with ``CONFIG_ERROR`` instead of a
    pydantic or YAML exception.
    """
    try:
        return Settings()
    except (ValidationError, yaml.YAMLError, OSError) as exc:
        raise BlocklistError(ErrorCode.CONFIG_ERROR, str(exc)).with_context(
            "Invalid blockmerge settings"
        ) from exc


def load_blocklist_config(path: Path) -> BlocklistConfig:
    """Read and validate a blocklist config file.

    JSON by default; ``.yaml``/``.yml`` files are parsed as YAML. Any
    failure raises ``BlocklistError`` with ``CONFIG_ERROR`` naming the file.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BlocklistError(ErrorCode.CONFIG_ERROR, str(exc)).with_context(
            f"Can't read {path}"
        ) from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            raw = yaml.safe_load(text)
            return BlocklistConfig.model_validate(raw if raw is not None else {})
        return BlocklistConfig.model_validate_json(text)
    except (ValidationError, yaml.YAMLError) as exc:
        raise BlocklistError(ErrorCode.CONFIG_ERROR, str(exc)).with_context(
            f"Can't parse {path}"
        ) from exc
