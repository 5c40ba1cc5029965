"""Unified configuration loaded from .orgjekyll.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".orgjekyll.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "orgjekyll" / "config.toml"


class BlogSectionConfig(BaseModel):
    """[blog] section."""

    directory: str = "~/Git-Projects/blog/"
    base_url: str = "http://endlessparentheses.com/"
    posts_subdir: str = "_posts"

    @property
    def path(self) -> Path:
        """The blog directory with ``~`` expanded."""
        return Path(self.directory).expanduser()

    @property
    def directory_prefix(self) -> str:
        """Expanded blog directory as a string ending in ``/``."""
        return str(self.path).rstrip("/") + "/"


class ExportSectionConfig(BaseModel):
    """[export] section."""

    pandoc: str = "pandoc"
    pandoc_args: list[str] = Field(default_factory=list)
    timeout: int = 60
    default_layout: str = "post"


class SpellcheckSectionConfig(BaseModel):
    """[spellcheck] section."""

    enabled: bool = True
    command: list[str] = Field(default_factory=lambda: ["aspell", "--lang=en", "list"])
    timeout: int = 20


class HistorySectionConfig(BaseModel):
    """[history] section: reusable commit-message entries."""

    file: str = "~/.local/state/orgjekyll/commit-messages.json"
    max_entries: int = 60

    @property
    def path(self) -> Path:
        return Path(self.file).expanduser()


class OrgJekyllConfig(BaseModel):
    """Top-level configuration model for the export pipeline."""

    blog: BlogSectionConfig = Field(default_factory=BlogSectionConfig)
    export: ExportSectionConfig = Field(default_factory=ExportSectionConfig)
    spellcheck: SpellcheckSectionConfig = Field(default_factory=SpellcheckSectionConfig)
    history: HistorySectionConfig = Field(default_factory=HistorySectionConfig)


def load_config(path: str | Path | None = None) -> OrgJekyllConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .orgjekyll.toml in CWD
    3. ~/.config/orgjekyll/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged OrgJekyllConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = OrgJekyllConfig.model_validate(data) if data else OrgJekyllConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: OrgJekyllConfig, **cli_kwargs: object) -> OrgJekyllConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values (``blog_dir``, ``base_url``,
            ``pandoc``, ``spellcheck``).

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "blog_dir": ("blog", "directory"),
        "base_url": ("blog", "base_url"),
        "pandoc": ("export", "pandoc"),
        "spellcheck": ("spellcheck", "enabled"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return OrgJekyllConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: OrgJekyllConfig) -> OrgJekyllConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "ORGJEKYLL_BLOG_DIR": ("blog", "directory"),
        "ORGJEKYLL_BASE_URL": ("blog", "base_url"),
        "ORGJEKYLL_PANDOC": ("export", "pandoc"),
        "ORGJEKYLL_HISTORY_FILE": ("history", "file"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    spell_raw = os.environ.get("ORGJEKYLL_SPELLCHECK")
    if spell_raw is not None:
        data["spellcheck"]["enabled"] = spell_raw.lower() in ("true", "1", "yes")

    return OrgJekyllConfig.model_validate(data)
