"""Configuration loader for the project switcher.

Holds every tunable constant of the switcher and loads overrides from a JSON
file plus a couple of environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "project-switcher" / "config.json"

StrategyMode = Literal["auto", "naive", "optimized"]


class StorageKeys(BaseModel):
    """Key names used in the two storage scopes."""

    # Global scope
    projects: str = "projects"
    sessions: str = "projectSessions"
    switcher_enabled: str = "projectSwitcherEnabled"
    active_project: str = "currentProjectId"

    # Workspace scope
    original_excludes: str = "originalFileExcludes"
    filtering: str = "isCurrentlyFiltering"
    filtered_project: str = "currentActiveProject"


class SwitcherConfig(BaseModel):
    """Tunables for registry limits, restore batching, autosave and strategy choice."""

    max_enabled_projects: int = Field(default=9, ge=1, le=9, description="Shortcut slots 1-9")
    min_enabled_projects: int = Field(default=2, ge=1, description="Minimum enabled while switcher is active")
    directory_denylist: List[str] = Field(default_factory=lambda: ["node_modules"])

    large_restore_threshold: int = Field(default=50, ge=1, description="Valid tabs above which restore batches")
    restore_batch_size: int = Field(default=15, ge=1)
    restore_batch_yield_ms: float = Field(default=30.0, ge=0)

    cache_batch_size: int = Field(default=10, ge=1)
    cache_batch_yield_ms: float = Field(default=50.0, ge=0)

    autosave_debounce_seconds: float = Field(default=3.0, ge=0)

    strategy: StrategyMode = Field(default="auto")
    optimized_tab_threshold: int = Field(
        default=6, ge=0,
        description="auto mode: use the hide/show cache when current + target tabs reach this"
    )

    storage_keys: StorageKeys = Field(default_factory=StorageKeys)

    @field_validator("directory_denylist")
    @classmethod
    def strip_denylist(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v if name.strip()]


def load_switcher_config(config_file: Optional[Path] = None) -> SwitcherConfig:
    """Load switcher configuration from JSON file.

    Missing or invalid files fall back to defaults. Environment overrides:
    PROJECT_SWITCHER_STRATEGY and PROJECT_SWITCHER_DEBOUNCE.

    Args:
        config_file: Path to config.json (default: ~/.config/project-switcher/config.json)

    Returns:
        SwitcherConfig instance
    """
    config_file = config_file or DEFAULT_CONFIG_FILE
    data = {}

    if config_file.exists():
        try:
            with open(config_file) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                logger.error(f"Config file {config_file} does not contain an object, using defaults")
                data = {}
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read switcher config from {config_file}: {e}")
            data = {}
    else:
        logger.debug(f"Switcher config not found: {config_file}, using defaults")

    strategy = os.environ.get("PROJECT_SWITCHER_STRATEGY")
    if strategy:
        data["strategy"] = strategy

    debounce = os.environ.get("PROJECT_SWITCHER_DEBOUNCE")
    if debounce:
        try:
            data["autosave_debounce_seconds"] = float(debounce)
        except ValueError:
            logger.warning(f"Ignoring invalid PROJECT_SWITCHER_DEBOUNCE value: {debounce}")

    try:
        config = SwitcherConfig(**data)
    except ValidationError as e:
        logger.error(f"Invalid switcher config ({config_file}): {e}")
        logger.warning("Using default switcher configuration")
        return SwitcherConfig()

    logger.info(
        f"Loaded switcher config: strategy={config.strategy}, "
        f"debounce={config.autosave_debounce_seconds}s"
    )
    return config
