"""Workspace exclusion settings backed by .vscode/settings.json.

The settings file is JSON with comments and trailing commas, so it is parsed
with json5. Only the ``files.exclude`` key is rewritten; all other settings in
the file are preserved and exclude values (including ``{"when": ...}``
clauses) are passed through untouched. The mapping is always written as a
whole.

A settings file that exists but cannot be parsed is never treated as empty:
reads raise, so nothing is captured and nothing is written over it.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict

import json5

from .storage import atomic_write_json

logger = logging.getLogger(__name__)

FILES_EXCLUDE_KEY = "files.exclude"


class SettingsParseError(ValueError):
    """The workspace settings file exists but is not readable JSON(C)."""


class WorkspaceSettingsExcludes:
    """ExcludeSettings implementation for one workspace root."""

    def __init__(self, workspace_root: Path, settings_relpath: str = ".vscode/settings.json"):
        self.workspace_root = workspace_root
        self.settings_file = workspace_root / settings_relpath

    def _read_settings(self) -> Dict[str, Any]:
        """Parse the settings file.

        Returns:
            Settings mapping (empty when the file does not exist)

        Raises:
            SettingsParseError: If the file cannot be read or parsed
        """
        if not self.settings_file.exists():
            return {}
        try:
            data = json5.loads(self.settings_file.read_text(encoding="utf-8"))
        except (ValueError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not parse {self.settings_file}: {e}")
            raise SettingsParseError(f"{self.settings_file}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsParseError(f"{self.settings_file} does not contain an object")
        return data

    def get_excludes(self) -> Dict[str, Any]:
        """Current exclude mapping (empty when unset).

        Raises:
            SettingsParseError: If the settings file cannot be parsed
        """
        excludes = self._read_settings().get(FILES_EXCLUDE_KEY) or {}
        return dict(excludes)

    async def set_excludes(self, patterns: Dict[str, Any]) -> None:
        """Overwrite the exclude mapping, keeping every other setting.

        Raises:
            SettingsParseError: If the existing settings cannot be parsed
            OSError: If the settings file cannot be written
        """
        settings = self._read_settings()
        settings[FILES_EXCLUDE_KEY] = dict(patterns)
        await asyncio.to_thread(atomic_write_json, self.settings_file, settings)
        logger.debug(f"Wrote {len(patterns)} exclude pattern(s) to {self.settings_file}")
