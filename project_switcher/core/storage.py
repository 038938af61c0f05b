"""Key-value storage scopes.

Two scopes are used: "global" (shared across workspaces: projects, sessions)
and "workspace" (per workspace: original excludes, filtering flag).

State file schema:
{
    "version": "1.0",
    "scope": "global",
    "last_updated": 1730000000.123,
    "values": {"projects": [...], "projectSessions": {...}}
}
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

STORAGE_VERSION = "1.0"


def atomic_write_json(path: Path, data: Any) -> None:
    """Write JSON atomically: temp file in the same directory, fsync, rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class JsonFileStorage:
    """KeyValueStorage persisted to one JSON file per scope."""

    def __init__(self, state_file: Path, scope: str = "global"):
        """Initialize storage.

        Args:
            state_file: JSON file backing this scope
            scope: Scope name recorded in the file
        """
        self.state_file = state_file
        self.scope = scope
        self._values: Dict[str, Any] = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    def load(self) -> None:
        """Load values from disk.

        A missing file yields an empty scope. A corrupted file is backed up to
        ``.json.bak`` and the scope starts empty.
        """
        self._loaded = True
        if not self.state_file.exists():
            logger.info(f"Storage file for scope '{self.scope}' not found, starting empty")
            self._values = {}
            return

        try:
            with self.state_file.open("r") as f:
                data = json.load(f)

            version = data.get("version", STORAGE_VERSION)
            if version != STORAGE_VERSION:
                logger.warning(f"Unsupported storage version {version} in {self.state_file}, reinitializing")
                self._values = {}
                return

            self._values = dict(data.get("values", {}))
            logger.debug(f"Loaded {len(self._values)} key(s) for scope '{self.scope}'")

        except (json.JSONDecodeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to load {self.state_file}: {e}")
            backup_file = self.state_file.with_suffix(".json.bak")
            self.state_file.rename(backup_file)
            logger.info(f"Backed up corrupted storage to {backup_file}")
            self._values = {}

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def get(self, key: str, default: Any = None) -> Any:
        self._ensure_loaded()
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def keys(self) -> List[str]:
        self._ensure_loaded()
        return list(self._values.keys())

    async def set(self, key: str, value: Any) -> None:
        """Set a key and rewrite the scope file.

        Raises:
            OSError: If the file cannot be written
        """
        self._ensure_loaded()
        async with self._lock:
            self._values[key] = copy.deepcopy(value)
            await self._save_unlocked()

    async def delete(self, key: str) -> None:
        self._ensure_loaded()
        async with self._lock:
            if self._values.pop(key, None) is not None:
                await self._save_unlocked()

    async def clear(self) -> None:
        self._ensure_loaded()
        async with self._lock:
            self._values.clear()
            await self._save_unlocked()

    async def _save_unlocked(self) -> None:
        data = {
            "version": STORAGE_VERSION,
            "scope": self.scope,
            "last_updated": time.time(),
            "values": self._values,
        }
        try:
            await asyncio.to_thread(atomic_write_json, self.state_file, data)
        except Exception as e:
            logger.error(f"Failed to save storage scope '{self.scope}': {e}")
            raise


class MemoryStorage:
    """In-process KeyValueStorage."""

    def __init__(self, scope: str = "global", initial: Dict[str, Any] = None):
        self.scope = scope
        self._values: Dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return copy.deepcopy(self._values[key])

    def keys(self) -> List[str]:
        return list(self._values.keys())

    async def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    async def clear(self) -> None:
        self._values.clear()
