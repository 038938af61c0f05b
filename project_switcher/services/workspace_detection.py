"""Workspace mode detection and project directory discovery."""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from ..core.host import DirEntry, FileSystem

logger = logging.getLogger(__name__)

# Files that do not make the workspace root a project of its own
IGNORED_ROOT_FILES = frozenset({"README.md", "LICENSE", ".gitignore"})


class WorkspaceMode(str, Enum):
    """How the open workspace root is laid out."""

    NONE = "none"
    SINGLE = "single"
    PARENT = "parent"


def is_project_directory(entry: DirEntry, denylist: Iterable[str]) -> bool:
    return entry.is_dir and not entry.name.startswith(".") and entry.name not in set(denylist)


def is_meaningful_file(entry: DirEntry) -> bool:
    return entry.is_file and not entry.name.startswith(".") and entry.name not in IGNORED_ROOT_FILES


async def list_project_directories(
    filesystem: FileSystem,
    root: str,
    denylist: Iterable[str] = ("node_modules",),
) -> List[str]:
    """
    Names of the visible immediate subdirectories of root.

    Dot-directories and denylisted names are skipped.

    Raises:
        OSError: If the directory cannot be listed
    """
    denylist = list(denylist)
    entries = await filesystem.list_directory(root)
    return [entry.name for entry in entries if is_project_directory(entry, denylist)]


async def detect_workspace_mode(
    filesystem: FileSystem,
    root: Optional[str],
    denylist: Iterable[str] = ("node_modules",),
) -> WorkspaceMode:
    """
    Classify the workspace root.

    A root holding two or more project directories and no meaningful files is
    a parent directory. Anything else, including an unreadable root, is treated
    as a single project.

    Args:
        filesystem: Filesystem collaborator
        root: Workspace root path, None when no folder is open
        denylist: Directory names never considered projects

    Returns:
        Detected WorkspaceMode
    """
    if not root:
        return WorkspaceMode.NONE

    denylist = list(denylist)
    try:
        entries = await filesystem.list_directory(root)
    except OSError as e:
        logger.error(f"Failed to detect workspace mode for {root}: {e}")
        return WorkspaceMode.SINGLE

    directories = [entry for entry in entries if is_project_directory(entry, denylist)]
    meaningful_files = [entry for entry in entries if is_meaningful_file(entry)]

    if len(directories) >= 2 and not meaningful_files:
        logger.info(f"Detected parent directory {Path(root).name} with {len(directories)} subdirectories")
        return WorkspaceMode.PARENT

    return WorkspaceMode.SINGLE
