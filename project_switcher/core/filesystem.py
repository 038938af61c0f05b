"""Local filesystem collaborator.

Blocking pathlib calls are pushed to a worker thread so directory listings and
existence checks never stall the event loop.
"""

import asyncio
import logging
from pathlib import Path
from typing import List

from .host import DirEntry

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """FileSystem implementation over the local disk."""

    async def list_directory(self, path: str) -> List[DirEntry]:
        """List immediate children of a directory.

        Raises:
            OSError: If the directory cannot be read
        """
        return await asyncio.to_thread(self._list_directory_sync, path)

    def _list_directory_sync(self, path: str) -> List[DirEntry]:
        entries = []
        for child in sorted(Path(path).iterdir(), key=lambda p: p.name):
            try:
                entries.append(DirEntry(name=child.name, is_dir=child.is_dir(), is_file=child.is_file()))
            except OSError as e:
                logger.debug(f"Skipping unreadable entry {child}: {e}")
        return entries

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def is_dir(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_dir)
