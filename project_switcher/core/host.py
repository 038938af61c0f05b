"""Host collaborator interfaces.

The switcher core never talks to an editor, a filesystem or a settings store
directly; it goes through the protocols below. Concrete filesystem and storage
implementations live next to this module; the editor side is supplied by the
embedding host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import unquote, urlparse

from ..models.session import Selection

FILE_SCHEME = "file"


def path_to_uri(path: str) -> str:
    """Absolute filesystem path -> file:// URI."""
    return Path(path).absolute().as_uri()


def uri_to_path(uri: str) -> Optional[str]:
    """file:// URI -> filesystem path, None for other schemes."""
    parsed = urlparse(uri)
    if parsed.scheme != FILE_SCHEME:
        return None
    return unquote(parsed.path)


@dataclass
class DirEntry:
    """Immediate child of a directory."""

    name: str
    is_dir: bool
    is_file: bool = False


@dataclass
class OpenTab:
    """A tab currently shown in the editor's tab strip."""

    uri: str
    view_column: int = 1
    tab_index: int = 0
    is_active: bool = False
    is_pinned: bool = False
    is_dirty: bool = False
    selection: Optional[Selection] = None

    @property
    def path(self) -> Optional[str]:
        return uri_to_path(self.uri)


@dataclass
class DocumentView:
    """An opened editor for a document, with enough shape to clamp selections."""

    uri: str
    view_column: int
    line_lengths: Tuple[int, ...] = field(default_factory=tuple)
    token: Optional[int] = None


TabChangeCallback = Callable[[], None]


class EditorHost(Protocol):
    """Editor window operations used by capture, restore and the tab cache."""

    def list_open_tabs(self) -> List[OpenTab]:
        ...

    def active_tab_uri(self) -> Optional[str]:
        ...

    async def open_document(
        self,
        uri: str,
        *,
        view_column: int,
        preview: bool = False,
        preserve_focus: bool = True,
        document_token: Optional[int] = None,
    ) -> DocumentView:
        ...

    async def apply_selection(self, view: DocumentView, selection: Selection, reveal: bool) -> None:
        ...

    async def close_tabs(self, uris: Sequence[str]) -> int:
        ...

    async def close_all_tabs(self) -> None:
        ...

    def document_token(self, uri: str) -> Optional[int]:
        """Token of a resident document, None when not resident."""
        ...

    def is_document_live(self, token: int) -> bool:
        ...

    async def reveal_in_explorer(self, path: str) -> None:
        ...

    def notify(self, level: str, message: str) -> None:
        """Show a short user-facing message ("info", "warning", "error")."""
        ...

    def subscribe_tab_changes(self, callback: TabChangeCallback) -> Callable[[], None]:
        """Register a tab strip change callback; returns an unsubscribe function."""
        ...


class FileSystem(Protocol):
    """Directory listing and existence checks."""

    async def list_directory(self, path: str) -> List[DirEntry]:
        ...

    async def exists(self, path: str) -> bool:
        ...

    async def is_dir(self, path: str) -> bool:
        ...


class KeyValueStorage(Protocol):
    """Persisted key-value storage for one scope ("global" or "workspace")."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class ExcludeSettings(Protocol):
    """Directory-exclusion configuration of the current workspace."""

    def get_excludes(self) -> Dict[str, Any]:
        ...

    async def set_excludes(self, patterns: Dict[str, Any]) -> None:
        ...
