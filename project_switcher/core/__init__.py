"""Host collaborator interfaces and local implementations."""

from .host import (
    DirEntry,
    OpenTab,
    DocumentView,
    EditorHost,
    FileSystem,
    KeyValueStorage,
    ExcludeSettings,
    path_to_uri,
    uri_to_path,
)
from .filesystem import LocalFileSystem
from .storage import JsonFileStorage, MemoryStorage, atomic_write_json
from .exclude_settings import SettingsParseError, WorkspaceSettingsExcludes

__all__ = [
    "DirEntry",
    "OpenTab",
    "DocumentView",
    "EditorHost",
    "FileSystem",
    "KeyValueStorage",
    "ExcludeSettings",
    "path_to_uri",
    "uri_to_path",
    "LocalFileSystem",
    "JsonFileStorage",
    "MemoryStorage",
    "atomic_write_json",
    "SettingsParseError",
    "WorkspaceSettingsExcludes",
]
