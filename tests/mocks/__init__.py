"""Mock host collaborators for project switcher tests."""

from .editor_host import MockEditorHost, MockExcludeSettings, FailingStorage, OpenCall

__all__ = ["MockEditorHost", "MockExcludeSettings", "FailingStorage", "OpenCall"]
