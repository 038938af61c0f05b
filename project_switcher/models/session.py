"""
Session snapshot models.

A SessionSnapshot is the persisted open-tab layout of one project. TabRecord
may carry a document token while it sits in the in-memory tab cache; the token
is excluded from serialization and only meaningful against the host's live
document table.
"""

import time
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field


class Position(BaseModel):
    """Zero-based line/character position."""

    line: int = 0
    character: int = 0

    def clamped(self, line_lengths: Sequence[int]) -> "Position":
        """Clamp into a document described by its line lengths.

        Mirrors an editor's position validation: negative values go to zero,
        lines past the end go to the last line, characters past the end of the
        line go to the line end.
        """
        if not line_lengths:
            return Position(line=0, character=0)

        line = min(max(0, self.line), len(line_lengths) - 1)
        character = min(max(0, self.character), line_lengths[line])
        return Position(line=line, character=character)


class Selection(BaseModel):
    """Editor selection range."""

    start: Position = Field(default_factory=Position)
    end: Position = Field(default_factory=Position)

    def clamped(self, line_lengths: Sequence[int]) -> "Selection":
        return Selection(
            start=self.start.clamped(line_lengths),
            end=self.end.clamped(line_lengths),
        )


class TabRecord(BaseModel):
    """One open tab as captured from the editor."""

    uri: str = Field(..., min_length=1)
    is_active: bool = False
    is_pinned: bool = False
    view_column: int = Field(default=1, ge=1)
    is_dirty: bool = False
    tab_index: int = Field(default=0, ge=0, description="Position within its view column")
    selection: Optional[Selection] = None

    # Owned by the tab cache, never persisted
    document_token: Optional[int] = Field(default=None, exclude=True)

    def sort_key(self):
        return (self.view_column, self.tab_index)


class ExplorerHint(BaseModel):
    """File browser state recorded alongside a session."""

    expanded_directories: List[str] = Field(default_factory=list)
    selected_file: Optional[str] = None


class SessionSnapshot(BaseModel):
    """Persisted tab layout for one project."""

    project_id: str = Field(..., min_length=1)
    tabs: List[TabRecord] = Field(default_factory=list)
    active_tab_uri: Optional[str] = None
    explorer_hint: Optional[ExplorerHint] = None
    last_saved: float = Field(default_factory=time.time)

    @property
    def tab_count(self) -> int:
        return len(self.tabs)
