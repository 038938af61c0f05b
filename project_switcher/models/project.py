"""
Project Pydantic model.

A project is a registered subdirectory of the parent workspace. Dynamic order
(rank among enabled projects) is deliberately not a field: it is recomputed by
the registry on every lookup.
"""

import time
import uuid
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def new_project_id() -> str:
    """Generate an opaque unique project id."""
    return uuid.uuid4().hex[:16]


class Project(BaseModel):
    """Project definition with ordering and session flags."""

    id: str = Field(default_factory=new_project_id, min_length=1)
    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1, description="Absolute project directory")
    order: int = Field(default=0, ge=0, description="Shortcut slot 1-9, 0 while unassigned")
    enabled: bool = Field(default=True)
    session_enabled: bool = Field(default=True)
    last_used: float = Field(default_factory=time.time)
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator('path', mode='before')
    @classmethod
    def validate_path_format(cls, v: str) -> str:
        """Ensure path is absolute."""
        if not isinstance(v, str):
            v = str(v)

        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError("path must be absolute")

        return str(path)

    @property
    def resolved_path(self) -> Path:
        """Symlink-resolved project directory."""
        return Path(self.path).resolve()

    @property
    def basename(self) -> str:
        return Path(self.path).name

    def touch(self) -> None:
        """Mark as used now."""
        self.last_used = time.time()
