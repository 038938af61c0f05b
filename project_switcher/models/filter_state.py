"""
Directory visibility filter state.

FilterMode follows the filter lifecycle:
UNARMED -> NOT_FILTERING (original excludes captured) -> FILTERING(path)
-> NOT_FILTERING (disable) -> UNARMED (teardown).
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class FilterMode(str, Enum):
    """Directory filter lifecycle mode."""

    UNARMED = "unarmed"
    NOT_FILTERING = "not_filtering"
    FILTERING = "filtering"


class FilterState(BaseModel):
    """Snapshot of the directory filter."""

    original_exclude_patterns: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Exclude map captured before the first filtering write; None while unarmed"
    )
    currently_filtering: bool = False
    active_filtered_project_path: Optional[str] = None

    @property
    def mode(self) -> FilterMode:
        if self.original_exclude_patterns is None:
            return FilterMode.UNARMED
        if self.currently_filtering:
            return FilterMode.FILTERING
        return FilterMode.NOT_FILTERING

    @property
    def is_armed(self) -> bool:
        return self.original_exclude_patterns is not None
