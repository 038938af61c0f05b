"""
Switch strategies.

Both strategies share ``show``: replay the cache entry when the target has
one, otherwise restore its saved session. They differ in ``hide``:

- naive: close the old project's tabs outright
- optimized: move them into the in-memory cache for a fast way back

``choose_strategy`` picks one from the tab counts involved in a switch.
"""

import logging
from typing import Dict

from ..config import SwitcherConfig
from ..models.project import Project
from ..models.switch import RestoreResult
from .tab_cache import OptimizedTabCache
from .tab_capture import TabCaptureEngine

logger = logging.getLogger(__name__)

NAIVE = "naive"
OPTIMIZED = "optimized"


class SwitchStrategy:
    """Hide the old project's tabs and show the new project's."""

    name = "base"

    def __init__(self, capture: TabCaptureEngine, cache: OptimizedTabCache):
        self.capture = capture
        self.cache = cache

    async def hide(self, project: Project) -> int:
        raise NotImplementedError

    async def show(self, project: Project) -> RestoreResult:
        return await self.cache.show(project)


class NaiveStrategy(SwitchStrategy):
    """Close the old project's tabs; its session is the only way back."""

    name = NAIVE

    async def hide(self, project: Project) -> int:
        uris = [tab.uri for tab in self.capture.project_tabs(project)]
        if not uris:
            return 0
        closed = await self.capture.context.editor.close_tabs(uris)
        logger.debug(f"Closed {closed} tabs for project {project.name}")
        return closed


class OptimizedStrategy(SwitchStrategy):
    """Keep the old project's tabs in the in-memory cache."""

    name = OPTIMIZED

    async def hide(self, project: Project) -> int:
        return await self.cache.hide(project)


def choose_strategy(current_tabs: int, target_tabs: int, config: SwitcherConfig) -> str:
    """
    Pick a strategy name for a switch.

    Args:
        current_tabs: Tabs open for the project being left
        target_tabs: Tabs the target project would show
        config: Switcher configuration (forced mode and threshold)

    Returns:
        "naive" or "optimized"
    """
    if config.strategy != "auto":
        return config.strategy
    if current_tabs + target_tabs >= config.optimized_tab_threshold:
        return OPTIMIZED
    return NAIVE


def build_strategies(capture: TabCaptureEngine, cache: OptimizedTabCache) -> Dict[str, SwitchStrategy]:
    return {
        NAIVE: NaiveStrategy(capture, cache),
        OPTIMIZED: OptimizedStrategy(capture, cache),
    }
