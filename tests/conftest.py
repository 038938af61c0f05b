"""Pytest configuration and fixtures for project switcher tests.

Provides test fixtures for:
- Isolated parent workspaces with project subdirectories (temp directories)
- Mock editor host, exclude settings and storage scopes
- A wired SwitcherContext and SwitchOrchestrator
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to the Python path before test collection
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))

from project_switcher.config import SwitcherConfig  # noqa: E402
from project_switcher.core.filesystem import LocalFileSystem  # noqa: E402
from project_switcher.core.storage import MemoryStorage  # noqa: E402
from project_switcher.orchestrator import SwitchOrchestrator  # noqa: E402
from project_switcher.state import SwitcherContext  # noqa: E402
from tests.mocks import FailingStorage, MockEditorHost, MockExcludeSettings  # noqa: E402

PROJECT_NAMES = ("alpha", "beta", "gamma")


def write_lines(path: Path, count: int, width: int = 20) -> Path:
    """Create a text file with ``count`` lines of ``width`` characters."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join("x" * width for _ in range(count)))
    return path


@pytest.fixture
def workspace(tmp_path):
    """Create a parent workspace with three project subdirectories.

    Layout:
        workspace/
            README.md
            .git/
            node_modules/
            alpha/ beta/ gamma/   (each with main.py, util.py, docs/notes.md)

    Returns:
        Path: Workspace root
    """
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "README.md").write_text("# workspace\n")
    (root / ".git").mkdir()
    (root / "node_modules").mkdir()

    for name in PROJECT_NAMES:
        project_dir = root / name
        write_lines(project_dir / "main.py", 30)
        write_lines(project_dir / "util.py", 10)
        write_lines(project_dir / "docs" / "notes.md", 5)

    return root.resolve()


@pytest.fixture
def editor():
    return MockEditorHost()


@pytest.fixture
def excludes():
    return MockExcludeSettings({"**/.git": True, "**/__pycache__": True})


@pytest.fixture
def global_storage():
    return FailingStorage("global")


@pytest.fixture
def workspace_storage():
    return MemoryStorage("workspace")


@pytest.fixture
def switcher_config():
    """Default tunables with the cooperative yields switched off."""
    return SwitcherConfig(restore_batch_yield_ms=0, cache_batch_yield_ms=0, autosave_debounce_seconds=0.05)


@pytest.fixture
def context(workspace, editor, excludes, global_storage, workspace_storage, switcher_config):
    return SwitcherContext(
        editor=editor,
        filesystem=LocalFileSystem(),
        global_storage=global_storage,
        workspace_storage=workspace_storage,
        excludes=excludes,
        workspace_root=str(workspace),
        config=switcher_config,
    )


@pytest.fixture
def orchestrator(context):
    return SwitchOrchestrator(context)
