"""
Error handling for the project switcher.

Every failure carries a numeric code, a log-oriented message, a short
user-facing message and optional context for the structured log record.

Code ranges:
- 1000-1099: Early rejects (no state change)
- 1100-1199: Directory filter errors
- 1200-1299: File/document I/O errors
- 1300-1399: Persistence errors
- 1400-1499: Switch errors
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for the project switcher."""

    # Early rejects (1000-1099)
    PROJECT_NOT_FOUND = 1000
    PROJECT_DISABLED = 1001
    PATH_GONE = 1002
    CAPACITY_EXCEEDED = 1003
    MINIMUM_ENABLED_VIOLATION = 1004
    DUPLICATE_PATH = 1005
    SWITCH_IN_PROGRESS = 1006
    SWITCHER_UNAVAILABLE = 1007

    # Directory filter (1100-1199)
    DIRECTORY_READ_ERROR = 1100
    EXCLUDE_WRITE_ERROR = 1101

    # I/O (1200-1299)
    DOCUMENT_OPEN_FAILED = 1200
    FILE_STAT_FAILED = 1201

    # Persistence (1300-1399)
    STORAGE_WRITE_FAILED = 1300
    STORAGE_READ_FAILED = 1301

    # Switch (1400-1499)
    SWITCH_FAILED = 1400


class SwitcherError(Exception):
    """Base exception for project switcher errors."""

    user_message = "Project switcher operation failed"

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize switcher error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a dictionary for structured logging.

        Returns:
            Error dictionary with code, name, message, suggestion and context
        """
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class EarlyReject(SwitcherError):
    """Request refused before any state was touched."""


class ProjectNotFoundError(EarlyReject):
    """Unknown project id."""

    def __init__(self, project_id: str):
        self.user_message = "Project not found"
        super().__init__(
            code=ErrorCode.PROJECT_NOT_FOUND,
            message=f"Project not found: {project_id}",
            context={"project_id": project_id}
        )


class DisabledProjectError(EarlyReject):
    """Target project is disabled."""

    def __init__(self, project_id: str, name: str):
        self.user_message = f"Project '{name}' is disabled"
        super().__init__(
            code=ErrorCode.PROJECT_DISABLED,
            message=f"Project {name} ({project_id}) is disabled",
            suggestion="Enable the project before switching to it",
            context={"project_id": project_id}
        )


class PathGoneError(EarlyReject):
    """Target project directory no longer exists."""

    def __init__(self, project_id: str, path: str):
        self.user_message = f"Project path no longer exists: {path}"
        super().__init__(
            code=ErrorCode.PATH_GONE,
            message=f"Project path no longer exists: {path}",
            suggestion="Remove the project or restore its directory",
            context={"project_id": project_id, "path": path}
        )


class CapacityExceededError(EarlyReject):
    """Too many enabled projects."""

    def __init__(self, limit: int):
        self.user_message = f"Maximum of {limit} projects allowed"
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Cannot have more than {limit} enabled projects",
            suggestion="Disable or remove a project first",
            context={"limit": limit}
        )


class MinimumEnabledViolationError(EarlyReject):
    """Disabling would leave too few enabled projects."""

    def __init__(self, project_id: str, minimum: int):
        self.user_message = f"At least {minimum} projects must stay enabled"
        super().__init__(
            code=ErrorCode.MINIMUM_ENABLED_VIOLATION,
            message=f"Disabling {project_id} would leave fewer than {minimum} enabled projects",
            context={"project_id": project_id, "minimum": minimum}
        )


class DuplicatePathError(EarlyReject):
    """A project already resolves to the same path."""

    def __init__(self, path: str, existing_name: str):
        self.user_message = f"Project already exists: {existing_name}"
        super().__init__(
            code=ErrorCode.DUPLICATE_PATH,
            message=f"Path {path} is already registered as {existing_name}",
            context={"path": path, "existing": existing_name}
        )


class SwitchInProgressError(EarlyReject):
    """Another switch is still running."""

    def __init__(self, current_target: Optional[str], requested: str):
        self.user_message = "A project switch is already in progress"
        super().__init__(
            code=ErrorCode.SWITCH_IN_PROGRESS,
            message=f"Switch to {requested} rejected: switch to {current_target} in progress",
            suggestion="Retry once the current switch completes",
            context={"in_progress": current_target, "requested": requested}
        )


class SwitcherUnavailableError(EarlyReject):
    """Switcher cannot be enabled in the current workspace."""

    def __init__(self, reason: str):
        self.user_message = reason
        super().__init__(
            code=ErrorCode.SWITCHER_UNAVAILABLE,
            message=reason,
            suggestion="Open a parent directory with 2+ project subdirectories"
        )


class FilterApplicationError(SwitcherError):
    """Directory filter could not be applied; previous mode retained."""

    user_message = "Failed to update the file explorer filter"


class DirectoryReadError(FilterApplicationError):
    """Workspace root listing failed."""

    def __init__(self, root: str, reason: str):
        super().__init__(
            code=ErrorCode.DIRECTORY_READ_ERROR,
            message=f"Failed to list workspace directory {root}: {reason}",
            suggestion="Check directory permissions",
            context={"root": root, "reason": reason}
        )


class ExcludeWriteError(FilterApplicationError):
    """Writing the exclusion configuration failed."""

    def __init__(self, reason: str):
        super().__init__(
            code=ErrorCode.EXCLUDE_WRITE_ERROR,
            message=f"Failed to write exclude configuration: {reason}",
            suggestion="Check that workspace settings are writable",
            context={"reason": reason}
        )


class TransientIOError(SwitcherError):
    """Single file open/stat failure during capture or restore."""

    user_message = "Some tabs could not be restored"

    def __init__(self, uri: str, reason: str, code: ErrorCode = ErrorCode.DOCUMENT_OPEN_FAILED):
        super().__init__(
            code=code,
            message=f"I/O failure for {uri}: {reason}",
            context={"uri": uri, "reason": reason}
        )


class PersistenceError(SwitcherError):
    """Storage read/write failure."""

    user_message = "Failed to save project state"

    def __init__(self, key: str, reason: str, code: ErrorCode = ErrorCode.STORAGE_WRITE_FAILED):
        super().__init__(
            code=code,
            message=f"Storage operation on '{key}' failed: {reason}",
            context={"key": key, "reason": reason}
        )


class SwitchFailedError(SwitcherError):
    """Unexpected failure inside a switch step."""

    user_message = "Failed to switch project"

    def __init__(self, step: str, reason: str, project_id: str):
        super().__init__(
            code=ErrorCode.SWITCH_FAILED,
            message=f"Switch to {project_id} failed at step '{step}': {reason}",
            context={"step": step, "project_id": project_id, "reason": reason}
        )
