"""Exceptions raised by the Cursebreaker Codex engine.

Only boundary operations fail: task validation happens before a task
reaches the engine, and completion, undo and import are declined by the
coordinator, which catches these exceptions and leaves the committed state
untouched.
"""

from __future__ import annotations


class CodexError(Exception):
    """Base class for all engine errors."""


class TaskValidationError(CodexError):
    """Validation error with field-specific information for form highlighting.

    Attributes:
        field: The DATA_TASK_* key of the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for message placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize TaskValidationError.

        Args:
            field: The DATA_TASK_* key for the field that failed validation
            translation_key: The TRANS_KEY_* constant for error message
            placeholders: Optional dict for message placeholders
        """
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


class TaskNotFoundError(CodexError):
    """Raised when an operation names a task id that does not exist."""

    def __init__(self, task_id: str) -> None:
        """Initialize TaskNotFoundError."""
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class NotCompletableError(CodexError):
    """Raised when a task cannot be completed today.

    The coordinator turns this into a silent no-op.
    """

    def __init__(self, task_id: str, reason: str) -> None:
        """Initialize NotCompletableError."""
        self.task_id = task_id
        self.reason = reason
        super().__init__(f"Task {task_id} is not completable: {reason}")


class NotUndoableError(CodexError):
    """Raised when no history entry exists for the task on the given day."""

    def __init__(self, task_id: str, completion_date: str) -> None:
        """Initialize NotUndoableError."""
        self.task_id = task_id
        self.completion_date = completion_date
        super().__init__(
            f"No completion of task {task_id} recorded on {completion_date}"
        )


class ImportFormatError(CodexError):
    """Raised when a save blob fails its identity, version or field checks."""

    def __init__(self, reason: str) -> None:
        """Initialize ImportFormatError."""
        self.reason = reason
        super().__init__(f"Save data rejected: {reason}")
