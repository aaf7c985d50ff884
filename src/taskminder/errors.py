"""Error types shared across Taskminder."""


class TaskminderError(Exception):
    """Base class for Taskminder errors."""

    pass


class TaskNotFoundError(TaskminderError):
    """Raised when an operation references a task id that does not exist."""

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class InvalidStateError(TaskminderError):
    """Raised when a task is not in a state that allows the operation."""

    pass


class StorageError(TaskminderError):
    """Raised when the task store cannot be written to disk."""

    pass


class UpstreamError(TaskminderError):
    """Raised when an external service (LLM, transcription) fails."""

    pass


class TranscriptionError(UpstreamError):
    """Raised when a voice note cannot be transcribed."""

    pass


class CommandError(TaskminderError):
    """Raised when a chat/CLI command cannot be parsed. Message is the usage hint."""

    pass
