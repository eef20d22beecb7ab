from typing import Optional


class TaskError(Exception):
    """Base error for store operations. `message` is what callers see."""

    message = "Task error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class NotFound(TaskError):
    message = "Task not found"


class InvalidInput(TaskError):
    message = "Invalid input"


# Reserved: ids are never reused, so nothing raises this today.
class DuplicateTask(TaskError):
    message = "Duplicate task"
