import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from .errors import InvalidInput, NotFound
from .schemas import TaskRecord, TaskSnapshot


logger = logging.getLogger(__name__)


@dataclass
class Task:
    id: int
    title: str
    description: str
    done: bool
    is_important: bool
    created_at: int
    updated_at: int


class TaskStore:
    """
    In-memory task store.

    Holds the id -> Task mapping and the next id counter. Callers must
    serialize access; the store itself takes no locks.

    Every query returns copies in ascending id order.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self.tasks: Dict[int, Task] = {}
        self.next_id = 0

    # ---- helpers ----

    def _now(self) -> int:
        return int(self._clock())

    def _lookup(self, task_id: int) -> Task:
        task = self.tasks.get(task_id)
        if task is None:
            raise NotFound()
        return task

    def _touch(self, task: Task) -> None:
        task.updated_at = max(self._now(), task.updated_at)

    def _select(self, predicate: Callable[[Task], bool]) -> List[Task]:
        return [replace(t) for t in self.tasks.values() if predicate(t)]

    # ---- create / read ----

    def create(self, title: str, description: str, is_important: Optional[bool] = None) -> int:
        if not title or not description:
            raise InvalidInput()

        task_id = self.next_id
        self.next_id += 1

        now = self._now()
        self.tasks[task_id] = Task(
            id=task_id,
            title=title,
            description=description,
            done=False,
            is_important=bool(is_important),
            created_at=now,
            updated_at=now,
        )
        logger.debug("Task created id=%s important=%s", task_id, bool(is_important))
        return task_id

    def get(self, task_id: int) -> Task:
        return replace(self._lookup(task_id))

    def list_all(self) -> List[Task]:
        return self._select(lambda t: True)

    def count(self) -> int:
        return len(self.tasks)

    # ---- mutations ----

    def update(
        self,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        done: Optional[bool] = None,
        is_important: Optional[bool] = None,
    ) -> bool:
        task = self._lookup(task_id)
        if title is not None and not title:
            raise InvalidInput()
        if description is not None and not description:
            raise InvalidInput()

        if title is not None:
            task.title = title
        if description is not None:
            task.description = description
        if done is not None:
            task.done = done
        if is_important is not None:
            task.is_important = is_important
        self._touch(task)
        logger.debug("Task updated id=%s", task_id)
        return True

    def delete(self, task_id: int) -> bool:
        if self.tasks.pop(task_id, None) is None:
            raise NotFound()
        logger.debug("Task deleted id=%s", task_id)
        return True

    def mark_done(self, task_id: int) -> bool:
        task = self._lookup(task_id)
        task.done = True
        self._touch(task)
        return True

    def reset_status(self, task_id: int) -> bool:
        task = self._lookup(task_id)
        task.done = False
        self._touch(task)
        return True

    def mark_important(self, task_id: int) -> bool:
        task = self._lookup(task_id)
        task.is_important = True
        self._touch(task)
        return True

    def toggle_importance(self, task_id: int) -> bool:
        task = self._lookup(task_id)
        task.is_important = not task.is_important
        self._touch(task)
        return True

    def clear_completed(self) -> None:
        before = len(self.tasks)
        self.tasks = {k: t for k, t in self.tasks.items() if not t.done}
        logger.debug("Cleared %s completed tasks", before - len(self.tasks))

    # ---- filtered queries ----

    def by_status(self, done: bool) -> List[Task]:
        return self._select(lambda t: t.done == done)

    def by_importance(self, is_important: bool) -> List[Task]:
        return self._select(lambda t: t.is_important == is_important)

    def important(self) -> List[Task]:
        return self.by_importance(True)

    def completed(self) -> List[Task]:
        return self.by_status(True)

    def incomplete(self) -> List[Task]:
        return self.by_status(False)

    def by_title(self, title: str) -> List[Task]:
        return self._select(lambda t: t.title == title)

    def by_description(self, description: str) -> List[Task]:
        return self._select(lambda t: t.description == description)

    def created_after(self, timestamp: int) -> List[Task]:
        return self._select(lambda t: t.created_at > timestamp)

    def updated_after(self, timestamp: int) -> List[Task]:
        return self._select(lambda t: t.updated_at > timestamp)

    # ---- snapshot / restore ----

    def snapshot(self) -> dict:
        """Plain-data copy of the store state, suitable for json.dumps."""
        return TaskSnapshot(
            next_id=self.next_id,
            tasks=[TaskRecord.model_validate(t) for t in self.tasks.values()],
        ).model_dump()

    def restore(self, data: dict) -> None:
        """
        Replace the store state with a snapshot produced by `snapshot()`.

        The whole snapshot is validated first; a malformed one raises
        InvalidInput and leaves the current state untouched.
        """
        try:
            snap = TaskSnapshot.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(f"Invalid input: malformed snapshot ({e.error_count()} errors)") from e

        records = sorted(snap.tasks, key=lambda t: t.id)
        self.tasks = {t.id: Task(**t.model_dump()) for t in records}
        self.next_id = snap.next_id
        logger.info("Store restored tasks=%s next_id=%s", len(self.tasks), self.next_id)

    @classmethod
    def from_snapshot(cls, data: dict, clock: Callable[[], int] = time.time_ns) -> "TaskStore":
        store = cls(clock=clock)
        store.restore(data)
        return store
