"""
Column store: the authoritative three ordered task lists.

All structural edits go through command methods. Each successful command
notifies subscribers exactly once with a snapshot of the board, which is how
persistence is triggered. Rejected commands (bad index, unknown task)
change nothing and notify nobody.
"""
import logging
from typing import Callable, Dict, List, Optional

from .schema import BoardState, Column, Task, COLUMNS, status_label_for

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[BoardState], None]


class ColumnStore:
    """Owns the board's task lists and routes changes to subscribers."""

    def __init__(self, state: Optional[BoardState] = None):
        self._columns: Dict[Column, List[Task]] = {col: [] for col in COLUMNS}
        self.subscribers: List[ChangeCallback] = []
        if state is not None:
            self.replace_all(state, notify=False)

    # ── Subscribers ──────────────────────────────────────────────

    def subscribe(self, callback: ChangeCallback) -> None:
        """Register a callback run after every successful mutation."""
        self.subscribers.append(callback)

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for callback in self.subscribers:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Error in board change callback: {e}")

    # ── Queries ──────────────────────────────────────────────────

    def get(self, column: Column) -> List[Task]:
        """Tasks of a column in display order. The list is a copy."""
        return list(self._columns[Column.from_str(column)])

    def task_at(self, column: Column, index: int) -> Optional[Task]:
        tasks = self._columns[Column.from_str(column)]
        if 0 <= index < len(tasks):
            return tasks[index]
        return None

    def resolve(self, column: Column, index: int, task_id: str) -> Optional[int]:
        """Current index of task_id within column, preferring the given index.

        Returns None if the task is no longer in that column.
        """
        column = Column.from_str(column)
        task = self.task_at(column, index)
        if task is not None and task.id == task_id:
            return index
        for i, candidate in enumerate(self._columns[column]):
            if candidate.id == task_id:
                return i
        return None

    def status_label_for(self, column: Column) -> str:
        return status_label_for(column)

    def snapshot(self) -> BoardState:
        """Deep copy of the board, safe to hand to persistence or callers."""
        return BoardState(
            todo=self._columns[Column.TODO],
            in_progress=self._columns[Column.IN_PROGRESS],
            done=self._columns[Column.DONE],
        ).copy()

    def counts(self) -> Dict[str, int]:
        return {col.value: len(self._columns[col]) for col in COLUMNS}

    # ── Commands ─────────────────────────────────────────────────

    def append(self, column: Column, task: Task) -> None:
        """Add a copy of task to the end of column."""
        self._columns[Column.from_str(column)].append(task.copy())
        self._emit()

    def insert_at(self, column: Column, index: int, task: Task) -> bool:
        """Insert a copy of task at index (0..len inclusive)."""
        tasks = self._columns[Column.from_str(column)]
        if not 0 <= index <= len(tasks):
            return False
        tasks.insert(index, task.copy())
        self._emit()
        return True

    def remove_at(self, column: Column, index: int) -> Optional[Task]:
        """Remove and return the task at index, or None if out of range."""
        tasks = self._columns[Column.from_str(column)]
        if not 0 <= index < len(tasks):
            return None
        task = tasks.pop(index)
        self._emit()
        return task

    def replace_at(self, column: Column, index: int, task: Task) -> bool:
        """Overwrite the task at index with a copy of task."""
        tasks = self._columns[Column.from_str(column)]
        if not 0 <= index < len(tasks):
            return False
        tasks[index] = task.copy()
        self._emit()
        return True

    def move(self, source: Column, index: int, target: Column) -> Optional[Task]:
        """Move a task to the end of target, relabeling it for that column.

        Removal and insertion happen as one step with a single notification.
        Returns the moved task, or None if nothing was moved.
        """
        source = Column.from_str(source)
        target = Column.from_str(target)
        if source == target:
            return None
        tasks = self._columns[source]
        if not 0 <= index < len(tasks):
            return None
        task = tasks.pop(index)
        task.status_label = status_label_for(target)
        self._columns[target].append(task)
        self._emit()
        return task

    def replace_all(self, state: BoardState, notify: bool = True) -> None:
        """Swap in a whole board (startup load, reset)."""
        for col in COLUMNS:
            self._columns[col] = [t.copy() for t in state.column(col)]
        if notify:
            self._emit()
