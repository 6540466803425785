"""
Drag-and-drop transfer between columns.

States:
  idle ──start──▶ dragging ──drop / end──▶ idle

The in-memory context is authoritative. The JSON payload handed to the drag
gesture is advisory only.

The dragged task is re-resolved by id at drop time. If other edits shifted
it within the source column the drop still moves the right card; if it has
left the source column the drop does nothing.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional

from .columns import ColumnStore
from .schema import Column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragPayload:
    """Origin of an in-flight drag."""
    column: Column
    index: int
    task_id: str

    def to_json(self) -> str:
        return json.dumps({
            "column": self.column.value,
            "index": self.index,
            "taskId": self.task_id,
        })


def parse_payload(text: str) -> Optional[DragPayload]:
    """Decode a drag payload string. Malformed input yields None."""
    try:
        data = json.loads(text)
        index = data["index"]
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        return DragPayload(
            column=Column.from_str(data["column"]),
            index=index,
            task_id=str(data["taskId"]),
        )
    except (json.JSONDecodeError, TypeError, KeyError, ValueError):
        return None


class DragTransfer:
    """Tracks a single in-flight drag and performs the cross-column move."""

    def __init__(self, store: ColumnStore):
        self.store = store
        self.context: Optional[DragPayload] = None

    @property
    def dragging(self) -> bool:
        return self.context is not None

    def start(self, column: Column, index: int) -> Optional[str]:
        """Begin dragging the task at (column, index).

        Returns the transfer payload, or None if that slot is empty.
        """
        column = Column.from_str(column)
        task = self.store.task_at(column, index)
        if task is None:
            logger.debug(f"Drag start ignored: nothing at {column.value}[{index}]")
            self.context = None
            return None
        self.context = DragPayload(column=column, index=index, task_id=task.id)
        return self.context.to_json()

    def drop(self, target: Column) -> bool:
        """Finish the drag over target. Returns True if a task moved."""
        context, self.context = self.context, None
        if context is None:
            return False

        target = Column.from_str(target)
        if target == context.column:
            return False

        index = self.store.resolve(context.column, context.index, context.task_id)
        if index is None:
            logger.debug(
                f"Drop ignored: {context.task_id} no longer in {context.column.value}"
            )
            return False

        task = self.store.move(context.column, index, target)
        if task is None:
            return False
        logger.info(f"Moved task {task.id}: {context.column.value} -> {target.value}")
        return True

    def end(self) -> None:
        """Drag ended without a drop."""
        self.context = None

    def to_dict(self) -> Optional[dict]:
        if self.context is None:
            return None
        return json.loads(self.context.to_json())
