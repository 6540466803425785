"""
Add/edit form controller.

The form works on a private draft Task. Opening copies data in, saving
commits a normalized copy into the ColumnStore, cancelling throws the draft
away. The draft never aliases a task held by the store.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional

from .columns import ColumnStore
from .schema import (
    Column,
    Priority,
    Task,
    DEFAULT_META,
    blank_draft,
    make_task_id,
    status_label_for,
)

logger = logging.getLogger(__name__)

# Draft fields the rendering layer may bind to; id is assigned, never typed in
EDITABLE_FIELDS = ("title", "description", "priority", "label", "meta", "status_label")


class FormMode(Enum):
    CREATE = "create"
    EDIT = "edit"


class FormController:
    """Transient state of the add/edit modal."""

    def __init__(self, store: ColumnStore):
        self.store = store
        self.draft: Task = blank_draft()
        self.mode: FormMode = FormMode.CREATE
        self.visible: bool = False
        self.target_column: Column = Column.TODO
        self.edit_index: Optional[int] = None

    def _reset(self) -> None:
        self.draft = blank_draft()
        self.mode = FormMode.CREATE
        self.visible = False
        self.target_column = Column.TODO
        self.edit_index = None

    def open_for_create(self, column: Column) -> Task:
        """Start a new card destined for column."""
        column = Column.from_str(column)
        self._reset()
        self.draft.id = make_task_id()
        self.draft.status_label = status_label_for(column)
        self.target_column = column
        self.visible = True
        return self.draft

    def open_for_edit(self, task: Task, column: Column, index: int) -> Task:
        """Load a copy of an existing card at (column, index) into the draft."""
        column = Column.from_str(column)
        self._reset()
        self.draft = task.copy()
        self.mode = FormMode.EDIT
        self.target_column = column
        self.edit_index = index
        self.visible = True
        return self.draft

    def update_draft(self, **fields: Any) -> Task:
        """Set draft fields from the rendering layer's inputs."""
        for name, value in fields.items():
            if name not in EDITABLE_FIELDS:
                raise ValueError(f"Field not editable: {name}")
            if name == "priority":
                value = Priority.from_str(value)
            else:
                value = "" if value is None else str(value)
            setattr(self.draft, name, value)
        return self.draft

    def _normalized(self) -> Task:
        task = self.draft.copy()
        task.title = task.title.strip()
        task.description = task.description.strip()
        if not task.meta.strip():
            task.meta = DEFAULT_META
        return task

    def save(self) -> bool:
        """Commit the draft. Returns True if the board changed.

        A closed form commits nothing. A blank title keeps the form open
        with the draft untouched.
        """
        if not self.visible:
            logger.debug("Save refused: form is not open")
            return False
        if not self.draft.title.strip():
            logger.debug("Save refused: title is empty")
            return False

        task = self._normalized()
        if self.mode == FormMode.EDIT:
            saved = self._commit_edit(task)
        else:
            self._commit_create(task)
            saved = True
        self._reset()
        return saved

    def _commit_create(self, task: Task) -> None:
        if not task.id:
            task.id = make_task_id()
        task.status_label = status_label_for(self.target_column)
        self.store.append(self.target_column, task)
        logger.info(f"Created task {task.id} in {self.target_column.value}")

    def _commit_edit(self, task: Task) -> bool:
        index = None
        if self.edit_index is not None:
            index = self.store.resolve(self.target_column, self.edit_index, task.id)
        if index is None:
            logger.debug(
                f"Edit of {task.id} dropped: no longer in {self.target_column.value}"
            )
            return False
        self.store.replace_at(self.target_column, index, task)
        logger.info(f"Updated task {task.id} in {self.target_column.value}")
        return True

    def cancel(self) -> None:
        """Discard the draft and close the form. Never touches the board."""
        self._reset()

    def delete(self, column: Column, index: int, task_id: Optional[str] = None) -> bool:
        """Remove the task at (column, index) if that slot is still valid.

        With task_id, the slot must still hold that task.
        """
        column = Column.from_str(column)
        current = self.store.task_at(column, index)
        if current is None or (task_id and current.id != task_id):
            logger.debug(f"Delete ignored: stale reference {column.value}[{index}]")
            return False
        self.store.remove_at(column, index)
        logger.info(f"Deleted task {current.id} from {column.value}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "visible": self.visible,
            "mode": self.mode.value,
            "column": self.target_column.value,
            "index": self.edit_index,
            "draft": self.draft.to_dict(),
        }
