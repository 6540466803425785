"""
Task card schema and column definitions.

Board layout:
  todo → inProgress → done

A task's status label is never stored independently of its column: it is
recomputed from STATUS_LABELS whenever the task enters a column.
"""
from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Dict, Any, List
import time
import uuid


class Column(Enum):
    """The three fixed board columns."""
    TODO = "todo"
    IN_PROGRESS = "inProgress"
    DONE = "done"

    @classmethod
    def from_str(cls, value: str) -> "Column":
        """Accept the wire value ("inProgress") or the member name ("in_progress")."""
        if isinstance(value, Column):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[str(value).replace("-", "_").upper()]
        except KeyError:
            raise ValueError(f"Unknown column: {value!r}") from None


class Priority(Enum):
    """Card priority, serialized by display value."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def from_str(cls, value: str) -> "Priority":
        if isinstance(value, Priority):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            return cls.MEDIUM


# Column order as displayed and serialized
COLUMNS = (Column.TODO, Column.IN_PROGRESS, Column.DONE)

STATUS_LABELS: Dict[Column, str] = {
    Column.TODO: "Backlog",
    Column.IN_PROGRESS: "Active",
    Column.DONE: "Ready to deploy",
}

DEFAULT_LABEL = "New"
DEFAULT_META = "No details"


def status_label_for(column: Column) -> str:
    """Status text for a column. Single source of truth for statusLabel."""
    return STATUS_LABELS[Column.from_str(column)]


def make_task_id() -> str:
    """Generate a sortable unique task ID (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"task-{ts}-{rand}"


@dataclass
class Task:
    """One card on the board."""

    id: str
    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    label: str = DEFAULT_LABEL
    meta: str = ""                          # estimate / progress note
    status_label: str = STATUS_LABELS[Column.TODO]

    def copy(self) -> "Task":
        """Value copy; tasks never alias between the draft and the board."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted key names."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value if isinstance(self.priority, Priority) else self.priority,
            "label": self.label,
            "meta": self.meta,
            "statusLabel": self.status_label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from dict. Missing string fields become empty."""
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            priority=Priority.from_str(data.get("priority", "Medium")),
            label=str(data.get("label") or ""),
            meta=str(data.get("meta") or ""),
            status_label=str(data.get("statusLabel") or ""),
        )


def blank_draft() -> Task:
    """A fresh, empty working buffer for the add/edit form."""
    return Task(
        id="",
        title="",
        description="",
        priority=Priority.MEDIUM,
        label=DEFAULT_LABEL,
        meta="",
        status_label=STATUS_LABELS[Column.TODO],
    )


def seed_tasks() -> Dict[Column, List[Task]]:
    """Example board used when no valid persisted state exists.

    Returns new Task objects on every call.
    """
    return {
        Column.TODO: [
            Task(
                id="seed-1",
                title="Design onboarding flow",
                description="Sketch the first-run screens and review them with the team.",
                priority=Priority.HIGH,
                label="Design",
                meta="Est. 3 days",
                status_label=STATUS_LABELS[Column.TODO],
            ),
            Task(
                id="seed-2",
                title="Set up error tracking",
                description="Wire client errors into the monitoring dashboard.",
                priority=Priority.MEDIUM,
                label="Infra",
                meta="Est. 1 day",
                status_label=STATUS_LABELS[Column.TODO],
            ),
        ],
        Column.IN_PROGRESS: [
            Task(
                id="seed-3",
                title="Implement task drag and drop",
                description="Move cards between columns and persist the result.",
                priority=Priority.HIGH,
                label="Feature",
                meta="60% complete",
                status_label=STATUS_LABELS[Column.IN_PROGRESS],
            ),
        ],
        Column.DONE: [
            Task(
                id="seed-4",
                title="Write API documentation",
                description="Document the board endpoints.",
                priority=Priority.LOW,
                label="Docs",
                meta="Reviewed",
                status_label=STATUS_LABELS[Column.DONE],
            ),
        ],
    }


@dataclass
class BoardState:
    """The three ordered task sequences, keyed by column."""

    todo: List[Task] = field(default_factory=list)
    in_progress: List[Task] = field(default_factory=list)
    done: List[Task] = field(default_factory=list)

    def column(self, column: Column) -> List[Task]:
        return getattr(self, _STATE_FIELDS[Column.from_str(column)])

    def is_empty(self) -> bool:
        return not (self.todo or self.in_progress or self.done)

    def copy(self) -> "BoardState":
        return BoardState(
            todo=[t.copy() for t in self.todo],
            in_progress=[t.copy() for t in self.in_progress],
            done=[t.copy() for t in self.done],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as {"todo": [...], "inProgress": [...], "done": [...]}."""
        return {
            col.value: [t.to_dict() for t in self.column(col)]
            for col in COLUMNS
        }

    @classmethod
    def from_columns(cls, columns: Dict[Column, List[Task]]) -> "BoardState":
        return cls(
            todo=list(columns.get(Column.TODO, [])),
            in_progress=list(columns.get(Column.IN_PROGRESS, [])),
            done=list(columns.get(Column.DONE, [])),
        )


_STATE_FIELDS: Dict[Column, str] = {
    Column.TODO: "todo",
    Column.IN_PROGRESS: "in_progress",
    Column.DONE: "done",
}


def seed_state() -> BoardState:
    return BoardState.from_columns(seed_tasks())
