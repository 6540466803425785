"""Shared test fixtures for task board tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root is importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.board import TaskBoard
from taskboard.columns import ColumnStore
from taskboard.persistence import BoardPersistence
from taskboard.schema import BoardState, Column, Task, status_label_for
from taskboard.storage import MemoryKeyValueStore, StorageError


class FailingStore:
    """Key-value store whose every operation fails, like a full or locked store."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.data = {}

    def get(self, key):
        if self.fail_reads:
            raise StorageError("store unavailable")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise StorageError("quota exceeded")
        self.data[key] = value

    def remove(self, key):
        if self.fail_writes:
            raise StorageError("store unavailable")
        self.data.pop(key, None)


def make_task(task_id: str, column: Column = Column.TODO, **kwargs) -> Task:
    kwargs.setdefault("title", f"Task {task_id}")
    return Task(id=task_id, status_label=status_label_for(column), **kwargs)


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(kv):
    return BoardPersistence(kv)


@pytest.fixture
def store():
    """Column store holding todo=[A, B], inProgress=[], done=[]."""
    return ColumnStore(BoardState(
        todo=[make_task("A"), make_task("B")],
    ))


@pytest.fixture
def board(kv):
    """Board session seeded from an empty in-memory store."""
    return TaskBoard(kv)
