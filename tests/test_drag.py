"""Tests for the drag-transfer protocol."""
import json

import pytest

from taskboard.drag import DragPayload, DragTransfer, parse_payload
from taskboard.schema import Column

from conftest import make_task


@pytest.fixture
def drag(store):
    return DragTransfer(store)


def _ids(store, column):
    return [t.id for t in store.get(column)]


class TestDragStart:

    def test_start_records_context_and_payload(self, drag):
        payload = drag.start(Column.TODO, 1)
        assert drag.dragging
        assert json.loads(payload) == {"column": "todo", "index": 1, "taskId": "B"}

    def test_start_on_empty_slot_stays_idle(self, drag):
        assert drag.start(Column.DONE, 0) is None
        assert not drag.dragging

    def test_restart_replaces_context(self, drag):
        drag.start(Column.TODO, 0)
        drag.start(Column.TODO, 1)
        assert drag.context.task_id == "B"


class TestDrop:

    def test_cross_column_move(self, drag, store):
        drag.start(Column.TODO, 0)
        assert drag.drop(Column.DONE)
        assert _ids(store, Column.TODO) == ["B"]
        done = store.get(Column.DONE)
        assert [t.id for t in done] == ["A"]
        assert done[0].status_label == "Ready to deploy"
        assert done[0].title == "Task A"
        assert not drag.dragging

    def test_moved_task_is_appended(self, drag, store):
        store.append(Column.IN_PROGRESS, make_task("P", Column.IN_PROGRESS))
        drag.start(Column.TODO, 1)
        drag.drop(Column.IN_PROGRESS)
        assert _ids(store, Column.IN_PROGRESS) == ["P", "B"]
        assert store.task_at(Column.IN_PROGRESS, 1).status_label == "Active"

    def test_same_column_is_noop(self, drag, store):
        before = store.snapshot()
        seen = []
        store.subscribe(seen.append)
        drag.start(Column.TODO, 0)
        assert not drag.drop(Column.TODO)
        assert store.snapshot() == before
        assert seen == []
        assert not drag.dragging

    def test_drop_without_start_is_noop(self, drag, store):
        before = store.snapshot()
        assert not drag.drop(Column.DONE)
        assert store.snapshot() == before

    def test_drop_persists_once(self, drag, store):
        seen = []
        store.subscribe(seen.append)
        drag.start(Column.TODO, 0)
        drag.drop(Column.IN_PROGRESS)
        assert len(seen) == 1

    def test_drop_follows_task_after_list_shift(self, drag, store):
        drag.start(Column.TODO, 1)          # B
        store.remove_at(Column.TODO, 0)     # A removed mid-drag, B now at 0
        assert drag.drop(Column.DONE)
        assert _ids(store, Column.DONE) == ["B"]
        assert _ids(store, Column.TODO) == []

    def test_drop_after_task_deleted_is_noop(self, drag, store):
        drag.start(Column.TODO, 1)
        store.remove_at(Column.TODO, 1)
        before = store.snapshot()
        assert not drag.drop(Column.DONE)
        assert store.snapshot() == before
        assert not drag.dragging

    def test_unknown_target_clears_context(self, drag):
        drag.start(Column.TODO, 0)
        with pytest.raises(ValueError):
            drag.drop("archive")
        assert not drag.dragging


def test_end_clears_without_mutation(drag, store):
    seen = []
    store.subscribe(seen.append)
    drag.start(Column.TODO, 0)
    drag.end()
    assert not drag.dragging
    assert not drag.drop(Column.DONE)
    assert _ids(store, Column.TODO) == ["A", "B"]
    assert seen == []


def test_payload_round_trip():
    payload = DragPayload(column=Column.IN_PROGRESS, index=3, task_id="t-9")
    assert parse_payload(payload.to_json()) == payload


@pytest.mark.parametrize("text", [
    "not json",
    "[]",
    '{"column": "todo", "index": 0}',
    '{"column": "nowhere", "index": 0, "taskId": "x"}',
    '{"column": "todo", "index": "0", "taskId": "x"}',
    '{"column": "todo", "index": true, "taskId": "x"}',
])
def test_parse_payload_rejects_malformed(text):
    assert parse_payload(text) is None
