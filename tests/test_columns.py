"""Tests for the column store."""
from taskboard.columns import ColumnStore
from taskboard.schema import BoardState, Column

from conftest import make_task


def _ids(store, column):
    return [t.id for t in store.get(column)]


class TestQueries:

    def test_get_returns_copy(self, store):
        tasks = store.get(Column.TODO)
        tasks.clear()
        assert _ids(store, Column.TODO) == ["A", "B"]

    def test_get_accepts_wire_name(self, store):
        assert _ids(store, "todo") == ["A", "B"]
        assert store.get("inProgress") == []

    def test_task_at_bounds(self, store):
        assert store.task_at(Column.TODO, 1).id == "B"
        assert store.task_at(Column.TODO, 2) is None
        assert store.task_at(Column.TODO, -1) is None

    def test_resolve_prefers_given_index(self, store):
        assert store.resolve(Column.TODO, 1, "B") == 1

    def test_resolve_finds_shifted_task(self, store):
        assert store.resolve(Column.TODO, 5, "B") == 1
        assert store.resolve(Column.TODO, 0, "B") == 1

    def test_resolve_missing(self, store):
        assert store.resolve(Column.DONE, 0, "A") is None

    def test_snapshot_does_not_alias(self, store):
        state = store.snapshot()
        state.todo[0].title = "changed"
        state.todo.clear()
        assert _ids(store, Column.TODO) == ["A", "B"]
        assert store.task_at(Column.TODO, 0).title != "changed"

    def test_counts(self, store):
        assert store.counts() == {"todo": 2, "inProgress": 0, "done": 0}

    def test_status_label_for(self, store):
        assert store.status_label_for(Column.DONE) == "Ready to deploy"


class TestCommands:

    def setup_method(self):
        self.notified = []

    def _watch(self, store):
        store.subscribe(self.notified.append)
        return store

    def test_append(self, store):
        self._watch(store)
        store.append(Column.DONE, make_task("C"))
        assert _ids(store, Column.DONE) == ["C"]
        assert len(self.notified) == 1
        assert [t.id for t in self.notified[0].done] == ["C"]

    def test_append_stores_copy(self, store):
        task = make_task("C")
        store.append(Column.DONE, task)
        task.title = "changed afterwards"
        assert store.task_at(Column.DONE, 0).title == "Task C"

    def test_insert_at(self, store):
        self._watch(store)
        assert store.insert_at(Column.TODO, 1, make_task("X"))
        assert _ids(store, Column.TODO) == ["A", "X", "B"]
        assert store.insert_at(Column.TODO, 3, make_task("Y"))
        assert _ids(store, Column.TODO) == ["A", "X", "B", "Y"]
        assert not store.insert_at(Column.TODO, 9, make_task("Z"))
        assert len(self.notified) == 2

    def test_remove_at(self, store):
        self._watch(store)
        removed = store.remove_at(Column.TODO, 0)
        assert removed.id == "A"
        assert _ids(store, Column.TODO) == ["B"]
        assert len(self.notified) == 1

    def test_remove_at_out_of_range(self, store):
        self._watch(store)
        assert store.remove_at(Column.TODO, 5) is None
        assert store.remove_at(Column.TODO, -1) is None
        assert _ids(store, Column.TODO) == ["A", "B"]
        assert self.notified == []

    def test_replace_at(self, store):
        self._watch(store)
        assert store.replace_at(Column.TODO, 0, make_task("A", title="Renamed"))
        assert store.task_at(Column.TODO, 0).title == "Renamed"
        assert not store.replace_at(Column.TODO, 2, make_task("Q"))
        assert len(self.notified) == 1

    def test_move_relabels_and_appends(self, store):
        self._watch(store)
        store.append(Column.DONE, make_task("D", Column.DONE))
        moved = store.move(Column.TODO, 0, Column.DONE)
        assert moved.id == "A"
        assert moved.status_label == "Ready to deploy"
        assert _ids(store, Column.TODO) == ["B"]
        assert _ids(store, Column.DONE) == ["D", "A"]
        # one notification for the append, one for the move
        assert len(self.notified) == 2

    def test_move_same_column_or_bad_index(self, store):
        self._watch(store)
        assert store.move(Column.TODO, 0, Column.TODO) is None
        assert store.move(Column.TODO, 7, Column.DONE) is None
        assert _ids(store, Column.TODO) == ["A", "B"]
        assert self.notified == []

    def test_failing_subscriber_does_not_block_mutation(self, store):
        def broken(state):
            raise RuntimeError("boom")

        store.subscribe(broken)
        self._watch(store)
        store.append(Column.DONE, make_task("C"))
        assert _ids(store, Column.DONE) == ["C"]
        assert len(self.notified) == 1


def test_task_ids_never_duplicated_across_columns():
    store = ColumnStore(BoardState(todo=[make_task("A"), make_task("B")]))
    store.move(Column.TODO, 0, Column.IN_PROGRESS)
    store.move(Column.IN_PROGRESS, 0, Column.DONE)
    ids = [t.id for col in Column for t in store.get(col)]
    assert sorted(ids) == ["A", "B"]


def test_replace_all_without_notify():
    store = ColumnStore()
    seen = []
    store.subscribe(seen.append)
    store.replace_all(BoardState(done=[make_task("Z")]), notify=False)
    assert [t.id for t in store.get(Column.DONE)] == ["Z"]
    assert seen == []
