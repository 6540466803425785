"""
Task board: wires storage, persistence, columns, form and drag together.

Startup loads the board once; afterwards every ColumnStore mutation is
written back through BoardPersistence.
"""
import logging
from typing import Any, Dict, Optional

from .columns import ColumnStore
from .config import Config
from .drag import DragTransfer
from .form import FormController
from .persistence import BoardPersistence, DEFAULT_STORAGE_KEY
from .schema import BoardState, COLUMNS, STATUS_LABELS, seed_state
from .storage import KeyValueStore, MemoryKeyValueStore, StorageError, open_store

logger = logging.getLogger(__name__)


class TaskBoard:
    """One board session."""

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = DEFAULT_STORAGE_KEY):
        if store is None:
            store = MemoryKeyValueStore()
        self.persistence = BoardPersistence(store, key)
        self.columns = ColumnStore(self.persistence.load_or_seed())
        self.columns.subscribe(self._on_change)
        self.form = FormController(self.columns)
        self.drag = DragTransfer(self.columns)

    @classmethod
    def from_config(cls, cfg: Config) -> "TaskBoard":
        try:
            store = open_store(cfg.storage_backend, cfg.db_path)
        except StorageError as e:
            logger.warning(f"{e}; keeping the board in memory for this session")
            store = MemoryKeyValueStore()
        return cls(store, cfg.storage_key)

    def _on_change(self, state: BoardState) -> None:
        self.persistence.save(state)

    def reset(self) -> None:
        """Drop the stored board and start over from the seed tasks."""
        self.form.cancel()
        self.drag.end()
        self.persistence.clear()
        self.columns.replace_all(seed_state())
        logger.info("Board reset to seed tasks")

    def to_dict(self) -> Dict[str, Any]:
        """Everything the rendering layer needs to draw the board."""
        state = self.columns.snapshot()
        return {
            "columns": state.to_dict(),
            "statusLabels": {col.value: STATUS_LABELS[col] for col in COLUMNS},
            "counts": self.columns.counts(),
            "form": self.form.to_dict(),
            "dragging": self.drag.to_dict(),
        }
