"""
Board persistence over a key-value store.

The whole board is one JSON value under a single key:
  {"todo": [...], "inProgress": [...], "done": [...]}

Nothing here raises to the caller. A missing, corrupt or empty value falls
back to the seed board; a failed write leaves the in-memory board
authoritative for the rest of the session.
"""
import json
import logging
from typing import Optional

from .schema import BoardState, Task, COLUMNS, seed_state
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "task-board-state"


class BoardPersistence:
    """Loads and saves BoardState under one key of a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> Optional[BoardState]:
        """Read the stored board.

        Returns None when the value is absent, unreadable, not an object, or
        holds no tasks at all. Each column field that is a list is adopted on
        its own; fields that are missing or of the wrong type stay empty.
        """
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.warning(f"Could not read board state '{self.key}': {e}")
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning(f"Stored board state is not valid JSON: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning("Stored board state is not an object; ignoring")
            return None

        state = BoardState()
        for col in COLUMNS:
            entries = data.get(col.value)
            if not isinstance(entries, list):
                continue
            tasks = state.column(col)
            for entry in entries:
                if isinstance(entry, dict):
                    tasks.append(Task.from_dict(entry))

        if state.is_empty():
            return None
        return state

    def load_or_seed(self) -> BoardState:
        """Startup load. Falls back to the seed board and writes it back."""
        state = self.load()
        if state is not None:
            logger.info(
                f"Loaded board: {len(state.todo)} todo, "
                f"{len(state.in_progress)} in progress, {len(state.done)} done"
            )
            return state
        logger.info("No usable board state stored; seeding defaults")
        state = seed_state()
        self.save(state)
        return state

    def save(self, state: BoardState) -> bool:
        """Write the board. Returns False (and logs) on any failure."""
        try:
            payload = json.dumps(state.to_dict())
            self.store.set(self.key, payload)
            return True
        except Exception as e:
            logger.warning(f"Error saving board state '{self.key}': {e}")
            return False

    def clear(self) -> bool:
        """Remove the stored board so the next load seeds again."""
        try:
            self.store.remove(self.key)
            return True
        except Exception as e:
            logger.warning(f"Error clearing board state '{self.key}': {e}")
            return False
