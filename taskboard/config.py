# Task board: configuration
# Override paths and server settings via taskboard.yaml, env vars or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path(__file__).parent.parent / "taskboard.yaml"

BACKENDS = ("sqlite", "memory")


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


@dataclass
class Config:
    """Runtime configuration for the task board."""

    # Storage
    storage_backend: str = "sqlite"
    db_path: str = "~/.local/share/taskboard/board.db"
    storage_key: str = "task-board-state"

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 3000

    log_level: str = "INFO"

    def resolve_paths(self):
        """Expand ~ and apply the TASKBOARD_DB override."""
        env_db = os.environ.get("TASKBOARD_DB")
        if env_db:
            self.db_path = env_db
        self.db_path = str(Path(self.db_path).expanduser())

    def validate(self):
        if self.storage_backend not in BACKENDS:
            raise ConfigError(
                f"Unknown storage_backend '{self.storage_backend}'. "
                f"Available: {list(BACKENDS)}"
            )
        if not self.storage_key:
            raise ConfigError("storage_key must not be empty")
        if not isinstance(self.port, int) or self.port <= 0:
            raise ConfigError(f"Invalid port: {self.port}")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        if path is None:
            path = os.environ.get("TASKBOARD_CONFIG")
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping")
            cfg = cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        else:
            cfg = cls()

        cfg.resolve_paths()
        cfg.validate()
        return cfg
