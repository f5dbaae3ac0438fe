# Task board configuration
# Override via config.yaml, TASKBOARD_* environment variables, or keyword args.

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

CONFIG_PATH = Path(__file__).parent / "config.yaml"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

ENV_OVERRIDES = {
    "TASKBOARD_API_URL": "api_url",
    "TASKBOARD_API_KEY": "api_key",
    "TASKBOARD_LOG_LEVEL": "log_level",
}


@dataclass
class BoardConfig:
    """Runtime configuration for the board client."""

    # Task / note store
    api_url: str = "http://localhost:5000/api"
    api_key: str = ""
    request_timeout: float = 5.0

    # Behavior
    notes_debounce_ms: int = 500
    dedupe_notifications: bool = True
    sticky_drag: bool = False

    log_level: str = "INFO"

    @property
    def notes_debounce_secs(self) -> float:
        return self.notes_debounce_ms / 1000

    def apply_env(self, environ=None) -> None:
        """Apply TASKBOARD_* environment overrides."""
        environ = os.environ if environ is None else environ
        for env_name, attr in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                setattr(self, attr, value)

    @classmethod
    def load(cls, path: Optional[str] = None, environ=None) -> "BoardConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logging.getLogger(__name__).warning(f"Ignoring unreadable config {cfg_path}: {e}")
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env(environ)
        return cfg


def setup_logging(level: str = "INFO") -> None:
    """Log to stdout in the same format across the client and server."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
