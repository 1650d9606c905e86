from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path

from .helpers import env_flag


# ----------------------------
# Config & Constants
# ----------------------------
SITE_NAME = "Show-Ready Checkout"

DEMO_ITEM = "Demo Hoodie"
DEMO_AMOUNT = 4200  # cents
DEMO_CURRENCY = "usd"

DB_FILENAME = "db.json"
LAST_EVENT_FILENAME = "last_event.json"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("fixtures")
    safe_mode: bool = False
    seed_on_reset: bool = False
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def db_file(self) -> Path:
        return self.data_dir / DB_FILENAME

    @property
    def last_event_file(self) -> Path:
        return self.data_dir / LAST_EVENT_FILENAME

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=Path(os.environ.get("DATA_DIR", "./fixtures")),
            safe_mode=env_flag(os.environ.get("SAFE_MODE")),
            seed_on_reset=env_flag(os.environ.get("SEED_ON_RESET")),
            host=os.environ.get("HOST", "127.0.0.1"),
            port=int(os.environ.get("PORT", "3000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


class RuntimeMode:
    """SAFE/LIVE display flag for one running application.

    Lives on ``app.state`` and is handed to the route handlers through a
    dependency, so every app instance starts from its own settings.
    """

    SAFE = "SAFE"
    LIVE = "LIVE"

    def __init__(self, safe: bool = False) -> None:
        self._safe = safe
        self._lock = threading.Lock()

    @property
    def safe(self) -> bool:
        return self._safe

    @property
    def label(self) -> str:
        return self.SAFE if self._safe else self.LIVE

    def toggle(self) -> str:
        with self._lock:
            self._safe = not self._safe
            return self.label
