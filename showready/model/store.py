from __future__ import annotations

import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import orjson

from .order import State, empty_state


def _dump(path: Path, data: Any) -> None:
    # write next to the target, then rename over it
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def _load(path: Path) -> Any:
    # malformed content raises orjson.JSONDecodeError on purpose
    return orjson.loads(path.read_bytes())


class StateStore:
    """Whole-document JSON store for orders, users and stats."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def read(self) -> State:
        if not self.path.exists():
            return empty_state()
        return _load(self.path)

    def write(self, state: State) -> None:
        with self._lock:
            _dump(self.path, state)

    @contextmanager
    def transaction(self) -> Iterator[State]:
        """
        Read-modify-write under the store lock:

            with store.transaction() as state:
                state["orders"].append(order)

        The state is written back only if the block exits cleanly.
        """
        with self._lock:
            state = self.read()
            yield state
            self.write(state)


class LastEventStore:
    """Single JSON document holding the most recent simulated event."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        return _load(self.path)

    def write(self, event: Dict[str, Any]) -> None:
        _dump(self.path, event)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
