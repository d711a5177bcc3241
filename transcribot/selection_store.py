import json
import logging
import threading
from collections.abc import Iterator, MutableMapping
from pathlib import Path
from typing import Optional

from transcribot.errors import NotSelectedError

logger = logging.getLogger(__name__)


class JsonFileBacking(MutableMapping):
    """dict persisted to a JSON file after every write. Load/save failures are logged, not raised."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._data = {str(k): str(v) for k, v in raw.items()}
                except Exception as e:
                    logger.warning("Selection store load failed: %s, starting fresh", e)
            case False:
                pass

    def _save(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump(self._data, f, indent=2)
        except Exception as e:
            logger.warning("Selection store save failed: %s", e)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._save()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SelectionStore:
    """Requester → backend name. Guarded by a lock so tasks and threads may share it."""

    def __init__(self, backing: Optional[MutableMapping] = None) -> None:
        self._backing: MutableMapping = {} if backing is None else backing
        self._lock = threading.Lock()

    def set_selection(self, requester_id: str, backend_name: str) -> None:
        with self._lock:
            self._backing[requester_id] = backend_name

    def get_selection(self, requester_id: str) -> str:
        with self._lock:
            match self._backing.get(requester_id):
                case None:
                    raise NotSelectedError(requester_id)
                case name:
                    return name

    def has_selection(self, requester_id: str) -> bool:
        with self._lock:
            return requester_id in self._backing

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._backing)
