import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)


class LocalStorage:
    """Key/value store persisted as one JSON document.

    Every ``set``/``remove`` rewrites the file; there is no locking, so two
    processes sharing a file race and the last writer wins.
    With ``path=None`` the store only lives in memory.
    """

    def __init__(self, path: Optional[os.PathLike] = None):
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            log.warning('unreadable storage file %s, starting empty', self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        tmp.write_text(json.dumps(self._data, indent=2), encoding='utf-8')
        tmp.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()

    def __contains__(self, key: str) -> bool:
        return key in self._data
