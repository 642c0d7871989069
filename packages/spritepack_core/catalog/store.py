"""Durable key/value maps backing the sprite pipeline.

Each named map lives in one JSON object file. Reads are memoized per
process and writes replace the whole file atomically.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from copy import deepcopy
from logging import getLogger
from pathlib import Path
from typing import Any, Mapping
import json
import os
import threading
import uuid

logger = getLogger("spritepack_core.catalog.store")

TRACKING = "tracking"
PLACEMENTS = "placements"


class CatalogStore(ABC):
    @abstractmethod
    def init_db(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, map_name: str) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def set(self, map_name: str, content: Mapping[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def invalidate(self, map_name: str | None = None) -> None:
        """Drop memoized copies so the next ``get`` reads from storage."""
        raise NotImplementedError


class JsonFileCatalogStore(CatalogStore):
    def __init__(self, data_dir: Path, files: Mapping[str, str]) -> None:
        self.data_dir = data_dir
        self.files = dict(files)
        self._memo: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()

    def path_for(self, map_name: str) -> Path:
        try:
            return self.data_dir / self.files[map_name]
        except KeyError:
            raise KeyError(f"Unknown catalog map: {map_name}") from None

    def init_db(self) -> None:
        logger.info("[CATALOG] Using data directory '%s'", self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            payload = json.loads(raw.decode("utf-8"))
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            payload = None
        if not isinstance(payload, dict):
            logger.warning("[CATALOG] Discarding corrupt catalog file '%s'", path)
            path.unlink(missing_ok=True)
            return {}
        return payload

    def get(self, map_name: str) -> dict[str, Any]:
        with self._lock:
            if map_name not in self._memo:
                self._memo[map_name] = self._read(self.path_for(map_name))
            return deepcopy(self._memo[map_name])

    def set(self, map_name: str, content: Mapping[str, Any]) -> None:
        path = self.path_for(map_name)
        snapshot = deepcopy(dict(content))
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
            try:
                with tmp_path.open("w", encoding="utf-8") as fh:
                    json.dump(snapshot, fh, separators=(",", ":"), ensure_ascii=True)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_path, path)
            finally:
                tmp_path.unlink(missing_ok=True)
            self._memo[map_name] = snapshot
        logger.debug("[CATALOG] Wrote %d entries to '%s'", len(snapshot), path)

    def invalidate(self, map_name: str | None = None) -> None:
        with self._lock:
            if map_name is None:
                self._memo.clear()
            else:
                self._memo.pop(map_name, None)
