"""Entry points tying tracking, lookup and regeneration together."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import fcntl
import logging
import threading

from ..catalog.store import PLACEMENTS, TRACKING, CatalogStore, JsonFileCatalogStore
from .allocator import RegenerationResult, SheetAllocator
from .config import SpriteConfig
from .errors import SourceUnreadableError, SpriteError
from .records import (
    PlacementCreated,
    PlacementHit,
    PlacementLookup,
    PlacementRecord,
    normalize_sheet_id,
    parse_placements,
)
from .styles import class_name, css_declarations, sheet_file_name, style_rules
from .variants import VariantResolver, normalize_source

logger = logging.getLogger("spritepack_core.sheets.pipeline")


class RegenerationLock:
    """Exclusive lock around regenerate+commit, across threads and processes."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._local = threading.RLock()
        self._depth = 0

    @contextmanager
    def hold(self) -> Iterator[None]:
        with self._local:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a+") as fh:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                self._depth = 1
                try:
                    yield
                finally:
                    self._depth = 0
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)


def build_store(config: SpriteConfig) -> JsonFileCatalogStore:
    return JsonFileCatalogStore(
        config.data_dir,
        {TRACKING: config.track_file, PLACEMENTS: config.placement_file},
    )


class SpritePipeline:
    def __init__(self, config: SpriteConfig, store: Optional[CatalogStore] = None) -> None:
        self.config = config
        self.store = store or build_store(config)
        self.resolver = VariantResolver(config.image_root, config.states)
        self.allocator = SheetAllocator(config, self.store, self.resolver)
        self.lock = RegenerationLock(config.lock_path)

    def init_db(self) -> None:
        self.store.init_db()
        self.config.sheet_dir.mkdir(parents=True, exist_ok=True)

    def tracking(self) -> dict[str, Optional[str]]:
        return {key: normalize_sheet_id(value) for key, value in self.store.get(TRACKING).items()}

    def placements(self) -> dict[str, PlacementRecord]:
        return parse_placements(self.store.get(PLACEMENTS))

    def lookup(self, source: str) -> Optional[PlacementRecord]:
        return self.placements().get(normalize_source(source))

    def sheet_exists(self, record: PlacementRecord) -> bool:
        return (self.config.sheet_dir / sheet_file_name(record.sheet, self.config.sheet_format)).is_file()

    def track(self, source: str, sheet_id: Optional[str] = None) -> dict[str, Optional[str]]:
        """Validate ``source`` and return the tracking map with it added.

        Nothing is written; the returned map is the candidate a regeneration
        commits on success.
        """
        key = normalize_source(source)
        self.resolver.expand(key)
        tracking = self.store.get(TRACKING)
        if sheet_id is not None or key not in tracking:
            tracking[key] = normalize_sheet_id(sheet_id)
        return tracking

    def ensure_placement(self, source: str, sheet_id: Optional[str] = None) -> PlacementLookup:
        """Return the placement for ``source``, building sheets on first sight.

        The tracking entry is committed only together with a successful
        regeneration, so a failing source leaves the catalog untouched. A
        memoized placement whose sheet file is gone is re-read from disk and
        rebuilt if still missing.
        """
        key = normalize_source(source)
        record = self.placements().get(key)
        if record is not None and self.sheet_exists(record):
            return PlacementHit(source=key, record=record)

        # Rejects extensionless sources before taking the lock.
        self.resolver.expand(key)

        with self.lock.hold():
            self.store.invalidate()
            record = self.placements().get(key)
            if record is not None and self.sheet_exists(record):
                return PlacementHit(source=key, record=record)
            if record is not None:
                logger.warning("[PIPELINE] Sheet '%s' for '%s' is missing; rebuilding", record.sheet, key)

            if not self.resolver.base_readable(key):
                raise SourceUnreadableError(f"Image {key} could not be loaded", source_path=key)

            result = self._regenerate(self.track(key, sheet_id))

        record = result.placements.get(key)
        if record is None:
            raise SourceUnreadableError(f"Image {key} could not be loaded", source_path=key)
        return PlacementCreated(source=key, record=record)

    def regenerate(self) -> RegenerationResult:
        with self.lock.hold():
            self.store.invalidate()
            return self._regenerate(self.store.get(TRACKING))

    def _regenerate(self, tracking: dict) -> RegenerationResult:
        try:
            return self.allocator.regenerate(tracking)
        except SpriteError as exc:
            logger.error(
                "[PIPELINE] Regeneration failed (%s) for '%s': %s",
                exc.error_code,
                exc.source_path,
                exc,
            )
            raise

    def class_name(self, source: str) -> str:
        return class_name(normalize_source(source), self.config.states)

    def css_for(self, record: PlacementRecord) -> str:
        return css_declarations(record, self.config.sheet_url, self.config.sheet_format)

    def style_rules(self) -> str:
        return style_rules(
            self.placements(),
            states=self.config.states,
            sheet_url=self.config.sheet_url,
            sheet_format=self.config.sheet_format,
        )
