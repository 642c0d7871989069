"""Assignment of tracked images to sheets and full sheet regeneration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
import logging
import uuid

from ..catalog.store import PLACEMENTS, TRACKING, CatalogStore
from .codec import DecodedImage, Placed, decode, render
from .config import SpriteConfig
from .placement import PackItem, pack
from .records import PlacementRecord, normalize_sheet_id
from .styles import sheet_file_name
from .sweeper import sweep
from .errors import InvalidSourcePathError
from .variants import Variant, VariantResolver, normalize_source

logger = logging.getLogger("spritepack_core.sheets.allocator")

AUTO_BUCKET = "auto"
EXPLICIT_BUCKET = "sheet"


@dataclass
class Bucket:
    kind: str
    name: str
    entries: list[tuple[Variant, DecodedImage]] = field(default_factory=list)
    pixels: int = 0

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.name}"

    def add(self, variant: Variant, image: DecodedImage) -> None:
        self.entries.append((variant, image))
        self.pixels += image.width * image.height


@dataclass(frozen=True)
class RenderedSheet:
    sheet_id: str
    bucket: str
    width: int
    height: int
    sources: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "sheet": self.sheet_id,
            "bucket": self.bucket,
            "width": self.width,
            "height": self.height,
            "sources": list(self.sources),
        }


@dataclass(frozen=True)
class RegenerationResult:
    tracking: dict[str, Optional[str]]
    placements: dict[str, PlacementRecord]
    sheets: list[RenderedSheet]
    pruned: list[str]
    swept: list[str]


class SheetAllocator:
    def __init__(self, config: SpriteConfig, store: CatalogStore, resolver: VariantResolver | None = None) -> None:
        self.config = config
        self.store = store
        self.resolver = resolver or VariantResolver(config.image_root, config.states)

    def resolve_variants(
        self, tracking: Mapping[str, Any]
    ) -> tuple[dict[str, Optional[str]], list[Variant], list[str]]:
        """Expand tracked sources, dropping invalid keys and those whose base file is gone."""
        kept: dict[str, Optional[str]] = {}
        variants: list[Variant] = []
        pruned: list[str] = []
        seen: set[str] = set()
        for source, raw_sheet in tracking.items():
            try:
                key = normalize_source(source)
                readable = self.resolver.base_readable(key)
                expanded = self.resolver.expand(key) if readable else []
            except InvalidSourcePathError as exc:
                logger.warning("[ALLOCATOR] Pruning invalid tracked source '%s': %s", source, exc)
                pruned.append(source)
                continue
            if not readable:
                logger.info("[ALLOCATOR] Pruning tracked source with missing file: '%s'", source)
                pruned.append(source)
                continue
            kept[key] = normalize_sheet_id(raw_sheet)
            for variant in expanded:
                if variant.path in seen:
                    continue
                seen.add(variant.path)
                variants.append(variant)
        return kept, variants, pruned

    def partition(
        self,
        tracking: Mapping[str, Optional[str]],
        decoded: list[tuple[Variant, DecodedImage]],
    ) -> list[Bucket]:
        """Group variants into sheets.

        Explicit sheet ids always share one bucket. Everything else fills
        auto buckets in order, starting a new one when the next image would
        push the bucket's pixel area past ``max_sheet_pixels``.
        """
        buckets: dict[tuple[str, str], Bucket] = {}
        auto_index = 0
        for variant, image in decoded:
            sheet_id = tracking.get(variant.source)
            if sheet_id is not None:
                key = (EXPLICIT_BUCKET, sheet_id)
            else:
                key = (AUTO_BUCKET, str(auto_index))
                current = buckets.get(key)
                area = image.width * image.height
                if current is not None and current.pixels + area > self.config.max_sheet_pixels:
                    auto_index += 1
                    key = (AUTO_BUCKET, str(auto_index))
            if key not in buckets:
                buckets[key] = Bucket(kind=key[0], name=key[1])
            buckets[key].add(variant, image)
        return list(buckets.values())

    def _new_sheet_id(self, taken: set[str]) -> str:
        while True:
            sheet_id = uuid.uuid4().hex
            if sheet_id in taken:
                continue
            if (self.config.sheet_dir / sheet_file_name(sheet_id, self.config.sheet_format)).exists():
                continue
            taken.add(sheet_id)
            return sheet_id

    def _render_bucket(self, bucket: Bucket, sheet_id: str) -> tuple[RenderedSheet, dict[str, PlacementRecord]]:
        items = [PackItem(key=idx, width=image.width, height=image.height) for idx, (_, image) in enumerate(bucket.entries)]
        layout = pack(items)

        placed: list[Placed] = []
        records: dict[str, PlacementRecord] = {}
        for idx, (variant, image) in enumerate(bucket.entries):
            x, y = layout.positions[idx]
            placed.append(Placed(image=image, x=x, y=y))
            records[variant.path] = PlacementRecord(
                sheet=sheet_id,
                x=x,
                y=y,
                width=image.width,
                height=image.height,
            )

        out_path = self.config.sheet_dir / sheet_file_name(sheet_id, self.config.sheet_format)
        render(
            out_path,
            placed,
            width=layout.width,
            height=layout.height,
            compression_level=self.config.compression_level,
        )
        sheet = RenderedSheet(
            sheet_id=sheet_id,
            bucket=bucket.label,
            width=layout.width,
            height=layout.height,
            sources=tuple(records),
        )
        return sheet, records

    def regenerate(self, tracking: Mapping[str, Any]) -> RegenerationResult:
        """Rebuild every sheet from ``tracking`` and commit the catalog.

        Nothing is committed unless every sheet rendered; the previous
        placement and tracking maps stay intact on failure.
        """
        logger.info("[ALLOCATOR] Regenerating sheets for %d tracked source(s)", len(tracking))
        kept, variants, pruned = self.resolve_variants(tracking)

        decoded = [
            (variant, decode(self.resolver.file_for(variant.path), source_path=variant.path))
            for variant in variants
        ]
        buckets = self.partition(kept, decoded)

        taken: set[str] = set()
        sheets: list[RenderedSheet] = []
        placements: dict[str, PlacementRecord] = {}
        for bucket in buckets:
            sheet, records = self._render_bucket(bucket, self._new_sheet_id(taken))
            logger.info(
                "[ALLOCATOR] Rendered sheet '%s' (%s): %dx%d, %d image(s)",
                sheet.sheet_id,
                sheet.bucket,
                sheet.width,
                sheet.height,
                len(records),
            )
            sheets.append(sheet)
            placements.update(records)

        self.store.set(PLACEMENTS, {key: record.as_dict() for key, record in placements.items()})
        self.store.set(TRACKING, kept)

        live = {sheet_file_name(s.sheet_id, self.config.sheet_format) for s in sheets}
        swept = sweep(self.config.sheet_dir, self.config.retention_seconds, keep=live)
        logger.info(
            "[ALLOCATOR] Regeneration complete: sheets=%d, placements=%d, pruned=%d, swept=%d",
            len(sheets),
            len(placements),
            len(pruned),
            len(swept),
        )
        return RegenerationResult(
            tracking=kept,
            placements=placements,
            sheets=sheets,
            pruned=pruned,
            swept=[p.name for p in swept],
        )
