"""Configuration for sprite sheet generation, read from SPRITEPACK_* env vars."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

WORKSPACE_ROOT = Path(__file__).resolve().parents[3]

DEFAULT_STATES = ("active", "hover")
DEFAULT_MAX_SHEET_PIXELS = 250_000
DEFAULT_RETENTION_SECONDS = 60
DEFAULT_COMPRESSION_LEVEL = 9


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _int_env(name: str, default: int) -> int:
    raw = _first_non_empty(os.environ.get(name))
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _path_env(name: str, default: str) -> Path:
    p = Path(_first_non_empty(os.environ.get(name)) or default)
    if not p.is_absolute():
        p = (WORKSPACE_ROOT / p).resolve()
    return p


def _states_env(name: str) -> tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return DEFAULT_STATES
    values = [v.strip().lower() for v in raw.split(",") if v.strip()]
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class SpriteConfig:
    """Paths and tuning knobs shared by every pipeline component."""

    image_root: Path
    data_dir: Path
    sheet_subdir: str = "sprites"
    sheet_url: str = "images/sprites/"
    track_file: str = "tracks.json"
    placement_file: str = "sprites.json"
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    max_sheet_pixels: int = DEFAULT_MAX_SHEET_PIXELS
    retention_seconds: int = DEFAULT_RETENTION_SECONDS
    states: tuple[str, ...] = DEFAULT_STATES
    sheet_format: str = "png"

    def __post_init__(self) -> None:
        object.__setattr__(self, "compression_level", max(0, min(9, int(self.compression_level))))
        object.__setattr__(self, "max_sheet_pixels", max(1, int(self.max_sheet_pixels)))
        object.__setattr__(self, "retention_seconds", max(0, int(self.retention_seconds)))

    @property
    def sheet_dir(self) -> Path:
        return self.image_root / self.sheet_subdir

    @property
    def lock_path(self) -> Path:
        return self.data_dir / ".regenerate.lock"

    @classmethod
    def from_env(cls) -> "SpriteConfig":
        return cls(
            image_root=_path_env("SPRITEPACK_IMAGE_ROOT", "images"),
            data_dir=_path_env("SPRITEPACK_DATA_DIR", "data"),
            sheet_subdir=_first_non_empty(os.environ.get("SPRITEPACK_SHEET_SUBDIR")) or "sprites",
            sheet_url=_first_non_empty(os.environ.get("SPRITEPACK_SHEET_URL")) or "images/sprites/",
            track_file=_first_non_empty(os.environ.get("SPRITEPACK_TRACK_FILE")) or "tracks.json",
            placement_file=_first_non_empty(os.environ.get("SPRITEPACK_PLACEMENT_FILE")) or "sprites.json",
            compression_level=_int_env("SPRITEPACK_PNG_COMPRESSION", DEFAULT_COMPRESSION_LEVEL),
            max_sheet_pixels=_int_env("SPRITEPACK_MAX_SHEET_PIXELS", DEFAULT_MAX_SHEET_PIXELS),
            retention_seconds=_int_env("SPRITEPACK_RETENTION_SECONDS", DEFAULT_RETENTION_SECONDS),
            states=_states_env("SPRITEPACK_STATES"),
        )
