"""Pillow-backed decode/encode for sprite sources and rendered sheets."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
import logging
import os

from PIL import Image, UnidentifiedImageError

from .errors import CompositeFailureError, SourceUnreadableError, UnsupportedFormatError

logger = logging.getLogger("spritepack_core.sheets.codec")

SUPPORTED_FORMATS = {"PNG", "JPEG", "GIF"}
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class DecodedImage:
    path: str
    bitmap: Image.Image
    width: int
    height: int


@dataclass(frozen=True)
class Placed:
    image: DecodedImage
    x: int
    y: int


def decode(file_path: Path, *, source_path: str | None = None) -> DecodedImage:
    label = source_path or str(file_path)
    try:
        with Image.open(file_path) as img:
            fmt = img.format
            if fmt not in SUPPORTED_FORMATS:
                raise UnsupportedFormatError(
                    f"Unsupported image format {fmt} for {label}",
                    source_path=label,
                )
            bitmap = img.convert("RGBA")
    except Image.DecompressionBombError as exc:
        raise UnsupportedFormatError(f"Image {label} is too large to decode: {exc}", source_path=label) from exc
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError(f"Unrecognized image data in {label}", source_path=label) from exc
    except OSError as exc:
        raise SourceUnreadableError(f"Could not read {label}: {exc}", source_path=label) from exc
    return DecodedImage(path=label, bitmap=bitmap, width=bitmap.width, height=bitmap.height)


def render(
    out_path: Path,
    placed: Iterable[Placed],
    *,
    width: int,
    height: int,
    compression_level: int = 9,
) -> Path:
    """Composite ``placed`` onto a transparent canvas and write it as PNG.

    The file appears at ``out_path`` only once fully written.
    """
    canvas = Image.new("RGBA", (width, height), TRANSPARENT)
    for item in placed:
        try:
            canvas.paste(item.image.bitmap, (item.x, item.y))
        except (ValueError, OSError) as exc:
            raise CompositeFailureError(
                f"Could not copy {item.image.path} into sheet {out_path.name}: {exc}",
                source_path=item.image.path,
            ) from exc

    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = out_path.with_name(out_path.name + ".tmp")
    try:
        with tmp_path.open("wb") as fh:
            canvas.save(fh, format="PNG", compress_level=compression_level)
        os.replace(tmp_path, out_path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise CompositeFailureError(f"Could not write sheet {out_path}: {exc}") from exc
    logger.debug("[CODEC] Wrote %dx%d sheet to '%s'", width, height, out_path)
    return out_path
