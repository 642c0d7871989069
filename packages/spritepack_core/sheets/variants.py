"""State variant resolution for logical image sources.

A logical image ``icons/save.png`` may have state renditions such as
``icons/save_hover.png``. Each existing rendition is packed independently
but shares the CSS class of its base source.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import posixpath

from .errors import InvalidSourcePathError


@dataclass(frozen=True)
class Variant:
    source: str
    path: str
    state: str | None = None


def normalize_source(source: str) -> str:
    """Return the canonical image-root-relative key for ``source``."""
    text = str(source or "").strip().replace("\\", "/")
    if not text:
        raise InvalidSourcePathError("Empty image source", source_path=source)
    if text.startswith("/"):
        raise InvalidSourcePathError(f"Image source must be relative: {source}", source_path=source)
    normalized = posixpath.normpath(text)
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        raise InvalidSourcePathError(f"Image source escapes the image root: {source}", source_path=source)
    return normalized


def _split_name(path: str) -> tuple[str, str, str]:
    head, _, name = path.rpartition("/")
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        raise InvalidSourcePathError(f"Image source has no file extension: {path}", source_path=path)
    return head, stem, ext


def _join_name(head: str, stem: str, ext: str) -> str:
    name = f"{stem}.{ext}"
    return f"{head}/{name}" if head else name


def with_state(path: str, state: str | None) -> str:
    if not state:
        return path
    head, stem, ext = _split_name(path)
    return _join_name(head, f"{stem}_{state}", ext)


def state_of(path: str, states: tuple[str, ...]) -> str | None:
    try:
        _, stem, _ = _split_name(path)
    except InvalidSourcePathError:
        return None
    for state in states:
        if stem.endswith(f"_{state}") and len(stem) > len(state) + 1:
            return state
    return None


def strip_state(path: str, states: tuple[str, ...]) -> str:
    state = state_of(path, states)
    if state is None:
        return path
    head, stem, ext = _split_name(path)
    return _join_name(head, stem[: -(len(state) + 1)], ext)


def is_readable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


class VariantResolver:
    def __init__(self, image_root: Path, states: tuple[str, ...]) -> None:
        self.image_root = image_root
        self.states = tuple(states)

    def file_for(self, path: str) -> Path:
        return self.image_root / path

    def base_readable(self, source: str) -> bool:
        return is_readable(self.file_for(source))

    def expand(self, source: str) -> list[Variant]:
        """Base source first, then every configured state whose file exists."""
        _split_name(source)
        out = [Variant(source=source, path=source, state=None)]
        for state in self.states:
            candidate = with_state(source, state)
            if is_readable(self.file_for(candidate)):
                out.append(Variant(source=source, path=candidate, state=state))
        return out

    def strip_state(self, path: str) -> str:
        return strip_state(path, self.states)

    def state_of(self, path: str) -> str | None:
        return state_of(path, self.states)
