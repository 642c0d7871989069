"""Process-wide catalog backend for the sprite API."""

from __future__ import annotations

from functools import lru_cache
from logging import getLogger
from typing import Any

from packages.spritepack_core.catalog.store import PLACEMENTS, TRACKING, CatalogStore
from packages.spritepack_core.sheets.config import SpriteConfig
from packages.spritepack_core.sheets.pipeline import build_store

logger = getLogger("spritepack_api.storage.catalog")


@lru_cache(maxsize=1)
def sprite_config() -> SpriteConfig:
    config = SpriteConfig.from_env()
    logger.info(
        "[STORAGE] Sprite config: image_root='%s', data_dir='%s', sheet_dir='%s'",
        config.image_root,
        config.data_dir,
        config.sheet_dir,
    )
    return config


@lru_cache(maxsize=1)
def _backend() -> CatalogStore:
    return build_store(sprite_config())


def reset_backend_cache_for_tests() -> None:
    _backend.cache_clear()
    sprite_config.cache_clear()


def init_db() -> None:
    _backend().init_db()
    sprite_config().sheet_dir.mkdir(parents=True, exist_ok=True)


def ping() -> None:
    config = sprite_config()
    for directory in (config.data_dir, config.sheet_dir):
        if not directory.is_dir():
            raise RuntimeError(f"Missing directory: {directory}")


def get_tracking() -> dict[str, Any]:
    return _backend().get(TRACKING)


def get_placements() -> dict[str, Any]:
    return _backend().get(PLACEMENTS)
