"""Persistent tracking and placement catalog for sprite sheets."""

from .store import PLACEMENTS, TRACKING, CatalogStore, JsonFileCatalogStore

__all__ = [
    "PLACEMENTS",
    "TRACKING",
    "CatalogStore",
    "JsonFileCatalogStore",
]
