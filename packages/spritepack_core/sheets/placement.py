"""Free-block shelf packer for sprite sheets.

Images are placed widest first into the tightest free rectangle that can
hold them. The sheet is exactly as wide as its widest image and grows
downward through an open-ended strip at the bottom (a free block with
``height == 0``). Whatever an image leaves unused of its block is returned
to the free list as a block to its right and, for bounded blocks, a block
below it, so the free blocks and placed images always tile the sheet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, Sequence


@dataclass(frozen=True)
class PackItem:
    key: Hashable
    width: int
    height: int


@dataclass(frozen=True)
class FreeBlock:
    x: int
    y: int
    width: int
    height: int  # 0 = open strip at the bottom of the sheet

    @property
    def open_ended(self) -> bool:
        return self.height == 0

    def fits(self, width: int, height: int) -> bool:
        return self.width >= width and (self.open_ended or self.height >= height)


@dataclass(frozen=True)
class PackResult:
    width: int
    height: int
    positions: dict[Hashable, tuple[int, int]]


def _choose_block(blocks: Sequence[FreeBlock], width: int, height: int) -> int:
    chosen: int | None = None
    for idx, block in enumerate(blocks):
        if not block.fits(width, height):
            continue
        if chosen is None:
            chosen = idx
            continue
        current = blocks[chosen]
        if current.open_ended and not block.open_ended:
            chosen = idx
        elif not current.open_ended and not block.open_ended and block.width < current.width:
            chosen = idx
    if chosen is None:
        # The open strip spans the full sheet width, so this means a bad input.
        raise ValueError(f"No free block can hold a {width}x{height} image")
    return chosen


def sort_for_packing(items: Iterable[PackItem]) -> list[PackItem]:
    # sorted() is stable, so equal widths keep their input order
    return sorted(items, key=lambda item: item.width, reverse=True)


def pack(items: Iterable[PackItem]) -> PackResult:
    ordered = sort_for_packing(items)
    if not ordered:
        return PackResult(width=0, height=0, positions={})
    for item in ordered:
        if item.width <= 0 or item.height <= 0:
            raise ValueError(f"Image {item.key!r} has empty dimensions {item.width}x{item.height}")

    sheet_width = ordered[0].width
    sheet_height = 0
    blocks: list[FreeBlock] = [FreeBlock(x=0, y=0, width=sheet_width, height=0)]
    positions: dict[Hashable, tuple[int, int]] = {}

    for item in ordered:
        block = blocks.pop(_choose_block(blocks, item.width, item.height))

        if block.open_ended:
            sheet_height += item.height
            blocks.append(FreeBlock(x=0, y=block.y + item.height, width=sheet_width, height=0))
        elif item.height < block.height:
            blocks.append(
                FreeBlock(
                    x=block.x,
                    y=block.y + item.height,
                    width=block.width,
                    height=block.height - item.height,
                )
            )

        if item.width < block.width:
            blocks.append(
                FreeBlock(
                    x=block.x + item.width,
                    y=block.y,
                    width=block.width - item.width,
                    height=item.height,
                )
            )

        positions[item.key] = (block.x, block.y)

    return PackResult(width=sheet_width, height=sheet_height, positions=positions)
