"""
Grid Mask Annotator - Grid Model
--------------------------------
The fixed logical grid overlaid on a scene image.

Filled cells are kept as an immutable set of integer (x, y) pairs. All
helpers return a new set and never modify their input.
"""

import math
from dataclasses import dataclass
from typing import FrozenSet, Iterator, Tuple

import numpy as np

GRID_WIDTH = 256
GRID_HEIGHT = 256

Cell = Tuple[int, int]
CellSet = FrozenSet[Cell]

EMPTY_CELLS: CellSet = frozenset()


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def pointer_to_cell(px: float, py: float, display_width: float, display_height: float,
                    grid_width: int = GRID_WIDTH, grid_height: int = GRID_HEIGHT) -> Cell:
    """
    Map a pointer position in display pixels to a grid cell.

    Uses floor(pointer / (displaySize / gridSize)) on each axis and clamps
    the result into the grid.
    """
    if display_width <= 0 or display_height <= 0:
        raise ValueError(f"Display size must be positive, got {display_width}x{display_height}")
    cell_width = display_width / grid_width
    cell_height = display_height / grid_height
    fx, fy = px / cell_width, py / cell_height
    if not (math.isfinite(fx) and math.isfinite(fy)):
        raise ValueError(f"Pointer position must be finite, got ({px}, {py})")
    x = int(math.floor(fx))
    y = int(math.floor(fy))
    return _clamp(x, 0, grid_width - 1), _clamp(y, 0, grid_height - 1)


@dataclass(frozen=True)
class CellRect:
    """Rectangle anchored at (start_x, start_y) with a movable opposite corner."""
    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @classmethod
    def at(cls, cell: Cell) -> "CellRect":
        x, y = cell
        return cls(x, y, x, y)

    def with_end(self, cell: Cell) -> "CellRect":
        x, y = cell
        return CellRect(self.start_x, self.start_y, x, y)

    def bounds(self) -> Tuple[int, int, int, int]:
        """Return (min_x, min_y, max_x, max_y)."""
        return (min(self.start_x, self.end_x), min(self.start_y, self.end_y),
                max(self.start_x, self.end_x), max(self.start_y, self.end_y))

    def cells(self) -> Iterator[Cell]:
        """Iterate every cell of the bounding box, both corners included."""
        min_x, min_y, max_x, max_y = self.bounds()
        for x in range(min_x, max_x + 1):
            for y in range(min_y, max_y + 1):
                yield x, y

    def to_dict(self):
        return {"startX": self.start_x, "startY": self.start_y,
                "endX": self.end_x, "endY": self.end_y}


def fill_rect(cells: CellSet, rect: CellRect) -> CellSet:
    return cells | frozenset(rect.cells())


def erase_rect(cells: CellSet, rect: CellRect) -> CellSet:
    return cells - frozenset(rect.cells())


def set_cell(cells: CellSet, cell: Cell) -> CellSet:
    if cell in cells:
        return cells
    return cells | {cell}


def clear_cell(cells: CellSet, cell: Cell) -> CellSet:
    if cell not in cells:
        return cells
    return cells - {cell}


def line_cells(x0: int, y0: int, x1: int, y1: int) -> Iterator[Cell]:
    """Bresenham walk from (x0, y0) to (x1, y1), both endpoints included."""
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        yield x0, y0
        if x0 == x1 and y0 == y1:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def cells_from_mask(mask: np.ndarray) -> CellSet:
    """
    Recover filled cells from a rasterized mask.

    Accepts a 2D luminance array (dark pixels are filled) or an array with
    an alpha channel in the last axis (opaque dark pixels are filled).
    """
    mask = np.asarray(mask)
    if mask.ndim == 2:
        filled = mask < 128
    elif mask.ndim == 3 and mask.shape[2] in (2, 4):
        alpha = mask[:, :, -1]
        lum = mask[:, :, 0] if mask.shape[2] == 2 else mask[:, :, :3].mean(axis=2)
        filled = (alpha > 127) & (lum < 128)
    elif mask.ndim == 3 and mask.shape[2] in (1, 3):
        filled = mask.mean(axis=2) < 128
    else:
        raise ValueError(f"Unsupported mask shape {mask.shape}")
    ys, xs = np.nonzero(filled)
    return frozenset(zip(xs.tolist(), ys.tolist()))
