"""
Tests for the grid model: pointer mapping, rectangles and cell sets.
"""

import numpy as np
import pytest

from backend.grid import (
    EMPTY_CELLS, CellRect, cells_from_mask, clear_cell, erase_rect, fill_rect,
    line_cells, pointer_to_cell, set_cell,
)
from backend.rasterizer import rasterize


class TestPointerToCell:

    def test_maps_by_cell_size(self):
        # 512px display over 256 cells -> 2px per cell
        assert pointer_to_cell(0, 0, 512, 512) == (0, 0)
        assert pointer_to_cell(1.9, 3.1, 512, 512) == (0, 1)
        assert pointer_to_cell(511, 256, 512, 512) == (255, 128)

    def test_non_square_display(self):
        assert pointer_to_cell(100, 100, 256, 128) == (100, 200)

    def test_clamps_into_grid(self):
        assert pointer_to_cell(-5, -0.1, 512, 512) == (0, 0)
        assert pointer_to_cell(512, 9999, 512, 512) == (255, 255)

    def test_rejects_empty_display(self):
        with pytest.raises(ValueError):
            pointer_to_cell(1, 1, 0, 512)

    def test_rejects_non_finite_pointer(self):
        with pytest.raises(ValueError):
            pointer_to_cell(float("inf"), 0, 512, 512)
        with pytest.raises(ValueError):
            pointer_to_cell(0, float("nan"), 512, 512)

    def test_rejects_pointer_that_overflows_cell_scale(self):
        # 1e308 over a tiny cell size is no longer a finite float
        with pytest.raises(ValueError):
            pointer_to_cell(1e308, 0, 1e-300, 1e-300)


class TestCellRect:

    def test_bounds_normalize_corners(self):
        rect = CellRect(5, 9, 2, 3)
        assert rect.bounds() == (2, 3, 5, 9)

    def test_cells_inclusive_of_both_corners(self):
        cells = set(CellRect(1, 1, 2, 3).cells())
        assert cells == {(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)}

    def test_single_cell_rect(self):
        assert list(CellRect.at((7, 8)).cells()) == [(7, 8)]

    def test_with_end_keeps_anchor(self):
        rect = CellRect.at((4, 4)).with_end((1, 6))
        assert (rect.start_x, rect.start_y, rect.end_x, rect.end_y) == (4, 4, 1, 6)


class TestCellSets:

    def test_fill_covers_every_cell_in_box(self):
        rect = CellRect(10, 20, 3, 5)
        cells = fill_rect(EMPTY_CELLS, rect)
        for x in range(3, 11):
            for y in range(5, 21):
                assert (x, y) in cells
        assert len(cells) == 8 * 16

    def test_erase_removes_box_regardless_of_prior_state(self):
        cells = frozenset({(0, 0), (1, 1), (5, 5)})
        result = erase_rect(cells, CellRect(0, 0, 2, 2))
        assert result == frozenset({(5, 5)})

    def test_helpers_do_not_mutate_input(self):
        cells = frozenset({(1, 1)})
        fill_rect(cells, CellRect(0, 0, 3, 3))
        erase_rect(cells, CellRect(0, 0, 3, 3))
        assert cells == frozenset({(1, 1)})

    def test_set_and_clear_cell(self):
        cells = set_cell(EMPTY_CELLS, (3, 4))
        assert cells == {(3, 4)}
        assert set_cell(cells, (3, 4)) is cells
        assert clear_cell(cells, (3, 4)) == EMPTY_CELLS
        assert clear_cell(cells, (9, 9)) is cells


class TestLineCells:

    def test_horizontal(self):
        assert list(line_cells(0, 0, 3, 0)) == [(0, 0), (1, 0), (2, 0), (3, 0)]

    def test_diagonal_reverse(self):
        assert list(line_cells(3, 3, 0, 0)) == [(3, 3), (2, 2), (1, 1), (0, 0)]

    def test_steep_line_has_no_gaps(self):
        cells = list(line_cells(0, 0, 2, 7))
        assert cells[0] == (0, 0) and cells[-1] == (2, 7)
        ys = [y for _, y in cells]
        assert ys == list(range(8))

    def test_single_point(self):
        assert list(line_cells(5, 5, 5, 5)) == [(5, 5)]


class TestCellsFromMask:

    def test_reads_back_rasterized_cells(self):
        cells = frozenset({(0, 0), (255, 255), (12, 40)})
        assert cells_from_mask(rasterize(cells)) == cells

    def test_grayscale_dark_pixels_are_filled(self):
        mask = np.full((4, 4), 255, dtype=np.uint8)
        mask[2, 1] = 0
        assert cells_from_mask(mask) == {(1, 2)}

    def test_rejects_unknown_shape(self):
        with pytest.raises(ValueError):
            cells_from_mask(np.zeros((2, 2, 5), dtype=np.uint8))
