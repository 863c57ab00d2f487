"""
Grid Mask Annotator - Grid Editor
---------------------------------
Editor state and the pointer/button handlers that act on it.

EditorState is immutable. Every handler takes a state and returns a new
one, so callers decide where the current state lives (see SessionManager).

Two interaction styles are supported:
- "rectangle": press anchors a rectangle, move drags its opposite corner,
  release erases immediately (erase mode) or leaves the rectangle pending
  until confirm_rect() (draw mode).
- "freehand": every cell under the pointer while the button is held is
  filled (draw) or cleared (erase) right away.
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from backend.grid import (
    EMPTY_CELLS, GRID_HEIGHT, GRID_WIDTH, Cell, CellRect, CellSet,
    clear_cell, erase_rect, fill_rect, line_cells, pointer_to_cell, set_cell,
)

DRAW = "draw"
ERASE = "erase"
MODES = (DRAW, ERASE)

RECTANGLE = "rectangle"
FREEHAND = "freehand"
INTERACTIONS = (RECTANGLE, FREEHAND)


@dataclass(frozen=True)
class EditorState:
    mode: str = DRAW
    interaction: str = RECTANGLE
    cells: CellSet = EMPTY_CELLS
    proposed_rect: Optional[CellRect] = None
    rect_pending: bool = False
    drawing: bool = False
    last_cell: Optional[Cell] = None
    display_size: Tuple[float, float] = (float(GRID_WIDTH), float(GRID_HEIGHT))
    grid_size: Tuple[int, int] = (GRID_WIDTH, GRID_HEIGHT)
    interpolate: bool = False
    version: int = 0

    def cell_at(self, px: float, py: float) -> Cell:
        return pointer_to_cell(px, py, self.display_size[0], self.display_size[1],
                               self.grid_size[0], self.grid_size[1])


def _with_cells(state: EditorState, cells: CellSet, **changes) -> EditorState:
    if cells is state.cells:
        return replace(state, **changes)
    return replace(state, cells=cells, version=state.version + 1, **changes)


def _paint(state: EditorState, cells: CellSet, cell: Cell) -> CellSet:
    if state.mode == DRAW:
        return set_cell(cells, cell)
    return clear_cell(cells, cell)


def set_mode(state: EditorState, mode: str) -> EditorState:
    if mode not in MODES:
        raise ValueError(f"Unknown draw mode: {mode!r}")
    return replace(state, mode=mode)


def set_interaction(state: EditorState, interaction: str) -> EditorState:
    """Switch between rectangle and freehand editing; drops any in-flight gesture."""
    if interaction not in INTERACTIONS:
        raise ValueError(f"Unknown interaction: {interaction!r}")
    if interaction == state.interaction:
        return state
    return replace(state, interaction=interaction, proposed_rect=None,
                   rect_pending=False, drawing=False, last_cell=None)


def set_display_size(state: EditorState, width: float, height: float) -> EditorState:
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise ValueError(f"Display size must be positive, got {width}x{height}")
    return replace(state, display_size=(float(width), float(height)))


def set_interpolate(state: EditorState, interpolate: bool) -> EditorState:
    return replace(state, interpolate=bool(interpolate))


def configure_interaction(state: EditorState, interaction: Optional[str] = None,
                          interpolate: Optional[bool] = None) -> EditorState:
    """
    Change the interaction style and/or freehand interpolation in one step.
    Both arguments are validated before anything changes; None keeps the
    current value.
    """
    if interaction is not None and interaction not in INTERACTIONS:
        raise ValueError(f"Unknown interaction: {interaction!r}")
    if interpolate is not None and not isinstance(interpolate, bool):
        raise ValueError(f"interpolate must be a boolean, got {interpolate!r}")
    if interpolate is not None:
        state = set_interpolate(state, interpolate)
    if interaction is not None:
        state = set_interaction(state, interaction)
    return state


def pointer_down(state: EditorState, px: float, py: float) -> EditorState:
    cell = state.cell_at(px, py)
    if state.interaction == FREEHAND:
        return _with_cells(state, _paint(state, state.cells, cell),
                           drawing=True, last_cell=cell)
    # A new press replaces any rectangle still waiting for confirmation
    return replace(state, proposed_rect=CellRect.at(cell), rect_pending=False, drawing=True)


def pointer_move(state: EditorState, px: float, py: float) -> EditorState:
    if not state.drawing:
        return state
    cell = state.cell_at(px, py)
    if state.interaction == FREEHAND:
        cells = state.cells
        if state.interpolate and state.last_cell is not None:
            for step in line_cells(state.last_cell[0], state.last_cell[1], cell[0], cell[1]):
                cells = _paint(state, cells, step)
        else:
            cells = _paint(state, cells, cell)
        return _with_cells(state, cells, last_cell=cell)
    if state.proposed_rect is None:
        return state
    return replace(state, proposed_rect=state.proposed_rect.with_end(cell))


def pointer_up(state: EditorState) -> EditorState:
    if not state.drawing:
        return state
    if state.interaction == FREEHAND:
        return replace(state, drawing=False, last_cell=None)
    if state.mode == ERASE:
        cells = state.cells
        if state.proposed_rect is not None:
            cells = erase_rect(cells, state.proposed_rect)
        return _with_cells(state, cells, proposed_rect=None, rect_pending=False, drawing=False)
    return replace(state, rect_pending=state.proposed_rect is not None, drawing=False)


def confirm_rect(state: EditorState) -> EditorState:
    """Commit the proposed rectangle with the current mode."""
    if state.proposed_rect is None:
        return state
    if state.mode == DRAW:
        cells = fill_rect(state.cells, state.proposed_rect)
    else:
        cells = erase_rect(state.cells, state.proposed_rect)
    return _with_cells(state, cells, proposed_rect=None, rect_pending=False)


def clear_proposed_rect(state: EditorState) -> EditorState:
    return replace(state, proposed_rect=None, rect_pending=False)


def clear_all(state: EditorState) -> EditorState:
    return _with_cells(state, EMPTY_CELLS if state.cells else state.cells)


def load_cells(state: EditorState, cells: Iterable[Cell]) -> EditorState:
    """Replace the filled cells, e.g. with a mask read back from the store."""
    return _with_cells(state, frozenset(cells), proposed_rect=None,
                       rect_pending=False, drawing=False, last_cell=None)


def reset(state: EditorState) -> EditorState:
    """Fresh state for a newly selected sample; keeps mode and view settings."""
    return load_cells(state, EMPTY_CELLS)


def to_dict(state: EditorState, include_cells: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "mode": state.mode,
        "interaction": state.interaction,
        "proposedRect": state.proposed_rect.to_dict() if state.proposed_rect else None,
        "rectPending": state.rect_pending,
        "drawing": state.drawing,
        "displaySize": {"width": state.display_size[0], "height": state.display_size[1]},
        "gridSize": {"width": state.grid_size[0], "height": state.grid_size[1]},
        "interpolate": state.interpolate,
        "version": state.version,
        "cellCount": len(state.cells),
    }
    if include_cells:
        data["cells"] = sorted([x, y] for x, y in state.cells)
    return data
