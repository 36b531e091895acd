import math
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple, Any

from space_planner.utils.geometry import effective_extent

# (x, y, z): unit plan cell on a level
Cell = Tuple[int, int, float]


def cells_for(space: Any, position: Tuple[float, float, float]) -> FrozenSet[Cell]:
    """
    Get all unit grid cells a space would occupy at a position.

    Uses ``position`` rather than ``space.position`` so hypothetical
    placements can be tested before they are committed.

    Args:
        space: Space with width, depth and rotation
        position: (x, y, z) anchor to evaluate

    Returns:
        FrozenSet[Cell]: Cells covered by the rotation-adjusted rectangle
    """
    x, y, z = position
    w, d = effective_extent(space)

    x_cells = range(math.floor(x), math.floor(x + w))
    y_cells = range(math.floor(y), math.floor(y + d))

    return frozenset((cx, cy, z) for cx in x_cells for cy in y_cells)


class OccupancyIndex:
    """
    Sparse map from grid cells to the ID of the space occupying them.

    Only PlacementController mutates an index, and only after a legality
    check has passed, so the index never drifts from the registry.
    """

    def __init__(self):
        self._cells: Dict[Cell, str] = {}

    cells_for = staticmethod(cells_for)

    def is_free(self, cells: Iterable[Cell]) -> bool:
        """True if none of the cells are occupied"""
        return not any(cell in self._cells for cell in cells)

    def occupant(self, cell: Cell) -> Optional[str]:
        """ID of the space occupying a cell, if any"""
        return self._cells.get(cell)

    def occupants(self, cells: Iterable[Cell]) -> Set[str]:
        """IDs of all spaces occupying any of the cells"""
        return {self._cells[cell] for cell in cells if cell in self._cells}

    def occupy(self, cells: Iterable[Cell], space_id: str):
        """Mark cells as occupied by a space"""
        for cell in cells:
            self._cells[cell] = space_id

    def release(self, cells: Iterable[Cell]):
        """Mark cells as free"""
        for cell in cells:
            self._cells.pop(cell, None)

    def cells(self) -> FrozenSet[Cell]:
        """Snapshot of every occupied cell"""
        return frozenset(self._cells)

    def cells_of(self, space_id: str) -> FrozenSet[Cell]:
        """Snapshot of the cells occupied by one space"""
        return frozenset(cell for cell, owner in self._cells.items() if owner == space_id)

    def snapshot(self) -> Dict[Cell, str]:
        """Copy of the full cell -> space ID mapping"""
        return dict(self._cells)

    def clear(self):
        self._cells.clear()

    def __contains__(self, cell: Cell) -> bool:
        return cell in self._cells

    def __len__(self) -> int:
        return len(self._cells)
