"""
Placement controller: the only way to change a layout.

Every mutation is an atomic remove-then-place against the occupancy index
and the registry. A rejected operation leaves both exactly as they were.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from space_planner.config.config_loader import get_grid_config
from space_planner.core.errors import (
    CollisionError,
    InvalidArgumentError,
    NotFoundError,
    PlacementResult,
)
from space_planner.core.grid import (
    is_finite_number,
    snap_position,
    snap_to_menu,
    validate_pitch,
)
from space_planner.core.occupancy import Cell, OccupancyIndex, cells_for
from space_planner.core.registry import SpaceRegistry
from space_planner.models.space import Space
from space_planner.utils.geometry import VALID_ROTATIONS

logger = logging.getLogger(__name__)


def _is_positive(value: Any) -> bool:
    return is_finite_number(value) and value > 0


def _invalid_position(position: Any) -> Optional[InvalidArgumentError]:
    try:
        coordinates = tuple(position)
    except TypeError:
        coordinates = ()
    if len(coordinates) != 3 or not all(is_finite_number(c) for c in coordinates):
        return InvalidArgumentError(
            f"Position must be three finite numbers (x, y, z), got {position!r}"
        )
    return None


class PlacementController:
    """
    Orchestrates place, move, rotate, resize and remove operations.

    The occupancy index and the registry are private to one controller.
    Callers receive copies of spaces and snapshots of occupied cells, never
    the underlying structures, so the two cannot drift apart. One controller
    serves one canvas and is not safe to share between threads.
    """

    def __init__(
        self,
        snap_size: Optional[float] = None,
        grid_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize an empty layout.

        Args:
            snap_size: Active snap pitch in feet, defaults to the configured default
            grid_config: Grid configuration, loaded from defaults when omitted
        """
        self.grid_config = grid_config or get_grid_config()
        self.snap_sizes: List[float] = list(self.grid_config["snap_sizes"])
        self._snap_size = snap_to_menu(
            snap_size if snap_size is not None else self.grid_config["default_snap"],
            self.snap_sizes,
        )

        self._index = OccupancyIndex()
        self._registry = SpaceRegistry()

    @property
    def snap_size(self) -> float:
        """Active snap pitch in feet"""
        return self._snap_size

    def set_snap_size(self, pitch: float):
        """
        Change the active snap pitch.

        Raises:
            InvalidArgumentError: If the pitch is not one of the configured snap sizes
        """
        self._snap_size = snap_to_menu(pitch, self.snap_sizes)
        logger.debug(f"Snap size set to {pitch}")

    # ===== VALIDATION =====

    def _validate_space(self, space: Space) -> Optional[InvalidArgumentError]:
        for name in ("width", "depth", "height"):
            value = getattr(space, name)
            if not _is_positive(value):
                return InvalidArgumentError(
                    f"Space {space.id}: {name} must be positive, got {value!r}"
                )
        if space.rotation not in VALID_ROTATIONS:
            return InvalidArgumentError(
                f"Space {space.id}: rotation must be one of {VALID_ROTATIONS}, "
                f"got {space.rotation!r}"
            )
        error = _invalid_position(space.position)
        if error is not None:
            return InvalidArgumentError(f"Space {space.id}: {error}")
        return None

    def _resolve_pitch(self, pitch: Optional[float]) -> float:
        return validate_pitch(pitch) if pitch is not None else self._snap_size

    def _reject(self, operation: str, error) -> PlacementResult:
        logger.info(f"{operation} rejected: {error}")
        return PlacementResult.fail(error)

    # ===== PLACEMENT & COLLISION =====

    def can_place(
        self, space: Space, position: Optional[Tuple[float, float, float]] = None
    ) -> bool:
        """
        Check if a space could be placed without collision. Never mutates.

        The space's own cells do not count against it, so a placed space can
        always be checked at the position it already holds.

        Args:
            space: Space to test
            position: Optional (x, y, z) to test instead of space.position

        Returns:
            bool: True if the footprint is free; False for an invalid space or position
        """
        position = position if position is not None else space.position
        if self._validate_space(space) is not None or _invalid_position(position) is not None:
            return False

        conflicts = self._index.occupants(cells_for(space, position))
        conflicts.discard(space.id)
        return not conflicts

    def place(self, space: Space, pitch: Optional[float] = None) -> PlacementResult:
        """
        Place a new space on the grid.

        Args:
            space: Space description; the caller keeps its own object
            pitch: Snap pitch for this call, defaults to the active snap size

        Returns:
            PlacementResult: Success with the committed copy, or the rejection reason
        """
        try:
            pitch = self._resolve_pitch(pitch)
        except InvalidArgumentError as e:
            return self._reject("place", e)

        return self._add("place", space, pitch)

    def _restore(self, space: Space) -> PlacementResult:
        """
        Re-place a persisted space at exactly its stored position.

        Occupancy is re-derived and checked as for place(); only snapping is
        skipped, so positions saved under another snap size survive a reload.
        """
        return self._add("restore", space, None)

    def _add(self, operation: str, space: Space, pitch: Optional[float]) -> PlacementResult:
        error = self._validate_space(space)
        if error is not None:
            return self._reject(operation, error)

        if space.id in self._registry:
            return self._reject(
                operation,
                InvalidArgumentError(
                    f"Space {space.id} is already placed; move, rotate or resize it instead"
                ),
            )

        candidate = space.copy()
        if pitch is not None:
            candidate.position = snap_position(space.position, pitch)

        cells = cells_for(candidate, candidate.position)
        if not self._index.is_free(cells):
            return self._reject(
                operation, CollisionError(candidate.id, self._index.occupants(cells))
            )

        self._index.occupy(cells, candidate.id)
        self._registry.add(candidate)
        logger.debug(f"{operation}: {candidate!r}")
        return PlacementResult.ok(candidate.copy())

    def remove(self, space_id: str) -> PlacementResult:
        """
        Remove a space from the grid.

        Args:
            space_id: ID of the space to remove

        Returns:
            PlacementResult: Success with the removed space, or NotFoundError
        """
        space = self._registry.get(space_id)
        if space is None:
            return self._reject("remove", NotFoundError(space_id))

        self._index.release(cells_for(space, space.position))
        self._registry.delete(space_id)
        logger.debug(f"Removed {space_id}")
        return PlacementResult.ok(space)

    def _replace(self, operation: str, space_id: str, **changes) -> PlacementResult:
        """
        Release a space's footprint, try the changed footprint, and restore
        the original footprint if the new one is taken.
        """
        current = self._registry.get(space_id)
        if current is None:
            return self._reject(operation, NotFoundError(space_id))

        candidate = current.with_changes(**changes)
        old_cells = cells_for(current, current.position)
        new_cells = cells_for(candidate, candidate.position)

        self._index.release(old_cells)
        if not self._index.is_free(new_cells):
            conflicts = self._index.occupants(new_cells)
            self._index.occupy(old_cells, space_id)
            return self._reject(operation, CollisionError(space_id, conflicts))

        self._index.occupy(new_cells, space_id)
        self._registry.add(candidate)
        logger.debug(f"{operation}: {candidate!r}")
        return PlacementResult.ok(candidate.copy())

    def move(
        self,
        space_id: str,
        new_position: Tuple[float, float, float],
        pitch: Optional[float] = None,
    ) -> PlacementResult:
        """
        Move a space to a new position.

        x and y are snapped with the given (or active) pitch; z is kept exactly.

        Args:
            space_id: ID of the space to move
            new_position: (x, y, z) target position
            pitch: Snap pitch for this call, defaults to the active snap size

        Returns:
            PlacementResult: Success, CollisionError, NotFoundError or InvalidArgumentError
        """
        if space_id not in self._registry:
            return self._reject("move", NotFoundError(space_id))

        error = _invalid_position(new_position)
        if error is not None:
            return self._reject("move", error)

        try:
            snapped = snap_position(new_position, self._resolve_pitch(pitch))
        except InvalidArgumentError as e:
            return self._reject("move", e)

        return self._replace("move", space_id, position=snapped)

    def rotate(self, space_id: str) -> PlacementResult:
        """
        Rotate a space 90 degrees about its anchor corner.

        Args:
            space_id: ID of the space to rotate

        Returns:
            PlacementResult: Success, CollisionError or NotFoundError
        """
        space = self._registry.get(space_id)
        if space is None:
            return self._reject("rotate", NotFoundError(space_id))

        return self._replace("rotate", space_id, rotation=(space.rotation + 90) % 360)

    def set_rotation(self, space_id: str, rotation: int) -> PlacementResult:
        """
        Set a space's rotation directly.

        Args:
            space_id: ID of the space to rotate
            rotation: One of 0, 90, 180, 270

        Returns:
            PlacementResult: Success, CollisionError, NotFoundError or InvalidArgumentError
        """
        if rotation not in VALID_ROTATIONS:
            return self._reject(
                "set_rotation",
                InvalidArgumentError(
                    f"Rotation must be one of {VALID_ROTATIONS}, got {rotation!r}"
                ),
            )
        return self._replace("set_rotation", space_id, rotation=rotation)

    def resize(
        self,
        space_id: str,
        new_width: float,
        new_depth: float,
        new_height: Optional[float] = None,
    ) -> PlacementResult:
        """
        Resize a space in place.

        Plan dimensions must be at least the active snap size; height must be
        positive and is kept when omitted.

        Args:
            space_id: ID of the space to resize
            new_width: Width in feet at rotation 0
            new_depth: Depth in feet at rotation 0
            new_height: Height in feet

        Returns:
            PlacementResult: Success, CollisionError, NotFoundError or InvalidArgumentError
        """
        space = self._registry.get(space_id)
        if space is None:
            return self._reject("resize", NotFoundError(space_id))

        new_height = space.height if new_height is None else new_height
        for name, value in (("width", new_width), ("depth", new_depth)):
            if not is_finite_number(value) or value < self._snap_size:
                return self._reject(
                    "resize",
                    InvalidArgumentError(
                        f"Space {space_id}: {name} must be at least {self._snap_size}, "
                        f"got {value!r}"
                    ),
                )
        if not _is_positive(new_height):
            return self._reject(
                "resize",
                InvalidArgumentError(
                    f"Space {space_id}: height must be positive, got {new_height!r}"
                ),
            )

        return self._replace(
            "resize", space_id, width=new_width, depth=new_depth, height=new_height
        )

    # ===== ACCESS =====

    def get_space(self, space_id: str) -> Optional[Space]:
        """Copy of a placed space, or None"""
        return self._registry.get(space_id)

    def get_all_spaces(self) -> List[Space]:
        """Copies of all placed spaces"""
        return self._registry.all()

    def occupied_cells(self) -> FrozenSet[Cell]:
        """Snapshot of every occupied cell"""
        return self._index.cells()

    def clear(self):
        """Remove all spaces"""
        self._index.clear()
        self._registry.clear()
        logger.debug("Cleared all spaces")

    def check_invariants(self) -> bool:
        """
        Check that the occupancy index matches the registry exactly.

        Returns:
            bool: True if every registered footprint cell is indexed under its
            space and no other cells are indexed
        """
        expected: Dict[Cell, str] = {}
        for space in self._registry.all():
            for cell in cells_for(space, space.position):
                if cell in expected:
                    return False
                expected[cell] = space.id
        return expected == self._index.snapshot()

    def __contains__(self, space_id: str) -> bool:
        return space_id in self._registry

    def __len__(self) -> int:
        return len(self._registry)
