"""
Layout model for space planning.
This wraps a PlacementController with layout-level queries, grouping and
plain-data serialization.
"""

import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set, Tuple

from space_planner.core.adjacency import AdjacencyAnalyzer
from space_planner.core.errors import InvalidArgumentError, PlacementResult
from space_planner.core.placement import PlacementController
from space_planner.core.spatial_query import BoundingBox, Envelope, SpatialQueryService
from space_planner.models.space import Space

logger = logging.getLogger(__name__)


class Layout:
    """
    A space layout: one placement controller plus layout-specific queries
    and metadata.
    """

    def __init__(
        self,
        controller: Optional[PlacementController] = None,
        name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a layout.

        Args:
            controller: The underlying placement controller, a new one if omitted
            name: Optional name for the layout
            metadata: Optional metadata
        """
        self.controller = controller or PlacementController()
        self.name = name or f"Layout_{uuid.uuid4().hex[:8]}"
        self.metadata = metadata or {}

        # Spaces that could not be restored by deserialize()
        self.load_failures: List[Tuple[Optional[str], PlacementResult]] = []

    @property
    def spaces(self) -> List[Space]:
        """Copies of all placed spaces"""
        return self.controller.get_all_spaces()

    @property
    def snap_size(self) -> float:
        return self.controller.snap_size

    def get_space(self, space_id: str) -> Optional[Space]:
        return self.controller.get_space(space_id)

    # ===== MUTATIONS =====

    def place(self, space: Space, pitch: Optional[float] = None) -> PlacementResult:
        """Place a new space; see PlacementController.place"""
        return self.controller.place(space, pitch)

    def remove(self, space_id: str) -> PlacementResult:
        return self.controller.remove(space_id)

    def move(
        self,
        space_id: str,
        new_position: Tuple[float, float, float],
        pitch: Optional[float] = None,
    ) -> PlacementResult:
        return self.controller.move(space_id, new_position, pitch)

    def rotate(self, space_id: str) -> PlacementResult:
        return self.controller.rotate(space_id)

    def resize(
        self,
        space_id: str,
        new_width: float,
        new_depth: float,
        new_height: Optional[float] = None,
    ) -> PlacementResult:
        return self.controller.resize(space_id, new_width, new_depth, new_height)

    def clear(self):
        self.controller.clear()

    # ===== QUERIES =====

    def adjacency_graph(self) -> Dict[str, Set[str]]:
        """
        Get the adjacency graph of placed spaces, recomputed on every call.

        Returns:
            Dict[str, Set[str]]: Mapping of space ID to adjacent space IDs
        """
        return AdjacencyAnalyzer.find_adjacencies(self.spaces)

    def are_adjacent(self, space_id1: str, space_id2: str) -> bool:
        return space_id2 in self.adjacency_graph().get(space_id1, set())

    def levels(self) -> List[float]:
        return SpatialQueryService.levels(self.spaces)

    def get_spaces_by_level(self, z: float) -> List[Space]:
        return SpatialQueryService.spaces_on_level(self.spaces, z)

    def get_spaces_by_category(self, category: str) -> List[Space]:
        return [space for space in self.spaces if space.category == category]

    def get_spaces_by_type(self, space_type: str) -> List[Space]:
        return [space for space in self.spaces if space.space_type == space_type]

    def _selected(self, level: Optional[float]) -> List[Space]:
        if level is None:
            return self.spaces
        return self.get_spaces_by_level(level)

    def bounding_box(self, level: Optional[float] = None) -> Optional[BoundingBox]:
        """
        Get the bounding box of the layout or of one level.

        Returns:
            Optional[BoundingBox]: None if there are no spaces to cover
        """
        return SpatialQueryService.bounding_box(self._selected(level))

    def perimeter_spaces(self, level: Optional[float] = None) -> List[str]:
        """
        Get IDs of spaces on the perimeter.

        With a level, perimeter is measured against that level's bounding box;
        without one, each level is measured against its own bounding box.
        """
        if level is not None:
            return SpatialQueryService.perimeter_spaces(self.get_spaces_by_level(level))

        perimeter = []
        for z in self.levels():
            perimeter.extend(
                SpatialQueryService.perimeter_spaces(self.get_spaces_by_level(z))
            )
        return perimeter

    def envelope(self, level: Optional[float] = None) -> Optional[Envelope]:
        return SpatialQueryService.envelope(self._selected(level))

    def areas_by_level(self) -> Dict[float, float]:
        """
        Calculate total plan area for each level.

        Returns:
            Dict[float, float]: Mapping of level z value to square feet
        """
        areas = defaultdict(float)
        for space in self.spaces:
            areas[space.position.z] += space.area
        return dict(sorted(areas.items()))

    def areas_by_type(self) -> Dict[str, float]:
        """Total plan area for each space type"""
        areas = defaultdict(float)
        for space in self.spaces:
            areas[space.space_type] += space.area
        return dict(areas)

    def areas_by_category(self) -> Dict[str, float]:
        """Total plan area for each space category"""
        areas = defaultdict(float)
        for space in self.spaces:
            areas[space.category] += space.area
        return dict(areas)

    def total_area(self) -> float:
        return sum(space.area for space in self.spaces)

    # ===== SERIALIZATION =====

    def clone(self) -> "Layout":
        """
        Create a deep copy of the layout.

        Returns:
            Layout: Cloned layout with its own controller
        """
        return Layout.deserialize(self.serialize(), name=f"{self.name}_clone")

    def serialize(self) -> Dict[str, Any]:
        """
        Serialize the layout to plain data.

        Returns:
            Dict: Serialized layout
        """
        return {
            "name": self.name,
            "metadata": dict(self.metadata),
            "snap_size": self.controller.snap_size,
            "spaces": [space.to_dict() for space in self.spaces],
        }

    @classmethod
    def _controller_for(cls, snap_size: Any) -> PlacementController:
        if snap_size is None:
            return PlacementController()
        try:
            return PlacementController(snap_size=snap_size)
        except InvalidArgumentError as e:
            logger.warning(f"Ignoring stored snap size: {e}; using the configured default")
            return PlacementController()

    @classmethod
    def deserialize(cls, data: Dict[str, Any], name: Optional[str] = None) -> "Layout":
        """
        Create a Layout from serialized data.

        Each space is re-placed through the controller at its stored position
        so occupancy is re-derived and checked. Records that are malformed or
        no longer fit are skipped and recorded in ``load_failures``. A stored
        snap size that is no longer on the snap menu falls back to the
        configured default.

        Args:
            data: Serialized layout data
            name: Optional name overriding the stored one

        Returns:
            Layout: Deserialized layout
        """
        layout = cls(
            controller=cls._controller_for(data.get("snap_size")),
            name=name or data.get("name"),
            metadata=data.get("metadata", {}),
        )

        for space_data in data.get("spaces", []):
            space_id = space_data.get("id") if isinstance(space_data, dict) else None
            try:
                space = Space.from_dict(space_data)
            except (KeyError, TypeError, AttributeError) as e:
                result = PlacementResult.fail(
                    InvalidArgumentError(f"Malformed space record {space_id!r}: {e!r}")
                )
            else:
                result = layout.controller._restore(space)

            if not result:
                logger.warning(f"Could not restore space {space_id}: {result.error}")
                layout.load_failures.append((space_id, result))

        return layout

    def __len__(self) -> int:
        return len(self.controller)

    def __str__(self) -> str:
        return f"Layout(name={self.name}, spaces={len(self)})"
