"""
Aggregate geometry of a set of spaces: bounding box, perimeter membership
and envelope form factors. All functions are pure and work on any list of
spaces, whether or not it came from a controller.
"""

import math
from typing import Iterable, List, NamedTuple, Optional, Sequence

import numpy as np

from space_planner.core.adjacency import AdjacencyAnalyzer
from space_planner.models.space import Space
from space_planner.utils.geometry import coincident, rect_area, rect_perimeter, space_rect


class BoundingBox(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    depth: float

    @property
    def area(self) -> float:
        return self.width * self.depth


class Envelope(NamedTuple):
    area: float  # summed footprint area
    perimeter: float  # exposed edge length
    ratio: float  # perimeter / sqrt(area)
    compactness: float  # 4 * pi * area / perimeter ** 2


class SpatialQueryService:
    """Stateless spatial queries over lists of spaces."""

    @staticmethod
    def bounding_box(spaces: Iterable[Space]) -> Optional[BoundingBox]:
        """
        Get the axis-aligned box covering every space's rotated rectangle.

        Args:
            spaces: Spaces to cover

        Returns:
            Optional[BoundingBox]: The box, or None when there are no spaces
        """
        rects = np.array([space_rect(space) for space in spaces], dtype=float)
        if rects.size == 0:
            return None

        min_x, min_y = rects[:, 0].min(), rects[:, 1].min()
        max_x, max_y = rects[:, 2].max(), rects[:, 3].max()
        return BoundingBox(
            float(min_x),
            float(min_y),
            float(max_x),
            float(max_y),
            float(max_x - min_x),
            float(max_y - min_y),
        )

    @staticmethod
    def is_on_perimeter(space: Space, bounds: BoundingBox) -> bool:
        """
        Check if any edge of a space lies on the matching bounding-box edge.

        Args:
            space: Space to test
            bounds: Bounding box of the layout

        Returns:
            bool: True if the space touches min-x, max-x, min-y or max-y
        """
        min_x, min_y, max_x, max_y = space_rect(space)
        return (
            coincident(min_x, bounds.min_x)
            or coincident(max_x, bounds.max_x)
            or coincident(min_y, bounds.min_y)
            or coincident(max_y, bounds.max_y)
        )

    @classmethod
    def perimeter_spaces(cls, spaces: Iterable[Space]) -> List[str]:
        """
        Get the IDs of spaces on the perimeter of the spaces' own bounding box.

        Args:
            spaces: Spaces to test

        Returns:
            List[str]: IDs of perimeter spaces, in input order
        """
        spaces = list(spaces)
        bounds = cls.bounding_box(spaces)
        if bounds is None:
            return []
        return [space.id for space in spaces if cls.is_on_perimeter(space, bounds)]

    @staticmethod
    def envelope(spaces: Iterable[Space]) -> Optional[Envelope]:
        """
        Calculate the envelope form factors of a set of non-overlapping spaces.

        Perimeter is the exposed edge length: the sum of all rectangle
        perimeters minus both sides of every shared edge.

        Args:
            spaces: Spaces to measure

        Returns:
            Optional[Envelope]: Envelope, or None when there are no spaces
        """
        spaces = list(spaces)
        if not spaces:
            return None

        rects = [space_rect(space) for space in spaces]
        area = float(np.sum([rect_area(rect) for rect in rects]))
        perimeter = float(np.sum([rect_perimeter(rect) for rect in rects]))
        perimeter -= 2 * AdjacencyAnalyzer.total_shared_length(spaces)

        ratio = perimeter / math.sqrt(area) if area > 0 else 0.0
        compactness = 4 * math.pi * area / perimeter ** 2 if perimeter > 0 else 0.0
        return Envelope(area, perimeter, ratio, compactness)

    @staticmethod
    def spaces_on_level(spaces: Iterable[Space], z: float) -> List[Space]:
        """Get the spaces whose level equals z"""
        return [space for space in spaces if space.position.z == z]

    @staticmethod
    def levels(spaces: Sequence[Space]) -> List[float]:
        """Get the distinct levels in use, lowest first"""
        return sorted({space.position.z for space in spaces})
