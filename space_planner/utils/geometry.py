"""
Geometric utility functions for space layout.
Every rotation-aware extent calculation in the engine goes through
effective_extent so the width/depth swap is applied identically everywhere.
"""

from typing import Tuple, Any

# Type aliases
Extent = Tuple[float, float]  # (width, depth)
Rect = Tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)

VALID_ROTATIONS = (0, 90, 180, 270)

# Edges closer than this are treated as coincident
EDGE_TOLERANCE = 1e-9


def effective_extent(space: Any) -> Extent:
    """
    Get the axis-aligned plan extent of a space, accounting for rotation.

    Args:
        space: Object with width, depth and rotation attributes

    Returns:
        Extent: (width, depth) with the two swapped at 90 and 270 degrees
    """
    if space.rotation % 180 == 0:
        return space.width, space.depth
    return space.depth, space.width


def space_rect(space: Any, position: Any = None) -> Rect:
    """
    Get the rotation-adjusted plan rectangle of a space.

    Args:
        space: Space to measure
        position: Optional (x, y, z) to use instead of space.position

    Returns:
        Rect: (min_x, min_y, max_x, max_y)
    """
    x, y, _ = position if position is not None else space.position
    w, d = effective_extent(space)
    return x, y, x + w, y + d


def coincident(a: float, b: float) -> bool:
    """Check whether two edge coordinates coincide"""
    return abs(a - b) <= EDGE_TOLERANCE


def overlap_length(a1: float, a2: float, b1: float, b2: float) -> float:
    """
    Length of the overlap between 1D ranges [a1, a2) and [b1, b2).

    Returns:
        float: Overlap length, 0.0 when the ranges only touch or are disjoint
    """
    length = min(a2, b2) - max(a1, b1)
    return length if length > EDGE_TOLERANCE else 0.0


def ranges_overlap(a1: float, a2: float, b1: float, b2: float) -> bool:
    """Check if two 1D ranges overlap with positive length"""
    return overlap_length(a1, a2, b1, b2) > 0.0


def shared_edge_length(rect_a: Rect, rect_b: Rect) -> float:
    """
    Length of the edge segment shared by two plan rectangles.

    A single common corner point is not a shared edge.

    Args:
        rect_a: First rectangle (min_x, min_y, max_x, max_y)
        rect_b: Second rectangle (min_x, min_y, max_x, max_y)

    Returns:
        float: Shared edge length, 0.0 if the rectangles do not touch along an edge
    """
    a_min_x, a_min_y, a_max_x, a_max_y = rect_a
    b_min_x, b_min_y, b_max_x, b_max_y = rect_b

    # A's right edge against B's left edge, or B's right against A's left
    if coincident(a_max_x, b_min_x) or coincident(b_max_x, a_min_x):
        length = overlap_length(a_min_y, a_max_y, b_min_y, b_max_y)
        if length > 0.0:
            return length

    # A's bottom edge against B's top edge, or B's bottom against A's top
    if coincident(a_max_y, b_min_y) or coincident(b_max_y, a_min_y):
        return overlap_length(a_min_x, a_max_x, b_min_x, b_max_x)

    return 0.0


def rect_area(rect: Rect) -> float:
    """Area of a plan rectangle"""
    min_x, min_y, max_x, max_y = rect
    return (max_x - min_x) * (max_y - min_y)


def rect_perimeter(rect: Rect) -> float:
    """Perimeter of a plan rectangle"""
    min_x, min_y, max_x, max_y = rect
    return 2 * ((max_x - min_x) + (max_y - min_y))
