"""
Grid coordinate snapping.
Only horizontal plan coordinates are snapped; level heights (z) pass through.
"""

import math
import numbers
from typing import Iterable, Tuple

from space_planner.core.errors import InvalidArgumentError
from space_planner.models.space import GridPosition


def is_finite_number(value) -> bool:
    """True for real, non-boolean numbers that are neither NaN nor infinite"""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_pitch(pitch: float) -> float:
    """
    Check that a snap pitch is usable.

    Args:
        pitch: Grid snap increment in feet

    Returns:
        float: The pitch, unchanged

    Raises:
        InvalidArgumentError: If the pitch is not a positive finite number
    """
    if not isinstance(pitch, numbers.Real) or not math.isfinite(pitch) or pitch <= 0:
        raise InvalidArgumentError(f"Snap pitch must be a positive number, got {pitch!r}")
    return pitch


def snap(value: float, pitch: float) -> float:
    """
    Snap a value to the nearest multiple of pitch.

    Ties round away from zero, so 2.5 snaps to 5 and -2.5 to -5 at pitch 5.
    Ties are compared with a relative tolerance so pitches that are not
    exact binary fractions (e.g. 0.1) still round up at the halfway point.

    Args:
        value: Coordinate in feet
        pitch: Grid snap increment in feet

    Returns:
        float: Snapped coordinate

    Raises:
        InvalidArgumentError: If the pitch is invalid or the value is not finite
    """
    validate_pitch(pitch)
    if not is_finite_number(value):
        raise InvalidArgumentError(f"Coordinate must be a finite number, got {value!r}")

    quotient = abs(value) / pitch
    steps = math.floor(quotient)
    remainder = quotient - steps
    if remainder > 0.5 or math.isclose(remainder, 0.5, rel_tol=1e-9):
        steps += 1
    snapped = math.copysign(steps, value) * pitch
    # Normalise -0.0
    return snapped + 0.0


def snap_position(position: Tuple[float, float, float], pitch: float) -> GridPosition:
    """
    Snap the plan coordinates of a position.

    Args:
        position: (x, y, z) position
        pitch: Grid snap increment in feet

    Returns:
        GridPosition: Position with x and y snapped and z unchanged
    """
    x, y, z = position
    return GridPosition(snap(x, pitch), snap(y, pitch), z)


def is_on_grid(value: float, pitch: float) -> bool:
    """Check whether a value already lies on a grid line"""
    return snap(value, pitch) == value


def snap_to_menu(pitch: float, menu: Iterable[float]) -> float:
    """
    Check that a pitch is one of the offered snap sizes.

    Args:
        pitch: Requested snap pitch
        menu: Available snap pitches

    Returns:
        float: The pitch, unchanged

    Raises:
        InvalidArgumentError: If the pitch is invalid or not on the menu
    """
    validate_pitch(pitch)
    menu = list(menu)
    if pitch not in menu:
        raise InvalidArgumentError(f"Snap pitch {pitch} is not one of {menu}")
    return pitch
