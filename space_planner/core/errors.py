"""
Error taxonomy for layout operations.

Placement operations return these errors inside a PlacementResult rather
than raising them; only pure helpers (snapping, pitch validation) raise.
"""

from typing import Iterable, List, Optional


class PlacementError(Exception):
    """Base class for rejected layout operations"""


class CollisionError(PlacementError):
    """The requested footprint overlaps cells occupied by other spaces"""

    def __init__(self, space_id: str, conflicting_ids: Iterable[str]):
        self.space_id = space_id
        self.conflicting_ids: List[str] = sorted(set(conflicting_ids), key=str)
        super().__init__(
            f"Space {space_id} collides with {', '.join(map(str, self.conflicting_ids))}"
        )


class NotFoundError(PlacementError):
    """The referenced space is not in the registry"""

    def __init__(self, space_id: str):
        self.space_id = space_id
        super().__init__(f"Space {space_id} not found")


class InvalidArgumentError(PlacementError, ValueError):
    """Non-positive pitch or dimension, unsupported rotation, or duplicate ID"""


class PlacementResult:
    """
    Outcome of a placement operation.

    Truthy only on success, so callers can write ``if controller.move(...)``.
    On success ``space`` holds a copy of the space as committed; on failure
    ``error`` holds the reason and nothing was changed.
    """

    def __init__(self, success: bool, error: Optional[PlacementError] = None, space=None):
        self.success = success
        self.error = error
        self.space = space

    @classmethod
    def ok(cls, space=None) -> "PlacementResult":
        return cls(True, space=space)

    @classmethod
    def fail(cls, error: PlacementError) -> "PlacementResult":
        return cls(False, error=error)

    @property
    def is_collision(self) -> bool:
        return isinstance(self.error, CollisionError)

    @property
    def is_not_found(self) -> bool:
        return isinstance(self.error, NotFoundError)

    @property
    def is_invalid(self) -> bool:
        return isinstance(self.error, InvalidArgumentError)

    def raise_for_error(self) -> "PlacementResult":
        """Raise the carried error, if any; otherwise return self"""
        if self.error is not None:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        if self.success:
            return f"PlacementResult(success=True, space={self.space!r})"
        return f"PlacementResult(success=False, error={self.error!r})"
