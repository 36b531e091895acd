from typing import Dict, Iterator, List, Optional

from space_planner.models.space import Space


class SpaceRegistry:
    """
    Canonical storage of placed spaces, keyed by ID.

    Holds no legality logic: PlacementController validates every operation
    before it reaches the registry. Spaces are copied on the way in and on
    the way out so no caller ever holds an alias into the registry.
    """

    def __init__(self):
        self._spaces: Dict[str, Space] = {}

    def add(self, space: Space):
        self._spaces[space.id] = space.copy()

    def delete(self, space_id: str):
        del self._spaces[space_id]

    def get(self, space_id: str) -> Optional[Space]:
        """Copy of a space, or None if the ID is not registered"""
        space = self._spaces.get(space_id)
        return space.copy() if space is not None else None

    def all(self) -> List[Space]:
        """Copies of all registered spaces, in insertion order"""
        return [space.copy() for space in self._spaces.values()]

    def ids(self) -> List[str]:
        return list(self._spaces)

    def clear(self):
        self._spaces.clear()

    def __contains__(self, space_id: str) -> bool:
        return space_id in self._spaces

    def __len__(self) -> int:
        return len(self._spaces)

    def __iter__(self) -> Iterator[Space]:
        return iter(self.all())
