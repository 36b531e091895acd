import copy
from typing import Dict, Any, Optional, NamedTuple, Tuple

from space_planner.config.config_loader import get_project_settings
from space_planner.utils.geometry import effective_extent, space_rect, Rect

SPACE_TYPES = ("program", "circulation", "support", "generic")


class GridPosition(NamedTuple):
    """
    Plan position of a space's anchor corner, in feet.
    x and y are horizontal plan coordinates, z is the level height.
    """

    x: float
    y: float
    z: float = 0.0


class Space:
    """
    Represents a space block placed (or to be placed) on the planning grid.
    """

    def __init__(
        self,
        id: str,
        width: float,
        depth: float,
        height: float,
        position: Optional[Tuple[float, float, float]] = None,
        rotation: int = 0,
        name: Optional[str] = None,
        category: str = "generic",
        space_type: str = "generic",
        color: Optional[str] = None,
        template_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a space.

        Args:
            id: Unique, stable identifier
            width: Width in feet at rotation 0
            depth: Depth in feet at rotation 0
            height: Height in feet
            position: (x, y, z) anchor position, defaults to the origin
            rotation: One of 0, 90, 180, 270 degrees
            name: Display name
            category: Space category (e.g. "technology", "service")
            space_type: One of "program", "circulation", "support", "generic"
            color: Display color
            template_id: ID of the library definition this space was created from
            metadata: Additional space information
        """
        self.id = id
        self.width = width
        self.depth = depth
        self.height = height
        self.position = GridPosition(*(position or (0.0, 0.0, 0.0)))
        self.rotation = rotation
        self.name = name or str(id)
        self.category = category
        self.space_type = space_type
        self.color = color
        self.template_id = template_id
        self.metadata = metadata or {}

    @property
    def area(self) -> float:
        """Calculate the plan area of the space"""
        return self.width * self.depth

    @property
    def volume(self) -> float:
        """Calculate the volume of the space"""
        return self.width * self.depth * self.height

    @property
    def level(self) -> float:
        """Level (z value) the space sits on"""
        return self.position.z

    @property
    def extent(self) -> Tuple[float, float]:
        """Rotation-adjusted (width, depth)"""
        return effective_extent(self)

    @property
    def rect(self) -> Rect:
        """Rotation-adjusted plan rectangle (min_x, min_y, max_x, max_y)"""
        return space_rect(self)

    def copy(self) -> "Space":
        """Return an independent copy of this space"""
        return copy.deepcopy(self)

    def with_changes(self, **changes) -> "Space":
        """
        Return a copy of this space with some attributes replaced.

        Args:
            **changes: Attribute values to override on the copy

        Returns:
            Space: The modified copy
        """
        changed = self.copy()
        for key, value in changes.items():
            if key == "position":
                value = GridPosition(*value)
            setattr(changed, key, value)
        return changed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "space_type": self.space_type,
            "width": self.width,
            "depth": self.depth,
            "height": self.height,
            "position": {
                "x": self.position.x,
                "y": self.position.y,
                "z": self.position.z,
            },
            "rotation": self.rotation,
            "color": self.color,
            "template_id": self.template_id,
            "metadata": copy.deepcopy(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Space":
        """Create a Space from dictionary representation"""
        position = data.get("position") or {}
        if isinstance(position, dict):
            position = (
                position.get("x", 0.0),
                position.get("y", 0.0),
                position.get("z", 0.0),
            )

        return cls(
            id=data["id"],
            width=data["width"],
            depth=data["depth"],
            height=data["height"],
            position=position,
            rotation=data.get("rotation", 0),
            name=data.get("name"),
            category=data.get("category", "generic"),
            space_type=data.get("space_type", "generic"),
            color=data.get("color"),
            template_id=data.get("template_id"),
            metadata=data.get("metadata", {}),
        )

    def __repr__(self) -> str:
        return (
            f"Space(id={self.id}, dim={self.width}x{self.depth}x{self.height}, "
            f"pos={tuple(self.position)}, rot={self.rotation})"
        )


class SpaceDefinition:
    """
    A library template from which space instances are created.
    """

    def __init__(
        self,
        id: str,
        name: str,
        width: float,
        depth: float,
        height: Optional[float] = None,
        category: str = "generic",
        space_type: str = "generic",
        color: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.width = width
        self.depth = depth
        self.height = height or get_project_settings()["default_space_height"]
        self.category = category
        self.space_type = space_type if space_type in SPACE_TYPES else "generic"
        self.color = color

    @property
    def area(self) -> float:
        return self.width * self.depth

    def __repr__(self) -> str:
        return f"SpaceDefinition(id={self.id}, name={self.name}, dim={self.width}x{self.depth})"


class SpaceFactory:
    """
    Factory for creating space instances from library definitions.
    """

    @staticmethod
    def instance_id(template_id: str, instance_number: int) -> str:
        """Build the instance ID for the n-th instance of a template"""
        return f"{template_id}-instance-{instance_number}"

    @staticmethod
    def create_instance(
        definition: SpaceDefinition,
        position: Tuple[float, float, float] = (0.0, 0.0, 0.0),
        instance_number: int = 1,
        rotation: int = 0,
        **kwargs,
    ) -> Space:
        """
        Create a space instance from a library definition.

        Args:
            definition: Template to instantiate
            position: (x, y, z) anchor position
            instance_number: Sequence number used to build a unique ID
            rotation: Initial rotation in degrees
            **kwargs: Extra Space arguments (e.g. metadata)

        Returns:
            Space: New space instance
        """
        return Space(
            id=SpaceFactory.instance_id(definition.id, instance_number),
            width=definition.width,
            depth=definition.depth,
            height=definition.height,
            position=position,
            rotation=rotation,
            name=definition.name,
            category=definition.category,
            space_type=definition.space_type,
            color=definition.color,
            template_id=definition.id,
            **kwargs,
        )

    @staticmethod
    def next_instance_number(template_id: str, existing_ids) -> int:
        """
        Get the next free instance number for a template.

        Args:
            template_id: Template ID
            existing_ids: IDs already in use

        Returns:
            int: One more than the highest instance number in use
        """
        prefix = f"{template_id}-instance-"
        numbers = [
            int(space_id[len(prefix):])
            for space_id in existing_ids
            if space_id.startswith(prefix) and space_id[len(prefix):].isdigit()
        ]
        return max(numbers, default=0) + 1
