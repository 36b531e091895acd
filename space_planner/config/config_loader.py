"""
Configuration loader for Space Planner.
This module loads configuration from optional data files and provides
a clean API for accessing configuration throughout the project.
"""

import os
import json
import copy
import logging
from typing import Dict, List, Any, Optional

logger = logging.getLogger(__name__)

# Define paths to data directories
# Move up from this file to the project root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.path.join(BASE_DIR, "data")

# Sub-directories for configuration data
GRID_DIR = "grid"
PROJECT_DIR = "project"

DEFAULT_GRID_CONFIG = {
    "grid_module": 1,  # feet, base cell size used for collision
    "default_snap": 5,  # feet
    "snap_sizes": [1, 2.5, 5, 7.5, 10, 15, 20, 30],
}

DEFAULT_PROJECT_SETTINGS = {
    "budget_target": 85000,  # square feet
    "default_space_height": 12,  # feet
    "level_heights": [15, 15, 15, 15],  # floor-to-floor, feet
}

SPACE_CATEGORIES = {
    "technology": {
        "label": "Technology",
        "color": "#003C71",
        "description": "Computer labs, cyber security, audio visual",
    },
    "trades": {
        "label": "Trades",
        "color": "#00A9E0",
        "description": "Construction, aviation, culinary, automotive",
    },
    "band": {
        "label": "Band",
        "color": "#9A3324",
        "description": "Band hall, choir, music, dressing rooms",
    },
    "systems": {
        "label": "Systems",
        "color": "#B5BD00",
        "description": "PLC support, control rooms, server rooms",
    },
    "admin": {
        "label": "Admin",
        "color": "#f16555",
        "description": "Offices, conference rooms, meeting spaces",
    },
    "service": {
        "label": "Service",
        "color": "#F2A900",
        "description": "Storage, mechanical, electrical, janitorial",
    },
    "generic": {
        "label": "Generic",
        "color": "#67823A",
        "description": "Career centers, circulation, commons",
    },
    "egress": {
        "label": "Egress",
        "color": "#6B7280",
        "description": "Emergency exits, corridors, stairs, exit routes",
    },
}


def _data_dir() -> str:
    # Read at call time so tests and hosts can redirect it
    return os.environ.get("SPACE_PLANNER_DATA_DIR", DATA_DIR)


def _load_json_file(filepath: str, default: Any = None) -> Any:
    """
    Load a JSON file with error handling.

    Args:
        filepath: Path to the JSON file
        default: Default value to return if file doesn't exist or has errors

    Returns:
        Loaded JSON data or default value
    """
    if not os.path.exists(filepath):
        return default

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read configuration file {filepath}: {e}")
        return default


def _merged(defaults: Dict[str, Any], subdir: str, name: str) -> Dict[str, Any]:
    filepath = os.path.join(_data_dir(), subdir, f"{name}.json")
    result = _load_json_file(filepath, {})
    if not isinstance(result, dict):
        logger.warning(f"Ignoring configuration file {filepath}: not a JSON object")
        result = {}

    # Ensure essential parameters exist
    merged = copy.deepcopy(defaults)
    merged.update(result)
    return merged


def get_grid_config(name: str = "default") -> Dict[str, Any]:
    """
    Get grid configuration.

    Args:
        name: Name of the grid configuration

    Returns:
        Dictionary with grid_module, default_snap and snap_sizes
    """
    return _merged(DEFAULT_GRID_CONFIG, GRID_DIR, name)


def get_project_settings(name: str = "default") -> Dict[str, Any]:
    """
    Get project settings.

    Args:
        name: Name of the project settings file

    Returns:
        Dictionary with budget_target, default_space_height and level_heights
    """
    return _merged(DEFAULT_PROJECT_SETTINGS, PROJECT_DIR, name)


def get_space_categories() -> Dict[str, Dict[str, str]]:
    """Get all configured space categories"""
    return copy.deepcopy(SPACE_CATEGORIES)


def get_snap_sizes(name: str = "default") -> List[float]:
    """Get the menu of available snap pitches"""
    return list(get_grid_config(name)["snap_sizes"])


def level_elevation(level: int, settings: Optional[Dict[str, Any]] = None) -> float:
    """
    Get the z value (feet) of a 1-based building level.

    Args:
        level: Level number, 1 = ground level
        settings: Project settings, loaded from defaults when omitted

    Returns:
        float: Sum of the floor-to-floor heights of the levels below
    """
    if level < 1:
        raise ValueError(f"Level must be 1 or greater, got {level}")

    settings = settings or get_project_settings()
    heights = settings["level_heights"]
    if level > len(heights):
        raise ValueError(f"Level {level} is above the {len(heights)} configured levels")

    return float(sum(heights[: level - 1]))
