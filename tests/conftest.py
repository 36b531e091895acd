"""Shared fixtures for Space Planner tests."""

import pytest

from space_planner.config.config_loader import DEFAULT_GRID_CONFIG
from space_planner.core.placement import PlacementController
from space_planner.models.space import Space


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point configuration at an empty data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("SPACE_PLANNER_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture
def make_space():
    """Build a Space with sensible defaults."""

    def _make_space(space_id, width=10, depth=10, position=(0, 0, 0), rotation=0, **kwargs):
        kwargs.setdefault("height", 12)
        return Space(
            id=space_id,
            width=width,
            depth=depth,
            position=position,
            rotation=rotation,
            **kwargs,
        )

    return _make_space


@pytest.fixture
def controller():
    """Empty controller snapping to 5 ft."""
    return PlacementController(snap_size=5, grid_config=dict(DEFAULT_GRID_CONFIG))


@pytest.fixture
def fine_controller():
    """Empty controller snapping to 1 ft."""
    return PlacementController(snap_size=1, grid_config=dict(DEFAULT_GRID_CONFIG))
