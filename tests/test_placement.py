import random

import pytest

from space_planner.config.config_loader import DEFAULT_GRID_CONFIG
from space_planner.core.adjacency import AdjacencyAnalyzer
from space_planner.core.errors import (
    CollisionError,
    InvalidArgumentError,
    NotFoundError,
    PlacementResult,
)
from space_planner.core.occupancy import cells_for
from space_planner.core.placement import PlacementController
from space_planner.models.space import GridPosition


def footprint_union(controller):
    cells = set()
    for space in controller.get_all_spaces():
        cells |= cells_for(space, space.position)
    return cells


def state_of(controller):
    return (
        [space.to_dict() for space in controller.get_all_spaces()],
        controller.occupied_cells(),
    )


class TestPlace:
    def test_basic_collision_scenario(self, controller, make_space):
        assert controller.place(make_space("a", 10, 10, (0, 0, 0)))

        result = controller.place(make_space("b", 10, 10, (5, 5, 0)))
        assert not result
        assert isinstance(result.error, CollisionError)
        assert "a" in result.error.conflicting_ids
        assert "b" not in controller

        result = controller.place(make_space("b", 10, 10, (10, 0, 0)))
        assert result
        graph = AdjacencyAnalyzer.find_adjacencies(controller.get_all_spaces())
        assert graph["a"] == {"b"}
        assert graph["b"] == {"a"}
        assert controller.check_invariants()

    def test_place_snaps_plan_coordinates_only(self, controller, make_space):
        result = controller.place(make_space("a", position=(12, 13, 15.3)))
        assert result
        assert result.space.position == GridPosition(10, 15, 15.3)
        assert controller.get_space("a").position == GridPosition(10, 15, 15.3)

    def test_place_with_pitch_override(self, controller, make_space):
        result = controller.place(make_space("a", position=(12, 13, 0)), pitch=2.5)
        assert result.space.position == GridPosition(12.5, 12.5, 0)

    def test_place_invalid_pitch(self, controller, make_space):
        result = controller.place(make_space("a"), pitch=0)
        assert result.is_invalid
        assert len(controller) == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"depth": -5},
            {"height": 0},
            {"width": "10"},
            {"rotation": 45},
            {"rotation": 360},
            {"width": float("inf")},
            {"depth": float("nan")},
            {"height": float("inf")},
            {"width": True},
            {"position": (float("nan"), 0, 0)},
            {"position": (0, float("inf"), 0)},
            {"position": (0, 0, float("nan"))},
        ],
    )
    def test_place_rejects_invalid_space(self, controller, make_space, kwargs):
        result = controller.place(make_space("a", **kwargs))
        assert not result
        assert isinstance(result.error, InvalidArgumentError)
        assert len(controller) == 0
        assert controller.occupied_cells() == frozenset()

    def test_place_rejects_duplicate_id(self, controller, make_space):
        controller.place(make_space("a"))
        before = state_of(controller)

        result = controller.place(make_space("a", position=(50, 50, 0)))
        assert result.is_invalid
        assert state_of(controller) == before

    def test_caller_object_is_not_aliased(self, controller, make_space):
        space = make_space("a")
        result = controller.place(space)

        space.width = 100
        result.space.width = 200
        controller.get_space("a").width = 300

        assert controller.get_space("a").width == 10
        assert controller.check_invariants()

    def test_same_cells_on_other_level_do_not_collide(self, controller, make_space):
        assert controller.place(make_space("a", position=(0, 0, 0)))
        assert controller.place(make_space("b", position=(0, 0, 15)))

    def test_can_place_never_mutates(self, controller, make_space):
        controller.place(make_space("a"))
        before = state_of(controller)

        assert not controller.can_place(make_space("b"), (5, 5, 0))
        assert controller.can_place(make_space("b"), (10, 0, 0))
        assert controller.can_place(controller.get_space("a"))
        assert state_of(controller) == before

    def test_can_place_rejects_non_finite_position(self, controller, make_space):
        assert not controller.can_place(make_space("b"), (float("nan"), 0, 0))
        assert not controller.can_place(make_space("b", width=float("inf")), (50, 0, 0))
        assert len(controller) == 0


class TestRemove:
    def test_remove_releases_cells(self, controller, make_space):
        controller.place(make_space("a"))
        controller.place(make_space("b", position=(10, 0, 0)))

        result = controller.remove("a")
        assert result
        assert result.space.id == "a"
        assert "a" not in controller
        assert controller.occupied_cells() == footprint_union(controller)
        assert controller.place(make_space("c"))

    def test_remove_missing(self, controller):
        result = controller.remove("ghost")
        assert result.is_not_found
        assert isinstance(result.error, NotFoundError)
        assert result.error.space_id == "ghost"


class TestMove:
    def test_move_snaps_and_keeps_z(self, controller, make_space):
        controller.place(make_space("a"))
        result = controller.move("a", (22, 38, 15.5))
        assert result
        assert controller.get_space("a").position == GridPosition(20, 40, 15.5)
        assert controller.check_invariants()

    def test_move_to_current_position_succeeds(self, controller, make_space):
        controller.place(make_space("a", position=(10, 10, 0)))
        before = state_of(controller)
        assert controller.move("a", (10, 10, 0))
        assert state_of(controller) == before

    def test_move_overlapping_own_footprint_succeeds(self, controller, make_space):
        controller.place(make_space("a", 20, 20))
        assert controller.move("a", (5, 5, 0))
        assert controller.check_invariants()

    def test_move_collision_rolls_back(self, controller, make_space):
        controller.place(make_space("a"))
        controller.place(make_space("b", position=(20, 0, 0)))
        before = state_of(controller)

        result = controller.move("a", (15, 0, 0))
        assert result.is_collision
        assert result.error.conflicting_ids == ["b"]
        assert state_of(controller) == before
        assert controller.check_invariants()

    def test_move_missing(self, controller):
        assert controller.move("ghost", (0, 0, 0)).is_not_found

    def test_move_invalid_pitch(self, controller, make_space):
        controller.place(make_space("a"))
        before = state_of(controller)
        assert controller.move("a", (20, 0, 0), pitch=-5).is_invalid
        assert state_of(controller) == before

    @pytest.mark.parametrize(
        "position",
        [
            (float("nan"), 0, 0),
            (0, float("-inf"), 0),
            (0, 0, float("nan")),
            (0, 0),
            None,
        ],
    )
    def test_move_rejects_invalid_position(self, controller, make_space, position):
        controller.place(make_space("a"))
        before = state_of(controller)
        assert controller.move("a", position).is_invalid
        assert state_of(controller) == before
        assert controller.check_invariants()


class TestRotate:
    def test_rotation_swap_scenario(self, controller, make_space):
        assert controller.place(make_space("long", 20, 10))
        assert controller.occupied_cells() == cells_for(make_space("x", 20, 10), (0, 0, 0))

        # Neighbour sits where the rotated 10 x 20 footprint would land
        assert controller.place(make_space("n", 10, 10, (0, 10, 0)))
        before = state_of(controller)

        result = controller.rotate("long")
        assert result.is_collision
        assert result.error.conflicting_ids == ["n"]
        assert controller.get_space("long").rotation == 0
        assert state_of(controller) == before
        assert controller.check_invariants()

    def test_rotate_swaps_footprint(self, controller, make_space):
        controller.place(make_space("long", 20, 10))
        result = controller.rotate("long")
        assert result
        assert result.space.rotation == 90
        assert result.space.extent == (10, 20)
        assert controller.occupied_cells() == cells_for(result.space, (0, 0, 0))

    def test_rotate_cycles_back_to_zero(self, controller, make_space):
        controller.place(make_space("a", 20, 10))
        rotations = [controller.rotate("a").space.rotation for _ in range(4)]
        assert rotations == [90, 180, 270, 0]

    def test_rotate_missing(self, controller):
        assert controller.rotate("ghost").is_not_found

    def test_set_rotation(self, controller, make_space):
        controller.place(make_space("a", 20, 10))
        assert controller.set_rotation("a", 270).space.extent == (10, 20)
        assert controller.set_rotation("a", 45).is_invalid
        assert controller.get_space("a").rotation == 270


class TestResize:
    def test_resize(self, controller, make_space):
        controller.place(make_space("a"))
        result = controller.resize("a", 20, 15, 14)
        assert result
        space = controller.get_space("a")
        assert (space.width, space.depth, space.height) == (20, 15, 14)
        assert len(controller.occupied_cells()) == 300

    def test_resize_keeps_height_when_omitted(self, controller, make_space):
        controller.place(make_space("a", height=9))
        assert controller.resize("a", 15, 15).space.height == 9

    def test_resize_respects_rotation(self, controller, make_space):
        controller.place(make_space("a", rotation=90))
        controller.resize("a", 30, 10)
        assert controller.get_space("a").extent == (10, 30)
        assert controller.check_invariants()

    @pytest.mark.parametrize(
        "width, depth, height",
        [
            (4, 10, 12),
            (10, 2.5, 12),
            (10, 10, 0),
            (10, 10, -1),
            (float("inf"), 10, 12),
            (10, float("nan"), 12),
            (10, 10, float("inf")),
        ],
    )
    def test_resize_rejects_invalid_dimensions(self, controller, make_space, width, depth, height):
        controller.place(make_space("a"))
        before = state_of(controller)
        assert controller.resize("a", width, depth, height).is_invalid
        assert state_of(controller) == before

    def test_resize_minimum_follows_snap_size(self, fine_controller, make_space):
        fine_controller.place(make_space("a"))
        assert fine_controller.resize("a", 1, 1)

    def test_resize_collision_rolls_back(self, controller, make_space):
        controller.place(make_space("a"))
        controller.place(make_space("b", position=(15, 0, 0)))
        before = state_of(controller)

        result = controller.resize("a", 20, 10)
        assert result.is_collision
        assert state_of(controller) == before

    def test_resize_missing(self, controller):
        assert controller.resize("ghost", 10, 10).is_not_found


class TestSnapSize:
    def test_default_snap_size(self):
        controller = PlacementController(grid_config=dict(DEFAULT_GRID_CONFIG))
        assert controller.snap_size == 5

    def test_set_snap_size(self, controller, make_space):
        controller.set_snap_size(7.5)
        assert controller.snap_size == 7.5
        controller.place(make_space("a", position=(8, 8, 0)))
        assert controller.get_space("a").position == GridPosition(7.5, 7.5, 0)

    def test_set_snap_size_rejects_values_off_the_menu(self, controller):
        with pytest.raises(InvalidArgumentError):
            controller.set_snap_size(3)
        with pytest.raises(InvalidArgumentError):
            controller.set_snap_size(0)
        assert controller.snap_size == 5

    def test_constructor_rejects_values_off_the_menu(self):
        with pytest.raises(InvalidArgumentError):
            PlacementController(snap_size=4, grid_config=dict(DEFAULT_GRID_CONFIG))


def test_clear(controller, make_space):
    controller.place(make_space("a"))
    controller.clear()
    assert len(controller) == 0
    assert controller.occupied_cells() == frozenset()


def test_result_raise_for_error(controller, make_space):
    ok = controller.place(make_space("a"))
    assert ok.raise_for_error() is ok

    with pytest.raises(CollisionError):
        controller.place(make_space("b")).raise_for_error()
    with pytest.raises(NotFoundError):
        controller.remove("ghost").raise_for_error()


def test_result_repr():
    assert "success=False" in repr(PlacementResult.fail(NotFoundError("x")))


def test_occupancy_matches_registry_after_random_operations(fine_controller, make_space):
    rng = random.Random(1234)
    levels = [0, 15]

    for step in range(400):
        ids = [space.id for space in fine_controller.get_all_spaces()]
        operation = rng.choice(["place", "place", "move", "rotate", "resize", "remove"])
        before = state_of(fine_controller)

        if operation == "place" or not ids:
            result = fine_controller.place(
                make_space(
                    f"s{step}",
                    width=rng.randint(1, 12),
                    depth=rng.randint(1, 12),
                    position=(rng.randint(0, 40), rng.randint(0, 40), rng.choice(levels)),
                    rotation=rng.choice([0, 90, 180, 270]),
                )
            )
        elif operation == "move":
            result = fine_controller.move(
                rng.choice(ids), (rng.randint(0, 40), rng.randint(0, 40), rng.choice(levels))
            )
        elif operation == "rotate":
            result = fine_controller.rotate(rng.choice(ids))
        elif operation == "resize":
            result = fine_controller.resize(rng.choice(ids), rng.randint(1, 12), rng.randint(1, 12))
        else:
            result = fine_controller.remove(rng.choice(ids))

        assert fine_controller.check_invariants()
        assert fine_controller.occupied_cells() == footprint_union(fine_controller)
        if not result:
            assert state_of(fine_controller) == before
