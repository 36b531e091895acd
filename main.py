#!/usr/bin/env python
"""
Sample application to demonstrate the Space Planner layout engine.
This script lays out a small two-level program and prints its metrics.
"""

import argparse
import json
import logging

from space_planner.config.config_loader import get_project_settings, level_elevation
from space_planner.models.layout import Layout
from space_planner.models.space import SpaceDefinition, SpaceFactory
from space_planner.core.placement import PlacementController
from space_planner.utils.metrics import AdjacencyRule, LayoutMetrics

logger = logging.getLogger(__name__)


def create_library():
    """Create the library of space definitions used by the demo"""
    return {
        "lab": SpaceDefinition("tech-001", "Computer Lab", 30, 40, category="technology", space_type="program"),
        "shop": SpaceDefinition("trades-001", "Construction Shop", 40, 60, category="trades", space_type="program"),
        "band": SpaceDefinition("band-001", "Band Hall", 50, 40, category="band", space_type="program"),
        "storage": SpaceDefinition("service-001", "Storage", 10, 20, category="service", space_type="support"),
        "corridor": SpaceDefinition("generic-001", "Corridor", 10, 90, category="generic", space_type="circulation"),
        "office": SpaceDefinition("admin-001", "Office", 15, 15, category="admin", space_type="program"),
    }


def create_sample_layout(snap_size: float) -> Layout:
    """Create a sample layout on two levels"""
    logger.info("Creating sample layout...")
    library = create_library()
    layout = Layout(controller=PlacementController(snap_size=snap_size), name="Demo Campus")

    level_1 = level_elevation(1)
    level_2 = level_elevation(2)

    placements = [
        ("corridor", (40, 0, level_1), 1),
        ("shop", (0, 0, level_1), 1),
        ("lab", (50, 0, level_1), 1),
        ("storage", (50, 40, level_1), 1),
        ("band", (0, 0, level_2), 1),
        ("office", (50, 0, level_2), 1),
        ("office", (50, 15, level_2), 2),
    ]

    for key, position, number in placements:
        space = SpaceFactory.create_instance(library[key], position, number)
        result = layout.place(space)
        if result:
            logger.info(f"Placed {space.name} ({space.id}) at {tuple(result.space.position)}")
        else:
            logger.info(f"Could not place {space.name}: {result.error}")

    # Dropping a space on top of an existing one is rejected
    overlap = SpaceFactory.create_instance(library["office"], (55, 5, level_1), 3)
    result = layout.place(overlap)
    logger.info(f"Overlapping drop accepted: {bool(result)} ({result.error})")

    # Rotating storage swaps its footprint to 20 x 10
    result = layout.rotate("service-001-instance-1")
    logger.info(f"Rotate storage: {bool(result)}")

    return layout


def report(layout: Layout, metrics: LayoutMetrics):
    """Print a summary of the layout"""
    print(f"\n{layout}")
    for z, area in layout.areas_by_level().items():
        print(f"  Level z={z:g}: {area:,.0f} sf")

    print("\nAdjacencies:")
    for space_id, neighbors in sorted(layout.adjacency_graph().items()):
        print(f"  {space_id}: {', '.join(sorted(neighbors))}")

    print("\nMetrics:")
    for name, value in metrics.evaluate_all().items():
        if isinstance(value, float):
            print(f"  {name}: {value:,.2f}")
        else:
            print(f"  {name}: {value}")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Space Planner layout demo")
    parser.add_argument(
        "--snap", type=float, default=5, help="Snap pitch in feet (1, 2.5, 5, 7.5, 10, 15, 20, 30)"
    )
    parser.add_argument(
        "--budget", type=float, default=None, help="Budget target in square feet"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the serialized layout as JSON"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main():
    """Main function"""
    args = parse_arguments()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    layout = create_sample_layout(args.snap)

    settings = get_project_settings()
    if args.budget is not None:
        settings["budget_target"] = args.budget

    rules = [
        AdjacencyRule("technology", "generic", "required"),
        AdjacencyRule("trades", "generic", "required"),
        AdjacencyRule("technology", "service", "preferred"),
        AdjacencyRule("band", "admin", "optional"),
    ]
    metrics = LayoutMetrics(layout, settings=settings, adjacency_rules=rules)

    if args.json:
        print(json.dumps(layout.serialize(), indent=2))
    else:
        report(layout, metrics)


if __name__ == "__main__":
    main()
