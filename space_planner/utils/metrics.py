"""
Evaluation metrics for space layouts.
"""

from typing import Dict, List, Any, Optional, Iterable

from space_planner.config.config_loader import get_project_settings
from space_planner.core.adjacency import AdjacencyAnalyzer
from space_planner.models.layout import Layout

IMPORTANCE_POINTS = {"required": 3, "preferred": 2, "optional": 1}

# Percent over budget at which the status changes
AT_BUDGET_TOLERANCE = 2.0
CRITICAL_OVER_BUDGET = 10.0


class AdjacencyRule:
    """
    A desired adjacency between two space categories.
    """

    def __init__(
        self,
        space1: str,
        space2: str,
        importance: str = "preferred",
        points: Optional[float] = None,
    ):
        """
        Args:
            space1: Category of the first space
            space2: Category of the second space
            importance: "required", "preferred" or "optional"
            points: Score weight, defaults by importance
        """
        if importance not in IMPORTANCE_POINTS:
            raise ValueError(
                f"Importance must be one of {list(IMPORTANCE_POINTS)}, got {importance!r}"
            )
        self.space1 = space1
        self.space2 = space2
        self.importance = importance
        self.points = IMPORTANCE_POINTS[importance] if points is None else points

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjacencyRule":
        return cls(
            space1=data["space1"],
            space2=data["space2"],
            importance=data.get("importance", "preferred"),
            points=data.get("points"),
        )

    def __repr__(self) -> str:
        return f"AdjacencyRule({self.space1}<->{self.space2}, {self.importance}, {self.points})"


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


class LayoutMetrics:
    """
    Class for evaluating project metrics of a layout.
    """

    def __init__(
        self,
        layout: Layout,
        settings: Optional[Dict[str, Any]] = None,
        adjacency_rules: Optional[Iterable[AdjacencyRule]] = None,
    ):
        """
        Initialize with a layout.

        Args:
            layout: The layout to evaluate
            settings: Project settings, loaded from defaults when omitted
            adjacency_rules: Desired category adjacencies for the adjacency score
        """
        self.layout = layout
        self.settings = settings or get_project_settings()
        self.adjacency_rules = list(adjacency_rules or [])

    # SF totals
    def area_totals(self) -> Dict[str, float]:
        """
        Calculate total plan area, overall and per space type.

        Returns:
            Dict[str, float]: total_sf, program_sf, circulation_sf, support_sf
        """
        by_type = self.layout.areas_by_type()
        return {
            "total_sf": self.layout.total_area(),
            "program_sf": by_type.get("program", 0.0),
            "circulation_sf": by_type.get("circulation", 0.0),
            "support_sf": by_type.get("support", 0.0),
        }

    def budget(self) -> Dict[str, float]:
        """
        Compare the total area against the budget target.

        Returns:
            Dict[str, float]: budget_sf, over_budget (SF, negative when under)
            and percent_over_budget
        """
        budget_sf = float(self.settings["budget_target"])
        over = self.layout.total_area() - budget_sf
        return {
            "budget_sf": budget_sf,
            "over_budget": over,
            "percent_over_budget": _ratio(over, budget_sf) * 100,
        }

    def efficiency(self) -> Dict[str, float]:
        """
        Calculate area efficiency ratios.

        Returns:
            Dict[str, float]: gross_to_net (program / total), circulation_factor
            (circulation / program) and support_ratio (support / total)
        """
        totals = self.area_totals()
        return {
            "gross_to_net": _ratio(totals["program_sf"], totals["total_sf"]),
            "circulation_factor": _ratio(totals["circulation_sf"], totals["program_sf"]),
            "support_ratio": _ratio(totals["support_sf"], totals["total_sf"]),
        }

    def form(self) -> Dict[str, float]:
        """
        Envelope form factors of the whole layout.

        Returns:
            Dict[str, float]: envelope_area, envelope_perimeter, envelope_ratio
            and compactness, all 0.0 for an empty layout
        """
        envelope = self.layout.envelope()
        if envelope is None:
            return {
                "envelope_area": 0.0,
                "envelope_perimeter": 0.0,
                "envelope_ratio": 0.0,
                "compactness": 0.0,
            }
        return {
            "envelope_area": envelope.area,
            "envelope_perimeter": envelope.perimeter,
            "envelope_ratio": envelope.ratio,
            "compactness": envelope.compactness,
        }

    def adjacency_score(self) -> float:
        """
        Score how well the adjacency rules are satisfied.

        A rule is satisfied when some space of the first category shares an
        edge with a different space of the second category.

        Returns:
            float: Satisfied points as a percentage of all points (0 to 100),
            100 when there are no rules
        """
        total_points = sum(rule.points for rule in self.adjacency_rules)
        if total_points <= 0:
            return 100.0

        spaces = {space.id: space for space in self.layout.spaces}
        graph = AdjacencyAnalyzer.build_graph(spaces.values())

        satisfied = 0.0
        for rule in self.adjacency_rules:
            for a, b in graph.edges:
                categories = (spaces[a].category, spaces[b].category)
                if categories in ((rule.space1, rule.space2), (rule.space2, rule.space1)):
                    satisfied += rule.points
                    break

        return satisfied / total_points * 100

    def unsatisfied_rules(self) -> List[AdjacencyRule]:
        """Rules with no matching adjacency in the layout"""
        spaces = {space.id: space for space in self.layout.spaces}
        pairs = set()
        for a, b in AdjacencyAnalyzer.build_graph(spaces.values()).edges:
            pairs.add((spaces[a].category, spaces[b].category))
            pairs.add((spaces[b].category, spaces[a].category))
        return [
            rule for rule in self.adjacency_rules if (rule.space1, rule.space2) not in pairs
        ]

    def perimeter_spaces(self) -> int:
        """Number of spaces on the perimeter of their level"""
        return len(self.layout.perimeter_spaces())

    def daylight_access(self) -> float:
        """
        Share of spaces on the perimeter of their level.

        Returns:
            float: Ratio (0.0 to 1.0), 0.0 for an empty layout
        """
        return _ratio(self.perimeter_spaces(), len(self.layout))

    def status(self) -> str:
        """
        Budget status.

        Returns:
            str: "under", "at", "over" or "critical"
        """
        percent = self.budget()["percent_over_budget"]
        if percent < -AT_BUDGET_TOLERANCE:
            return "under"
        if percent <= AT_BUDGET_TOLERANCE:
            return "at"
        if percent <= CRITICAL_OVER_BUDGET:
            return "over"
        return "critical"

    def evaluate_all(self) -> Dict[str, Any]:
        """
        Calculate all metrics.

        Returns:
            Dict: All metrics keyed by name
        """
        metrics: Dict[str, Any] = {}
        metrics.update(self.area_totals())
        metrics.update(self.budget())
        metrics.update(self.efficiency())
        metrics.update(self.form())
        metrics["adjacency_score"] = self.adjacency_score()
        metrics["daylight_access"] = self.daylight_access()
        metrics["perimeter_spaces"] = self.perimeter_spaces()
        metrics["areas_by_level"] = self.layout.areas_by_level()
        metrics["status"] = self.status()
        return metrics
