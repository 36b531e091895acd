"""
Adjacency detection between placed spaces.
Two spaces are adjacent when they sit on the same level and share a
positive-length edge segment; touching at a single corner does not count.
"""

import logging
from typing import Dict, Iterable, List, Set

import networkx as nx

from space_planner.models.space import Space
from space_planner.utils import geometry

logger = logging.getLogger(__name__)

AdjacencyGraph = Dict[str, Set[str]]


class AdjacencyAnalyzer:
    """
    Derives the adjacency graph of a list of spaces.

    Holds no state of its own. The scan is a plain pairwise comparison,
    which is fine for the tens to low hundreds of spaces in one building.
    """

    @staticmethod
    def shared_edge_length(a: Space, b: Space) -> float:
        """
        Length of the edge shared by two spaces.

        Args:
            a: First space
            b: Second space

        Returns:
            float: Shared edge length in feet, 0.0 if not adjacent
        """
        if a.position.z != b.position.z:
            return 0.0
        return geometry.shared_edge_length(geometry.space_rect(a), geometry.space_rect(b))

    @classmethod
    def are_adjacent(cls, a: Space, b: Space) -> bool:
        """Check if two spaces share an edge on the same level"""
        return cls.shared_edge_length(a, b) > 0.0

    @classmethod
    def build_graph(cls, spaces: Iterable[Space]) -> nx.Graph:
        """
        Build an undirected graph with one node per space and one edge per
        adjacency, weighted by the shared edge length.

        Args:
            spaces: Spaces to analyze

        Returns:
            nx.Graph: Adjacency graph
        """
        spaces = list(spaces)
        graph = nx.Graph()
        for space in spaces:
            graph.add_node(space.id, level=space.position.z, category=space.category)

        for i in range(len(spaces)):
            for j in range(i + 1, len(spaces)):
                length = cls.shared_edge_length(spaces[i], spaces[j])
                if length > 0.0:
                    graph.add_edge(spaces[i].id, spaces[j].id, length=length)

        logger.debug(
            f"Adjacency graph: {graph.number_of_nodes()} spaces, "
            f"{graph.number_of_edges()} adjacencies"
        )
        return graph

    @classmethod
    def find_adjacencies(cls, spaces: Iterable[Space]) -> AdjacencyGraph:
        """
        Find all adjacencies between spaces.

        Args:
            spaces: Spaces to analyze

        Returns:
            AdjacencyGraph: Mapping of space ID to the IDs it shares an edge
            with; spaces with no neighbours are not included
        """
        graph = cls.build_graph(spaces)
        return {
            node: set(graph.neighbors(node))
            for node in graph.nodes
            if graph.degree(node) > 0
        }

    @classmethod
    def neighbors(cls, space_id: str, spaces: Iterable[Space]) -> List[str]:
        """
        Get all spaces adjacent to one space.

        Args:
            space_id: ID of the space
            spaces: Spaces to search, including the space itself

        Returns:
            List[str]: IDs of adjacent spaces, empty if the space is not present
        """
        graph = cls.build_graph(spaces)
        if space_id not in graph:
            return []
        return sorted(graph.neighbors(space_id), key=str)

    @classmethod
    def total_shared_length(cls, spaces: Iterable[Space]) -> float:
        """Sum of all shared edge lengths between the spaces"""
        graph = cls.build_graph(spaces)
        return float(graph.size(weight="length"))
