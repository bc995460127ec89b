"""
Transition Graph: historical track-to-track frequencies for one generation run.

Built from the full transition history at the start of a generation call and
never modified afterwards. Concurrent calls each build their own graph.
"""

import logging
from typing import Dict, Iterable

from ..models import TransitionEdge

logger = logging.getLogger(__name__)


class TransitionGraph:
    """Read-only adjacency map: from_id -> to_id -> frequency."""

    def __init__(self, adjacency: Dict[str, Dict[str, int]]):
        self._adjacency = {src: dict(dst) for src, dst in adjacency.items()}

    @classmethod
    def from_edges(cls, edges: Iterable[TransitionEdge]) -> "TransitionGraph":
        """
        Build a graph from transition records.

        A later record for the same (from, to) pair replaces an earlier one.

        Args:
            edges: Transition records from the TransitionStore

        Returns:
            TransitionGraph instance
        """
        adjacency: Dict[str, Dict[str, int]] = {}
        for edge in edges:
            adjacency.setdefault(edge.from_id, {})[edge.to_id] = edge.frequency

        graph = cls(adjacency)
        logger.debug(f"Transition graph built: {len(graph)} edges from {len(adjacency)} tracks")
        return graph

    def frequency(self, from_id: str, to_id: str) -> int:
        """How often to_id followed from_id; 0 if never observed."""
        return self._adjacency.get(from_id, {}).get(to_id, 0)

    def neighbours(self, from_id: str) -> Dict[str, int]:
        """Copy of the outgoing edges of from_id."""
        return dict(self._adjacency.get(from_id, {}))

    def __len__(self) -> int:
        return sum(len(dst) for dst in self._adjacency.values())

    def __contains__(self, from_id: str) -> bool:
        return from_id in self._adjacency

    def __repr__(self) -> str:
        return f"TransitionGraph(edges={len(self)})"
