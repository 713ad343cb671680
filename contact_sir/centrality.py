"""Degree and reachability-based betweenness scores for a contact graph."""

import heapq
from typing import Callable, Dict, List, Literal

from loguru import logger

from contact_sir.graph import ContactGraph
from contact_sir.state import Interaction

CostTransform = Literal["truncated", "exact"]


def truncated_cost(interaction: Interaction) -> int:
    """Strength scaled by 100 and truncated to an integer."""
    return int(interaction.strength * 100)


def exact_cost(interaction: Interaction) -> float:
    return interaction.strength


_COSTS: Dict[str, Callable[[Interaction], float]] = {
    "truncated": truncated_cost,
    "exact": exact_cost,
}


class CentralityAnalyzer:
    """
    Structural scores over a ``ContactGraph``. Never modifies the graph.

    ``betweenness_centrality`` is a reachability-frequency score: for each
    source it runs a single-source shortest-path search and credits every
    other node the search reaches. It is not classical betweenness, which
    credits intermediate hops on paths between other pairs.
    """

    def __init__(self, graph: ContactGraph, cost: CostTransform = "truncated"):
        if cost not in _COSTS:
            raise ValueError(f"Unknown cost transform: {cost}")
        self.graph = graph
        self.cost = cost
        self._cost_fn = _COSTS[cost]

    def degree_centrality(self) -> Dict[int, int]:
        """Raw incident-edge count per node (not normalised)."""
        return {node: self.graph.degree_of(node) for node in self.graph.nodes()}

    def shortest_path_costs(self, source: int) -> Dict[int, float]:
        """
        Dijkstra from ``source`` using a binary heap.

        Returns:
            Mapping of every reachable node (source included, at cost 0) to
            its least path cost
        """
        self.graph.degree_of(source)  # validates the id
        dist: Dict[int, float] = {}
        heap = [(0, source)]
        while heap:
            d, node = heapq.heappop(heap)
            if node in dist:
                continue
            dist[node] = d
            for nbr, interaction in self.graph.neighbor_items(node):
                if nbr not in dist:
                    heapq.heappush(heap, (d + self._cost_fn(interaction), nbr))
        return dist

    def betweenness_centrality(self) -> Dict[int, float]:
        """
        Normalised count of sources from which each node is reachable.

        Counts are divided by ``(N-1)(N-2)/2`` when N > 2 and by 1 otherwise.
        Every node appears in the result.
        """
        n = self.graph.number_of_nodes
        counts: List[int] = [0] * n
        for source in self.graph.nodes():
            for target in self.shortest_path_costs(source):
                if target != source:
                    counts[target] += 1

        if n > 2:
            normalization = (n - 1) * (n - 2) / 2
        else:
            normalization = 1.0
            if n:
                logger.warning(f"Graph has N={n} <= 2 nodes, betweenness left unnormalised")

        return {node: count / normalization for node, count in enumerate(counts)}

    @staticmethod
    def top_nodes(scores: Dict[int, float], k: int = 10) -> List[int]:
        """Ids of the ``k`` highest-scoring nodes, ties broken by lower id."""
        return sorted(scores, key=lambda node: (-scores[node], node))[:k]
