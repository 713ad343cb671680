"""Undirected weighted contact graph with per-node health state."""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx
import numpy as np
from scipy import sparse

from contact_sir.errors import InvalidEdgeError, UnknownNodeError
from contact_sir.state import HealthState, Interaction, PersonState, illegal_transitions


class ContactGraph:
    """
    Simple undirected graph over dense integer node ids.

    Node ids are assigned by ``add_node`` in insertion order (0, 1, 2, ...)
    and are never reused. Each node carries a ``HealthState``; each edge
    carries an ``Interaction``. Adjacency is stored as one dict per node
    mapping neighbour id to the shared ``Interaction``.
    """

    def __init__(self):
        self._adjacency: List[Dict[int, Interaction]] = []
        self._states: List[int] = []
        self._num_edges = 0

    @classmethod
    def from_edges(
        cls,
        states: Iterable[HealthState],
        edges: Iterable[Tuple[int, int, Interaction]],
    ) -> "ContactGraph":
        """Build a graph from initial node states and ``(a, b, interaction)`` triples."""
        graph = cls()
        for state in states:
            graph.add_node(state)
        for a, b, interaction in edges:
            graph.add_edge(a, b, interaction)
        return graph

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_node(self, state: HealthState = HealthState.SUSCEPTIBLE) -> int:
        """Append a node and return its id."""
        self._adjacency.append({})
        self._states.append(int(HealthState(state)))
        return len(self._states) - 1

    def add_edge(self, a: int, b: int, interaction: Interaction) -> None:
        """
        Insert an undirected edge between ``a`` and ``b``.

        Raises:
            InvalidEdgeError: on a self-loop or if the edge already exists
            UnknownNodeError: if either endpoint is not in the graph
        """
        self._check_node(a)
        self._check_node(b)
        if a == b:
            raise InvalidEdgeError(f"Self-loop on node {a} is not allowed")
        if b in self._adjacency[a]:
            raise InvalidEdgeError(f"Edge {a}-{b} already exists")
        if not isinstance(interaction, Interaction):
            raise InvalidEdgeError(f"Expected Interaction, got {type(interaction).__name__}")
        self._adjacency[a][b] = interaction
        self._adjacency[b][a] = interaction
        self._num_edges += 1

    # ------------------------------------------------------------------
    # Structure queries
    # ------------------------------------------------------------------

    @property
    def number_of_nodes(self) -> int:
        return len(self._states)

    @property
    def number_of_edges(self) -> int:
        return self._num_edges

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, node_id) -> bool:
        return isinstance(node_id, (int, np.integer)) and 0 <= node_id < len(self._states)

    def nodes(self) -> range:
        return range(len(self._states))

    def neighbors(self, node_id: int) -> List[int]:
        """All nodes directly connected to ``node_id`` (order not meaningful)."""
        self._check_node(node_id)
        return list(self._adjacency[node_id])

    def neighbor_items(self, node_id: int) -> Iterator[Tuple[int, Interaction]]:
        """``(neighbour, interaction)`` pairs for ``node_id``."""
        self._check_node(node_id)
        return iter(self._adjacency[node_id].items())

    def degree_of(self, node_id: int) -> int:
        self._check_node(node_id)
        return len(self._adjacency[node_id])

    def has_edge(self, a: int, b: int) -> bool:
        if a not in self or b not in self:
            return False
        return b in self._adjacency[a]

    def edge(self, a: int, b: int) -> Interaction:
        self._check_node(a)
        self._check_node(b)
        try:
            return self._adjacency[a][b]
        except KeyError:
            raise InvalidEdgeError(f"No edge between {a} and {b}") from None

    def edges(self) -> Iterator[Tuple[int, int, Interaction]]:
        """Each edge once, as ``(a, b, interaction)`` with ``a < b``."""
        for a, nbrs in enumerate(self._adjacency):
            for b, interaction in nbrs.items():
                if a < b:
                    yield a, b, interaction

    # ------------------------------------------------------------------
    # Health state
    # ------------------------------------------------------------------

    def node(self, node_id: int) -> PersonState:
        return PersonState(id=node_id, state=self.state_of(node_id))

    def state_of(self, node_id: int) -> HealthState:
        self._check_node(node_id)
        return HealthState(self._states[node_id])

    def set_state(self, node_id: int, state: HealthState) -> None:
        """Set a node's state directly (used for seeding before a run)."""
        self._check_node(node_id)
        self._states[node_id] = int(HealthState(state))

    def states(self) -> np.ndarray:
        """Copy of all node states as an ``int8`` array indexed by node id."""
        return np.array(self._states, dtype=np.int8)

    def assign_states(self, states: np.ndarray) -> None:
        """
        Overwrite all node states, enforcing monotonic transitions.

        The new states may be any number of rounds after the current ones, so
        only moves backwards (I -> S, R -> S, R -> I) are rejected.

        Raises:
            ValueError: if the array length differs from the node count or
                any node would move backwards
        """
        new = np.asarray(states, dtype=np.int8)
        if new.shape != (len(self._states),):
            raise ValueError(
                f"Expected {len(self._states)} states, got array of shape {new.shape}"
            )
        if new.size and (new.min() < 0 or new.max() > HealthState.RECOVERED):
            raise ValueError(f"Unknown state code in {sorted(set(new.tolist()))}")
        bad = illegal_transitions(self.states(), new, single_round=False)
        if bad.size:
            node_id = int(bad[0])
            raise ValueError(
                f"Illegal transition for node {node_id}: "
                f"{HealthState(self._states[node_id]).name} -> {HealthState(int(new[node_id])).name}"
            )
        self._states = [int(s) for s in new]

    def state_map(self) -> Dict[int, HealthState]:
        return {i: HealthState(s) for i, s in enumerate(self._states)}

    def state_counts(self) -> Dict[HealthState, int]:
        counts = np.bincount(self.states(), minlength=len(HealthState))
        return {state: int(counts[state]) for state in HealthState}

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_csr(self, weight: Optional[str] = None) -> sparse.csr_matrix:
        """
        Symmetric sparse adjacency matrix.

        Args:
            weight: ``None`` for 1 per edge, or ``"frequency"`` / ``"strength"``

        Returns:
            N x N CSR matrix
        """
        if weight not in (None, "frequency", "strength"):
            raise ValueError(f"Unknown edge weight: {weight}")
        n = len(self._states)
        rows, cols, data = [], [], []
        for a, b, interaction in self.edges():
            value = 1.0 if weight is None else float(getattr(interaction, weight))
            rows.extend((a, b))
            cols.extend((b, a))
            data.extend((value, value))
        return sparse.csr_matrix(
            (
                np.asarray(data, dtype=np.float64),
                (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64)),
            ),
            shape=(n, n),
        )

    def to_networkx(self) -> nx.Graph:
        """Export to ``networkx`` with ``state`` node and interaction edge attributes."""
        g = nx.Graph()
        for node_id, state in enumerate(self._states):
            g.add_node(node_id, state=HealthState(state))
        for a, b, interaction in self.edges():
            g.add_edge(a, b, frequency=interaction.frequency, strength=interaction.strength)
        return g

    def copy(self) -> "ContactGraph":
        other = ContactGraph()
        other._adjacency = [dict(nbrs) for nbrs in self._adjacency]
        other._states = list(self._states)
        other._num_edges = self._num_edges
        return other

    def _check_node(self, node_id: int) -> None:
        if node_id not in self:
            raise UnknownNodeError(f"Unknown node id: {node_id}")

    def __repr__(self) -> str:
        return f"ContactGraph(nodes={self.number_of_nodes}, edges={self.number_of_edges})"
