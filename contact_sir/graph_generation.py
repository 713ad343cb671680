"""Random contact-graph generation."""

from typing import Tuple

from loguru import logger

from contact_sir.errors import InvalidParameterError
from contact_sir.graph import ContactGraph
from contact_sir.rng import RandomLike, graph_rng, make_rng
from contact_sir.state import HealthState, Interaction


def generate_contact_graph(
    N: int = 1000,
    avg_degree: int = 15,
    initial_infected_fraction: float = 0.1,
    frequency_range: Tuple[int, int] = (1, 10),
    strength_range: Tuple[float, float] = (0.1, 1.0),
    rng: RandomLike = None,
) -> Tuple[ContactGraph, dict]:
    """
    Generate a random contact graph with seeded infections.

    Each node, in id order, draws uniform targets and adds an edge to every
    target that is not itself and not already a neighbour, until it has added
    ``avg_degree`` edges. Edges added by earlier nodes count towards a later
    node's degree but not towards its quota, so the mean degree ends up close
    to ``2 * avg_degree``.

    Args:
        N: Number of nodes
        avg_degree: Edges each node adds
        initial_infected_fraction: Probability that a node starts Infected
        frequency_range: ``[low, high)`` integer range for edge frequency
        strength_range: ``[low, high)`` range for edge strength, inside (0, 1]
        rng: Seed or ``RandomState``

    Returns:
        Tuple of (graph, metadata)
    """
    _validate(N, avg_degree, initial_infected_fraction, frequency_range, strength_range)
    rng = make_rng(rng)
    logger.info(f"Generating contact graph: N={N}, avg_degree={avg_degree}")

    graph = ContactGraph()
    for _ in range(N):
        infected = rng.random_sample() < initial_infected_fraction
        graph.add_node(HealthState.INFECTED if infected else HealthState.SUSCEPTIBLE)

    freq_lo, freq_hi = frequency_range
    str_lo, str_hi = strength_range
    saturated = 0
    for node in range(N):
        added = 0
        while added < avg_degree:
            if graph.degree_of(node) >= N - 1:
                saturated += 1
                break
            target = int(rng.randint(0, N))
            if target == node or graph.has_edge(node, target):
                continue
            strength = rng.uniform(str_lo, str_hi)
            # uniform() may return the upper bound through rounding
            if strength >= 1.0:
                strength = str_lo
            graph.add_edge(
                node,
                target,
                Interaction(frequency=int(rng.randint(freq_lo, freq_hi)), strength=float(strength)),
            )
            added += 1

    if saturated:
        logger.warning(f"{saturated} nodes were adjacent to every other node before reaching their quota")

    actual_avg_degree = 2 * graph.number_of_edges / N if N else 0.0
    counts = graph.state_counts()
    logger.info(
        f"Generated graph: {graph.number_of_edges} edges, avg_degree={actual_avg_degree:.2f}, "
        f"initially infected={counts[HealthState.INFECTED]}"
    )

    metadata = {
        "N": N,
        "avg_degree_target": avg_degree,
        "avg_degree_actual": float(actual_avg_degree),
        "num_edges": graph.number_of_edges,
        "initial_infected": counts[HealthState.INFECTED],
        "initial_infected_fraction": initial_infected_fraction,
    }

    return graph, metadata


def generate_from_config(config, rng: RandomLike = None) -> Tuple[ContactGraph, dict]:
    """Generate a graph from a ``SimulationConfig`` (graph stream of ``config.seed`` unless ``rng`` is given)."""
    return generate_contact_graph(
        N=config.N,
        avg_degree=config.avg_degree,
        initial_infected_fraction=config.initial_infected_fraction,
        frequency_range=(config.interaction.frequency_min, config.interaction.frequency_max),
        strength_range=(config.interaction.strength_min, config.interaction.strength_max),
        rng=graph_rng(config.seed) if rng is None else rng,
    )


def _validate(N, avg_degree, initial_infected_fraction, frequency_range, strength_range) -> None:
    if N < 0:
        raise InvalidParameterError(f"N must be >= 0, got {N}")
    if avg_degree < 0:
        raise InvalidParameterError(f"avg_degree must be >= 0, got {avg_degree}")
    if not 0.0 <= initial_infected_fraction <= 1.0:
        raise InvalidParameterError(
            f"initial_infected_fraction must be in [0, 1], got {initial_infected_fraction}"
        )
    freq_lo, freq_hi = frequency_range
    if freq_lo < 1 or freq_hi <= freq_lo:
        raise InvalidParameterError(f"Invalid frequency_range: {frequency_range}")
    str_lo, str_hi = strength_range
    if not (0.0 < str_lo < str_hi <= 1.0):
        raise InvalidParameterError(f"Invalid strength_range: {strength_range}")
