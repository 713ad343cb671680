#!/usr/bin/env python
"""Simple demonstration of SIR spread on a contact graph."""

from contact_sir.centrality import CentralityAnalyzer
from contact_sir.config import SimulationConfig
from contact_sir.engine import SIREngine
from contact_sir.graph import ContactGraph
from contact_sir.graph_generation import generate_from_config
from contact_sir.state import HealthState, Interaction


def demo_toy_path():
    """Demonstrate synchronous spread along a path of 6 people."""
    print("\n" + "=" * 60)
    print("DEMO 1: Toy Path (6 nodes, beta=1, gamma=0)")
    print("=" * 60)

    config = SimulationConfig.toy_path()
    states = [HealthState.INFECTED] + [HealthState.SUSCEPTIBLE] * (config.N - 1)
    edges = [(k, k + 1, Interaction(frequency=1, strength=0.5)) for k in range(config.N - 1)]
    graph = ContactGraph.from_edges(states, edges)

    history, _ = SIREngine.from_config(graph, config).simulate()
    for state in history[: config.N]:
        print(f"t={state.t}: S={state.S} I={state.I} R={state.R}")


def demo_reference_setup():
    """Demonstrate the reference 1000-person setup."""
    print("\n" + "=" * 60)
    print("DEMO 2: Reference Setup (N=1,000, 100 rounds)")
    print("=" * 60)

    config = SimulationConfig.default()
    graph, metadata = generate_from_config(config)
    _, metrics = SIREngine.from_config(graph, config).simulate()

    print(f"Edges: {metadata['num_edges']}, mean degree {metadata['avg_degree_actual']:.1f}")
    print(f"Peak infected: {metrics['peak_infected']} at t={metrics['peak_time']}")
    print(f"Attack rate: {metrics['attack_rate']:.1%}")

    analyzer = CentralityAnalyzer(graph)
    degree = analyzer.degree_centrality()
    for node in CentralityAnalyzer.top_nodes(degree, 5):
        print(f"Node {node}: Degree {degree[node]}")


if __name__ == "__main__":
    demo_toy_path()
    demo_reference_setup()
