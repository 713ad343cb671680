"""Tests for the SIR engine, metrics and configuration."""

import numpy as np
import pytest
from pydantic import ValidationError

from contact_sir.config import InteractionConfig, SimulationConfig
from contact_sir.engine import RoundState, SIREngine
from contact_sir.errors import InvalidParameterError
from contact_sir.graph import ContactGraph
from contact_sir.graph_generation import generate_contact_graph, generate_from_config
from contact_sir.metrics import MetricsCollector, compute_epidemic_metrics
from contact_sir.rng import graph_rng, run_rng
from contact_sir.state import HealthState, Interaction

S, I, R = HealthState.SUSCEPTIBLE, HealthState.INFECTED, HealthState.RECOVERED


def _path_graph(states):
    """Linear chain 0-1-2-...-(n-1) with the given initial states."""
    n = len(states)
    edges = [(k, k + 1, Interaction(frequency=1, strength=0.5)) for k in range(n - 1)]
    return ContactGraph.from_edges(states, edges)


@pytest.fixture
def random_graph():
    graph, _ = generate_contact_graph(N=120, avg_degree=4, initial_infected_fraction=0.1, rng=42)
    return graph


class TestEngineParameters:
    """Test engine construction."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(time_steps=-1, beta=0.3, gamma=0.1),
            dict(time_steps=1.5, beta=0.3, gamma=0.1),
            dict(time_steps=10, beta=-0.1, gamma=0.1),
            dict(time_steps=10, beta=0.3, gamma=1.01),
        ],
    )
    def test_invalid_parameters_rejected(self, kwargs):
        with pytest.raises(InvalidParameterError):
            SIREngine(_path_graph([S, I]), rng=0, **kwargs)

    def test_from_config(self):
        config = SimulationConfig(N=10, avg_degree=2, time_steps=7, beta=0.2, gamma=0.4)
        engine = SIREngine.from_config(_path_graph([S, I]), config)
        assert engine.time_steps == 7
        assert engine.beta == 0.2
        assert engine.gamma == 0.4


class TestSynchronousUpdate:
    """Test round semantics on a linear chain."""

    def test_infection_advances_one_hop_per_round(self):
        graph = _path_graph([I, S, S, S, S])
        engine = SIREngine(graph, time_steps=1, beta=1.0, gamma=0.0, rng=0)
        engine.simulate()
        # Node 2 must not see node 1's infection within the same round
        assert [graph.state_of(v) for v in graph.nodes()] == [I, I, S, S, S]

    def test_chain_fully_infected_after_n_minus_one_rounds(self):
        graph = _path_graph([I, S, S, S, S, S])
        history, metrics = SIREngine(graph, time_steps=5, beta=1.0, gamma=0.0, rng=0).simulate()
        assert [h.I for h in history] == [1, 2, 3, 4, 5, 6]
        assert metrics["final_S"] == 0

    def test_write_back_after_infection_and_recovery(self):
        graph = _path_graph([I, S])
        history, _ = SIREngine(graph, time_steps=2, beta=1.0, gamma=1.0, rng=0).simulate()
        # Node 1 goes S -> I -> R across the two rounds
        assert [(h.S, h.I, h.R) for h in history] == [(1, 1, 0), (0, 1, 1), (0, 0, 2)]
        assert graph.state_map() == {0: R, 1: R}

    def test_zero_time_steps_leaves_states_unchanged(self, random_graph):
        before = random_graph.states()
        history, metrics = SIREngine(random_graph, time_steps=0, beta=0.9, gamma=0.9, rng=1).simulate()
        assert np.array_equal(random_graph.states(), before)
        assert len(history) == 1
        assert metrics["total_steps"] == 0

    def test_final_states_written_back(self, random_graph):
        engine = SIREngine(random_graph, time_steps=10, beta=0.3, gamma=0.2, rng=3)
        history, _ = engine.simulate(record_states=True)
        assert np.array_equal(random_graph.states(), history[-1].states)
        assert engine.final_states() == random_graph.state_map()


class TestEngineProperties:
    """Test invariants of the stochastic dynamics."""

    def test_conservation(self, random_graph):
        history, _ = SIREngine(random_graph, time_steps=30, beta=0.3, gamma=0.1, rng=5).simulate()
        for state in history:
            assert state.S + state.I + state.R == random_graph.number_of_nodes

    def test_monotonic_transitions(self, random_graph):
        history, _ = SIREngine(random_graph, time_steps=30, beta=0.4, gamma=0.2, rng=5).simulate(
            record_states=True
        )
        for prev, cur in zip(history, history[1:]):
            step = cur.states.astype(int) - prev.states.astype(int)
            assert ((step == 0) | (step == 1)).all()

        # Aggregate view: S never increases, R never decreases
        for prev, cur in zip(history, history[1:]):
            assert cur.S <= prev.S
            assert cur.R >= prev.R

    def test_zero_transmission(self, random_graph):
        initial_S = random_graph.state_counts()[S]
        history, metrics = SIREngine(random_graph, time_steps=25, beta=0.0, gamma=0.1, rng=9).simulate()
        assert all(h.S == initial_S for h in history)
        assert metrics["total_new_infections"] == 0

    def test_full_recovery(self, random_graph):
        history, _ = SIREngine(random_graph, time_steps=10, beta=0.5, gamma=1.0, rng=2).simulate(
            record_states=True
        )
        for prev, cur in zip(history, history[1:]):
            was_infected = prev.states == I
            assert (cur.states[was_infected] == R).all()

    def test_isolated_node_stays_susceptible(self):
        # Nodes 0-3 form a chain seeded at 0; node 4 is isolated
        graph = _path_graph([I, S, S, S])
        isolated = graph.add_node(S)
        SIREngine(graph, time_steps=50, beta=1.0, gamma=0.05, rng=4).simulate()
        assert graph.degree_of(isolated) == 0
        assert graph.state_of(isolated) == S
        assert graph.state_of(1) != S

    def test_recovered_is_absorbing(self):
        graph = _path_graph([R, I, R])
        history, _ = SIREngine(graph, time_steps=20, beta=1.0, gamma=0.3, rng=8).simulate(
            record_states=True
        )
        for h in history:
            assert h.states[0] == R
            assert h.states[2] == R

    def test_determinism(self, random_graph):
        g1, g2 = random_graph.copy(), random_graph.copy()
        h1, m1 = SIREngine(g1, time_steps=40, beta=0.3, gamma=0.1, rng=123).simulate(record_states=True)
        h2, m2 = SIREngine(g2, time_steps=40, beta=0.3, gamma=0.1, rng=123).simulate(record_states=True)

        assert len(h1) == len(h2)
        for a, b in zip(h1, h2):
            assert np.array_equal(a.states, b.states)
        assert m1 == m2

    def test_injected_random_state_is_shared(self, random_graph):
        rng = np.random.RandomState(0)
        engine = SIREngine(random_graph.copy(), time_steps=5, beta=0.3, gamma=0.1, rng=rng)
        assert engine.rng is rng

    def test_different_seeds_diverge(self, random_graph):
        _, m1 = SIREngine(random_graph.copy(), time_steps=40, beta=0.3, gamma=0.1, rng=1).simulate()
        _, m2 = SIREngine(random_graph.copy(), time_steps=40, beta=0.3, gamma=0.1, rng=2).simulate()
        assert m1["I_counts"] != m2["I_counts"]

    def test_empty_graph(self):
        history, metrics = SIREngine(ContactGraph(), time_steps=3, beta=0.5, gamma=0.5, rng=0).simulate()
        assert len(history) == 4
        assert metrics["attack_rate"] == 0.0


class TestRandomStreams:
    """Test seeding of the graph and simulation streams."""

    def test_streams_are_reproducible_and_distinct(self):
        assert np.array_equal(graph_rng(42).random_sample(5), graph_rng(42).random_sample(5))
        assert np.array_equal(run_rng(42, 3).random_sample(5), run_rng(42, 3).random_sample(5))
        assert not np.array_equal(graph_rng(42).random_sample(5), run_rng(42).random_sample(5))
        assert not np.array_equal(run_rng(42, 0).random_sample(5), run_rng(42, 1).random_sample(5))

    def test_first_round_recoveries_independent_of_seeding(self):
        config = SimulationConfig.default().model_copy(update={"time_steps": 1})
        graph, _ = generate_from_config(config)
        seeded = set(np.flatnonzero(graph.states() == I))

        history, _ = SIREngine.from_config(graph, config).simulate(record_states=True)
        recovered = set(np.flatnonzero(history[1].states == R))

        # About gamma * |seeded| recover, not the whole seeded set
        assert recovered != seeded
        assert history[1].newly_recovered < len(seeded) / 2

    def test_from_config_run_ids_differ(self, random_graph):
        config = SimulationConfig(N=120, avg_degree=4, time_steps=40)
        _, m0 = SIREngine.from_config(random_graph.copy(), config, run_id=0).simulate()
        _, m0_again = SIREngine.from_config(random_graph.copy(), config, run_id=0).simulate()
        _, m1 = SIREngine.from_config(random_graph.copy(), config, run_id=1).simulate()
        assert m0 == m0_again
        assert m0["I_counts"] != m1["I_counts"]


class TestMetrics:
    """Test epidemic metrics."""

    def _history(self):
        counts = [(8, 2, 0, 0), (6, 3, 1, 2), (5, 2, 3, 1), (5, 0, 5, 0)]
        return [RoundState(t=t, S=s, I=i, R=r, newly_infected=n) for t, (s, i, r, n) in enumerate(counts)]

    def test_compute_epidemic_metrics(self):
        metrics = compute_epidemic_metrics(self._history(), N=10)
        assert metrics["peak_infected"] == 3
        assert metrics["peak_time"] == 1
        assert metrics["extinction_time"] == 3
        assert metrics["total_steps"] == 3
        assert metrics["attack_rate"] == pytest.approx(0.5)
        assert metrics["total_new_infections"] == 3
        assert metrics["final_R"] == 5
        assert metrics["growth_ratio"] == pytest.approx((3 / 2 + 2 / 3 + 0) / 3)

    def test_no_extinction(self):
        history = [RoundState(t=0, S=1, I=1, R=0)]
        assert compute_epidemic_metrics(history, N=2)["extinction_time"] is None

    def test_collector_aggregate(self):
        collector = MetricsCollector(N_total=10)
        assert collector.compute_aggregate_metrics() == {}

        collector.add_run(
            {"attack_rate": 0.2, "peak_infected": 4, "peak_time": 2, "final_I": 0, "growth_ratio": 0.5}
        )
        collector.add_run(
            {"attack_rate": 0.6, "peak_infected": 6, "peak_time": 4, "final_I": 1, "growth_ratio": 1.5}
        )
        aggregate = collector.compute_aggregate_metrics()

        assert aggregate["num_runs"] == 2
        assert aggregate["mean_attack_rate"] == pytest.approx(0.4)
        assert aggregate["std_attack_rate"] == pytest.approx(0.2)
        assert aggregate["mean_peak_infected"] == pytest.approx(5.0)
        assert aggregate["extinction_probability"] == pytest.approx(0.5)
        assert aggregate["mean_growth_ratio"] == pytest.approx(1.0)

    def test_growth_ratio(self):
        assert MetricsCollector.compute_growth_ratio([1, 2, 4, 0, 0]) == pytest.approx((2 + 2 + 0) / 3)
        assert MetricsCollector.compute_growth_ratio([0, 0]) == 0.0


class TestConfig:
    """Test configuration."""

    def test_config_default(self):
        config = SimulationConfig.default()
        assert config.N == 1000
        assert config.avg_degree == 15
        assert config.time_steps == 100
        assert config.beta == 0.3
        assert config.gamma == 0.1

    def test_config_toy_path(self):
        config = SimulationConfig.toy_path()
        assert config.N == 6
        assert config.beta == 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [dict(beta=1.2), dict(gamma=-0.1), dict(time_steps=-3), dict(N=5, avg_degree=5), dict(seed=-1)],
    )
    def test_config_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            SimulationConfig(**kwargs)

    def test_interaction_ranges(self):
        with pytest.raises(ValidationError):
            InteractionConfig(strength_min=0.6, strength_max=0.5)
        with pytest.raises(ValidationError):
            InteractionConfig(frequency_min=5, frequency_max=5)

    def test_config_save_load(self, tmp_path):
        config = SimulationConfig(N=50, avg_degree=3, beta=0.25)
        config_path = tmp_path / "config.json"

        config.save(config_path)
        loaded_config = SimulationConfig.load(config_path)

        assert loaded_config == config

    def test_generate_from_config(self):
        config = SimulationConfig(N=30, avg_degree=2, seed=9)
        g1, metadata = generate_from_config(config)
        g2, _ = generate_from_config(config)
        assert metadata["N"] == 30
        assert list(g1.edges()) == list(g2.edges())
