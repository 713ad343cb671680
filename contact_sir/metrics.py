"""Metrics collection and analysis."""

import numpy as np
from typing import List, Dict, Optional, Sequence
from dataclasses import dataclass, asdict


@dataclass
class Metrics:
    """Container for aggregated metrics over independent runs."""

    num_runs: int
    mean_attack_rate: float  # Fraction of population ever infected
    std_attack_rate: float
    mean_peak_infected: float
    mean_peak_time: float
    mean_growth_ratio: float
    extinction_probability: float  # Fraction of runs with no Infected left at the end

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)


def compute_epidemic_metrics(history: Sequence, N: int) -> dict:
    """
    Summarise one simulation trajectory.

    Args:
        history: Round states with ``t``, ``S``, ``I``, ``R`` and
            ``newly_infected`` attributes, starting at t=0
        N: Population size

    Returns:
        Dictionary of metrics
    """
    times = [s.t for s in history]
    S_counts = [s.S for s in history]
    I_counts = [s.I for s in history]
    R_counts = [s.R for s in history]

    peak_index = int(np.argmax(I_counts)) if I_counts else 0
    extinction_time: Optional[int] = None
    for s in history:
        if s.I == 0:
            extinction_time = s.t
            break

    final_S = S_counts[-1] if history else N

    return {
        "times": times,
        "S_counts": S_counts,
        "I_counts": I_counts,
        "R_counts": R_counts,
        "final_S": final_S,
        "final_I": I_counts[-1] if history else 0,
        "final_R": R_counts[-1] if history else 0,
        "peak_infected": I_counts[peak_index] if history else 0,
        "peak_time": times[peak_index] if history else 0,
        "total_steps": len(history) - 1 if history else 0,
        "extinction_time": extinction_time,
        "attack_rate": MetricsCollector.compute_attack_rate(N - final_S, N),
        "growth_ratio": MetricsCollector.compute_growth_ratio(I_counts),
        "total_new_infections": int(sum(s.newly_infected for s in history)),
    }


class MetricsCollector:
    """Collects and aggregates metrics from independent simulation runs."""

    def __init__(self, N_total: int):
        """
        Initialize metrics collector.

        Args:
            N_total: Total population size
        """
        self.N_total = N_total
        self.runs: List[Dict] = []

    def add_run(self, metrics: dict) -> None:
        """Add metrics from a single run."""
        self.runs.append(metrics)

    def compute_aggregate_metrics(self) -> dict:
        """
        Compute aggregate metrics across all runs.

        Returns:
            Dictionary of aggregate metrics (empty if no runs were added)
        """
        if not self.runs:
            return {}

        attack_rates = [r.get("attack_rate", 0.0) for r in self.runs]
        peaks = [r.get("peak_infected", 0) for r in self.runs]
        peak_times = [r.get("peak_time", 0) for r in self.runs]
        growth_ratios = [r.get("growth_ratio", 0.0) for r in self.runs]
        extinct = sum(1 for r in self.runs if r.get("final_I", 0) == 0)

        return Metrics(
            num_runs=len(self.runs),
            mean_attack_rate=float(np.mean(attack_rates)),
            std_attack_rate=float(np.std(attack_rates)),
            mean_peak_infected=float(np.mean(peaks)),
            mean_peak_time=float(np.mean(peak_times)),
            mean_growth_ratio=float(np.mean(growth_ratios)),
            extinction_probability=extinct / len(self.runs),
        ).to_dict()

    @staticmethod
    def compute_growth_ratio(I_counts: List[int]) -> float:
        """
        Mean one-step growth ratio of the infected count.

        ratio ≈ mean(I[t+1] / I[t]) for t where I[t] > 0
        """
        ratios = []
        for t in range(len(I_counts) - 1):
            if I_counts[t] > 0:
                ratios.append(I_counts[t + 1] / I_counts[t])

        return float(np.mean(ratios)) if ratios else 0.0

    @staticmethod
    def compute_attack_rate(ever_infected: int, N_total: int) -> float:
        """Compute attack rate (fraction of population ever infected)."""
        return ever_infected / N_total if N_total > 0 else 0.0
