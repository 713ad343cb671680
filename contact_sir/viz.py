"""Visualization utilities."""

import matplotlib.pyplot as plt
import plotly.graph_objects as go
from typing import Dict, List, Optional
from pathlib import Path
from loguru import logger


def plot_sir_timeseries(
    times: List[int],
    S_counts: List[int],
    I_counts: List[int],
    R_counts: List[int],
    title: str = "SIR Dynamics",
    output_path: Optional[Path] = None,
    peak_time: Optional[int] = None,
) -> None:
    """
    Plot compartment sizes over time.

    Args:
        times: Time steps
        S_counts: Number of susceptible at each time
        I_counts: Number of infected at each time
        R_counts: Number of recovered at each time
        title: Plot title
        output_path: Path to save figure (PNG); shown interactively if None
        peak_time: If provided, draw a vertical line at the infection peak
    """
    fig, axes = plt.subplots(2, 2, figsize=(12, 8))

    panels = [
        (axes[0, 0], S_counts, "g-", "S(t)", "Susceptible"),
        (axes[0, 1], I_counts, "r-", "I(t)", "Active Infections"),
        (axes[1, 0], R_counts, "b-", "R(t)", "Recovered"),
    ]
    for ax, counts, style, label, panel_title in panels:
        ax.plot(times, counts, style, linewidth=2, label=label)
        ax.set_xlabel("Time (steps)")
        ax.set_ylabel("Count")
        ax.set_title(panel_title)
        ax.grid(True, alpha=0.3)
        ax.legend()

    # All together
    ax = axes[1, 1]
    ax.plot(times, S_counts, "g-", linewidth=2, label="S(t)", alpha=0.7)
    ax.plot(times, I_counts, "r-", linewidth=2, label="I(t)", alpha=0.7)
    ax.plot(times, R_counts, "b-", linewidth=2, label="R(t)", alpha=0.7)
    ax.set_xlabel("Time (steps)")
    ax.set_ylabel("Count")
    ax.set_title("All Compartments")
    ax.grid(True, alpha=0.3)
    ax.legend()

    if peak_time is not None:
        for a in axes.ravel():
            a.axvline(x=peak_time, color="k", linestyle=":", alpha=0.7)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {output_path}")
    else:
        plt.show()

    plt.close(fig)


def plot_centrality_scatter(
    degree: Dict[int, int],
    betweenness: Dict[int, float],
    title: str = "Degree vs Betweenness",
    output_path: Optional[Path] = None,
) -> None:
    """
    Scatter of degree against betweenness, one point per node.

    Args:
        degree: Degree per node id
        betweenness: Betweenness per node id
        title: Plot title
        output_path: Path to save figure (HTML)
    """
    nodes = sorted(degree)
    fig = go.Figure(
        data=[
            go.Scatter(
                x=[degree[n] for n in nodes],
                y=[betweenness.get(n, 0.0) for n in nodes],
                mode="markers",
                text=[f"node {n}" for n in nodes],
                hovertemplate="%{text}<br>degree=%{x}<br>betweenness=%{y:.3f}<extra></extra>",
            )
        ]
    )

    fig.update_layout(
        title=title,
        xaxis_title="Degree",
        yaxis_title="Betweenness",
        height=600,
        width=800,
    )

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.write_html(str(output_path))
        logger.info(f"Saved centrality scatter to {output_path}")
    else:
        fig.show()
