"""Command-line interface using Typer."""

import sys
import typer
from pathlib import Path
from typing import Optional
import json
from loguru import logger
from pydantic import ValidationError

from contact_sir.centrality import CentralityAnalyzer
from contact_sir.config import SimulationConfig
from contact_sir.engine import SIREngine
from contact_sir.graph_generation import generate_from_config
from contact_sir.metrics import MetricsCollector
from contact_sir.state import HealthState
from contact_sir.viz import plot_centrality_scatter, plot_sir_timeseries

app = typer.Typer(help="Contact-network SIR simulation CLI")


@app.command()
def run(
    n: int = typer.Option(1000, "--n", help="Number of people (nodes)"),
    avg_degree: int = typer.Option(15, help="Edges each node adds during generation"),
    initial_infected: float = typer.Option(0.1, help="Probability a node starts Infected"),
    time_steps: int = typer.Option(100, help="Number of synchronous rounds"),
    beta: float = typer.Option(0.3, help="Per-infected-neighbour infection probability"),
    gamma: float = typer.Option(0.1, help="Per-round recovery probability"),
    runs: int = typer.Option(1, help="Independent runs on the same graph"),
    seed: int = typer.Option(42, help="Random seed"),
    cost: str = typer.Option("truncated", help="Path cost transform: 'truncated' or 'exact'"),
    top: int = typer.Option(10, help="Number of top nodes to print per centrality"),
    output_dir: Optional[str] = typer.Option(None, help="Save config, metrics and plots here"),
    plot: bool = typer.Option(False, help="Write plots (requires --output-dir)"),
    verbose: bool = typer.Option(False, help="Log every round"),
) -> None:
    """Generate a contact graph, run the SIR engine and score node centrality."""
    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        config = SimulationConfig(
            seed=seed,
            N=n,
            avg_degree=avg_degree,
            initial_infected_fraction=initial_infected,
            time_steps=time_steps,
            beta=beta,
            gamma=gamma,
            runs=runs,
            cost_transform=cost,
            output_dir=output_dir or "runs/exp001",
        )
    except ValidationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        raise
    logger.info(f"Starting experiment: N={config.N}, runs={config.runs}, seed={config.seed}")

    graph, metadata = generate_from_config(config)

    # Run 0 mutates the generated graph; further runs start from copies of the initial state.
    initial = graph.copy()
    collector = MetricsCollector(config.N)
    first_metrics = None
    for run_id in range(config.runs):
        target = graph if run_id == 0 else initial.copy()
        engine = SIREngine.from_config(target, config, run_id=run_id)
        _, metrics = engine.simulate()
        collector.add_run(metrics)
        if first_metrics is None:
            first_metrics = metrics

    analyzer = CentralityAnalyzer(graph, cost=config.cost_transform)
    degree = analyzer.degree_centrality()
    betweenness = analyzer.betweenness_centrality()

    counts = graph.state_counts()
    typer.echo("Final states:")
    for state in HealthState:
        typer.echo(f"  {state.name.title()}: {counts[state]}")

    typer.echo(f"Degree Centrality (top {top}):")
    for node in CentralityAnalyzer.top_nodes(degree, top):
        typer.echo(f"  Node {node}: Degree {degree[node]}")

    typer.echo(f"Betweenness Centrality (top {top}):")
    for node in CentralityAnalyzer.top_nodes(betweenness, top):
        typer.echo(f"  Node {node}: Betweenness {betweenness[node]:.2f}")

    aggregate = collector.compute_aggregate_metrics()
    if config.runs > 1:
        typer.echo(
            f"Mean attack rate over {config.runs} runs: "
            f"{aggregate['mean_attack_rate']:.3f} ± {aggregate['std_attack_rate']:.3f}"
        )

    if output_dir is None:
        if plot:
            logger.warning("--plot ignored without --output-dir")
        return

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    config.save(output_path / "config.json")
    with open(output_path / "metrics.json", "w") as f:
        json.dump(
            {"graph": metadata, "run": first_metrics, "aggregate": aggregate},
            f,
            indent=2,
            default=str,
        )
    logger.info(f"Saved config and metrics to {output_path}")

    if plot:
        plot_sir_timeseries(
            first_metrics["times"],
            first_metrics["S_counts"],
            first_metrics["I_counts"],
            first_metrics["R_counts"],
            title=f"SIR on contact graph (N={config.N})",
            output_path=output_path / "timeseries.png",
            peak_time=first_metrics["peak_time"],
        )
        plot_centrality_scatter(
            degree, betweenness, output_path=output_path / "centrality.html"
        )


@app.command()
def plot(
    run_dir: str = typer.Option("runs/exp001", help="Run output directory"),
) -> None:
    """Regenerate the SIR curve from a completed run."""
    logger.info(f"Generating plots for run: {run_dir}")

    run_path = Path(run_dir)
    metrics_file = run_path / "metrics.json"
    if not metrics_file.exists():
        logger.error(f"Metrics file not found: {metrics_file}")
        raise FileNotFoundError(f"Metrics file not found: {metrics_file}")

    with open(metrics_file, "r") as f:
        metrics = json.load(f)["run"]

    plot_sir_timeseries(
        metrics["times"],
        metrics["S_counts"],
        metrics["I_counts"],
        metrics["R_counts"],
        title=f"Simulation Results: {run_dir}",
        output_path=run_path / "timeseries_regenerated.png",
        peak_time=metrics["peak_time"],
    )
    logger.info("Plots generated successfully")


if __name__ == "__main__":
    app()
