"""Configuration management for contact-network SIR runs."""

from typing import Literal
from pathlib import Path
from pydantic import BaseModel, Field, model_validator
import json


class InteractionConfig(BaseModel):
    """Ranges used when sampling edge interactions."""

    frequency_min: int = Field(default=1, ge=1, description="Lowest contact frequency (inclusive)")
    frequency_max: int = Field(default=10, ge=2, description="Highest contact frequency (exclusive)")
    strength_min: float = Field(default=0.1, gt=0.0, lt=1.0, description="Lowest strength (inclusive)")
    strength_max: float = Field(default=1.0, gt=0.0, le=1.0, description="Highest strength (exclusive)")

    @model_validator(mode="after")
    def check_ranges(self) -> "InteractionConfig":
        """Ranges must be non-empty."""
        if self.frequency_min >= self.frequency_max:
            raise ValueError("frequency_min must be < frequency_max")
        if self.strength_min >= self.strength_max:
            raise ValueError("strength_min must be < strength_max")
        return self


class SimulationConfig(BaseModel):
    """Main configuration for a contact-network SIR experiment."""

    # Random seed
    seed: int = Field(default=42, ge=0, description="Random seed for reproducibility")

    # Graph parameters
    N: int = Field(default=1000, ge=0, description="Number of people (nodes)")
    avg_degree: int = Field(
        default=15, ge=0, description="Edges each node adds during generation"
    )
    initial_infected_fraction: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Probability a node starts Infected"
    )
    interaction: InteractionConfig = Field(
        default_factory=InteractionConfig, description="Edge interaction sampling ranges"
    )

    # Dynamics
    time_steps: int = Field(default=100, ge=0, description="Number of synchronous rounds")
    beta: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Per-infected-neighbour infection probability"
    )
    gamma: float = Field(default=0.1, ge=0.0, le=1.0, description="Per-round recovery probability")
    runs: int = Field(default=1, ge=1, description="Independent runs on the same graph")

    # Centrality
    cost_transform: Literal["truncated", "exact"] = Field(
        default="truncated", description="Edge strength to path cost transform"
    )

    # Output
    output_dir: str = Field(default="runs/exp001", description="Output directory for results")

    @model_validator(mode="after")
    def check_degree_fits(self) -> "SimulationConfig":
        """A node cannot add more edges than there are other nodes."""
        if self.N > 0 and self.avg_degree > self.N - 1:
            raise ValueError(f"avg_degree={self.avg_degree} exceeds N-1={self.N - 1}")
        return self

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return self.model_dump()

    def to_json(self) -> str:
        """Convert config to JSON string."""
        return self.model_dump_json(indent=2)

    def save(self, path: Path | str) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, path: Path | str) -> "SimulationConfig":
        """Load config from JSON file."""
        path = Path(path)
        with open(path, "r") as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def default(cls) -> "SimulationConfig":
        """Reference setup: 1000 people, degree target 15, 100 rounds."""
        return cls(N=1000, avg_degree=15, time_steps=100, beta=0.3, gamma=0.1)

    @classmethod
    def toy_path(cls) -> "SimulationConfig":
        """Tiny deterministic-ish setup used in demos."""
        return cls(
            seed=7,
            N=6,
            avg_degree=1,
            initial_infected_fraction=0.0,
            time_steps=10,
            beta=1.0,
            gamma=0.0,
        )
