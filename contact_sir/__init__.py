"""
Contact-network SIR package

Simulates the spread of an infection over a weighted contact graph with a
synchronous stochastic SIR engine, and scores nodes by degree and by a
shortest-path reachability measure.
"""

__version__ = "0.1.0"
__author__ = "Author"

from contact_sir.config import SimulationConfig
from contact_sir.errors import InvalidEdgeError, InvalidParameterError
from contact_sir.state import HealthState, Interaction, PersonState
from contact_sir.graph import ContactGraph
from contact_sir.graph_generation import generate_contact_graph
from contact_sir.engine import SIREngine
from contact_sir.centrality import CentralityAnalyzer
from contact_sir.metrics import MetricsCollector

__all__ = [
    "SimulationConfig",
    "InvalidEdgeError",
    "InvalidParameterError",
    "HealthState",
    "Interaction",
    "PersonState",
    "ContactGraph",
    "generate_contact_graph",
    "SIREngine",
    "CentralityAnalyzer",
    "MetricsCollector",
]
