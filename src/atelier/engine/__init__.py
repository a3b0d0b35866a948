"""Agent runtime: coordinator, workers and the simulation that wires them."""

from atelier.engine.agent import Agent, AgentState
from atelier.engine.coordinator import DEFAULT_NAME, CoordinatorAgent, build_backlog
from atelier.engine.simulation import Simulation, SimulationResult, run_simulation
from atelier.engine.transport import LocalTransport, RecordingTransport, Transport
from atelier.engine.worker import (
    DrawSource,
    WorkerAgent,
    WorkerState,
    WorkerStats,
    generate_skills,
)

__all__ = [
    "DEFAULT_NAME",
    "Agent",
    "AgentState",
    "CoordinatorAgent",
    "DrawSource",
    "LocalTransport",
    "RecordingTransport",
    "Simulation",
    "SimulationResult",
    "Transport",
    "WorkerAgent",
    "WorkerState",
    "WorkerStats",
    "build_backlog",
    "generate_skills",
    "run_simulation",
]
