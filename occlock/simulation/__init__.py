"""Concurrency simulation for exercising the coordinators under contention."""

from .harness import Actor, ActorReport, ConcurrencySimulation, Operation, SimulationReport
from .scenarios import (
    change_subject,
    resolving_actor,
    retrying_actor,
    shift_window,
    single_attempt_actor,
)

__all__ = [
    "ConcurrencySimulation",
    "Actor",
    "ActorReport",
    "SimulationReport",
    "Operation",
    # Scenario building blocks
    "change_subject",
    "shift_window",
    "retrying_actor",
    "resolving_actor",
    "single_attempt_actor",
]
