"""Coordinators that react to version conflicts.

- RetryCoordinator: Bounded automatic retries with exponential backoff
- ManualResolutionCoordinator: One-shot escalation to a resolution policy
- ConcurrencyContext: Store, settings and policy passed to coordinators
"""

from .backoff import ExponentialBackoff
from .config import RetrySettings
from .mutation import Mutation, apply_mutation
from .resolution import (
    ApplyMine,
    ConflictReport,
    Decision,
    KeepExisting,
    ManualResolutionCoordinator,
    ResolutionPolicy,
    apply_mine,
    keep_existing,
)
from .retry import RetryCoordinator
from .session import ConcurrencyContext, Sleep

__all__ = [
    "ConcurrencyContext",
    "Sleep",
    "RetrySettings",
    "ExponentialBackoff",
    "Mutation",
    "apply_mutation",
    # Automatic retries
    "RetryCoordinator",
    # Manual resolution
    "ManualResolutionCoordinator",
    "ConflictReport",
    "KeepExisting",
    "ApplyMine",
    "Decision",
    "ResolutionPolicy",
    "keep_existing",
    "apply_mine",
]
