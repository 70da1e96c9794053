"""
Base classes and interfaces for battery dispatch optimization.
A remote backend is tried first; a rule-based optimizer is always available.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from ..models import EnergyProfile, OptimizationResult


class OptimizerBackend(ABC):
    """Base class for optimizers that may be unavailable.

    ``optimize`` either returns a complete result or raises
    BackendUnavailableError. It never returns a partial result.
    """

    def __init__(self, name: str, version: str = "1.0"):
        self.name = name
        self.version = version
        self.logger = logging.getLogger(f"gridsched.optimization.{name}")
        self._last_solve_time = 0.0
        self._solve_count = 0
        self._success_count = 0

    @abstractmethod
    async def optimize(self, profile: EnergyProfile) -> OptimizationResult:
        """Compute a dispatch plan for the profile."""
        pass

    def get_metadata(self) -> Dict[str, Any]:
        """Return backend information for logging/debugging."""
        return {
            "name": self.name,
            "version": self.version,
            "solve_count": self._solve_count,
            "success_rate": self._success_count / max(1, self._solve_count),
            "last_solve_time": self._last_solve_time
        }

    def _record_solve_attempt(self, success: bool, solve_time: float) -> None:
        """Record solve statistics."""
        self._solve_count += 1
        if success:
            self._success_count += 1
        self._last_solve_time = solve_time


class RuleBasedOptimizer(ABC):
    """Base class for local rule-based optimizers used as fallbacks."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"gridsched.rules.{name}")

    @abstractmethod
    def solve(self, profile: EnergyProfile) -> OptimizationResult:
        """Compute a dispatch plan locally. Must not raise for a valid profile."""
        pass

    def get_metadata(self) -> Dict[str, Any]:
        """Return rule engine metadata."""
        return {
            "name": self.name,
            "type": "rule_based",
            "always_available": True
        }
