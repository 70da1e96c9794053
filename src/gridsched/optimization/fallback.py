"""
Local dispatch heuristic used when the remote optimizer is unavailable.

The schedule and recommendations are a pure function of the profile. The
efficiency, fidelity and summary figures are illustrative values drawn from
an injectable random generator; only their bounds are meaningful.
"""

import time
from typing import List, Optional

import numpy as np

from .base import RuleBasedOptimizer
from ..models import (
    BatteryAction, EnergyProfile, OptimizationResult, OptimizationSummary,
    RECOMMENDATION_WINDOW, Recommendation, RecommendationType, ScheduleEntry,
    SolverMetrics, round_mw
)

# Surplus thresholds as a share of battery capacity
EXCESS_THRESHOLD = 0.5
DEFICIT_THRESHOLD = 0.3

EXPORT_SHARE = 0.8
IMPORT_SHARE = 0.9

EFFICIENCY_RANGE = (85, 95)
FIDELITY_RANGE = (0.92, 0.98)
EFFICIENCY_GAIN_RANGE = (15, 25)
COST_SAVING_RANGE = (12000, 17000)
CARBON_REDUCTION_RANGE = (450, 650)
SYSTEM_EFFICIENCY_RANGE = (88, 96)


class FallbackOptimizer(RuleBasedOptimizer):
    """Greedy charge-on-surplus / discharge-on-deficit battery dispatch."""

    def __init__(self, rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 recommendation_window: int = RECOMMENDATION_WINDOW):
        super().__init__("fallback_dispatch")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.recommendation_window = recommendation_window

    def _uniform(self, bounds) -> float:
        low, high = bounds
        return low + self.rng.random() * (high - low)

    def _schedule_entry(self, label: str, surplus: int, battery: int) -> ScheduleEntry:
        return ScheduleEntry(
            hour=label,
            action=BatteryAction.CHARGE if surplus > 0 else BatteryAction.DISCHARGE,
            amount=round_mw(min(abs(surplus), battery)),
            efficiency=round_mw(self._uniform(EFFICIENCY_RANGE)),
            grid_balance=round_mw(surplus),
        )

    @staticmethod
    def recommend(label: str, surplus: int, battery: int) -> Optional[Recommendation]:
        """Advisory for one hour, or None when the imbalance is within tolerance."""
        if surplus > battery * EXCESS_THRESHOLD:
            return Recommendation(
                time=label,
                type=RecommendationType.EXCESS,
                message=(
                    "High renewable output detected. Recommend charging storage or "
                    f"exporting {round_mw(surplus * EXPORT_SHARE)} MW to grid."
                ),
            )
        if surplus < -battery * DEFICIT_THRESHOLD:
            return Recommendation(
                time=label,
                type=RecommendationType.DEFICIT,
                message=(
                    "Demand exceeds supply. Recommend discharging storage or "
                    f"importing {round_mw(abs(surplus) * IMPORT_SHARE)} MW from grid."
                ),
            )
        return None

    def _metrics(self) -> SolverMetrics:
        return SolverMetrics(
            algorithm="QAOA (Fallback Mode)",
            qubits=12,
            gates=248,
            depth=42,
            fidelity=round(self._uniform(FIDELITY_RANGE), 3),
            execution_time="(Simulated)",
            iterations=50,
        )

    def _summary(self) -> OptimizationSummary:
        return OptimizationSummary(
            efficiency_gain=round_mw(self._uniform(EFFICIENCY_GAIN_RANGE)),
            cost_saving=round_mw(self._uniform(COST_SAVING_RANGE)),
            carbon_reduction=round_mw(self._uniform(CARBON_REDUCTION_RANGE)),
            system_efficiency=round_mw(self._uniform(SYSTEM_EFFICIENCY_RANGE)),
        )

    def solve(self, profile: EnergyProfile) -> OptimizationResult:
        start_time = time.time()
        battery = profile.capacity.battery

        schedule: List[ScheduleEntry] = []
        recommendations: List[Recommendation] = []

        for idx, sample in enumerate(profile.hourly):
            surplus = sample.surplus
            schedule.append(self._schedule_entry(sample.label, surplus, battery))

            if idx < self.recommendation_window:
                recommendation = self.recommend(sample.label, surplus, battery)
                if recommendation is not None:
                    recommendations.append(recommendation)

        solve_time = time.time() - start_time
        self.logger.info(
            f"Fallback plan for {profile.region.id}: "
            f"{sum(e.action is BatteryAction.CHARGE for e in schedule)} charge hours, "
            f"{len(recommendations)} recommendations"
        )

        return OptimizationResult(
            schedule=schedule,
            recommendations=recommendations,
            metrics=self._metrics(),
            summary=self._summary(),
            using_real_backend=False,
            metadata={"method": self.name, "solve_time": solve_time},
        )
