"""
Data models for generation profiles and dispatch results.
"""

from .profile import (
    DataSource,
    HourSample,
    CapacityEstimate,
    EnergyProfile,
    round_mw
)

from .dispatch import (
    RECOMMENDATION_WINDOW,
    BatteryAction,
    RecommendationType,
    ScheduleEntry,
    Recommendation,
    SolverMetrics,
    OptimizationSummary,
    OptimizationResult
)

__all__ = [
    # Generation profile
    "DataSource",
    "HourSample",
    "CapacityEstimate",
    "EnergyProfile",
    "round_mw",

    # Dispatch results
    "RECOMMENDATION_WINDOW",
    "BatteryAction",
    "RecommendationType",
    "ScheduleEntry",
    "Recommendation",
    "SolverMetrics",
    "OptimizationSummary",
    "OptimizationResult"
]
