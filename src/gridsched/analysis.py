"""Read-model helpers that turn session state into dashboard figures."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .models import EnergyProfile, OptimizationResult, ScheduleEntry
from .optimization import RECOMMENDATION_WINDOW
from .session import BackendStatus, SessionState

_STATUS_LABELS = {
    BackendStatus.CHECKING: "Connecting to Optimizer Backend...",
    BackendStatus.CONNECTED: "Remote Optimizer Backend",
    BackendStatus.FALLBACK: "Simulation Mode (Backend Offline)",
}


@dataclass
class ProfileStatistics:
    """Daily aggregates of a generation profile, in MW."""
    peak_demand: int
    peak_generation: int
    renewable_share: float  # generation / demand over the day
    surplus_hours: int
    max_surplus: int
    max_deficit: int


@dataclass
class DashboardSnapshot:
    """Everything the dashboard needs to render one frame."""
    region_id: str
    status: BackendStatus
    status_label: str
    is_processing: bool
    data_source_label: Optional[str] = None
    current: Dict[str, int] = field(default_factory=dict)
    net_balance: Optional[int] = None
    capacity: Dict[str, int] = field(default_factory=dict)
    statistics: Optional[ProfileStatistics] = None
    schedule_window: List[ScheduleEntry] = field(default_factory=list)
    recommendations: List[Dict[str, str]] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)
    using_real_backend: bool = False


def status_label(status: BackendStatus, using_real_data: bool = False) -> str:
    """Human-readable backend indicator."""
    label = _STATUS_LABELS[status]
    if status is BackendStatus.CONNECTED and using_real_data:
        label += " + NREL Data"
    return label


def profile_statistics(profile: EnergyProfile) -> ProfileStatistics:
    totals = np.array([sample.total for sample in profile.hourly])
    demand = np.array([sample.demand for sample in profile.hourly])
    surplus = totals - demand

    return ProfileStatistics(
        peak_demand=int(demand.max()),
        peak_generation=int(totals.max()),
        renewable_share=float(totals.sum() / demand.sum()),
        surplus_hours=int((surplus > 0).sum()),
        max_surplus=int(max(surplus.max(), 0)),
        max_deficit=int(max(-surplus.min(), 0)),
    )


def schedule_window(result: OptimizationResult,
                    hours: int = RECOMMENDATION_WINDOW) -> List[ScheduleEntry]:
    """The first ``hours`` entries of the battery schedule."""
    return result.schedule[:hours]


def snapshot(state: SessionState) -> DashboardSnapshot:
    """Build a render-ready view of the session."""
    view = DashboardSnapshot(
        region_id=state.region_id,
        status=state.backend_status,
        status_label=status_label(state.backend_status, state.using_real_data),
        is_processing=state.is_processing,
    )

    profile = state.profile
    if profile is not None:
        current = profile.current.to_dict()
        del current["hour"]
        view.data_source_label = profile.data_source_label
        view.current = current
        view.net_balance = profile.net_balance
        view.capacity = profile.capacity.to_dict()
        view.statistics = profile_statistics(profile)

    result = state.result
    if result is not None:
        view.schedule_window = schedule_window(result)
        view.recommendations = [rec.to_dict() for rec in result.recommendations]
        view.metrics = result.metrics.to_dict()
        view.summary = result.summary.to_dict()
        view.using_real_backend = result.using_real_backend

    return view
