"""
Battery dispatch result data model.

Results arrive either from the remote optimizer (parsed with ``from_dict``)
or from the local fallback heuristic. Both produce the same records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError
from ..validation import Validator
from .profile import EnergyProfile

# Advisories cover only the first hours of a profile
RECOMMENDATION_WINDOW = 8  # hours


class BatteryAction(str, Enum):
    """Battery action for one hour of the schedule."""
    CHARGE = "Charge"
    DISCHARGE = "Discharge"


class RecommendationType(str, Enum):
    """Kind of operator advisory."""
    EXCESS = "excess"
    DEFICIT = "deficit"


def _require(data: Dict[str, Any], key: str, expected_type=(int, float)) -> Any:
    """Fetch a required field from a wire payload, checking its type."""
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise ValidationError(f"Missing field '{key}'")
    value = data[key]
    Validator.validate_type(value, expected_type)
    return value


@dataclass
class ScheduleEntry:
    """Battery instruction for one hour."""
    hour: str
    action: BatteryAction
    amount: int  # MW
    efficiency: float  # %
    grid_balance: int  # MW, signed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.hour,
            "action": self.action.value,
            "amount": self.amount,
            "efficiency": self.efficiency,
            "gridBalance": self.grid_balance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScheduleEntry':
        action = _require(data, "action", str)
        try:
            action = BatteryAction(action)
        except ValueError:
            raise ValidationError(f"Unknown battery action: {action}") from None

        amount = _require(data, "amount")
        if amount < 0:
            raise ValidationError(f"Battery amount must be >= 0, got {amount}")

        return cls(
            hour=str(_require(data, "hour", (str, int))),
            action=action,
            amount=amount,
            efficiency=_require(data, "efficiency"),
            grid_balance=_require(data, "gridBalance"),
        )


@dataclass
class Recommendation:
    """Advisory message for an operator."""
    time: str
    type: RecommendationType
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"time": self.time, "type": self.type.value, "message": self.message}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recommendation':
        rec_type = _require(data, "type", str)
        try:
            rec_type = RecommendationType(rec_type)
        except ValueError:
            raise ValidationError(f"Unknown recommendation type: {rec_type}") from None
        return cls(
            time=str(_require(data, "time", (str, int))),
            type=rec_type,
            message=_require(data, "message", str),
        )


@dataclass
class SolverMetrics:
    """Descriptive metrics of the solver run."""
    algorithm: str
    qubits: int
    gates: int
    depth: int
    fidelity: float
    execution_time: str
    iterations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimization": self.algorithm,
            "qubits": self.qubits,
            "gates": self.gates,
            "depth": self.depth,
            "fidelity": self.fidelity,
            "executionTime": self.execution_time,
            "iterations": self.iterations,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolverMetrics':
        fidelity = _require(data, "fidelity", (int, float, str))
        try:
            fidelity = float(fidelity)
        except ValueError:
            raise ValidationError(f"Fidelity is not numeric: {fidelity!r}") from None

        return cls(
            algorithm=_require(data, "optimization", str),
            qubits=_require(data, "qubits", int),
            gates=_require(data, "gates", int),
            depth=_require(data, "depth", int),
            fidelity=fidelity,
            execution_time=str(_require(data, "executionTime", (str, int, float))),
            iterations=data.get("iterations", 0),
        )


@dataclass
class OptimizationSummary:
    """Aggregate figures shown next to the schedule."""
    efficiency_gain: float  # %
    cost_saving: float
    carbon_reduction: float  # tonnes CO2
    system_efficiency: float  # %

    def to_dict(self) -> Dict[str, float]:
        return {
            "totalOptimization": self.efficiency_gain,
            "costSaving": self.cost_saving,
            "carbonReduction": self.carbon_reduction,
            "efficiency": self.system_efficiency,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptimizationSummary':
        return cls(
            efficiency_gain=_require(data, "totalOptimization"),
            cost_saving=_require(data, "costSaving"),
            carbon_reduction=_require(data, "carbonReduction"),
            system_efficiency=_require(data, "efficiency"),
        )


@dataclass
class OptimizationResult:
    """Battery schedule, advisories and metrics for one profile."""
    schedule: List[ScheduleEntry]
    recommendations: List[Recommendation]
    metrics: SolverMetrics
    summary: OptimizationSummary
    using_real_backend: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule": [entry.to_dict() for entry in self.schedule],
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "metrics": self.metrics.to_dict(),
            "summary": self.summary.to_dict(),
            "usingRealBackend": self.using_real_backend,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  expected_hours: Optional[int] = None) -> 'OptimizationResult':
        """Parse a wire payload, raising ValidationError when it is malformed."""
        schedule_data = _require(data, "schedule", list)
        if expected_hours is not None and len(schedule_data) != expected_hours:
            raise ValidationError(
                f"Schedule has {len(schedule_data)} entries, expected {expected_hours}"
            )

        return cls(
            schedule=[ScheduleEntry.from_dict(entry) for entry in schedule_data],
            recommendations=[
                Recommendation.from_dict(rec)
                for rec in (_require(data, "recommendations", list)
                            if "recommendations" in data else [])
            ],
            metrics=SolverMetrics.from_dict(_require(data, "metrics", dict)),
            summary=OptimizationSummary.from_dict(_require(data, "summary", dict)),
            using_real_backend=bool(data.get("usingRealBackend", False)),
        )

    def validate_for_profile(self, profile: EnergyProfile,
                             recommendation_window: int = RECOMMENDATION_WINDOW) -> None:
        """Check that this plan fits ``profile``, raising ValidationError if not.

        The schedule must cover the profile hour by hour, no battery amount may
        exceed the battery capacity, and advisories may only refer to the first
        ``recommendation_window`` hours.
        """
        labels = [sample.label for sample in profile.hourly]
        if len(self.schedule) != len(labels):
            raise ValidationError(
                f"Schedule has {len(self.schedule)} entries, expected {len(labels)}"
            )

        battery = profile.capacity.battery
        for entry, label in zip(self.schedule, labels):
            if entry.hour != label:
                raise ValidationError(f"Schedule entry for {entry.hour} found where {label} expected")
            if entry.amount > battery:
                raise ValidationError(
                    f"Battery amount {entry.amount} MW at {entry.hour} exceeds capacity {battery} MW"
                )

        if len(self.recommendations) > recommendation_window:
            raise ValidationError(
                f"Got {len(self.recommendations)} recommendations, "
                f"at most {recommendation_window} allowed"
            )

        window = set(labels[:recommendation_window])
        for rec in self.recommendations:
            if rec.time not in window:
                raise ValidationError(f"Recommendation for {rec.time} is outside the advisory window")
