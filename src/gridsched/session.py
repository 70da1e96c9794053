"""
Dashboard session orchestration and the backend availability state machine.

Each region selection or retry starts a cycle: build the profile, ask the
remote optimizer for a plan, fall back to the local heuristic on failure.
Cycles are numbered. A cycle that finishes after a newer one has started is
stale and its results are discarded, so the session always shows the plan for
the most recently requested region.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .config import SchedulerConfig
from .events import EventType, SessionEvent
from .exceptions import ConfigurationError
from .irradiance import NRELIrradianceLookup
from .models import EnergyProfile, OptimizationResult, DataSource
from .optimization import (
    FallbackOptimizer, OptimizerBackend, RemoteOptimizerClient,
    RuleBasedOptimizer, solve_with_fallback
)
from .regions import DEFAULT_REGION_ID, Region, get_region
from .simulation import GenerationProfileBuilder

DEFAULT_OPTIMIZER_TIMEOUT = 5.0  # seconds
DEFAULT_MAX_HISTORY = 1000

EventListener = Callable[[SessionEvent], None]


class BackendStatus(str, Enum):
    """Which source the current dispatch plan came from."""
    CHECKING = "checking"
    CONNECTED = "connected"
    FALLBACK = "fallback"


@dataclass
class SessionState:
    """Everything the dashboard renders. Written only by SessionController."""
    region_id: str
    profile: Optional[EnergyProfile] = None
    result: Optional[OptimizationResult] = None
    backend_status: BackendStatus = BackendStatus.CHECKING
    using_real_data: bool = False
    is_processing: bool = False
    sequence: int = 0
    completed_at: Optional[datetime] = None


@dataclass
class CycleOutcome:
    """What one cycle produced, whether or not it was applied."""
    sequence: int
    region_id: str
    profile: EnergyProfile
    result: OptimizationResult
    backend_status: BackendStatus
    applied: bool


class SessionController:
    """Runs optimization cycles and owns the session state."""

    def __init__(
        self,
        builder: GenerationProfileBuilder,
        fallback: RuleBasedOptimizer,
        remote: Optional[OptimizerBackend] = None,
        optimizer_timeout: float = DEFAULT_OPTIMIZER_TIMEOUT,
        default_region: str = DEFAULT_REGION_ID,
        max_history: int = DEFAULT_MAX_HISTORY
    ):
        get_region(default_region)

        self.builder = builder
        self.fallback = fallback
        self.remote = remote
        self.optimizer_timeout = optimizer_timeout
        self.logger = logging.getLogger("gridsched.session")

        self._state = SessionState(region_id=default_region)
        self._latest_sequence = 0

        self._listeners: List[EventListener] = []
        self._history: List[SessionEvent] = []
        self._max_history = max_history

        self._cycles_completed = 0
        self._fallback_count = 0
        self._stale_count = 0

    @classmethod
    def from_config(cls, config: SchedulerConfig) -> 'SessionController':
        """Wire a controller with HTTP collaborators as configured.

        Raises ConfigurationError when the configuration fails validation at
        its validation level.
        """
        if not config.validate_and_log():
            errors = "; ".join(config.validate().errors)
            raise ConfigurationError(f"Invalid scheduler configuration: {errors}")

        lookup = NRELIrradianceLookup(config.irradiance) if config.irradiance.enabled else None
        remote = RemoteOptimizerClient(config.optimizer) if config.optimizer.enabled else None

        return cls(
            builder=GenerationProfileBuilder(lookup, lookup_timeout=config.irradiance.timeout),
            fallback=FallbackOptimizer(
                seed=config.fallback.random_seed,
                recommendation_window=config.fallback.recommendation_window,
            ),
            remote=remote,
            optimizer_timeout=config.optimizer.timeout,
            default_region=config.default_region,
            max_history=config.monitoring.max_event_history,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def backend_status(self) -> BackendStatus:
        return self._state.backend_status

    def add_listener(self, listener: EventListener) -> None:
        """Register a callback invoked for every session event."""
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event_type: EventType, sequence: int, region_id: str,
              **details: Any) -> None:
        event = SessionEvent(
            type=event_type,
            sequence=sequence,
            region_id=region_id,
            details=details or None,
        )

        self._history.append(event)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Session listener failed on {event_type.value}: {e}")

    def _is_latest(self, sequence: int) -> bool:
        return sequence == self._latest_sequence

    async def start(self) -> CycleOutcome:
        """Run the first cycle for the default region."""
        return await self.run_cycle(self._state.region_id)

    async def select_region(self, region_id: str) -> CycleOutcome:
        """Switch the dashboard to another region."""
        return await self.run_cycle(region_id)

    async def retry(self) -> CycleOutcome:
        """Re-run the cycle for the currently selected region."""
        return await self.run_cycle(self._state.region_id)

    async def run_cycle(self, region_id: str) -> CycleOutcome:
        """Build, optimize and publish one cycle for ``region_id``.

        Raises RegionNotFoundError before any state changes for unknown ids.
        """
        region: Region = get_region(region_id)

        self._latest_sequence += 1
        sequence = self._latest_sequence

        self._state.region_id = region_id
        self._state.backend_status = BackendStatus.CHECKING
        self._state.is_processing = True
        self.logger.info(f"Cycle {sequence} started for {region.name}")
        self._emit(EventType.CYCLE_STARTED, sequence, region_id)

        profile = await self.builder.build(region)
        if self._is_latest(sequence):
            self._state.profile = profile
            self._state.using_real_data = profile.data_source is DataSource.REAL
        self._emit(EventType.PROFILE_BUILT, sequence, region_id,
                   data_source=profile.data_source.value)

        result, connected = await solve_with_fallback(
            profile, self.fallback, self.remote, timeout=self.optimizer_timeout
        )
        status = BackendStatus.CONNECTED if connected else BackendStatus.FALLBACK

        self._cycles_completed += 1
        if not connected:
            self._fallback_count += 1

        applied = self._is_latest(sequence)
        if applied:
            self._publish(sequence, profile, result, status)
        else:
            self._stale_count += 1
            self.logger.info(
                f"Discarding stale cycle {sequence} for {region_id}; "
                f"cycle {self._latest_sequence} is current"
            )
            self._emit(EventType.STALE_RESULT_DISCARDED, sequence, region_id,
                       latest_sequence=self._latest_sequence)

        return CycleOutcome(
            sequence=sequence,
            region_id=region_id,
            profile=profile,
            result=result,
            backend_status=status,
            applied=applied,
        )

    def _publish(self, sequence: int, profile: EnergyProfile,
                 result: OptimizationResult, status: BackendStatus) -> None:
        state = self._state
        state.profile = profile
        state.result = result
        state.backend_status = status
        state.is_processing = False
        state.sequence = sequence
        state.completed_at = datetime.now()

        if status is BackendStatus.CONNECTED:
            self._emit(EventType.BACKEND_CONNECTED, sequence, state.region_id)
        else:
            self._emit(EventType.FALLBACK_ENGAGED, sequence, state.region_id)

        self.logger.info(f"Cycle {sequence} completed: backend {status.value}")
        self._emit(EventType.CYCLE_COMPLETED, sequence, state.region_id,
                   backend_status=status.value)

    def get_history(self, event_type: Optional[EventType] = None) -> List[SessionEvent]:
        """Recorded events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [event for event in self._history if event.type == event_type]

    def get_backend_stats(self) -> Dict[str, Any]:
        """Backend availability statistics across all cycles."""
        completed = self._cycles_completed
        stats = {
            "cycles_started": self._latest_sequence,
            "cycles_completed": completed,
            "fallback_rate": self._fallback_count / completed if completed else 0.0,
            "stale_results_discarded": self._stale_count,
            "backend_status": self._state.backend_status.value,
            "fallback": self.fallback.get_metadata(),
        }
        if self.remote is not None:
            stats["remote"] = self.remote.get_metadata()
        return stats
