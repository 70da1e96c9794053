"""Event definitions for dashboard sessions."""

from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

class EventType(str, Enum):
    """Types of session events."""
    # Cycle lifecycle
    CYCLE_STARTED = "cycle_started"
    CYCLE_COMPLETED = "cycle_completed"

    # Simulation
    PROFILE_BUILT = "profile_built"

    # Backend availability
    BACKEND_CONNECTED = "backend_connected"
    FALLBACK_ENGAGED = "fallback_engaged"
    STALE_RESULT_DISCARDED = "stale_result_discarded"

@dataclass
class SessionEvent:
    """A single state change within a session."""
    type: EventType
    sequence: int
    region_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    details: Optional[Dict[str, Any]] = None
