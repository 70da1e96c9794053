"""Grid dispatch scheduler library initialization."""

from .config import SchedulerConfig
from .exceptions import GridSchedError, BackendUnavailableError, DataUnavailableError
from .regions import Region, get_region, list_regions
from .simulation import GenerationProfileBuilder, simulate_profile
from .session import BackendStatus, SessionController

# Import advanced modules
from . import optimization
from . import models

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "SchedulerConfig",
    "GridSchedError",
    "BackendUnavailableError",
    "DataUnavailableError",
    "Region",
    "get_region",
    "list_regions",
    "GenerationProfileBuilder",
    "simulate_profile",
    "BackendStatus",
    "SessionController",
    "optimization",
    "models"
]
