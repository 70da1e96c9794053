"""
Configuration package for the grid dispatch scheduler.
Provides file-backed, hierarchical and validatable configuration management.
"""

from .base import (
    BaseConfig,
    ConfigFormat,
    ValidationLevel,
    ConfigValidationResult,
    IrradianceConfig,
    OptimizerBackendConfig,
    FallbackConfig
)

from .scheduler_config import (
    MonitoringConfig,
    SchedulerConfig
)

__all__ = [
    # Base configuration classes
    "BaseConfig",
    "ConfigFormat",
    "ValidationLevel",
    "ConfigValidationResult",

    # Collaborator endpoints
    "IrradianceConfig",
    "OptimizerBackendConfig",

    # Local heuristic
    "FallbackConfig",

    # Session configuration
    "MonitoringConfig",
    "SchedulerConfig"
]
