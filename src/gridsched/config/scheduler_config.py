"""
Main scheduler configuration class that integrates all configuration components.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import logging

from .base import (
    BaseConfig, ConfigValidationResult, ValidationLevel,
    IrradianceConfig, OptimizerBackendConfig, FallbackConfig
)
from ..exceptions import ConfigurationError
from ..regions import REGION_CATALOG, DEFAULT_REGION_ID

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class MonitoringConfig:
    """Configuration for logging and session event history."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    max_event_history: int = 1000

    def validate(self) -> ConfigValidationResult:
        """Validate monitoring configuration."""
        result = ConfigValidationResult()

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            result.add_error(f"Invalid log level: {self.log_level}")

        if self.max_event_history <= 0:
            result.add_error(f"Max event history must be > 0, got {self.max_event_history}")

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "max_event_history": self.max_event_history
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonitoringConfig':
        return cls(
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
            max_event_history=data.get("max_event_history", 1000)
        )


@dataclass
class SchedulerConfig(BaseConfig):
    """Top-level configuration for a dashboard session."""

    name: str = "Grid Dispatch Scheduler"
    default_region: str = DEFAULT_REGION_ID

    irradiance: IrradianceConfig = field(default_factory=IrradianceConfig)
    optimizer: OptimizerBackendConfig = field(default_factory=OptimizerBackendConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    config_version: str = "1.0"
    validation_level: ValidationLevel = ValidationLevel.STRICT

    def __post_init__(self):
        """Initialize after dataclass creation."""
        super().__init__(self.validation_level)
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging based on monitoring configuration."""
        logger = logging.getLogger("gridsched")
        logger.setLevel(getattr(logging, self.monitoring.log_level, logging.INFO))
        formatter = logging.Formatter(LOG_FORMAT)

        if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                   for h in logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.monitoring.log_file and not any(
                isinstance(h, logging.FileHandler) and h.baseFilename.endswith(self.monitoring.log_file)
                for h in logger.handlers):
            file_handler = logging.FileHandler(self.monitoring.log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    def validate(self) -> ConfigValidationResult:
        """Validate the entire scheduler configuration."""
        result = ConfigValidationResult()

        if not self.name:
            result.add_error("Scheduler name cannot be empty")

        if self.default_region not in REGION_CATALOG:
            result.add_error(f"Unknown default region: {self.default_region}")

        components = [
            ("irradiance", self.irradiance),
            ("optimizer", self.optimizer),
            ("fallback", self.fallback),
            ("monitoring", self.monitoring)
        ]

        for component_name, component in components:
            result.extend(component.validate(), prefix=f"{component_name}: ")

        if not self.optimizer.enabled:
            result.add_warning("Remote optimizer disabled; every cycle will use the fallback")

        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "name": self.name,
            "default_region": self.default_region,
            "irradiance": self.irradiance.to_dict(),
            "optimizer": self.optimizer.to_dict(),
            "fallback": self.fallback.to_dict(),
            "monitoring": self.monitoring.to_dict(),
            "config_version": self.config_version,
            "validation_level": self.validation_level.value
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SchedulerConfig':
        """Create configuration from dictionary."""
        level = data.get("validation_level", ValidationLevel.STRICT.value)
        try:
            validation_level = ValidationLevel(level)
        except ValueError:
            raise ConfigurationError(f"Unknown validation level: {level}") from None

        return cls(
            name=data.get("name", "Grid Dispatch Scheduler"),
            default_region=data.get("default_region", DEFAULT_REGION_ID),
            irradiance=IrradianceConfig.from_dict(data.get("irradiance") or {}),
            optimizer=OptimizerBackendConfig.from_dict(data.get("optimizer") or {}),
            fallback=FallbackConfig.from_dict(data.get("fallback") or {}),
            monitoring=MonitoringConfig.from_dict(data.get("monitoring") or {}),
            config_version=data.get("config_version", "1.0"),
            validation_level=validation_level
        )

    def validate_and_log(self) -> bool:
        """Validate configuration and log results.

        Returns whether the configuration is usable at the configured
        validation level: errors fail STRICT, are logged as warnings under
        WARN and are ignored under PERMISSIVE.
        """
        result = self.validate()

        logger = logging.getLogger("gridsched.config")

        if result.is_valid:
            logger.info("Configuration validation passed")
        elif self.validation_level == ValidationLevel.PERMISSIVE:
            logger.debug(f"Ignoring {len(result.errors)} validation errors")
        else:
            log = logger.error if self.validation_level == ValidationLevel.STRICT else logger.warning
            log("Configuration validation failed")
            for error in result.errors:
                log(f"Validation error: {error}")

        for warning in result.warnings:
            logger.warning(f"Validation warning: {warning}")

        return result.is_valid or self.validation_level != ValidationLevel.STRICT
