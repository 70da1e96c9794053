"""
Configuration primitives for the grid dispatch scheduler.
Provides file-backed, mergeable and validatable configuration objects.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Union, List
from pathlib import Path
from urllib.parse import urlparse
import yaml
import json
from enum import Enum
import logging

from ..exceptions import ConfigurationError


class ConfigFormat(Enum):
    """Supported configuration file formats."""
    YAML = "yaml"
    JSON = "json"


class ValidationLevel(Enum):
    """Configuration validation levels."""
    STRICT = "strict"      # Fail on any validation error
    WARN = "warn"          # Log warnings but continue
    PERMISSIVE = "permissive"  # Ignore validation errors


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add a validation error."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a validation warning."""
        self.warnings.append(message)

    def extend(self, other: 'ConfigValidationResult', prefix: str = "") -> None:
        """Fold another result into this one, optionally prefixing messages."""
        for error in other.errors:
            self.add_error(f"{prefix}{error}")
        for warning in other.warnings:
            self.add_warning(f"{prefix}{warning}")


class BaseConfig(ABC):
    """Abstract base class for all configuration objects."""

    def __init__(self, validation_level: ValidationLevel = ValidationLevel.STRICT):
        self.validation_level = validation_level
        self._logger = logging.getLogger(f"gridsched.config.{self.__class__.__name__}")

    @abstractmethod
    def validate(self) -> ConfigValidationResult:
        """Validate the configuration."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseConfig':
        """Create configuration from dictionary."""
        pass

    def save_to_file(self, file_path: Union[str, Path], format: ConfigFormat = ConfigFormat.YAML) -> None:
        """Save configuration to file."""
        file_path = Path(file_path)
        data = self.to_dict()

        with open(file_path, 'w') as f:
            if format == ConfigFormat.YAML:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2)
            else:
                json.dump(data, f, indent=2)

        self._logger.info(f"Saved configuration to {file_path}")

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path]) -> 'BaseConfig':
        """Load configuration from a YAML or JSON file."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        suffix = file_path.suffix.lower()
        try:
            with open(file_path, 'r') as f:
                if suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not parse {file_path}: {e}") from e

        config = cls.from_dict(data or {})
        config._logger.info(f"Loaded configuration from {file_path}")
        return config

    def merge(self, other: 'BaseConfig') -> 'BaseConfig':
        """Merge this configuration with another; values from ``other`` win."""
        merged = self._deep_merge(self.to_dict(), other.to_dict())
        return self.__class__.from_dict(merged)

    @staticmethod
    def _deep_merge(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = dict1.copy()

        for key, value in dict2.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = BaseConfig._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def _validate_endpoint(result: ConfigValidationResult, base_url: str, timeout: float) -> None:
    parsed = urlparse(base_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        result.add_error(f"Invalid endpoint URL: {base_url!r}")

    if timeout <= 0:
        result.add_error(f"Timeout must be > 0, got {timeout}")
    elif timeout > 60:
        result.add_warning(f"Timeout of {timeout}s will stall the dashboard")


@dataclass
class IrradianceConfig:
    """Settings for the solar-irradiance lookup service."""
    enabled: bool = True
    base_url: str = "https://developer.nrel.gov/api/solar/solar_resource/v1.json"
    api_key: str = "DEMO_KEY"
    timeout: float = 5.0  # seconds

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult()
        _validate_endpoint(result, self.base_url, self.timeout)

        if not self.api_key:
            result.add_error("Irradiance API key cannot be empty")
        elif self.api_key == "DEMO_KEY":
            result.add_warning("Using the rate-limited DEMO_KEY for irradiance lookups")

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "base_url": self.base_url,
            "api_key": self.api_key,
            "timeout": self.timeout
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IrradianceConfig':
        defaults = cls()
        return cls(
            enabled=data.get("enabled", defaults.enabled),
            base_url=data.get("base_url", defaults.base_url),
            api_key=data.get("api_key", defaults.api_key),
            timeout=data.get("timeout", defaults.timeout)
        )


@dataclass
class OptimizerBackendConfig:
    """Settings for the remote optimization service."""
    enabled: bool = True
    base_url: str = "https://quantumscheduler.up.railway.app"
    path: str = "/api/optimize"
    timeout: float = 5.0  # seconds

    @property
    def endpoint(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.path.lstrip("/")

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult()
        _validate_endpoint(result, self.base_url, self.timeout)

        if not self.path.startswith("/"):
            result.add_error(f"Optimizer path must start with '/', got {self.path!r}")

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "base_url": self.base_url,
            "path": self.path,
            "timeout": self.timeout
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptimizerBackendConfig':
        defaults = cls()
        return cls(
            enabled=data.get("enabled", defaults.enabled),
            base_url=data.get("base_url", defaults.base_url),
            path=data.get("path", defaults.path),
            timeout=data.get("timeout", defaults.timeout)
        )


@dataclass
class FallbackConfig:
    """Settings for the local fallback heuristic."""
    random_seed: Optional[int] = None
    recommendation_window: int = 8  # hours

    def validate(self) -> ConfigValidationResult:
        result = ConfigValidationResult()

        if self.random_seed is not None and self.random_seed < 0:
            result.add_error(f"Random seed must be >= 0, got {self.random_seed}")

        if not 0 <= self.recommendation_window <= 24:
            result.add_error(
                f"Recommendation window must be between 0 and 24, got {self.recommendation_window}"
            )

        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "random_seed": self.random_seed,
            "recommendation_window": self.recommendation_window
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FallbackConfig':
        return cls(
            random_seed=data.get("random_seed"),
            recommendation_window=data.get("recommendation_window", 8)
        )
