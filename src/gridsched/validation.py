"""Validation utilities for the grid dispatch scheduler."""

import math
from typing import Any, Optional, Sequence, Type, Union

from .exceptions import ValidationError, ValidationTypeError, ValidationRangeError

HOURS_PER_DAY = 24

class Validator:
    """Base validator class."""

    @staticmethod
    def validate_type(value: Any, expected_type: Union[Type, tuple]) -> None:
        """Validate value type."""
        # bool is an int subclass but never a valid quantity here
        if isinstance(value, bool) or not isinstance(value, expected_type):
            name = getattr(expected_type, "__name__", str(expected_type))
            raise ValidationTypeError(
                f"Expected type {name}, got {type(value).__name__}"
            )

    @staticmethod
    def validate_range(
        value: Union[int, float],
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None
    ) -> None:
        """Validate numeric range."""
        if not math.isfinite(value):
            raise ValidationRangeError(f"Value {value} is not finite")

        if min_value is not None and value < min_value:
            raise ValidationRangeError(f"Value {value} is below minimum {min_value}")

        if max_value is not None and value > max_value:
            raise ValidationRangeError(f"Value {value} exceeds maximum {max_value}")

class RegionValidator(Validator):
    """Validator for region catalog entries."""

    @staticmethod
    def validate_base_load(base_load: float) -> None:
        """Base load must be a positive MW figure."""
        Validator.validate_type(base_load, (int, float))
        if base_load <= 0:
            raise ValidationRangeError(f"Base load must be positive, got {base_load}")
        Validator.validate_range(base_load)

    @staticmethod
    def validate_factor(factor: float) -> None:
        """Validate a generation-mix factor."""
        Validator.validate_type(factor, (int, float))
        Validator.validate_range(factor, min_value=0)

    @staticmethod
    def validate_coordinates(latitude: float, longitude: float) -> None:
        """Validate geographic coordinates."""
        Validator.validate_type(latitude, (int, float))
        Validator.validate_type(longitude, (int, float))
        Validator.validate_range(latitude, min_value=-90, max_value=90)
        Validator.validate_range(longitude, min_value=-180, max_value=180)

class ProfileValidator(Validator):
    """Validator for simulated hourly profiles."""

    @staticmethod
    def validate_hour(hour: int) -> None:
        Validator.validate_type(hour, int)
        Validator.validate_range(hour, min_value=0, max_value=HOURS_PER_DAY - 1)

    @staticmethod
    def validate_output(output: float) -> None:
        """Generation output is a non-negative MW figure."""
        Validator.validate_type(output, (int, float))
        Validator.validate_range(output, min_value=0)

    @staticmethod
    def validate_demand(demand: float) -> None:
        Validator.validate_type(demand, (int, float))
        if demand <= 0:
            raise ValidationRangeError(f"Demand must be positive, got {demand}")

    @staticmethod
    def validate_horizon(samples: Sequence[Any]) -> None:
        """A profile covers exactly one day of hourly samples."""
        if len(samples) != HOURS_PER_DAY:
            raise ValidationError(
                f"Profile must contain {HOURS_PER_DAY} hourly samples, got {len(samples)}"
            )

class WeatherValidator(Validator):
    """Validator for weather data."""

    @staticmethod
    def validate_annual_ghi(ghi: float) -> None:
        """Validate an annual-average GHI in kWh/m²/day."""
        Validator.validate_type(ghi, (int, float))
        if ghi <= 0:
            raise ValidationRangeError(f"GHI must be positive, got {ghi}")
        Validator.validate_range(ghi, max_value=12)
