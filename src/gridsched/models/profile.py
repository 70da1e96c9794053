"""
Generation profile data model.

An EnergyProfile is one simulated day of renewable supply and demand for a
region, starting at the hour it was generated. It is also the request body
sent to the remote optimizer, so every record here knows its wire form.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError
from ..regions import Region
from ..validation import ProfileValidator


def round_mw(value: float) -> int:
    """Round a MW figure to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))


class DataSource(str, Enum):
    """Where the solar factor of a profile came from."""
    REAL = "real"
    SIMULATED = "simulated"

    @property
    def label(self) -> str:
        if self is DataSource.REAL:
            return "NREL API (Real Solar Data)"
        return "Simulated"


@dataclass
class HourSample:
    """Supply and demand for a single hour, in MW."""
    hour: int
    solar: int
    wind: int
    hydro: int
    demand: int
    total: Optional[int] = None

    def __post_init__(self):
        ProfileValidator.validate_hour(self.hour)
        for output in (self.solar, self.wind, self.hydro):
            ProfileValidator.validate_output(output)
        ProfileValidator.validate_demand(self.demand)

        generation = self.solar + self.wind + self.hydro
        if self.total is None:
            self.total = generation
        elif self.total != generation:
            raise ValidationError(
                f"Total {self.total} MW at {self.label} does not match "
                f"solar + wind + hydro = {generation} MW"
            )

    @property
    def label(self) -> str:
        return f"{self.hour}:00"

    @property
    def surplus(self) -> int:
        """Renewable generation minus demand; positive means excess."""
        return self.total - self.demand

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": self.label,
            "solar": self.solar,
            "wind": self.wind,
            "hydro": self.hydro,
            "demand": self.demand,
            "total": self.total,
        }


@dataclass(frozen=True)
class CapacityEstimate:
    """Installed-capacity ceilings derived from base load and mix factors."""
    solar: int
    wind: int
    hydro: int
    battery: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "solar": self.solar,
            "wind": self.wind,
            "hydro": self.hydro,
            "battery": self.battery,
        }


@dataclass
class EnergyProfile:
    """A 24-hour supply/demand curve for one region."""
    region: Region
    timestamp: datetime
    hourly: List[HourSample]
    capacity: CapacityEstimate
    data_source: DataSource = DataSource.SIMULATED
    solar_peak_fraction: float = 0.0
    irradiance: Optional[Dict[str, Any]] = field(default=None, repr=False)

    def __post_init__(self):
        ProfileValidator.validate_horizon(self.hourly)

    @property
    def current(self) -> HourSample:
        """The sample for the hour the profile was generated in."""
        return self.hourly[0]

    @property
    def surpluses(self) -> List[int]:
        return [sample.surplus for sample in self.hourly]

    @property
    def net_balance(self) -> int:
        """Surplus for the current hour."""
        return self.current.surplus

    @property
    def data_source_label(self) -> str:
        return self.data_source.label

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON body expected by the remote optimizer."""
        current = self.current.to_dict()
        del current["hour"]

        return {
            "region": self.region.name,
            "timestamp": self.timestamp.isoformat(),
            "current": current,
            "hourly": [sample.to_dict() for sample in self.hourly],
            "capacity": self.capacity.to_dict(),
            "dataSource": self.data_source_label,
            "nrelData": self.irradiance,
        }
