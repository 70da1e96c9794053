"""Simulation of daily renewable generation and demand for a grid region."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import numpy as np

from .irradiance import IrradianceLookup, IrradianceReading
from .models import CapacityEstimate, DataSource, EnergyProfile, HourSample, round_mw
from .regions import BATTERY_CAPACITY_FRACTION, Region
from .exceptions import ValidationError
from .validation import HOURS_PER_DAY, ProfileValidator, WeatherValidator

logger = logging.getLogger(__name__)

# Annual GHI (kWh/m²/day) the configured solar factors are calibrated against
REFERENCE_GHI = 5.0

SUNRISE_HOUR = 6
SUNSET_HOUR = 18
DEMAND_PEAK_HOUR = 14


def calibrate_solar_peak(solar_peak_fraction: float, ghi: float) -> float:
    """Scale a solar-peak fraction by measured irradiance."""
    return (ghi / REFERENCE_GHI) * solar_peak_fraction


def simulate_profile(
    region: Region,
    start_hour: int,
    solar_peak_fraction: Optional[float] = None,
    data_source: DataSource = DataSource.SIMULATED,
    timestamp: Optional[datetime] = None,
    irradiance: Optional[Dict[str, Any]] = None
) -> EnergyProfile:
    """Build a 24-hour profile starting at ``start_hour``.

    Deterministic given its arguments. ``solar_peak_fraction`` defaults to the
    region's configured value.
    """
    ProfileValidator.validate_hour(start_hour)
    if solar_peak_fraction is None:
        solar_peak_fraction = region.solar_peak_fraction

    base_load = region.base_load
    hours = (start_hour + np.arange(HOURS_PER_DAY)) % HOURS_PER_DAY

    daylight = (hours >= SUNRISE_HOUR) & (hours <= SUNSET_HOUR)
    solar = np.where(
        daylight,
        np.sin((hours - SUNRISE_HOUR) * np.pi / 12) * solar_peak_fraction * base_load,
        0.0,
    )
    # sin() dips just below zero at the daylight edges
    solar = np.maximum(solar, 0.0)
    wind = (np.sin(hours * np.pi / 8) + 1) * region.wind_factor * base_load / 2
    hydro = base_load * region.hydro_factor
    demand = base_load * (0.7 + 0.3 * np.sin((hours - DEMAND_PEAK_HOUR) * np.pi / 12))

    hourly = [
        HourSample(
            hour=int(hours[i]),
            solar=round_mw(solar[i]),
            wind=round_mw(wind[i]),
            hydro=round_mw(hydro),
            demand=round_mw(demand[i]),
        )
        for i in range(HOURS_PER_DAY)
    ]

    capacity = CapacityEstimate(
        solar=round_mw(base_load * solar_peak_fraction),
        wind=round_mw(base_load * region.wind_factor),
        hydro=round_mw(base_load * region.hydro_factor),
        battery=round_mw(base_load * BATTERY_CAPACITY_FRACTION),
    )

    return EnergyProfile(
        region=region,
        timestamp=timestamp or datetime.now(timezone.utc),
        hourly=hourly,
        capacity=capacity,
        data_source=data_source,
        solar_peak_fraction=solar_peak_fraction,
        irradiance=irradiance,
    )


class GenerationProfileBuilder:
    """Builds energy profiles, recalibrating solar output from irradiance when available."""

    def __init__(
        self,
        irradiance_lookup: Optional[IrradianceLookup] = None,
        lookup_timeout: float = 5.0,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.irradiance_lookup = irradiance_lookup
        self.lookup_timeout = lookup_timeout
        self._clock = clock or datetime.now
        self.logger = logging.getLogger("gridsched.simulation.builder")

    async def _lookup_irradiance(self, region: Region) -> Optional[IrradianceReading]:
        """Query the lookup, treating every failure as missing data."""
        if self.irradiance_lookup is None:
            return None

        try:
            reading = await asyncio.wait_for(
                self.irradiance_lookup.lookup(region.latitude, region.longitude),
                timeout=self.lookup_timeout,
            )
            if reading is not None:
                WeatherValidator.validate_annual_ghi(reading.ghi)
            return reading
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Irradiance lookup for {region.id} timed out after {self.lookup_timeout}s"
            )
        except ValidationError as e:
            self.logger.warning(f"Ignoring unusable irradiance for {region.id}: {e}")
        except Exception as e:
            self.logger.warning(f"Irradiance lookup for {region.id} failed: {e}")
        return None

    async def build(self, region: Region) -> EnergyProfile:
        """Build the profile for ``region`` starting at the current hour."""
        reading = await self._lookup_irradiance(region)

        solar_peak_fraction = region.solar_peak_fraction
        data_source = DataSource.SIMULATED
        payload = None

        if reading is not None:
            solar_peak_fraction = calibrate_solar_peak(region.solar_peak_fraction, reading.ghi)
            data_source = DataSource.REAL
            payload = reading.payload
            self.logger.info(
                f"Using measured irradiance for {region.name}: GHI={reading.ghi:.2f} kWh/m²/day"
            )

        now = self._clock()
        profile = simulate_profile(
            region,
            start_hour=now.hour,
            solar_peak_fraction=solar_peak_fraction,
            data_source=data_source,
            timestamp=now if now.tzinfo else now.astimezone(timezone.utc),
            irradiance=payload,
        )

        self.logger.debug(
            f"Built {data_source.value} profile for {region.id} from {profile.current.label}"
        )
        return profile
