"""Solar irradiance lookup used to recalibrate the solar-peak factor."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .config import IrradianceConfig
from .exceptions import DataUnavailableError, ValidationError
from .validation import WeatherValidator

logger = logging.getLogger(__name__)


@dataclass
class IrradianceReading:
    """Annual-average global horizontal irradiance at a site."""
    ghi: float  # kWh/m²/day
    payload: Dict[str, Any] = field(default_factory=dict, repr=False)


class IrradianceLookup(ABC):
    """Capability interface: coordinates in, irradiance reading or nothing out."""

    @abstractmethod
    async def lookup(self, latitude: float, longitude: float) -> Optional[IrradianceReading]:
        """Return the annual-average GHI for a site, or None when unavailable."""
        pass


def parse_solar_resource(data: Any) -> IrradianceReading:
    """Extract the annual GHI from a solar_resource response body.

    Raises DataUnavailableError when the payload carries no usable value.
    """
    try:
        outputs = data["outputs"]
        ghi = outputs["avg_ghi"]["annual"]
    except (KeyError, TypeError) as e:
        raise DataUnavailableError(f"No annual GHI in response: {e!r}") from e

    try:
        WeatherValidator.validate_annual_ghi(ghi)
    except ValidationError as e:
        raise DataUnavailableError(f"Unusable annual GHI {ghi!r}: {e}") from e

    return IrradianceReading(ghi=float(ghi), payload=outputs)


class NRELIrradianceLookup(IrradianceLookup):
    """Looks up annual GHI from the NREL solar_resource API."""

    def __init__(self, config: Optional[IrradianceConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or IrradianceConfig()
        self._transport = transport

    async def fetch(self, latitude: float, longitude: float) -> IrradianceReading:
        """Fetch and parse a reading, raising DataUnavailableError on any failure."""
        params = {
            "api_key": self.config.api_key,
            "lat": latitude,
            "lon": longitude,
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout,
                                         transport=self._transport) as client:
                response = await client.get(self.config.base_url, params=params)
                response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise DataUnavailableError(f"Irradiance request failed: {e}") from e
        except ValueError as e:
            raise DataUnavailableError(f"Irradiance response is not JSON: {e}") from e

        return parse_solar_resource(data)

    async def lookup(self, latitude: float, longitude: float) -> Optional[IrradianceReading]:
        logger.debug("Fetching solar resource for (%s, %s)", latitude, longitude)
        try:
            reading = await self.fetch(latitude, longitude)
        except DataUnavailableError as e:
            logger.warning("Irradiance unavailable, using configured solar factor: %s", e)
            return None

        logger.info("Annual GHI at (%s, %s): %.2f kWh/m²/day", latitude, longitude, reading.ghi)
        return reading
