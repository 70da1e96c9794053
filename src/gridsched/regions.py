"""Static catalog of supported grid regions."""

from dataclasses import dataclass
from typing import Dict, List

from .exceptions import RegionNotFoundError
from .validation import RegionValidator

# Battery ceiling as a share of regional base load
BATTERY_CAPACITY_FRACTION = 0.1

DEFAULT_REGION_ID = "california"


@dataclass(frozen=True)
class Region:
    """A grid area with its load and generation-mix parameters."""
    id: str
    name: str
    short_name: str
    utility_id: str
    latitude: float
    longitude: float
    base_load: float  # MW
    solar_peak_fraction: float
    wind_factor: float
    hydro_factor: float

    def __post_init__(self):
        RegionValidator.validate_base_load(self.base_load)
        RegionValidator.validate_coordinates(self.latitude, self.longitude)
        for factor in (self.solar_peak_fraction, self.wind_factor, self.hydro_factor):
            RegionValidator.validate_factor(factor)


_REGIONS = [
    Region("california", "California (CAISO)", "California", "PacifiCorp",
           36.7783, -119.4179, 35000, 0.4, 0.2, 0.15),
    Region("texas", "Texas (ERCOT)", "Texas", "Oncor",
           31.9686, -99.9018, 45000, 0.35, 0.35, 0.05),
    Region("newyork", "New York (NYISO)", "New York", "ConEdison",
           42.1657, -74.9481, 28000, 0.25, 0.2, 0.1),
    Region("newengland", "New England (ISO-NE)", "New England", "Eversource",
           44.5588, -69.6544, 22000, 0.2, 0.25, 0.12),
    Region("midwest", "Midwest (MISO)", "Midwest", "ComEd",
           41.8781, -87.6298, 38000, 0.28, 0.4, 0.08),
    Region("pjm", "PJM Interconnection", "PJM", "PECO",
           40.0583, -76.3055, 42000, 0.3, 0.22, 0.1),
    Region("southwest", "Southwest (SPP)", "Southwest", "AEP",
           35.2220, -101.8313, 32000, 0.38, 0.32, 0.06),
    Region("northwest", "Northwest (BPA)", "Northwest", "Seattle City Light",
           47.7511, -120.7401, 26000, 0.22, 0.18, 0.25),
]

REGION_CATALOG: Dict[str, Region] = {region.id: region for region in _REGIONS}


def get_region(region_id: str) -> Region:
    """Look up a region by id."""
    try:
        return REGION_CATALOG[region_id]
    except KeyError:
        raise RegionNotFoundError(
            f"Unknown region '{region_id}'. Must be one of {list(REGION_CATALOG)}"
        ) from None


def list_regions() -> List[Region]:
    """All regions in catalog order."""
    return list(REGION_CATALOG.values())
