from dataclasses import dataclass
from typing import Tuple

from ..economy.items import CropSoilProfile
from ..world.terrain import TerrainAttributes


@dataclass
class SoilData:
    moisture: float = 0.5
    fertility: float = 0.5
    drainage: float = 0.5
    tillage: float = 0.5

    @classmethod
    def from_terrain(cls, attrs: TerrainAttributes) -> "SoilData":
        return cls(
            moisture=attrs.moisture,
            fertility=attrs.fertility,
            drainage=attrs.drainage,
            tillage=attrs.tillage,
        )

    def to_dict(self):
        return {
            "moisture": self.moisture,
            "fertility": self.fertility,
            "drainage": self.drainage,
            "tillage": self.tillage,
        }


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _window_fit(soil: SoilData, profile: CropSoilProfile, floor: float) -> float:
    # Distance from the middle of the moisture window, relative to its half-width.
    if profile.max_moisture is None:
        return 1.0
    optimal = (profile.min_moisture + profile.max_moisture) / 2.0
    half_range = (profile.max_moisture - profile.min_moisture) / 2.0
    if half_range <= 0:
        return 1.0 if soil.moisture == optimal else floor
    return max(floor, 1.0 - abs(soil.moisture - optimal) / half_range)


def is_suitable(soil: SoilData, profile: CropSoilProfile) -> bool:
    if soil.moisture < profile.min_moisture:
        return False
    if profile.max_moisture is not None and soil.moisture > profile.max_moisture:
        return False
    if soil.fertility < profile.min_fertility:
        return False
    if profile.min_drainage is not None and soil.drainage < profile.min_drainage:
        return False
    if profile.max_drainage is not None and soil.drainage > profile.max_drainage:
        return False
    return soil.tillage <= profile.max_tillage


def growth_multiplier(soil: SoilData, profile: CropSoilProfile) -> float:
    """Growth speed factor in [0.1, 1.0]."""
    if soil.moisture < profile.min_moisture:
        moisture_fit = 0.0
    else:
        moisture_fit = _window_fit(soil, profile, 0.0)
    multiplier = 0.5 + moisture_fit * 0.5
    multiplier *= 0.7 + soil.fertility * profile.fertility_impact * 0.3

    too_wet = profile.min_drainage is not None and soil.drainage < profile.min_drainage
    too_dry = profile.max_drainage is not None and soil.drainage > profile.max_drainage
    if too_wet or too_dry:
        multiplier *= 0.5

    multiplier *= 1.0 - soil.tillage * 0.2
    return _clamp(multiplier, 0.1, 1.0)


def yield_multiplier(soil: SoilData, profile: CropSoilProfile) -> float:
    """Harvest size factor in [0.3, 1.5]."""
    multiplier = 0.5 + soil.fertility * profile.fertility_impact
    multiplier *= _window_fit(soil, profile, 0.5)
    return _clamp(multiplier, 0.3, 1.5)


def soil_multipliers(soil: SoilData, profile: CropSoilProfile) -> Tuple[float, float]:
    return growth_multiplier(soil, profile), yield_multiplier(soil, profile)
