"""Input models for the rating pipeline."""

from .base import BaseModelConfig
from .profile import (
    Accident,
    CoverageSelection,
    DriverProfile,
    LocationProfile,
    RiskProfile,
    TerritoryType,
    VehicleProfile,
    Violation,
)

__all__ = [
    "BaseModelConfig",
    "Accident",
    "CoverageSelection",
    "DriverProfile",
    "LocationProfile",
    "RiskProfile",
    "TerritoryType",
    "VehicleProfile",
    "Violation",
]
