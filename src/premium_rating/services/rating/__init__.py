"""Rating pipeline: risk scorers, adjustment engines and orchestrator."""

from .coverage_rating import CoverageRiskScorer, normalize_coverage_type
from .discount_calculator import DiscountEngine
from .driver_rating import DriverRiskScorer
from .history import ViolationSeverity, violation_severity, years_before
from .location_rating import LocationRiskScorer
from .premium_orchestrator import PremiumOrchestrator
from .rate_tables import (
    DEFAULT_RATING_TABLES,
    BandTable,
    JurisdictionRates,
    RatingTables,
    load_rating_tables,
)
from .surcharge_calculator import SurchargeEngine
from .tax_fee_calculator import TaxFeeEngine
from .territory_data import StaticTerritoryDataProvider, TerritoryDataProvider
from .vehicle_rating import VehicleClass, VehicleRiskScorer

__all__ = [
    "BandTable",
    "CoverageRiskScorer",
    "DEFAULT_RATING_TABLES",
    "DiscountEngine",
    "DriverRiskScorer",
    "JurisdictionRates",
    "LocationRiskScorer",
    "PremiumOrchestrator",
    "RatingTables",
    "StaticTerritoryDataProvider",
    "SurchargeEngine",
    "TaxFeeEngine",
    "TerritoryDataProvider",
    "VehicleClass",
    "VehicleRiskScorer",
    "ViolationSeverity",
    "load_rating_tables",
    "normalize_coverage_type",
    "violation_severity",
    "years_before",
]
