"""Auditable auto-insurance premium rating."""

from .core import (
    ComputationError,
    InvalidInputError,
    RatingError,
    Settings,
    UnsupportedJurisdictionError,
    configure_logging,
    get_settings,
)
from .models import RiskProfile
from .schemas import PremiumCalculationResult
from .services.rating import PremiumOrchestrator, RatingTables, load_rating_tables

__version__ = "1.0.0"

__all__ = [
    "ComputationError",
    "InvalidInputError",
    "PremiumCalculationResult",
    "PremiumOrchestrator",
    "RatingError",
    "RatingTables",
    "RiskProfile",
    "Settings",
    "UnsupportedJurisdictionError",
    "configure_logging",
    "get_settings",
    "load_rating_tables",
]
