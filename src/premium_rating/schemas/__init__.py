"""Typed payloads produced by the rating pipeline."""

from .rating import (
    CoverageLineRating,
    CoverageMinimumValidation,
    CoverageRating,
    DiscountRecord,
    DiscountSummary,
    FactorBreakdown,
    NamedFactor,
    PremiumCalculationResult,
    RatingWarning,
    SurchargeRecord,
    SurchargeSummary,
    TaxFeeBreakdown,
    round_currency,
)

__all__ = [
    "CoverageLineRating",
    "CoverageMinimumValidation",
    "CoverageRating",
    "DiscountRecord",
    "DiscountSummary",
    "FactorBreakdown",
    "NamedFactor",
    "PremiumCalculationResult",
    "RatingWarning",
    "SurchargeRecord",
    "SurchargeSummary",
    "TaxFeeBreakdown",
    "round_currency",
]
