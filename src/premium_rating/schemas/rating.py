# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Pydantic models used as typed payloads for every rating stage.

These models carry the audit trail: each scorer returns a
``FactorBreakdown``, the adjustment engines return summaries of
``DiscountRecord`` / ``SurchargeRecord`` entries and the orchestrator
assembles them into a ``PremiumCalculationResult``.
"""

import datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import Field, model_validator

from ..core.errors import ComputationError
from ..models.base import BaseModelConfig

__all__ = [
    "RatingWarning",
    "NamedFactor",
    "FactorBreakdown",
    "CoverageLineRating",
    "CoverageRating",
    "CoverageMinimumValidation",
    "DiscountRecord",
    "SurchargeRecord",
    "DiscountSummary",
    "SurchargeSummary",
    "TaxFeeBreakdown",
    "PremiumCalculationResult",
    "round_currency",
]

CENT = Decimal("0.01")


def round_currency(amount: Decimal) -> Decimal:
    """Round a dollar amount to cents, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class RatingWarning(BaseModelConfig):
    """Non-fatal condition reported alongside a result."""

    code: str = Field(..., min_length=1, max_length=50)
    stage: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1, max_length=255)


class NamedFactor(BaseModelConfig):
    """Single named multiplier; 1.0 is neutral."""

    name: str = Field(..., min_length=1, max_length=100)
    value: Decimal = Field(..., gt=Decimal("0"))


class FactorBreakdown(BaseModelConfig):
    """Ordered sub-factors of one risk dimension and their product."""

    dimension: str = Field(..., min_length=1, max_length=50)
    factors: list[NamedFactor] = Field(default_factory=list)
    total_factor: Decimal = Field(..., gt=Decimal("0"))
    warnings: list[RatingWarning] = Field(default_factory=list)

    @classmethod
    def from_factors(
        cls,
        dimension: str,
        factors: list[tuple[str, Decimal]],
        warnings: list[RatingWarning] | None = None,
    ) -> "FactorBreakdown":
        """Fold the factors left to right into a breakdown."""
        total = Decimal("1")
        for name, value in factors:
            if value <= 0:
                raise ComputationError(
                    f"{dimension} factor {name} must be positive, got {value}"
                )
            total *= value

        return cls(
            dimension=dimension,
            factors=[NamedFactor(name=name, value=value) for name, value in factors],
            total_factor=total,
            warnings=warnings or [],
        )

    @model_validator(mode="after")
    def validate_total_is_product(self) -> "FactorBreakdown":
        """The total must equal the ordered product of the sub-factors."""
        product = Decimal("1")
        for factor in self.factors:
            product *= factor.value
        if product != self.total_factor:
            raise ValueError(
                f"{self.dimension} total factor {self.total_factor} "
                f"does not match product of sub-factors {product}"
            )
        return self

    def get(self, name: str) -> Decimal:
        """Return the named sub-factor."""
        for factor in self.factors:
            if factor.name == name:
                return factor.value
        raise KeyError(f"{self.dimension} has no factor named {name!r}")

    def as_dict(self) -> dict[str, Decimal]:
        """Sub-factors keyed by name, plus ``total_factor``."""
        values = {factor.name: factor.value for factor in self.factors}
        values["total_factor"] = self.total_factor
        return values


class CoverageLineRating(BaseModelConfig):
    """Audit row for one selected coverage line."""

    coverage_type: str = Field(..., min_length=1, max_length=50)
    base_rate: Decimal = Field(..., gt=Decimal("0"))
    limit_factor: Decimal = Field(..., gt=Decimal("0"))
    deductible_factor: Decimal = Field(..., gt=Decimal("0"))
    line_premium: Decimal = Field(..., gt=Decimal("0"))


class CoverageRating(BaseModelConfig):
    """Coverage scorer output: base premium plus selection factor."""

    base_premium: Decimal = Field(..., gt=Decimal("0"))
    lines: list[CoverageLineRating] = Field(default_factory=list)
    breakdown: FactorBreakdown

    @property
    def coverage_factor(self) -> Decimal:
        """Coverage-selection multiplier."""
        return self.breakdown.total_factor


class CoverageMinimumValidation(BaseModelConfig):
    """Outcome of the liability state-minimum check."""

    state_code: str = Field(..., min_length=2, max_length=2)
    minimum_liability_limit: Decimal = Field(..., ge=Decimal("0"))
    valid: bool
    errors: list[str] = Field(default_factory=list)


class DiscountRecord(BaseModelConfig):
    """Applied discount; the percentage is a reduction."""

    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    percentage: Decimal = Field(..., ge=Decimal("0"), le=Decimal("100"))
    amount: Decimal = Field(..., ge=Decimal("0"))


class SurchargeRecord(BaseModelConfig):
    """Applied surcharge; the percentage is an increase and may exceed 100."""

    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    percentage: Decimal = Field(..., ge=Decimal("0"))
    amount: Decimal = Field(..., ge=Decimal("0"))


class DiscountSummary(BaseModelConfig):
    """Discount stage output."""

    basis_premium: Decimal = Field(..., ge=Decimal("0"))
    discounts: list[DiscountRecord] = Field(default_factory=list)
    uncapped_percentage: Decimal = Field(..., ge=Decimal("0"))
    cap_applied: bool = False
    total_discount_percentage: Decimal = Field(..., ge=Decimal("0"))
    total_discount_amount: Decimal = Field(..., ge=Decimal("0"))
    premium_after_discounts: Decimal = Field(..., ge=Decimal("0"))


class SurchargeSummary(BaseModelConfig):
    """Surcharge stage output."""

    basis_premium: Decimal = Field(..., ge=Decimal("0"))
    surcharges: list[SurchargeRecord] = Field(default_factory=list)
    total_surcharge_percentage: Decimal = Field(..., ge=Decimal("0"))
    total_surcharge_amount: Decimal = Field(..., ge=Decimal("0"))
    premium_after_surcharges: Decimal = Field(..., ge=Decimal("0"))


class TaxFeeBreakdown(BaseModelConfig):
    """Premium tax and flat fees for one jurisdiction, rounded to cents."""

    jurisdiction: str = Field(..., min_length=1, max_length=10)
    policy_term_months: int = Field(..., ge=1)
    premium_tax_percentage: Decimal = Field(..., ge=Decimal("0"))
    premium_tax_amount: Decimal = Field(..., ge=Decimal("0"))
    policy_fee_amount: Decimal = Field(..., ge=Decimal("0"))
    dmv_fee_amount: Decimal = Field(..., ge=Decimal("0"))
    total_taxes: Decimal = Field(..., ge=Decimal("0"))
    total_fees: Decimal = Field(..., ge=Decimal("0"))
    total_taxes_and_fees: Decimal = Field(..., ge=Decimal("0"))
    warnings: list[RatingWarning] = Field(default_factory=list)


class PremiumCalculationResult(BaseModelConfig):
    """Complete audited premium calculation, created once per request."""

    # Step 1: base premium
    base_premium: Decimal = Field(..., gt=Decimal("0"))
    coverage_lines: list[CoverageLineRating] = Field(default_factory=list)

    # Step 2: rating factors
    vehicle_factor: Decimal = Field(..., gt=Decimal("0"))
    vehicle_factor_details: FactorBreakdown
    driver_factor: Decimal = Field(..., gt=Decimal("0"))
    driver_factor_details: FactorBreakdown
    location_factor: Decimal = Field(..., gt=Decimal("0"))
    location_factor_details: FactorBreakdown
    coverage_factor: Decimal = Field(..., gt=Decimal("0"))
    coverage_factor_details: FactorBreakdown
    total_factor_multiplier: Decimal = Field(..., gt=Decimal("0"))
    adjusted_premium: Decimal = Field(..., gt=Decimal("0"))

    # Step 3: discounts
    discounts: list[DiscountRecord] = Field(default_factory=list)
    total_discount_amount: Decimal = Field(..., ge=Decimal("0"))
    total_discount_percentage: Decimal = Field(..., ge=Decimal("0"))
    premium_after_discounts: Decimal = Field(..., ge=Decimal("0"))

    # Step 4: surcharges
    surcharges: list[SurchargeRecord] = Field(default_factory=list)
    total_surcharge_amount: Decimal = Field(..., ge=Decimal("0"))
    total_surcharge_percentage: Decimal = Field(..., ge=Decimal("0"))
    premium_after_surcharges: Decimal = Field(..., ge=Decimal("0"))

    # Step 5: taxes and fees
    taxes_and_fees: TaxFeeBreakdown
    total_taxes_and_fees: Decimal = Field(..., ge=Decimal("0"))

    total_premium: Decimal = Field(..., gt=Decimal("0"))

    # Metadata
    rating_date: datetime.date
    calculation_timestamp: datetime.datetime
    calculation_version: str = Field(..., min_length=1, max_length=20)
    warnings: list[RatingWarning] = Field(default_factory=list)
    quote_id: str | None = None
    policy_id: str | None = None

    @property
    def rounded_total_premium(self) -> Decimal:
        """Total premium rounded to cents for display and billing."""
        return round_currency(self.total_premium)
