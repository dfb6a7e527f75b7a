# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Risk profile models consumed by the rating pipeline.

The request layer validates required fields, enumerations and ranges before
a profile reaches the pipeline. These models only pin down types, so a few
logically unusable values (blank make, non-numeric ZIP) are still reported by
the scorers as ``InvalidInputError``.

Optional fields stay ``None`` when absent; each scorer applies its neutral
default at the point of use.
"""

import datetime
from decimal import Decimal
from enum import Enum

from beartype import beartype
from pydantic import Field, field_validator

from .base import BaseModelConfig


class TerritoryType(str, Enum):
    """Territory density classification."""

    URBAN = "URBAN"
    SUBURBAN = "SUBURBAN"
    RURAL = "RURAL"


@beartype
class Violation(BaseModelConfig):
    """Moving violation on a driver's record."""

    type: str = Field(..., max_length=100, description="Violation type, e.g. SPEEDING")
    date: datetime.date = Field(..., description="Date of the violation")


@beartype
class Accident(BaseModelConfig):
    """Accident on a driver's record."""

    type: str = Field(..., max_length=100, description="Accident type, e.g. COLLISION")
    at_fault: bool = Field(..., description="Driver was at fault")
    date: datetime.date = Field(..., description="Date of the accident")


@beartype
class VehicleProfile(BaseModelConfig):
    """Vehicle characteristics used for rating."""

    year: int = Field(..., ge=1886, description="Vehicle model year")
    make: str = Field(..., max_length=50, description="Manufacturer, e.g. Toyota")
    model: str = Field(..., max_length=50, description="Model, e.g. Camry")
    vin: str | None = Field(None, max_length=17, description="Vehicle identification number")
    body_type: str | None = Field(None, max_length=30, description="Body type, e.g. coupe")
    market_value: Decimal | None = Field(
        None, ge=Decimal("0"), description="Estimated market value in dollars"
    )
    safety_rating: int | None = Field(
        None, ge=1, le=5, description="NHTSA overall safety rating"
    )
    anti_theft: bool | None = Field(None, description="Anti-theft device installed")


@beartype
class DriverProfile(BaseModelConfig):
    """Primary driver characteristics and history."""

    age: int = Field(..., ge=0, le=120, description="Driver age in years")
    years_licensed: int = Field(..., ge=0, description="Years holding a license")
    gender: str | None = Field(None, max_length=20, description="Gender where rating permits")
    marital_status: str | None = Field(None, max_length=20, description="Marital status")
    violations: list[Violation] = Field(default_factory=list)
    accidents: list[Accident] = Field(default_factory=list)
    continuous_coverage: bool | None = Field(
        None, description="Maintained prior coverage without a lapse"
    )
    credit_score: int | None = Field(None, ge=300, le=850, description="Credit score")


@beartype
class LocationProfile(BaseModelConfig):
    """Garaging location of the vehicle."""

    zip_code: str = Field(..., max_length=10, description="5 or 9 digit ZIP code")
    state_code: str = Field(..., min_length=2, max_length=2, description="Two-letter state")
    territory_type: TerritoryType | None = Field(None, description="Territory density")
    municipality: str | None = Field(None, max_length=100)

    @field_validator("state_code")
    @classmethod
    def normalize_state_code(cls, v: str) -> str:
        """State codes are matched upper-case."""
        return v.upper()


@beartype
class CoverageSelection(BaseModelConfig):
    """One selected coverage line."""

    coverage_type: str = Field(..., min_length=1, max_length=50)
    limit_amount: Decimal | None = Field(None, ge=Decimal("0"))
    deductible_amount: Decimal | None = Field(None, ge=Decimal("0"))


@beartype
class RiskProfile(BaseModelConfig):
    """Complete, immutable rating request."""

    vehicle: VehicleProfile
    driver: DriverProfile
    location: LocationProfile
    coverages: list[CoverageSelection] = Field(default_factory=list)
    effective_date: datetime.date = Field(..., description="Policy effective date")
    policy_term_months: int = Field(default=12, ge=1, le=36)
    annual_mileage: int | None = Field(None, ge=0, le=200000)

    # Discount eligibility
    multi_car: bool = Field(default=False)
    homeowner: bool = Field(default=False)
    defensive_driving_course: bool = Field(default=False)
    paperless: bool = Field(default=False)

    # Date the look-back windows and vehicle age are measured from; resolved
    # to today by the orchestrator when absent.
    rating_date: datetime.date | None = Field(None)

    quote_id: str | None = Field(None, max_length=100)
    policy_id: str | None = Field(None, max_length=100)
