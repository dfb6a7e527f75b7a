# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Surcharge evaluation for high-risk profiles.

Surcharges are additive percentages of the post-discount premium and are
never capped in aggregate: a driver with several accidents and a DUI can
pay well over double.
"""

import datetime
from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.errors import ComputationError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import RiskProfile, TerritoryType
from ...schemas.rating import SurchargeRecord, SurchargeSummary
from .history import (
    ViolationSeverity,
    recent_at_fault_accidents,
    recent_violations,
    violation_severity,
)
from .rate_tables import SurchargeTables
from .territory_data import TerritoryDataProvider
from .vehicle_rating import VehicleRiskScorer

logger = get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@beartype
class SurchargeEngine:
    """Evaluate the eight surcharge rules against a profile."""

    def __init__(
        self,
        tables: SurchargeTables,
        vehicle_scorer: VehicleRiskScorer,
        territory_data: TerritoryDataProvider,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self._vehicle_scorer = vehicle_scorer
        self._territory_data = territory_data
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("apply_surcharges")
    def apply(
        self,
        profile: RiskProfile,
        basis_premium: Decimal,
        rating_date: datetime.date,
    ) -> SurchargeSummary:
        """Apply all triggered surcharges to the basis premium.

        Raises:
            ComputationError: If the basis premium is negative
        """
        if basis_premium < ZERO:
            raise ComputationError(f"Surcharge basis premium is negative: {basis_premium}")

        surcharges = [
            SurchargeRecord(
                code=code,
                name=name,
                percentage=percentage,
                amount=basis_premium * percentage / HUNDRED,
            )
            for code, name, percentage in self.evaluate(profile, rating_date)
        ]
        total_percentage = sum((s.percentage for s in surcharges), ZERO)
        total_amount = sum((s.amount for s in surcharges), ZERO)

        if surcharges:
            logger.debug(
                "Surcharges %s total %s%%",
                [s.code for s in surcharges],
                total_percentage,
            )

        return SurchargeSummary(
            basis_premium=basis_premium,
            surcharges=surcharges,
            total_surcharge_percentage=total_percentage,
            total_surcharge_amount=total_amount,
            premium_after_surcharges=basis_premium + total_amount,
        )

    def evaluate(
        self, profile: RiskProfile, rating_date: datetime.date
    ) -> list[tuple[str, str, Decimal]]:
        """Return ``(code, name, percentage)`` for every surcharge triggered."""
        rules = [
            ("YOUNG_DRIVER", "Young Driver Surcharge", self.young_driver(profile)),
            (
                "INEXPERIENCED_DRIVER",
                "Inexperienced Driver Surcharge",
                self.inexperienced_driver(profile),
            ),
            (
                "ACCIDENT_HISTORY",
                "At-Fault Accident Surcharge",
                self.accident_history(profile, rating_date),
            ),
            (
                "VIOLATION_HISTORY",
                "Traffic Violation Surcharge",
                self.violation_history(profile, rating_date),
            ),
            ("HIGH_MILEAGE", "High Mileage Surcharge", self.high_mileage(profile)),
            (
                "HIGH_PERFORMANCE_VEHICLE",
                "High Performance Vehicle Surcharge",
                self.high_performance_vehicle(profile),
            ),
            ("URBAN_LOCATION", "Urban Location Surcharge", self.urban_location(profile)),
            ("POOR_CREDIT", "Credit-Based Surcharge", self.poor_credit(profile)),
        ]
        return [(code, name, pct) for code, name, pct in rules if pct > ZERO]

    def young_driver(self, profile: RiskProfile) -> Decimal:
        return self._tables.young_driver_bands.lookup(profile.driver.age)

    def inexperienced_driver(self, profile: RiskProfile) -> Decimal:
        return self._tables.inexperienced_driver_bands.lookup(profile.driver.years_licensed)

    def accident_history(self, profile: RiskProfile, rating_date: datetime.date) -> Decimal:
        """Flat percentage per recent at-fault accident, no cap on the count."""
        accidents = recent_at_fault_accidents(
            profile.driver.accidents, rating_date, self._tables.history_lookback_years
        )
        return self._tables.per_accident * len(accidents)

    def violation_history(self, profile: RiskProfile, rating_date: datetime.date) -> Decimal:
        """Sum of per-violation percentages by severity."""
        by_severity = {
            ViolationSeverity.MAJOR: self._tables.major_violation,
            ViolationSeverity.MODERATE: self._tables.moderate_violation,
            ViolationSeverity.MINOR: self._tables.minor_violation,
        }
        violations = recent_violations(
            profile.driver.violations, rating_date, self._tables.history_lookback_years
        )
        return sum(
            (by_severity[violation_severity(v.type, self._tables)] for v in violations),
            ZERO,
        )

    def high_mileage(self, profile: RiskProfile) -> Decimal:
        if profile.annual_mileage is None:
            return ZERO
        return self._tables.high_mileage_bands.lookup(profile.annual_mileage)

    def high_performance_vehicle(self, profile: RiskProfile) -> Decimal:
        vehicle_class = self._vehicle_scorer.classify(profile.vehicle)
        return self._tables.vehicle_class_surcharges.get(vehicle_class.value, ZERO)

    def urban_location(self, profile: RiskProfile) -> Decimal:
        """Dense territories, more so with a high crime index."""
        territory = profile.location.territory_type
        if territory is None:
            return ZERO
        crime_index = self._territory_data.crime_index(profile.location.zip_code)
        high_crime = crime_index >= self._tables.high_crime_index

        if territory is TerritoryType.URBAN:
            return self._tables.urban_high_crime if high_crime else self._tables.urban
        if territory is TerritoryType.SUBURBAN and high_crime:
            return self._tables.suburban_high_crime
        return ZERO

    def poor_credit(self, profile: RiskProfile) -> Decimal:
        if profile.driver.credit_score is None:
            return ZERO
        return self._tables.poor_credit_bands.lookup(profile.driver.credit_score)
