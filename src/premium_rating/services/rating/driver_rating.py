# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Driver risk scoring.

Age and experience dominate; the driving record adds multipliers for recent
violations (3 years) and at-fault accidents (5 years).
"""

import datetime
from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import Accident, DriverProfile, Violation
from ...schemas.rating import FactorBreakdown
from .history import recent_at_fault_accidents, recent_violations
from .rate_tables import DriverTables

logger = get_logger(__name__)

NEUTRAL = Decimal("1.0")


@beartype
class DriverRiskScorer:
    """Score the driver dimension of a risk profile."""

    def __init__(
        self,
        tables: DriverTables,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("score_driver")
    def score(self, driver: DriverProfile, rating_date: datetime.date) -> FactorBreakdown:
        """Compute the driver factor breakdown.

        Args:
            driver: Primary driver characteristics and history
            rating_date: Date the look-back windows end on

        Returns:
            Ordered driver sub-factors and their product
        """
        breakdown = FactorBreakdown.from_factors(
            "driver",
            [
                ("age_factor", self.age_factor(driver.age)),
                ("experience_factor", self.experience_factor(driver.years_licensed, driver.age)),
                ("gender_factor", self.gender_factor(driver.gender)),
                ("marital_status_factor", self.marital_status_factor(driver.marital_status)),
                ("violations_factor", self.violations_factor(driver.violations, rating_date)),
                ("accidents_factor", self.accidents_factor(driver.accidents, rating_date)),
                (
                    "continuous_coverage_factor",
                    self.continuous_coverage_factor(driver.continuous_coverage),
                ),
            ],
        )
        logger.debug("Driver age %s factor %s", driver.age, breakdown.total_factor)
        return breakdown

    def age_factor(self, age: int) -> Decimal:
        return self._tables.age_bands.lookup(age)

    def experience_factor(self, years_licensed: int, age: int) -> Decimal:
        """Years licensed, capped at the years since licensing age."""
        max_possible_years = max(0, age - self._tables.licensing_age)
        return self._tables.experience_bands.lookup(min(years_licensed, max_possible_years))

    def gender_factor(self, gender: str | None) -> Decimal:
        if gender is None:
            return NEUTRAL
        return self._tables.gender_factors.get(gender.strip().lower(), NEUTRAL)

    def marital_status_factor(self, marital_status: str | None) -> Decimal:
        if marital_status is None:
            return NEUTRAL
        return self._tables.marital_status_factors.get(marital_status.strip().lower(), NEUTRAL)

    def violations_factor(
        self, violations: list[Violation], rating_date: datetime.date
    ) -> Decimal:
        """Compound multiplier for recent violations, capped."""
        recent = recent_violations(
            violations, rating_date, self._tables.violation_lookback_years
        )
        if not recent:
            return NEUTRAL

        factor = NEUTRAL
        for violation in recent:
            factor *= self._violation_multiplier(violation.type)

        return min(factor, self._tables.violation_factor_cap)

    def _violation_multiplier(self, violation_type: str) -> Decimal:
        kind = violation_type.lower()
        for rule in self._tables.violation_multipliers:
            if any(keyword in kind for keyword in rule.keywords):
                return rule.factor
        return self._tables.other_violation_factor

    def accidents_factor(self, accidents: list[Accident], rating_date: datetime.date) -> Decimal:
        """Linear increase per recent at-fault accident, capped."""
        count = len(
            recent_at_fault_accidents(
                accidents, rating_date, self._tables.accident_lookback_years
            )
        )
        if count == 0:
            return NEUTRAL
        factor = NEUTRAL + self._tables.accident_increment * count
        return min(factor, self._tables.accident_factor_cap)

    def continuous_coverage_factor(self, continuous_coverage: bool | None) -> Decimal:
        if continuous_coverage is None:
            return NEUTRAL
        if continuous_coverage:
            return self._tables.continuous_coverage_factor
        return self._tables.coverage_lapse_factor
