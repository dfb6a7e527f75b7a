# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Discount evaluation and aggregate-cap stacking.

Seven independent rules each yield zero or a fixed percentage of the
factor-adjusted premium. When the percentages add up to more than the cap,
every discount is scaled down pro rata so the total equals the cap exactly.
"""

import datetime
from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.errors import ComputationError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import RiskProfile
from ...schemas.rating import DiscountRecord, DiscountSummary
from .history import recent_at_fault_accidents, recent_violations
from .rate_tables import DiscountTables

logger = get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@beartype
class DiscountEngine:
    """Evaluate discount eligibility and apply the aggregate cap."""

    def __init__(
        self,
        tables: DiscountTables,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("apply_discounts")
    def apply(
        self,
        profile: RiskProfile,
        basis_premium: Decimal,
        rating_date: datetime.date,
    ) -> DiscountSummary:
        """Apply all eligible discounts to the basis premium.

        Args:
            profile: Rating request
            basis_premium: Factor-adjusted premium the percentages apply to
            rating_date: Date the history window and quote lead time use

        Returns:
            Discount records after capping, with totals

        Raises:
            ComputationError: If the basis premium is negative
        """
        if basis_premium < ZERO:
            raise ComputationError(f"Discount basis premium is negative: {basis_premium}")

        eligible = self.evaluate(profile, rating_date)
        uncapped = sum((percentage for _, _, percentage in eligible), ZERO)
        cap = self._tables.max_total_discount
        cap_applied = uncapped > cap

        percentages = [percentage for _, _, percentage in eligible]
        if cap_applied:
            percentages = self.scale_to_cap(percentages, cap)
            logger.debug("Discounts total %s%% capped at %s%%", uncapped, cap)

        discounts = [
            DiscountRecord(
                code=code,
                name=name,
                percentage=percentage,
                amount=basis_premium * percentage / HUNDRED,
            )
            for (code, name, _), percentage in zip(eligible, percentages)
        ]
        total_percentage = sum((d.percentage for d in discounts), ZERO)
        total_amount = sum((d.amount for d in discounts), ZERO)

        return DiscountSummary(
            basis_premium=basis_premium,
            discounts=discounts,
            uncapped_percentage=uncapped,
            cap_applied=cap_applied,
            total_discount_percentage=total_percentage,
            total_discount_amount=total_amount,
            premium_after_discounts=basis_premium - total_amount,
        )

    @staticmethod
    def scale_to_cap(percentages: list[Decimal], cap: Decimal) -> list[Decimal]:
        """Scale percentages by ``cap / sum``; the last one absorbs rounding."""
        total = sum(percentages, ZERO)
        scaled = [percentage * cap / total for percentage in percentages[:-1]]
        scaled.append(cap - sum(scaled, ZERO))
        return scaled

    def evaluate(
        self, profile: RiskProfile, rating_date: datetime.date
    ) -> list[tuple[str, str, Decimal]]:
        """Return ``(code, name, percentage)`` for every discount that applies."""
        rules = [
            ("MULTI_CAR", "Multi-Car Discount", self.multi_car(profile)),
            ("GOOD_DRIVER", "Good Driver Discount", self.good_driver(profile, rating_date)),
            ("DEFENSIVE_DRIVING", "Defensive Driving Course", self.defensive_driving(profile)),
            ("LOW_MILEAGE", "Low Mileage Discount", self.low_mileage(profile)),
            ("HOMEOWNER", "Homeowner Discount", self.homeowner(profile)),
            ("ADVANCE_QUOTE", "Advance Quote Discount", self.advance_quote(profile, rating_date)),
            ("PAPERLESS", "Paperless Discount", self.paperless(profile)),
        ]
        return [(code, name, pct) for code, name, pct in rules if pct > ZERO]

    def multi_car(self, profile: RiskProfile) -> Decimal:
        return self._tables.multi_car if profile.multi_car else ZERO

    def good_driver(self, profile: RiskProfile, rating_date: datetime.date) -> Decimal:
        """No violations and no at-fault accidents inside the look-back window."""
        years = self._tables.good_driver_lookback_years
        driver = profile.driver
        if recent_violations(driver.violations, rating_date, years):
            return ZERO
        if recent_at_fault_accidents(driver.accidents, rating_date, years):
            return ZERO
        return self._tables.good_driver

    def defensive_driving(self, profile: RiskProfile) -> Decimal:
        return self._tables.defensive_driving if profile.defensive_driving_course else ZERO

    def low_mileage(self, profile: RiskProfile) -> Decimal:
        if profile.annual_mileage is None:
            return ZERO
        return self._tables.low_mileage_bands.lookup(profile.annual_mileage)

    def homeowner(self, profile: RiskProfile) -> Decimal:
        return self._tables.homeowner if profile.homeowner else ZERO

    def advance_quote(self, profile: RiskProfile, rating_date: datetime.date) -> Decimal:
        """Quotes bound well before the effective date."""
        lead_days = (profile.effective_date - rating_date).days
        if lead_days >= self._tables.advance_quote_min_days:
            return self._tables.advance_quote
        return ZERO

    def paperless(self, profile: RiskProfile) -> Decimal:
        return self._tables.paperless if profile.paperless else ZERO
