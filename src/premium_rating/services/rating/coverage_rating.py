# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Coverage rating: base premium and coverage-selection factor.

The base premium is the sum of the per-coverage base rates. Limits and
deductibles do not change the base premium; they move the coverage factor,
which is the base-rate-weighted mean of each line's limit and deductible
factors, times a full-coverage package credit.
"""

import re
from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.errors import InvalidInputError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import CoverageSelection
from ...schemas.rating import (
    CoverageLineRating,
    CoverageMinimumValidation,
    CoverageRating,
    FactorBreakdown,
)
from .rate_tables import CoverageTables

logger = get_logger(__name__)

NEUTRAL = Decimal("1.00")


@beartype
def normalize_coverage_type(coverage_type: str) -> str:
    """Upper-case the code and turn whitespace runs into underscores."""
    return re.sub(r"\s+", "_", coverage_type.strip().upper())


@beartype
class CoverageRiskScorer:
    """Rate the selected coverage lines."""

    def __init__(
        self,
        tables: CoverageTables,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("score_coverage")
    def score(self, coverages: list[CoverageSelection]) -> CoverageRating:
        """Compute the base premium, per-line audit rows and coverage factor.

        Raises:
            InvalidInputError: If no coverage is selected
        """
        if not coverages:
            raise InvalidInputError("At least one coverage is required", field="coverages")

        lines = [self.rate_line(coverage) for coverage in coverages]
        base_premium = sum((line.base_rate for line in lines), Decimal("0"))
        weighted = sum((line.line_premium for line in lines), Decimal("0"))

        breakdown = FactorBreakdown.from_factors(
            "coverage",
            [
                ("limits_deductibles_factor", weighted / base_premium),
                ("full_coverage_factor", self.full_coverage_factor(coverages)),
            ],
        )
        logger.debug(
            "Coverage base premium %s over %d line(s), factor %s",
            base_premium,
            len(lines),
            breakdown.total_factor,
        )
        return CoverageRating(base_premium=base_premium, lines=lines, breakdown=breakdown)

    def base_rate(self, coverage_type: str) -> Decimal:
        return self._tables.base_rates.get(
            normalize_coverage_type(coverage_type), self._tables.default_base_rate
        )

    def rate_line(self, coverage: CoverageSelection) -> CoverageLineRating:
        """Audit row for one coverage line."""
        code = normalize_coverage_type(coverage.coverage_type)
        base_rate = self.base_rate(code)
        limit_factor = self.limit_factor(code, coverage.limit_amount)
        deductible_factor = self.deductible_factor(code, coverage.deductible_amount)
        return CoverageLineRating(
            coverage_type=code,
            base_rate=base_rate,
            limit_factor=limit_factor,
            deductible_factor=deductible_factor,
            line_premium=base_rate * limit_factor * deductible_factor,
        )

    def limit_factor(self, coverage_type: str, limit_amount: Decimal | None) -> Decimal:
        """Higher liability limits cost more; other lines are neutral."""
        if limit_amount is None or coverage_type not in self._tables.liability_coverage_types:
            return NEUTRAL
        return self._tables.limit_bands.lookup(limit_amount)

    def deductible_factor(
        self, coverage_type: str, deductible_amount: Decimal | None
    ) -> Decimal:
        """Higher physical-damage deductibles cost less; other lines are neutral."""
        if (
            deductible_amount is None
            or coverage_type not in self._tables.physical_damage_coverage_types
        ):
            return NEUTRAL
        if deductible_amount <= self._tables.low_deductible_limit:
            return self._tables.low_deductible_factor
        if deductible_amount >= self._tables.high_deductible_limit:
            return self._tables.high_deductible_factor
        return self._tables.deductible_factors.get(deductible_amount, NEUTRAL)

    def full_coverage_factor(self, coverages: list[CoverageSelection]) -> Decimal:
        """Package credit for collision plus comprehensive with high liability limits."""
        codes = {normalize_coverage_type(c.coverage_type) for c in coverages}
        has_physical_damage = all(
            code in codes for code in self._tables.physical_damage_coverage_types
        )
        has_high_liability = any(
            normalize_coverage_type(c.coverage_type) in self._tables.liability_coverage_types
            and c.limit_amount is not None
            and c.limit_amount >= self._tables.full_coverage_min_liability_limit
            for c in coverages
        )
        if has_physical_damage and has_high_liability:
            return self._tables.full_coverage_factor
        return NEUTRAL

    def validate_state_minimums(
        self, coverages: list[CoverageSelection], state_code: str
    ) -> CoverageMinimumValidation:
        """Check the liability limit against the state's minimum.

        Diagnostic only; the pipeline does not reject a profile on it.
        """
        state = state_code.upper()
        minimum = self._tables.state_minimum_liability.get(
            state, self._tables.default_minimum_liability
        )
        errors: list[str] = []

        liability = next(
            (
                c
                for c in coverages
                if normalize_coverage_type(c.coverage_type)
                in self._tables.liability_coverage_types
            ),
            None,
        )
        if liability is None:
            errors.append("Liability coverage is required")
        elif liability.limit_amount is not None and liability.limit_amount < minimum:
            errors.append(f"Liability limit must meet state minimum of ${minimum}")

        return CoverageMinimumValidation(
            state_code=state,
            minimum_liability_limit=minimum,
            valid=not errors,
            errors=errors,
        )
