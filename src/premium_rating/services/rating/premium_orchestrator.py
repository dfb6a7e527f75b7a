# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium calculation orchestrator.

Runs the pipeline in one canonical order and assembles the audited result:

1. Score vehicle, driver, location and coverage; the coverage scorer also
   yields the base premium
2. ``adjusted = base x vehicle x driver x location x coverage``
3. Discounts are subtracted from the adjusted premium (capped at 50%)
4. Surcharges are added to the post-discount premium (uncapped)
5. Premium tax and fees are added for the garaging state

The orchestrator performs no business-rule arithmetic beyond composing the
stage outputs. Any fatal error aborts the whole calculation.
"""

import datetime
from decimal import Decimal

from beartype import beartype

from ...core.config import Settings, get_settings
from ...core.errors import RatingError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...core.result_types import Err, Ok, Result
from ...models.profile import RiskProfile
from ...schemas.rating import (
    CoverageMinimumValidation,
    CoverageRating,
    DiscountSummary,
    FactorBreakdown,
    PremiumCalculationResult,
    SurchargeSummary,
    TaxFeeBreakdown,
)
from .coverage_rating import CoverageRiskScorer
from .discount_calculator import DiscountEngine
from .driver_rating import DriverRiskScorer
from .location_rating import LocationRiskScorer
from .rate_tables import DEFAULT_RATING_TABLES, RatingTables, load_rating_tables
from .surcharge_calculator import SurchargeEngine
from .tax_fee_calculator import TaxFeeEngine
from .territory_data import StaticTerritoryDataProvider, TerritoryDataProvider
from .vehicle_rating import VehicleRiskScorer

logger = get_logger(__name__)


@beartype
class PremiumOrchestrator:
    """Sequence all rating stages into a ``PremiumCalculationResult``."""

    def __init__(
        self,
        tables: RatingTables | None = None,
        territory_data: TerritoryDataProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            tables: Reference tables; defaults to the file named by
                ``Settings.rating_tables_path`` or the built-in tables
            territory_data: ZIP-level data source; defaults to the static provider
            settings: Settings; defaults to the cached environment settings

        ``settings.log_level`` is applied to the process-wide
        ``premium_rating`` logger, so the most recently constructed
        orchestrator decides the level for every orchestrator in the process.
        """
        self._settings = settings or get_settings()
        self.slow_stage_threshold_ms = self._settings.slow_stage_threshold_ms
        get_logger("premium_rating", level=self._settings.log_level)
        if tables is None:
            path = self._settings.rating_tables_path
            tables = load_rating_tables(path) if path is not None else DEFAULT_RATING_TABLES
        self._tables = tables
        self._territory_data = territory_data or StaticTerritoryDataProvider()

        threshold = self.slow_stage_threshold_ms
        self._vehicle_scorer = VehicleRiskScorer(tables.vehicle, threshold)
        self._driver_scorer = DriverRiskScorer(tables.driver, threshold)
        self._location_scorer = LocationRiskScorer(
            tables.location, self._territory_data, threshold
        )
        self._coverage_scorer = CoverageRiskScorer(tables.coverage, threshold)
        self._discount_engine = DiscountEngine(tables.discount, threshold)
        self._surcharge_engine = SurchargeEngine(
            tables.surcharge, self._vehicle_scorer, self._territory_data, threshold
        )
        self._tax_fee_engine = TaxFeeEngine(tables.tax_fee, threshold)

    @property
    def tables(self) -> RatingTables:
        return self._tables

    @staticmethod
    def resolve_rating_date(profile: RiskProfile) -> datetime.date:
        """The profile's rating date, or today when absent."""
        return profile.rating_date or datetime.date.today()

    # Step-level operations, public for diagnostics

    def score_vehicle(
        self, profile: RiskProfile, rating_date: datetime.date | None = None
    ) -> FactorBreakdown:
        return self._vehicle_scorer.score(
            profile.vehicle, rating_date or self.resolve_rating_date(profile)
        )

    def score_driver(
        self, profile: RiskProfile, rating_date: datetime.date | None = None
    ) -> FactorBreakdown:
        return self._driver_scorer.score(
            profile.driver, rating_date or self.resolve_rating_date(profile)
        )

    def score_location(self, profile: RiskProfile) -> FactorBreakdown:
        return self._location_scorer.score(profile.location)

    def score_coverage(self, profile: RiskProfile) -> CoverageRating:
        return self._coverage_scorer.score(profile.coverages)

    def apply_discounts(
        self,
        profile: RiskProfile,
        basis_premium: Decimal,
        rating_date: datetime.date | None = None,
    ) -> DiscountSummary:
        return self._discount_engine.apply(
            profile, basis_premium, rating_date or self.resolve_rating_date(profile)
        )

    def apply_surcharges(
        self,
        profile: RiskProfile,
        basis_premium: Decimal,
        rating_date: datetime.date | None = None,
    ) -> SurchargeSummary:
        return self._surcharge_engine.apply(
            profile, basis_premium, rating_date or self.resolve_rating_date(profile)
        )

    def calculate_taxes_and_fees(
        self, basis_premium: Decimal, jurisdiction: str, policy_term_months: int = 12
    ) -> TaxFeeBreakdown:
        return self._tax_fee_engine.calculate(basis_premium, jurisdiction, policy_term_months)

    def validate_state_minimums(self, profile: RiskProfile) -> CoverageMinimumValidation:
        return self._coverage_scorer.validate_state_minimums(
            profile.coverages, profile.location.state_code
        )

    @performance_monitor("calculate_premium")
    def calculate_premium(self, profile: RiskProfile) -> PremiumCalculationResult:
        """Run the full pipeline for one profile.

        Raises:
            InvalidInputError: If the profile cannot be rated
            ComputationError: If a stage produces an inconsistent amount
        """
        rating_date = self.resolve_rating_date(profile)
        logger.debug(
            "Rating quote=%s policy=%s as of %s",
            profile.quote_id,
            profile.policy_id,
            rating_date,
        )
        try:
            result = self._run_pipeline(profile, rating_date)
        except RatingError as e:
            logger.error(
                "Premium calculation failed: quote=%s code=%s field=%s: %s",
                profile.quote_id,
                e.code,
                e.field,
                e.message,
            )
            raise
        except Exception:
            logger.exception(
                "Premium calculation failed unexpectedly: quote=%s", profile.quote_id
            )
            raise

        logger.info(
            "Premium calculated: quote=%s state=%s total=%s",
            profile.quote_id,
            profile.location.state_code,
            result.rounded_total_premium,
        )
        return result

    def _run_pipeline(
        self, profile: RiskProfile, rating_date: datetime.date
    ) -> PremiumCalculationResult:
        # Step 1-2: factors and adjusted premium
        vehicle = self.score_vehicle(profile, rating_date)
        driver = self.score_driver(profile, rating_date)
        location = self.score_location(profile)
        coverage = self.score_coverage(profile)

        total_factor = (
            vehicle.total_factor
            * driver.total_factor
            * location.total_factor
            * coverage.coverage_factor
        )
        adjusted_premium = coverage.base_premium * total_factor

        # Step 3-5: discounts, surcharges, taxes and fees
        discounts = self.apply_discounts(profile, adjusted_premium, rating_date)
        surcharges = self.apply_surcharges(
            profile, discounts.premium_after_discounts, rating_date
        )
        taxes = self.calculate_taxes_and_fees(
            surcharges.premium_after_surcharges,
            profile.location.state_code,
            profile.policy_term_months,
        )
        total_premium = surcharges.premium_after_surcharges + taxes.total_taxes_and_fees

        return PremiumCalculationResult(
            base_premium=coverage.base_premium,
            coverage_lines=coverage.lines,
            vehicle_factor=vehicle.total_factor,
            vehicle_factor_details=vehicle,
            driver_factor=driver.total_factor,
            driver_factor_details=driver,
            location_factor=location.total_factor,
            location_factor_details=location,
            coverage_factor=coverage.coverage_factor,
            coverage_factor_details=coverage.breakdown,
            total_factor_multiplier=total_factor,
            adjusted_premium=adjusted_premium,
            discounts=discounts.discounts,
            total_discount_amount=discounts.total_discount_amount,
            total_discount_percentage=discounts.total_discount_percentage,
            premium_after_discounts=discounts.premium_after_discounts,
            surcharges=surcharges.surcharges,
            total_surcharge_amount=surcharges.total_surcharge_amount,
            total_surcharge_percentage=surcharges.total_surcharge_percentage,
            premium_after_surcharges=surcharges.premium_after_surcharges,
            taxes_and_fees=taxes,
            total_taxes_and_fees=taxes.total_taxes_and_fees,
            total_premium=total_premium,
            rating_date=rating_date,
            calculation_timestamp=datetime.datetime.now(datetime.timezone.utc),
            calculation_version=self._settings.calculation_version,
            warnings=[
                *vehicle.warnings,
                *driver.warnings,
                *location.warnings,
                *coverage.breakdown.warnings,
                *taxes.warnings,
            ],
            quote_id=profile.quote_id,
            policy_id=profile.policy_id,
        )

    def try_calculate_premium(
        self, profile: RiskProfile
    ) -> Result[PremiumCalculationResult, RatingError]:
        """Like ``calculate_premium`` but returns rating failures as ``Err``."""
        try:
            return Ok(self.calculate_premium(profile))
        except RatingError as e:
            return Err(e)
