# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Location risk scoring from state, ZIP region, territory and crime data."""

from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import LocationProfile, TerritoryType
from ...schemas.rating import FactorBreakdown, RatingWarning
from .rate_tables import LocationTables
from .territory_data import TerritoryDataProvider, zip_number

logger = get_logger(__name__)


@beartype
class LocationRiskScorer:
    """Score the location dimension of a risk profile."""

    def __init__(
        self,
        tables: LocationTables,
        territory_data: TerritoryDataProvider,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self._territory_data = territory_data
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("score_location")
    def score(self, location: LocationProfile) -> FactorBreakdown:
        """Compute the location factor breakdown.

        An unlisted state rates at the neutral default and the breakdown
        carries an ``UNSUPPORTED_JURISDICTION`` warning.

        Raises:
            InvalidInputError: If the ZIP code has no leading digits
        """
        zip_number(location.zip_code)

        warnings: list[RatingWarning] = []
        state_result = self._tables.state_factor(location.state_code)
        if state_result.is_ok():
            state_factor = state_result.unwrap()
        else:
            error = state_result.unwrap_err()
            state_factor = self._tables.default_state_factor
            logger.warning(
                "%s; using default state factor %s", error.message, state_factor
            )
            warnings.append(
                RatingWarning(code=error.code, stage="location", message=error.message)
            )

        breakdown = FactorBreakdown.from_factors(
            "location",
            [
                ("state_factor", state_factor),
                ("zip_code_factor", self._territory_data.zip_region_factor(location.zip_code)),
                ("territory_type_factor", self.territory_factor(location.territory_type)),
                ("crime_rate_factor", self._territory_data.crime_rate_factor(location.zip_code)),
            ],
            warnings,
        )
        logger.debug(
            "Location %s %s factor %s",
            location.state_code,
            location.zip_code,
            breakdown.total_factor,
        )
        return breakdown

    def territory_factor(self, territory_type: TerritoryType | None) -> Decimal:
        if territory_type is None:
            return Decimal("1.0")
        return self._tables.territory_factors.get(territory_type.value, Decimal("1.0"))
