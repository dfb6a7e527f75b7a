# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Vehicle risk scoring.

The vehicle factor is the ordered product of six sub-factors:

- age: older vehicles cost more to repair and lack modern safety features
- make/model: luxury makes repair expensively, some models are theft targets
- performance: exotic and high-performance vehicles crash more often
- safety: NHTSA rating
- anti-theft: installed device
- market value: replacement cost
"""

import datetime
from decimal import Decimal
from enum import Enum

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.errors import InvalidInputError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...models.profile import VehicleProfile
from ...schemas.rating import FactorBreakdown
from .rate_tables import VehicleTables

logger = get_logger(__name__)

NEUTRAL = Decimal("1.00")


class VehicleClass(str, Enum):
    """Vehicle classification used by the surcharge engine."""

    SPORTS_CAR = "SPORTS_CAR"
    LUXURY = "LUXURY"
    STANDARD = "STANDARD"


def _require_name(value: str, field: str) -> str:
    name = value.strip().lower()
    if not name:
        raise InvalidInputError(f"Vehicle {field} is required", field=f"vehicle.{field}")
    return name


@beartype
class VehicleRiskScorer:
    """Score the vehicle dimension of a risk profile."""

    def __init__(
        self,
        tables: VehicleTables,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("score_vehicle")
    def score(self, vehicle: VehicleProfile, rating_date: datetime.date) -> FactorBreakdown:
        """Compute the vehicle factor breakdown.

        Args:
            vehicle: Vehicle characteristics
            rating_date: Date the vehicle age is measured from

        Returns:
            Ordered vehicle sub-factors and their product

        Raises:
            InvalidInputError: If the make or model is blank
        """
        make = _require_name(vehicle.make, "make")
        model = _require_name(vehicle.model, "model")

        breakdown = FactorBreakdown.from_factors(
            "vehicle",
            [
                ("age_factor", self.age_factor(vehicle.year, rating_date)),
                ("make_model_factor", self.make_model_factor(make, model)),
                ("performance_factor", self.performance_factor(make, model, vehicle.body_type)),
                ("safety_factor", self.safety_factor(vehicle.safety_rating)),
                ("anti_theft_factor", self.anti_theft_factor(vehicle.anti_theft)),
                ("market_value_factor", self.market_value_factor(vehicle.market_value)),
            ],
        )
        logger.debug(
            "Vehicle %s %s %s factor %s",
            vehicle.year,
            vehicle.make,
            vehicle.model,
            breakdown.total_factor,
        )
        return breakdown

    def age_factor(self, year: int, rating_date: datetime.date) -> Decimal:
        """Factor from vehicle age in years; future model years count as new."""
        age = max(0, rating_date.year - year)
        return self._tables.age_bands.lookup(age)

    def make_model_factor(self, make: str, model: str) -> Decimal:
        """Luxury and economy makes win over the high-theft model check."""
        if make in self._tables.luxury_makes:
            return self._tables.luxury_make_factor
        if make in self._tables.economy_makes:
            return self._tables.economy_make_factor
        if model in self._tables.high_theft_models:
            return self._tables.high_theft_model_factor
        return NEUTRAL

    def performance_factor(self, make: str, model: str, body_type: str | None) -> Decimal:
        if make in self._tables.exotic_makes:
            return self._tables.exotic_factor
        if any(name in make or name in model for name in self._tables.performance_names):
            return self._tables.performance_factor
        if body_type is not None:
            return self._tables.body_type_factors.get(body_type.strip().lower(), NEUTRAL)
        return NEUTRAL

    def safety_factor(self, safety_rating: int | None) -> Decimal:
        if safety_rating is None:
            return NEUTRAL
        return self._tables.safety_rating_factors.get(safety_rating, NEUTRAL)

    def anti_theft_factor(self, anti_theft: bool | None) -> Decimal:
        return self._tables.anti_theft_factor if anti_theft else NEUTRAL

    def market_value_factor(self, market_value: Decimal | None) -> Decimal:
        if market_value is None:
            return NEUTRAL
        return self._tables.market_value_bands.lookup(market_value)

    def classify(self, vehicle: VehicleProfile) -> VehicleClass:
        """Classify the vehicle as a sports car, luxury or standard vehicle."""
        make = vehicle.make.strip().lower()
        model = vehicle.model.strip().lower()

        if any(name in make or name in model for name in self._tables.sports_car_names):
            return VehicleClass.SPORTS_CAR
        if any(name in make for name in self._tables.luxury_class_makes):
            return VehicleClass.LUXURY
        return VehicleClass.STANDARD
