"""Unit tests for vehicle risk scoring."""

from datetime import date
from decimal import Decimal

import pytest

from premium_rating.core.errors import InvalidInputError
from premium_rating.models import VehicleProfile
from premium_rating.services.rating import (
    DEFAULT_RATING_TABLES,
    VehicleClass,
    VehicleRiskScorer,
)

RATING_DATE = date(2025, 6, 1)


@pytest.fixture
def scorer() -> VehicleRiskScorer:
    return VehicleRiskScorer(DEFAULT_RATING_TABLES.vehicle)


def vehicle(**overrides) -> VehicleProfile:
    data = {"year": 2022, "make": "Ford", "model": "Focus", **overrides}
    return VehicleProfile.model_validate(data)


class TestVehicleAgeFactor:
    """Test vehicle age bands."""

    @pytest.mark.parametrize(
        ("year", "expected"),
        [
            (2025, Decimal("1.00")),
            (2022, Decimal("1.00")),
            (2020, Decimal("1.05")),
            (2015, Decimal("1.20")),
            (2010, Decimal("1.30")),
            (2009, Decimal("1.40")),
        ],
    )
    def test_age_bands(self, scorer, year, expected):
        """Test each age band boundary."""
        assert scorer.age_factor(year, RATING_DATE) == expected

    def test_twenty_year_old_vehicle_gets_oldest_band(self, scorer):
        """Test a vehicle twenty years old rates at 1.40."""
        breakdown = scorer.score(vehicle(year=RATING_DATE.year - 20), RATING_DATE)
        assert breakdown.get("age_factor") == Decimal("1.40")

    def test_future_model_year_counts_as_new(self, scorer):
        """Test next year's model rates as a new vehicle."""
        assert scorer.age_factor(2026, RATING_DATE) == Decimal("1.00")


class TestMakeModelFactor:
    """Test make and model classification."""

    def test_luxury_make(self, scorer):
        """Test luxury makes increase the factor."""
        assert scorer.score(vehicle(make="BMW", model="X5"), RATING_DATE).get(
            "make_model_factor"
        ) == Decimal("1.30")

    def test_economy_make(self, scorer):
        """Test economy makes decrease the factor."""
        assert scorer.score(vehicle(make="Honda", model="Fit"), RATING_DATE).get(
            "make_model_factor"
        ) == Decimal("0.90")

    def test_high_theft_model(self, scorer):
        """Test high-theft models on a neutral make."""
        assert scorer.score(vehicle(make="Nissan", model="Altima"), RATING_DATE).get(
            "make_model_factor"
        ) == Decimal("1.15")

    def test_make_check_wins_over_model_check(self, scorer):
        """Test an economy make with a high-theft model uses the make factor."""
        assert scorer.score(vehicle(make="Toyota", model="Camry"), RATING_DATE).get(
            "make_model_factor"
        ) == Decimal("0.90")

    def test_unlisted_vehicle_is_neutral(self, scorer):
        """Test an unlisted make and model."""
        assert scorer.score(vehicle(), RATING_DATE).get("make_model_factor") == Decimal("1.00")


class TestPerformanceFactor:
    """Test performance classification."""

    def test_exotic_make(self, scorer):
        """Test exotic makes double the factor."""
        assert scorer.performance_factor("ferrari", "f8", None) == Decimal("2.00")

    def test_performance_name_in_model(self, scorer):
        """Test performance names match as a substring of the model."""
        assert scorer.performance_factor("ford", "mustang gt", None) == Decimal("1.50")

    def test_performance_name_in_make(self, scorer):
        """Test performance names match as a substring of the make."""
        assert scorer.performance_factor("porsche", "cayenne", None) == Decimal("1.50")

    def test_coupe_body_type(self, scorer):
        """Test coupes get the body type factor."""
        assert scorer.performance_factor("honda", "civic", "Coupe") == Decimal("1.20")

    def test_sedan_is_neutral(self, scorer):
        """Test other body types are neutral."""
        assert scorer.performance_factor("honda", "civic", "sedan") == Decimal("1.00")


class TestOptionalVehicleFactors:
    """Test factors driven by optional fields."""

    @pytest.mark.parametrize(
        ("rating", "expected"),
        [(5, Decimal("0.85")), (4, Decimal("0.90")), (3, Decimal("0.95")), (2, Decimal("1.00")), (None, Decimal("1.00"))],
    )
    def test_safety_rating(self, scorer, rating, expected):
        """Test safety rating discounts."""
        assert scorer.safety_factor(rating) == expected

    def test_anti_theft(self, scorer):
        """Test anti-theft device discount."""
        assert scorer.anti_theft_factor(True) == Decimal("0.95")
        assert scorer.anti_theft_factor(False) == Decimal("1.00")
        assert scorer.anti_theft_factor(None) == Decimal("1.00")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Decimal("0"), Decimal("0.90")),
            (Decimal("9999.99"), Decimal("0.90")),
            (Decimal("10000"), Decimal("1.00")),
            (Decimal("29999"), Decimal("1.00")),
            (Decimal("30000"), Decimal("1.15")),
            (Decimal("60000"), Decimal("1.30")),
        ],
    )
    def test_market_value(self, scorer, value, expected):
        """Test market value bands, including an explicit zero."""
        assert scorer.market_value_factor(value) == expected

    def test_absent_market_value_is_neutral(self, scorer):
        """Test a missing market value is neutral rather than the lowest band."""
        assert scorer.market_value_factor(None) == Decimal("1.00")


class TestVehicleBreakdown:
    """Test the assembled breakdown."""

    def test_sub_factor_order_and_product(self, scorer):
        """Test sub-factors keep their order and multiply to the total."""
        breakdown = scorer.score(
            vehicle(
                year=2018,
                make="BMW",
                model="M4",
                body_type="coupe",
                safety_rating=5,
                anti_theft=True,
                market_value=Decimal("65000"),
            ),
            RATING_DATE,
        )

        assert [f.name for f in breakdown.factors] == [
            "age_factor",
            "make_model_factor",
            "performance_factor",
            "safety_factor",
            "anti_theft_factor",
            "market_value_factor",
        ]
        # 1.20 x 1.30 x 1.20 x 0.85 x 0.95 x 1.30
        assert breakdown.total_factor == Decimal("1.965132")

    @pytest.mark.parametrize("field", ["make", "model"])
    def test_blank_make_or_model_is_rejected(self, scorer, field):
        """Test a blank make or model raises InvalidInputError."""
        with pytest.raises(InvalidInputError) as exc_info:
            scorer.score(vehicle(**{field: "   "}), RATING_DATE)

        assert exc_info.value.field == f"vehicle.{field}"


class TestVehicleClassification:
    """Test classification used by the surcharge engine."""

    @pytest.mark.parametrize(
        ("make", "model", "expected"),
        [
            ("Chevrolet", "Corvette", VehicleClass.SPORTS_CAR),
            ("Porsche", "911", VehicleClass.SPORTS_CAR),
            ("Mercedes-Benz", "C300", VehicleClass.LUXURY),
            ("Cadillac", "Escalade", VehicleClass.LUXURY),
            ("Toyota", "Camry", VehicleClass.STANDARD),
        ],
    )
    def test_classify(self, scorer, make, model, expected):
        """Test sports, luxury and standard classification."""
        assert scorer.classify(vehicle(make=make, model=model)) is expected
