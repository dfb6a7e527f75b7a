"""Unit tests for coverage rating and state minimum checks."""

from decimal import Decimal

import pytest

from premium_rating.core.errors import InvalidInputError
from premium_rating.models import CoverageSelection
from premium_rating.services.rating import (
    DEFAULT_RATING_TABLES,
    CoverageRiskScorer,
    normalize_coverage_type,
)


@pytest.fixture
def scorer() -> CoverageRiskScorer:
    return CoverageRiskScorer(DEFAULT_RATING_TABLES.coverage)


def selection(kind: str, limit: str | None = None, deductible: str | None = None) -> CoverageSelection:
    return CoverageSelection(
        coverage_type=kind,
        limit_amount=Decimal(limit) if limit is not None else None,
        deductible_amount=Decimal(deductible) if deductible is not None else None,
    )


class TestBasePremium:
    """Test base premium from per-coverage base rates."""

    def test_sum_of_base_rates(self, scorer):
        """Test the base premium is the sum of the selected base rates."""
        rating = scorer.score(
            [
                selection("BODILY_INJURY"),
                selection("PROPERTY_DAMAGE"),
                selection("COLLISION"),
                selection("COMPREHENSIVE"),
            ]
        )
        assert rating.base_premium == Decimal("1450")

    def test_codes_are_normalized(self, scorer):
        """Test codes are matched case-insensitively with spaces as underscores."""
        assert normalize_coverage_type(" uninsured  motorist ") == "UNINSURED_MOTORIST"
        assert scorer.base_rate("personal injury protection") == Decimal("200")

    def test_unrecognized_coverage_uses_default_rate(self, scorer):
        """Test unknown coverage codes get the default base rate."""
        assert scorer.base_rate("RENTAL_REIMBURSEMENT") == Decimal("100")

    def test_empty_selection_is_rejected(self, scorer):
        """Test an empty coverage list raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            scorer.score([])


class TestLimitAndDeductibleFactors:
    """Test per-line limit and deductible factors."""

    @pytest.mark.parametrize(
        ("limit", "expected"),
        [
            ("50000", Decimal("0.70")),
            ("100000", Decimal("0.85")),
            ("300000", Decimal("1.00")),
            ("500000", Decimal("1.30")),
            ("1000000", Decimal("1.60")),
            ("1000001", Decimal("2.00")),
        ],
    )
    def test_liability_limit_bands(self, scorer, limit, expected):
        """Test liability limit bands are inclusive of their upper bound."""
        assert scorer.limit_factor("BODILY_INJURY", Decimal(limit)) == expected

    def test_limit_ignored_outside_liability(self, scorer):
        """Test limits on non-liability lines are neutral."""
        assert scorer.limit_factor("PROPERTY_DAMAGE", Decimal("50000")) == Decimal("1.00")
        assert scorer.limit_factor("LIABILITY", None) == Decimal("1.00")

    @pytest.mark.parametrize(
        ("deductible", "expected"),
        [
            ("0", Decimal("1.15")),
            ("250", Decimal("1.15")),
            ("500", Decimal("1.00")),
            ("750", Decimal("1.00")),
            ("1000", Decimal("0.85")),
            ("2000", Decimal("0.70")),
            ("5000", Decimal("0.70")),
        ],
    )
    def test_deductible_factors(self, scorer, deductible, expected):
        """Test physical damage deductible factors, including an explicit zero."""
        assert scorer.deductible_factor("COMPREHENSIVE", Decimal(deductible)) == expected

    def test_deductible_ignored_outside_physical_damage(self, scorer):
        """Test deductibles on liability lines are neutral."""
        assert scorer.deductible_factor("BODILY_INJURY", Decimal("2000")) == Decimal("1.00")

    def test_weighted_mean_of_line_factors(self, scorer):
        """Test the coverage factor weights each line by its base rate."""
        rating = scorer.score(
            [selection("BODILY_INJURY", limit="300000"), selection("COLLISION", deductible="1000")]
        )

        # (400 x 1.00 + 500 x 0.85) / 900
        expected = Decimal("825") / Decimal("900")
        assert rating.breakdown.get("limits_deductibles_factor") == expected
        assert rating.coverage_factor == expected * Decimal("1.00")

    def test_audit_rows(self, scorer):
        """Test each line gets an audit row with its own factors."""
        rating = scorer.score(
            [selection("bodily injury", limit="50000"), selection("Collision", deductible="250")]
        )

        assert [line.coverage_type for line in rating.lines] == ["BODILY_INJURY", "COLLISION"]
        assert rating.lines[0].line_premium == Decimal("280")
        assert rating.lines[1].line_premium == Decimal("575")


class TestFullCoverageFactor:
    """Test the full coverage package credit."""

    def test_full_coverage_credit(self, scorer):
        """Test collision, comprehensive and a 500k liability limit earn 0.95."""
        rating = scorer.score(
            [
                selection("BODILY_INJURY", limit="500000"),
                selection("COLLISION", deductible="500"),
                selection("COMPREHENSIVE", deductible="500"),
            ]
        )
        assert rating.breakdown.get("full_coverage_factor") == Decimal("0.95")

    def test_no_credit_with_lower_liability_limit(self, scorer):
        """Test the credit needs a high liability limit."""
        coverages = [
            selection("BODILY_INJURY", limit="300000"),
            selection("COLLISION"),
            selection("COMPREHENSIVE"),
        ]
        assert scorer.full_coverage_factor(coverages) == Decimal("1.00")

    def test_no_credit_without_comprehensive(self, scorer):
        """Test the credit needs both physical damage lines."""
        coverages = [selection("LIABILITY", limit="1000000"), selection("COLLISION")]
        assert scorer.full_coverage_factor(coverages) == Decimal("1.00")


class TestStateMinimums:
    """Test the liability state minimum diagnostic."""

    def test_meets_minimum(self, scorer):
        """Test a limit at the state minimum is valid."""
        report = scorer.validate_state_minimums(
            [selection("BODILY_INJURY", limit="30000")], "ca"
        )
        assert report.valid
        assert report.state_code == "CA"
        assert report.minimum_liability_limit == Decimal("30000")

    def test_below_minimum(self, scorer):
        """Test a limit below the Texas minimum is reported."""
        report = scorer.validate_state_minimums(
            [selection("LIABILITY", limit="50000")], "TX"
        )
        assert not report.valid
        assert report.errors == ["Liability limit must meet state minimum of $60000"]

    def test_missing_liability(self, scorer):
        """Test a selection without liability coverage is reported."""
        report = scorer.validate_state_minimums([selection("COLLISION")], "OH")
        assert not report.valid
        assert report.minimum_liability_limit == Decimal("50000")
        assert report.errors == ["Liability coverage is required"]
