"""Unit tests for reference tables."""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from premium_rating.core.errors import InvalidInputError, UnsupportedJurisdictionError
from premium_rating.services.rating import (
    DEFAULT_RATING_TABLES,
    BandTable,
    RatingTables,
    load_rating_tables,
)
from premium_rating.services.rating.rate_tables import RateBand


class TestBandTable:
    """Test band lookup semantics."""

    def test_exclusive_bands(self):
        """Test a value equal to a limit falls into the next band."""
        table = BandTable(
            bands=[RateBand(limit=Decimal("10"), factor=Decimal("1"))], above=Decimal("2")
        )
        assert table.lookup(9) == Decimal("1")
        assert table.lookup(10) == Decimal("2")

    def test_inclusive_bands(self):
        """Test a value equal to a limit stays in that band."""
        table = BandTable(
            bands=[RateBand(limit=Decimal("10"), factor=Decimal("1"))],
            inclusive=True,
            above=Decimal("2"),
        )
        assert table.lookup(Decimal("10")) == Decimal("1")
        assert table.lookup(Decimal("10.01")) == Decimal("2")


class TestTableLookups:
    """Test Result-returning lookups."""

    def test_state_factor(self):
        """Test a listed state returns Ok."""
        result = DEFAULT_RATING_TABLES.location.state_factor("mi")
        assert result.is_ok()
        assert result.unwrap() == Decimal("1.35")

    def test_unlisted_state(self):
        """Test an unlisted state returns Err with the jurisdiction."""
        result = DEFAULT_RATING_TABLES.location.state_factor("AK")
        assert result.is_err()
        error = result.unwrap_err()
        assert isinstance(error, UnsupportedJurisdictionError)
        assert error.jurisdiction == "AK"

    def test_rates_for(self):
        """Test tax and fee lookup."""
        rates = DEFAULT_RATING_TABLES.tax_fee.rates_for("HI").unwrap()
        assert rates.premium_tax_rate == Decimal("4.265")
        assert DEFAULT_RATING_TABLES.tax_fee.rates_for("IA").is_err()


class TestRatingTables:
    """Test table construction and loading."""

    def test_tables_are_immutable(self):
        """Test table fields cannot be reassigned."""
        with pytest.raises(ValidationError):
            DEFAULT_RATING_TABLES.discount.max_total_discount = Decimal("90")

    def test_load_partial_override(self, tmp_path):
        """Test a JSON document overrides only the sections it names."""
        path = tmp_path / "2026.json"
        path.write_text(
            json.dumps(
                {
                    "version": "2026",
                    "discount": {"max_total_discount": "40", "paperless": "3"},
                    "location": {"state_factors": {"AK": "1.40"}},
                }
            )
        )
        tables = load_rating_tables(path)

        assert tables.version == "2026"
        assert tables.discount.max_total_discount == Decimal("40")
        assert tables.discount.paperless == Decimal("3")
        assert tables.discount.multi_car == Decimal("15")
        assert tables.location.state_factor("AK").unwrap() == Decimal("1.40")
        assert tables.location.state_factor("MI").is_err()
        assert tables.vehicle == RatingTables().vehicle

    def test_missing_file(self, tmp_path):
        """Test a missing file is reported as invalid input."""
        with pytest.raises(InvalidInputError) as exc_info:
            load_rating_tables(tmp_path / "missing.json")
        assert exc_info.value.field == "rating_tables_path"

    def test_invalid_document(self, tmp_path):
        """Test an invalid table document is rejected."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"discount": {"unknown_rule": "5"}}))

        with pytest.raises(InvalidInputError, match="Invalid rating tables"):
            load_rating_tables(path)
