# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Reference tables for every rating stage.

All bands, classification lists and per-jurisdiction rates live here as
frozen models so that a new policy year or a new state can be rolled out by
swapping the tables, without touching scoring logic. ``RatingTables()``
yields the built-in defaults; ``load_rating_tables`` reads a JSON document
whose sections override the defaults they name.

Tables are built once and shared read-only across calculations.
"""

from decimal import Decimal
from pathlib import Path

from beartype import beartype
from pydantic import Field, ValidationError

from ...core.errors import InvalidInputError, UnsupportedJurisdictionError
from ...core.logging_utils import get_logger
from ...core.result_types import Err, Ok, Result
from ...models.base import BaseModelConfig

logger = get_logger(__name__)


@beartype
class RateBand(BaseModelConfig):
    """Upper limit of a band and the value applied inside it."""

    limit: Decimal
    factor: Decimal


@beartype
class BandTable(BaseModelConfig):
    """Ascending bands; the first matching band wins.

    With ``inclusive`` a value matches when ``value <= limit``, otherwise when
    ``value < limit``. Values beyond the last band get ``above``.
    """

    bands: list[RateBand]
    inclusive: bool = False
    above: Decimal

    def lookup(self, value: Decimal | int) -> Decimal:
        """Return the factor for ``value``."""
        for band in self.bands:
            if value <= band.limit if self.inclusive else value < band.limit:
                return band.factor
        return self.above


def _bands(
    pairs: list[tuple[str, str]], above: str, *, inclusive: bool = False
) -> BandTable:
    return BandTable(
        bands=[RateBand(limit=Decimal(limit), factor=Decimal(factor)) for limit, factor in pairs],
        inclusive=inclusive,
        above=Decimal(above),
    )


@beartype
class KeywordFactor(BaseModelConfig):
    """Factor applied when any keyword appears in a free-text type."""

    keywords: list[str]
    factor: Decimal


@beartype
class JurisdictionRates(BaseModelConfig):
    """Premium tax rate (percent) and flat fees for one jurisdiction."""

    premium_tax_rate: Decimal = Field(..., ge=Decimal("0"))
    policy_fee: Decimal = Field(..., ge=Decimal("0"))
    dmv_fee: Decimal = Field(..., ge=Decimal("0"))


def _rates(tax: str, policy_fee: str, dmv_fee: str) -> JurisdictionRates:
    return JurisdictionRates(
        premium_tax_rate=Decimal(tax),
        policy_fee=Decimal(policy_fee),
        dmv_fee=Decimal(dmv_fee),
    )


@beartype
class VehicleTables(BaseModelConfig):
    """Vehicle age bands and make/model classifications."""

    age_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [("3", "1.00"), ("5", "1.05"), ("10", "1.20"), ("15", "1.30")],
            "1.40",
            inclusive=True,
        )
    )

    luxury_makes: list[str] = Field(
        default_factory=lambda: ["bmw", "mercedes", "audi", "lexus", "porsche", "tesla"]
    )
    economy_makes: list[str] = Field(
        default_factory=lambda: ["toyota", "honda", "hyundai", "kia", "mazda"]
    )
    high_theft_models: list[str] = Field(
        default_factory=lambda: ["civic", "accord", "camry", "corolla", "altima"]
    )
    luxury_make_factor: Decimal = Decimal("1.30")
    economy_make_factor: Decimal = Decimal("0.90")
    high_theft_model_factor: Decimal = Decimal("1.15")

    exotic_makes: list[str] = Field(
        default_factory=lambda: ["ferrari", "lamborghini", "maserati", "bugatti", "mclaren"]
    )
    performance_names: list[str] = Field(
        default_factory=lambda: ["porsche", "corvette", "mustang", "camaro", "challenger"]
    )
    exotic_factor: Decimal = Decimal("2.00")
    performance_factor: Decimal = Decimal("1.50")
    body_type_factors: dict[str, Decimal] = Field(
        default_factory=lambda: {"coupe": Decimal("1.20")}
    )

    safety_rating_factors: dict[int, Decimal] = Field(
        default_factory=lambda: {
            5: Decimal("0.85"),
            4: Decimal("0.90"),
            3: Decimal("0.95"),
        }
    )
    anti_theft_factor: Decimal = Decimal("0.95")

    market_value_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [("10000", "0.90"), ("30000", "1.00"), ("60000", "1.15")], "1.30"
        )
    )

    # Surcharge classification
    sports_car_names: list[str] = Field(
        default_factory=lambda: ["ferrari", "lamborghini", "porsche", "corvette", "mustang", "camaro"]
    )
    luxury_class_makes: list[str] = Field(
        default_factory=lambda: ["bmw", "mercedes-benz", "audi", "lexus", "tesla", "cadillac"]
    )


@beartype
class DriverTables(BaseModelConfig):
    """Driver age and experience bands plus history multipliers."""

    age_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [
                ("18", "2.5"),
                ("21", "2.0"),
                ("25", "1.5"),
                ("30", "1.2"),
                ("65", "0.9"),
                ("75", "1.0"),
            ],
            "1.2",
        )
    )
    licensing_age: int = 16
    experience_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [("1", "1.4"), ("3", "1.3"), ("5", "1.15"), ("10", "1.0")], "0.9"
        )
    )
    gender_factors: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "female": Decimal("0.95"),
            "f": Decimal("0.95"),
            "male": Decimal("1.05"),
            "m": Decimal("1.05"),
        }
    )
    marital_status_factors: dict[str, Decimal] = Field(
        default_factory=lambda: {"married": Decimal("0.85")}
    )

    violation_lookback_years: int = 3
    violation_multipliers: list[KeywordFactor] = Field(
        default_factory=lambda: [
            KeywordFactor(keywords=["dui", "dwi"], factor=Decimal("1.75")),
            KeywordFactor(keywords=["reckless"], factor=Decimal("1.35")),
            KeywordFactor(keywords=["speeding"], factor=Decimal("1.15")),
        ]
    )
    other_violation_factor: Decimal = Decimal("1.10")
    violation_factor_cap: Decimal = Decimal("2.5")

    accident_lookback_years: int = 5
    accident_increment: Decimal = Decimal("0.25")
    accident_factor_cap: Decimal = Decimal("3.0")

    continuous_coverage_factor: Decimal = Decimal("0.95")
    coverage_lapse_factor: Decimal = Decimal("1.15")


@beartype
class LocationTables(BaseModelConfig):
    """State base factors and territory density factors."""

    state_factors: dict[str, Decimal] = Field(
        default_factory=lambda: {
            code: Decimal(factor)
            for code, factor in {
                "MI": "1.35",
                "LA": "1.30",
                "FL": "1.25",
                "NY": "1.25",
                "CA": "1.20",
                "NJ": "1.20",
                "TX": "1.10",
                "IL": "1.10",
                "GA": "1.05",
                "PA": "1.05",
                "OH": "1.00",
                "NC": "1.00",
                "IA": "0.90",
                "WI": "0.90",
                "ID": "0.85",
                "ND": "0.85",
                "ME": "0.85",
                "VT": "0.85",
            }.items()
        }
    )
    default_state_factor: Decimal = Decimal("1.0")
    territory_factors: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "URBAN": Decimal("1.25"),
            "SUBURBAN": Decimal("1.00"),
            "RURAL": Decimal("0.85"),
        }
    )

    @beartype
    def state_factor(self, state_code: str) -> Result[Decimal, UnsupportedJurisdictionError]:
        """Look up the base factor for a state."""
        factor = self.state_factors.get(state_code.upper())
        if factor is None:
            return Err(UnsupportedJurisdictionError(state_code, "state factor"))
        return Ok(factor)


@beartype
class CoverageTables(BaseModelConfig):
    """Per-coverage base rates, limit and deductible factors."""

    base_rates: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "BODILY_INJURY": Decimal("400"),
            "PROPERTY_DAMAGE": Decimal("250"),
            "COLLISION": Decimal("500"),
            "COMPREHENSIVE": Decimal("300"),
            "UNINSURED_MOTORIST": Decimal("150"),
            "PERSONAL_INJURY_PROTECTION": Decimal("200"),
        }
    )
    default_base_rate: Decimal = Decimal("100")

    liability_coverage_types: list[str] = Field(
        default_factory=lambda: ["LIABILITY", "BODILY_INJURY"]
    )
    limit_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [
                ("50000", "0.70"),
                ("100000", "0.85"),
                ("300000", "1.00"),
                ("500000", "1.30"),
                ("1000000", "1.60"),
            ],
            "2.00",
            inclusive=True,
        )
    )

    physical_damage_coverage_types: list[str] = Field(
        default_factory=lambda: ["COLLISION", "COMPREHENSIVE"]
    )
    low_deductible_limit: Decimal = Decimal("250")
    low_deductible_factor: Decimal = Decimal("1.15")
    deductible_factors: dict[Decimal, Decimal] = Field(
        default_factory=lambda: {
            Decimal("500"): Decimal("1.00"),
            Decimal("1000"): Decimal("0.85"),
        }
    )
    high_deductible_limit: Decimal = Decimal("2000")
    high_deductible_factor: Decimal = Decimal("0.70")

    full_coverage_factor: Decimal = Decimal("0.95")
    full_coverage_min_liability_limit: Decimal = Decimal("500000")

    state_minimum_liability: dict[str, Decimal] = Field(
        default_factory=lambda: {
            "CA": Decimal("30000"),
            "TX": Decimal("60000"),
            "FL": Decimal("20000"),
            "NY": Decimal("50000"),
        }
    )
    default_minimum_liability: Decimal = Decimal("50000")


@beartype
class DiscountTables(BaseModelConfig):
    """Discount percentages and the aggregate cap."""

    max_total_discount: Decimal = Decimal("50")
    multi_car: Decimal = Decimal("15")
    good_driver: Decimal = Decimal("20")
    good_driver_lookback_years: int = 3
    defensive_driving: Decimal = Decimal("8")
    low_mileage_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [("5000", "15"), ("7500", "10"), ("10000", "5")], "0"
        )
    )
    homeowner: Decimal = Decimal("8")
    advance_quote: Decimal = Decimal("5")
    advance_quote_min_days: int = 7
    paperless: Decimal = Decimal("4")


@beartype
class SurchargeTables(BaseModelConfig):
    """Surcharge percentages; these are never capped in aggregate."""

    young_driver_bands: BandTable = Field(
        default_factory=lambda: _bands([("18", "50"), ("21", "40"), ("25", "30")], "0")
    )
    inexperienced_driver_bands: BandTable = Field(
        default_factory=lambda: _bands([("1", "30"), ("2", "20"), ("3", "15")], "0")
    )
    history_lookback_years: int = 3
    per_accident: Decimal = Decimal("30")

    major_violation: Decimal = Decimal("50")
    moderate_violation: Decimal = Decimal("25")
    minor_violation: Decimal = Decimal("15")
    major_violation_keywords: list[str] = Field(
        default_factory=lambda: ["DUI", "DWI", "RECKLESS", "HIT", "RUN"]
    )
    speeding_keyword: str = "SPEEDING"
    excessive_speeding_markers: list[str] = Field(
        default_factory=lambda: ["20", "EXCESSIVE"]
    )
    moderate_violation_keywords: list[str] = Field(
        default_factory=lambda: ["FAILURE", "YIELD"]
    )

    high_mileage_bands: BandTable = Field(
        default_factory=lambda: _bands(
            [("15000", "0"), ("20000", "10"), ("25000", "15")], "20", inclusive=True
        )
    )
    vehicle_class_surcharges: dict[str, Decimal] = Field(
        default_factory=lambda: {"SPORTS_CAR": Decimal("40"), "LUXURY": Decimal("30")}
    )

    high_crime_index: int = 60
    urban_high_crime: Decimal = Decimal("25")
    urban: Decimal = Decimal("15")
    suburban_high_crime: Decimal = Decimal("10")

    poor_credit_bands: BandTable = Field(
        default_factory=lambda: _bands([("500", "30"), ("600", "20"), ("700", "10")], "0")
    )


@beartype
class TaxFeeTables(BaseModelConfig):
    """Premium tax rates and flat fees per jurisdiction."""

    jurisdiction_rates: dict[str, JurisdictionRates] = Field(
        default_factory=lambda: {
            "CA": _rates("2.35", "15.00", "25.00"),
            "TX": _rates("1.75", "12.00", "20.00"),
            "FL": _rates("1.75", "14.00", "22.00"),
            "NY": _rates("2.50", "18.00", "30.00"),
            "PA": _rates("2.00", "13.00", "24.00"),
            "IL": _rates("2.25", "16.00", "23.00"),
            "OH": _rates("1.40", "11.00", "18.00"),
            "GA": _rates("2.50", "14.00", "21.00"),
            "NC": _rates("1.90", "13.00", "19.00"),
            "MI": _rates("1.25", "15.00", "26.00"),
            "NJ": _rates("2.10", "17.00", "28.00"),
            "VA": _rates("2.25", "14.00", "22.00"),
            "WA": _rates("2.00", "15.00", "24.00"),
            "AZ": _rates("2.00", "12.00", "20.00"),
            "MA": _rates("2.28", "16.00", "27.00"),
            "TN": _rates("1.75", "12.00", "19.00"),
            "IN": _rates("1.30", "11.00", "17.00"),
            "MO": _rates("2.00", "13.00", "20.00"),
            "MD": _rates("2.00", "15.00", "25.00"),
            "WI": _rates("2.00", "13.00", "21.00"),
            "CO": _rates("2.00", "14.00", "22.00"),
            "MN": _rates("2.00", "14.00", "23.00"),
            "SC": _rates("1.25", "12.00", "18.00"),
            "AL": _rates("2.45", "13.00", "19.00"),
            "LA": _rates("2.25", "14.00", "21.00"),
            "KY": _rates("1.90", "12.00", "18.00"),
            "OR": _rates("2.30", "15.00", "23.00"),
            "OK": _rates("2.25", "12.00", "19.00"),
            "CT": _rates("1.75", "16.00", "26.00"),
            "UT": _rates("2.25", "13.00", "20.00"),
            "NV": _rates("3.50", "14.00", "22.00"),
            "AR": _rates("2.50", "12.00", "18.00"),
            "MS": _rates("3.00", "11.00", "17.00"),
            "KS": _rates("2.00", "12.00", "19.00"),
            "NM": _rates("3.00", "13.00", "20.00"),
            "NE": _rates("1.00", "12.00", "18.00"),
            "WV": _rates("3.00", "12.00", "17.00"),
            "ID": _rates("1.50", "11.00", "16.00"),
            "HI": _rates("4.265", "18.00", "30.00"),
            "NH": _rates("1.25", "15.00", "24.00"),
            "ME": _rates("2.00", "14.00", "22.00"),
            "RI": _rates("2.00", "16.00", "25.00"),
            "MT": _rates("2.75", "12.00", "18.00"),
            "DE": _rates("2.00", "15.00", "23.00"),
            "SD": _rates("2.50", "11.00", "17.00"),
            "ND": _rates("2.00", "11.00", "16.00"),
            "AK": _rates("2.70", "17.00", "27.00"),
            "VT": _rates("2.00", "14.00", "22.00"),
            "WY": _rates("0.75", "10.00", "15.00"),
        }
    )
    default_rates: JurisdictionRates = Field(
        default_factory=lambda: _rates("2.00", "14.00", "21.00")
    )

    @beartype
    def rates_for(
        self, jurisdiction: str
    ) -> Result[JurisdictionRates, UnsupportedJurisdictionError]:
        """Look up tax and fee rates for a jurisdiction."""
        rates = self.jurisdiction_rates.get(jurisdiction.upper())
        if rates is None:
            return Err(UnsupportedJurisdictionError(jurisdiction, "tax/fee"))
        return Ok(rates)


@beartype
class RatingTables(BaseModelConfig):
    """Versioned bundle of all reference tables."""

    version: str = Field(default="default", min_length=1, max_length=50)
    vehicle: VehicleTables = Field(default_factory=VehicleTables)
    driver: DriverTables = Field(default_factory=DriverTables)
    location: LocationTables = Field(default_factory=LocationTables)
    coverage: CoverageTables = Field(default_factory=CoverageTables)
    discount: DiscountTables = Field(default_factory=DiscountTables)
    surcharge: SurchargeTables = Field(default_factory=SurchargeTables)
    tax_fee: TaxFeeTables = Field(default_factory=TaxFeeTables)


DEFAULT_RATING_TABLES = RatingTables()


@beartype
def load_rating_tables(path: Path) -> RatingTables:
    """Load reference tables from a JSON document.

    Sections missing from the document keep their built-in defaults; a
    section that is present replaces only the fields it names.

    Raises:
        InvalidInputError: If the file is missing or not a valid table set
    """
    try:
        document = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidInputError(
            f"Cannot read rating tables from {path}: {e}", field="rating_tables_path"
        ) from e

    try:
        tables = RatingTables.model_validate_json(document)
    except ValidationError as e:
        raise InvalidInputError(
            f"Invalid rating tables in {path}: {e.error_count()} error(s)",
            field="rating_tables_path",
        ) from e

    logger.info("Loaded rating tables version %s from %s", tables.version, path)
    return tables
