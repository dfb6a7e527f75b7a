# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Territory data behind a provider interface.

ZIP region factors and crime statistics are mock data
derived from the ZIP code itself. Scorers depend only on
``TerritoryDataProvider`` so a real data vendor can replace
``StaticTerritoryDataProvider`` without touching the scoring logic.
"""

import re
from decimal import Decimal
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from beartype import beartype

from ...core.errors import InvalidInputError

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


@beartype
def zip_number(zip_code: str) -> int:
    """Return the integer value of the ZIP code's leading digits.

    Raises:
        InvalidInputError: If the ZIP code does not start with a digit
    """
    match = _LEADING_DIGITS.match(zip_code)
    if match is None:
        raise InvalidInputError(
            f"ZIP code {zip_code!r} has no leading digits", field="location.zip_code"
        )
    return int(match.group(1))


@runtime_checkable
class TerritoryDataProvider(Protocol):
    """Source of ZIP-level territory data."""

    def zip_region_factor(self, zip_code: str) -> Decimal:
        """Regional multiplier for the ZIP code."""
        ...

    def crime_rate_factor(self, zip_code: str) -> Decimal:
        """Crime multiplier for the ZIP code."""
        ...

    def crime_index(self, zip_code: str) -> int:
        """Crime index on a 0-100 scale."""
        ...


_DEFAULT_ZIP_REGION_FACTORS = {
    "0": Decimal("1.20"),  # Northeast
    "1": Decimal("1.15"),
    "2": Decimal("1.10"),
    "3": Decimal("1.00"),  # Southeast
    "4": Decimal("0.95"),
    "5": Decimal("0.95"),  # Midwest
    "6": Decimal("0.90"),
    "7": Decimal("0.85"),  # South central
    "8": Decimal("0.95"),  # Mountain
    "9": Decimal("1.10"),  # West coast
}


@beartype
class StaticTerritoryDataProvider:
    """Deterministic territory data computed from the ZIP code."""

    def __init__(
        self,
        zip_region_factors: dict[str, Decimal] | None = None,
        crime_factor_base: Decimal = Decimal("0.95"),
        crime_factor_spread: Decimal = Decimal("0.20"),
        crime_factor_buckets: int = 20,
    ) -> None:
        """Initialize the provider.

        Args:
            zip_region_factors: Factor per leading ZIP digit
            crime_factor_base: Lowest crime factor
            crime_factor_spread: Width of the crime factor range
            crime_factor_buckets: Number of steps the range is split into
        """
        self._zip_region_factors = MappingProxyType(
            dict(zip_region_factors or _DEFAULT_ZIP_REGION_FACTORS)
        )
        self._crime_factor_base = crime_factor_base
        self._crime_factor_spread = crime_factor_spread
        self._crime_factor_buckets = crime_factor_buckets

    def zip_region_factor(self, zip_code: str) -> Decimal:
        """Regional multiplier from the leading ZIP digit, 1.0 if unknown."""
        first = zip_code.strip()[:1]
        return self._zip_region_factors.get(first, Decimal("1.0"))

    def crime_rate_factor(self, zip_code: str) -> Decimal:
        """Crime multiplier in ``[base, base + spread]``."""
        bucket = zip_number(zip_code) % self._crime_factor_buckets
        return (
            self._crime_factor_base
            + Decimal(bucket) / Decimal(self._crime_factor_buckets) * self._crime_factor_spread
        )

    def crime_index(self, zip_code: str) -> int:
        """Crime index from the leading ZIP digit."""
        zip_number(zip_code)
        first = int(zip_code.strip()[0])
        if first <= 2:
            return 65
        if first <= 5:
            return 45
        return 30
