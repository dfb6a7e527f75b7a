# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Error taxonomy for the rating pipeline.

``InvalidInputError`` and ``ComputationError`` are fatal and propagate to the
caller unchanged. ``UnsupportedJurisdictionError`` is never raised by the
pipeline itself: reference-table lookups return it inside an ``Err`` and the
stage substitutes default rates, logging a warning and annotating the result.
"""

from beartype import beartype


class RatingError(Exception):
    """Base class for all rating pipeline errors."""

    code: str = "RATING_ERROR"

    @beartype
    def __init__(self, message: str, *, field: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description
            field: Profile field that caused the error, when known
        """
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for serialization by the API layer."""
        return {"code": self.code, "message": self.message, "field": self.field}


class InvalidInputError(RatingError):
    """Required profile data is missing or logically unusable."""

    code = "INVALID_INPUT"


class UnsupportedJurisdictionError(RatingError):
    """Jurisdiction code is absent from a reference table."""

    code = "UNSUPPORTED_JURISDICTION"

    @beartype
    def __init__(self, jurisdiction: str, table: str) -> None:
        super().__init__(
            f"Jurisdiction {jurisdiction!r} not found in {table} table",
            field="location.state_code",
        )
        self.jurisdiction = jurisdiction
        self.table = table


class ComputationError(RatingError):
    """Arithmetic inconsistency that valid input should never produce."""

    code = "COMPUTATION_ERROR"
