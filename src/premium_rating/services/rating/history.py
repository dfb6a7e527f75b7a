# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Driving-history helpers shared by the driver scorer and adjustment engines.

Look-back windows are measured from the rating date, never from the wall
clock, so the same profile always rates the same way.
"""

import datetime
from enum import Enum

from beartype import beartype

from ...models.profile import Accident, Violation
from .rate_tables import SurchargeTables


class ViolationSeverity(str, Enum):
    """Severity tier used for violation surcharges."""

    MAJOR = "MAJOR"
    MODERATE = "MODERATE"
    MINOR = "MINOR"


@beartype
def years_before(as_of: datetime.date, years: int) -> datetime.date:
    """Return the same calendar day ``years`` earlier; Feb 29 maps to Feb 28."""
    try:
        return as_of.replace(year=as_of.year - years)
    except ValueError:
        return as_of.replace(year=as_of.year - years, day=28)


@beartype
def recent_violations(
    violations: list[Violation], as_of: datetime.date, years: int
) -> list[Violation]:
    """Violations dated on or after the window start."""
    cutoff = years_before(as_of, years)
    return [v for v in violations if v.date >= cutoff]


@beartype
def recent_at_fault_accidents(
    accidents: list[Accident], as_of: datetime.date, years: int
) -> list[Accident]:
    """At-fault accidents dated on or after the window start."""
    cutoff = years_before(as_of, years)
    return [a for a in accidents if a.at_fault and a.date >= cutoff]


@beartype
def violation_severity(violation_type: str, tables: SurchargeTables) -> ViolationSeverity:
    """Classify a free-text violation type into a severity tier."""
    kind = violation_type.upper()

    if any(keyword in kind for keyword in tables.major_violation_keywords):
        return ViolationSeverity.MAJOR

    if tables.speeding_keyword in kind and any(
        marker in kind for marker in tables.excessive_speeding_markers
    ):
        return ViolationSeverity.MODERATE

    if any(keyword in kind for keyword in tables.moderate_violation_keywords):
        return ViolationSeverity.MODERATE

    return ViolationSeverity.MINOR
