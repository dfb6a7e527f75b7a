# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""State premium taxes and regulatory fees.

Premium tax is a percentage of the final premium; the policy fee and the DMV
fee are flat amounts per policy. Fees are not prorated by term: the term is
recorded on the breakdown for downstream billing.
"""

from decimal import Decimal

from beartype import beartype

from ...core.config import DEFAULT_SLOW_STAGE_THRESHOLD_MS
from ...core.errors import ComputationError
from ...core.logging_utils import get_logger
from ...core.performance_monitor import performance_monitor
from ...schemas.rating import RatingWarning, TaxFeeBreakdown, round_currency
from .rate_tables import JurisdictionRates, TaxFeeTables

logger = get_logger(__name__)


@beartype
class TaxFeeEngine:
    """Compute taxes and fees for a jurisdiction."""

    def __init__(
        self,
        tables: TaxFeeTables,
        slow_stage_threshold_ms: float = DEFAULT_SLOW_STAGE_THRESHOLD_MS,
    ) -> None:
        self._tables = tables
        self.slow_stage_threshold_ms = slow_stage_threshold_ms

    @performance_monitor("calculate_taxes_and_fees")
    def calculate(
        self,
        basis_premium: Decimal,
        jurisdiction: str,
        policy_term_months: int = 12,
    ) -> TaxFeeBreakdown:
        """Compute premium tax and fees on the post-surcharge premium.

        Unknown jurisdictions use the default rates; the breakdown then carries
        an ``UNSUPPORTED_JURISDICTION`` warning instead of failing.

        Args:
            basis_premium: Premium after discounts and surcharges
            jurisdiction: Two-letter state code
            policy_term_months: Policy term, recorded only

        Returns:
            Tax and fee amounts rounded to cents

        Raises:
            ComputationError: If the basis premium is negative
        """
        if basis_premium < 0:
            raise ComputationError(f"Tax basis premium is negative: {basis_premium}")

        code = jurisdiction.upper()
        warnings: list[RatingWarning] = []
        result = self._tables.rates_for(code)
        if result.is_ok():
            rates = result.unwrap()
        else:
            error = result.unwrap_err()
            rates = self._tables.default_rates
            logger.warning(
                "Unknown state code: %s. Using default rates. "
                "Premium Tax: %s%%, Policy Fee: $%s, DMV Fee: $%s",
                code,
                rates.premium_tax_rate,
                rates.policy_fee,
                rates.dmv_fee,
            )
            warnings.append(
                RatingWarning(code=error.code, stage="taxes_and_fees", message=error.message)
            )

        premium_tax = round_currency(basis_premium * rates.premium_tax_rate / Decimal("100"))
        policy_fee = round_currency(rates.policy_fee)
        dmv_fee = round_currency(rates.dmv_fee)
        total_fees = policy_fee + dmv_fee

        return TaxFeeBreakdown(
            jurisdiction=code,
            policy_term_months=policy_term_months,
            premium_tax_percentage=rates.premium_tax_rate,
            premium_tax_amount=premium_tax,
            policy_fee_amount=policy_fee,
            dmv_fee_amount=dmv_fee,
            total_taxes=premium_tax,
            total_fees=total_fees,
            total_taxes_and_fees=premium_tax + total_fees,
            warnings=warnings,
        )

    def supported_jurisdictions(self) -> list[str]:
        """Jurisdiction codes with specific rates, sorted."""
        return sorted(self._tables.jurisdiction_rates)

    def is_supported_jurisdiction(self, jurisdiction: str) -> bool:
        return self._tables.rates_for(jurisdiction).is_ok()

    def get_jurisdiction_rates(self, jurisdiction: str) -> JurisdictionRates:
        """Rates for the jurisdiction, or the default rates when unknown."""
        return self._tables.rates_for(jurisdiction).unwrap_or(self._tables.default_rates)
