"""Test configuration and shared fixtures for the rating pipeline.

Every profile built here carries an explicit ``rating_date`` so that look-back
windows, vehicle age and quote lead time never depend on the wall clock.

The default profile rates as follows:

- vehicle 2022 Toyota Camry: economy make 0.90, everything else neutral
- driver age 35, 15 years licensed, clean record: 0.9 x 0.9 = 0.81
- location IL 60601 suburban: 1.10 x 0.90 x 1.00 x 0.96 = 0.9504
- coverage bodily injury 300k (400) + collision $500 deductible (500):
  base premium 900, coverage factor 1.0
- discounts: good driver 20% + advance quote 5% (effective 30 days out)
"""

from collections.abc import Callable, Generator
from datetime import date, timedelta
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from premium_rating.core.config import Settings, clear_settings_cache
from premium_rating.models import RiskProfile
from premium_rating.services.rating import DEFAULT_RATING_TABLES, PremiumOrchestrator

RATING_DATE = date(2025, 6, 1)

# Property tests share the autouse settings fixture below.
settings.register_profile(
    "premium_rating", suppress_health_check=[HealthCheck.function_scoped_fixture]
)
settings.load_profile("premium_rating")


def build_profile(
    *,
    vehicle: dict[str, Any] | None = None,
    driver: dict[str, Any] | None = None,
    location: dict[str, Any] | None = None,
    coverages: list[dict[str, Any]] | None = None,
    **fields: Any,
) -> RiskProfile:
    """Build a valid profile, overriding only the parts a test cares about."""
    data: dict[str, Any] = {
        "vehicle": {"year": 2022, "make": "Toyota", "model": "Camry", **(vehicle or {})},
        "driver": {"age": 35, "years_licensed": 15, **(driver or {})},
        "location": {
            "zip_code": "60601",
            "state_code": "IL",
            "territory_type": "SUBURBAN",
            **(location or {}),
        },
        "coverages": coverages
        if coverages is not None
        else [
            {"coverage_type": "BODILY_INJURY", "limit_amount": "300000"},
            {"coverage_type": "COLLISION", "deductible_amount": "500"},
        ],
        "effective_date": RATING_DATE + timedelta(days=30),
        "rating_date": RATING_DATE,
    }
    data.update(fields)
    return RiskProfile.model_validate(data)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from PREMIUM_RATING_* variables and cached settings."""
    for name in (
        "PREMIUM_RATING_CALCULATION_VERSION",
        "PREMIUM_RATING_RATING_TABLES_PATH",
        "PREMIUM_RATING_LOG_LEVEL",
        "PREMIUM_RATING_SLOW_STAGE_THRESHOLD_MS",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def rating_date() -> date:
    """Fixed rating date used by all profiles."""
    return RATING_DATE


@pytest.fixture
def make_profile() -> Callable[..., RiskProfile]:
    """Factory for profiles with selective overrides."""
    return build_profile


@pytest.fixture
def standard_profile() -> RiskProfile:
    """Clean-record adult driver with an economy sedan."""
    return build_profile()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a known calculation version."""
    return Settings(calculation_version="2.1.0", log_level="DEBUG")


@pytest.fixture
def orchestrator(test_settings: Settings) -> PremiumOrchestrator:
    """Orchestrator on the built-in tables and static territory data."""
    return PremiumOrchestrator(tables=DEFAULT_RATING_TABLES, settings=test_settings)
