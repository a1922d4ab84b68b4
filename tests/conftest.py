"""Shared test fixtures."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from src.fairwork.repository import AwardRepository
from src.rates.cache import RateCache
from src.rates.models import Award
from tests.factories import make_award, make_classification


@pytest.fixture
def electrical_award() -> Award:
    """Trade classification with two apprentice years, two versions of year 1."""
    return make_award(
        "MA000025",
        [
            make_classification("EL", "27.21"),
            make_classification(
                "EL-AP1", "18.00", valid_from=date(2024, 1, 1), valid_to=date(2024, 7, 1),
                parent_code="EL", year=1,
            ),
            make_classification("EL-AP1", "18.92", valid_from=date(2024, 7, 1), parent_code="EL", year=1),
            make_classification("EL-AP2", "21.78", parent_code="EL", year=2),
        ],
    )


@pytest.fixture
def mock_client(electrical_award: Award) -> AsyncMock:
    """Async mock of FairWorkClient serving the electrical award and no extra rates."""
    client = AsyncMock()
    client.get_award.side_effect = lambda code: electrical_award if code == electrical_award.code else None
    client.get_rates_for_date.return_value = []
    client.get_active_awards.return_value = [electrical_award]
    return client


@pytest.fixture
def repository(mock_client: AsyncMock) -> AwardRepository:
    return AwardRepository(mock_client, RateCache(ttl_seconds=60))
