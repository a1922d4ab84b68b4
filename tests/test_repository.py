"""Tests for the cached award repository."""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.errors import UpstreamUnavailable
from src.fairwork.repository import AwardRepository
from src.rates.cache import RateCache
from src.rates.models import Award
from tests.factories import make_rate


@pytest.mark.asyncio
async def test_award_is_fetched_once(repository: AwardRepository, mock_client: AsyncMock) -> None:
    first = await repository.get_award("MA000025")
    second = await repository.get_award("MA000025")
    assert first is second
    mock_client.get_award.assert_awaited_once_with("MA000025")


@pytest.mark.asyncio
async def test_different_awards_cached_separately(repository: AwardRepository, mock_client: AsyncMock) -> None:
    await repository.get_award("MA000025")
    assert await repository.get_award("MA000020") is None
    assert await repository.get_award("MA000020") is None
    assert mock_client.get_award.await_count == 2


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_request(electrical_award: Award) -> None:
    release = asyncio.Event()
    client = AsyncMock()

    async def slow_award(code: str) -> Award:
        await release.wait()
        return electrical_award

    client.get_award.side_effect = slow_award
    repository = AwardRepository(client, RateCache())

    tasks = [asyncio.create_task(repository.get_award("MA000025")) for _ in range(4)]
    await asyncio.sleep(0)
    release.set()
    awards = await asyncio.gather(*tasks)

    assert all(a is electrical_award for a in awards)
    assert client.get_award.await_count == 1


@pytest.mark.asyncio
async def test_upstream_failure_not_cached(electrical_award: Award) -> None:
    client = AsyncMock()
    client.get_award.side_effect = [UpstreamUnavailable("down"), electrical_award]
    repository = AwardRepository(client, RateCache())

    with pytest.raises(UpstreamUnavailable):
        await repository.get_award("MA000025")
    assert await repository.get_award("MA000025") is electrical_award


@pytest.mark.asyncio
async def test_rates_cached_per_date(repository: AwardRepository, mock_client: AsyncMock) -> None:
    await repository.get_rates_for_date(date(2025, 7, 1))
    await repository.get_rates_for_date(date(2025, 7, 1))
    await repository.get_rates_for_date(date(2025, 7, 2))
    assert mock_client.get_rates_for_date.await_count == 2


@pytest.mark.asyncio
async def test_pay_rates_combine_versions_and_published(
    repository: AwardRepository, mock_client: AsyncMock, electrical_award: Award
) -> None:
    mock_client.get_rates_for_date.return_value = [
        make_rate("19.10", date(2024, 7, 1), classification_code="EL-AP1", award_code="MA000025"),
        make_rate("30.00", date(2024, 7, 1), classification_code="EL", award_code="MA000025"),
    ]

    snapshots = await repository.get_pay_rates(electrical_award, "EL-AP1", date(2024, 8, 1))

    assert [s.base_rate for s in snapshots] == [Decimal("18.00"), Decimal("18.92"), Decimal("19.10")]
    assert all(s.classification_code == "EL-AP1" for s in snapshots)


@pytest.mark.asyncio
async def test_invalidate_award(repository: AwardRepository, mock_client: AsyncMock) -> None:
    await repository.get_award("MA000025")
    await repository.get_award("MA0000250")

    assert repository.invalidate_award("MA000025") is True
    await repository.get_award("MA000025")
    await repository.get_award("MA0000250")
    assert mock_client.get_award.await_count == 3


@pytest.mark.asyncio
async def test_invalidate_all(repository: AwardRepository) -> None:
    await repository.get_award("MA000025")
    await repository.get_active_awards()
    repository.cache.set("unrelated", 1)

    assert repository.invalidate_all() == 2
    assert repository.cache.get("unrelated") == 1


@pytest.mark.asyncio
async def test_validate_rate_is_not_cached(mock_client: AsyncMock, repository: AwardRepository) -> None:
    await repository.validate_rate(Decimal("27"), "MA000025", "EL")
    await repository.validate_rate(Decimal("27"), "MA000025", "EL")
    assert mock_client.validate_rate.await_count == 2


@pytest.mark.asyncio
async def test_pay_rates_ignore_other_awards_sharing_a_code(
    repository: AwardRepository, mock_client: AsyncMock, electrical_award: Award
) -> None:
    """EL-AP1 published under another award, or with no award tag, is not a candidate."""
    mock_client.get_rates_for_date.return_value = [
        make_rate("31.40", date(2024, 7, 1), classification_code="EL-AP1", award_code="MA000010"),
        make_rate("40.00", date(2024, 7, 1), classification_code="EL-AP1"),
    ]

    snapshots = await repository.get_pay_rates(electrical_award, "EL-AP1", date(2024, 8, 1))

    assert [s.base_rate for s in snapshots] == [Decimal("18.00"), Decimal("18.92")]
    assert all(s.award_code == "MA000025" for s in snapshots)
