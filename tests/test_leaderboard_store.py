"""
Tests for the leaderboard stores (SQL and in-memory backends)
"""
import asyncio
from datetime import date

import pytest

from bot.data_models.leaderboard import ScoreEntry
from bot.services.leaderboard_store import InMemoryLeaderboardStore
from bot.utils.leaderboard_exceptions import DuplicateSubmissionError
from bot.utils.periods import RotationPeriod

SERVER = 1001
OTHER_SERVER = 2002
MARCH = RotationPeriod(2025, 3)


@pytest.mark.asyncio
async def test_first_submission_creates_entry(store):
    total = await store.record_submission(SERVER, 1, 6, date(2025, 3, 4))

    assert total == 6
    assert await store.get_entries(SERVER, MARCH) == [ScoreEntry(user_id=1, score=6)]


@pytest.mark.asyncio
async def test_second_submission_same_day_is_rejected(store):
    await store.record_submission(SERVER, 1, 6, date(2025, 3, 4))

    with pytest.raises(DuplicateSubmissionError):
        await store.record_submission(SERVER, 1, 8, date(2025, 3, 4))

    assert await store.get_user_total(SERVER, 1, MARCH) == 6


@pytest.mark.asyncio
async def test_next_day_adds_to_running_total(store):
    await store.record_submission(SERVER, 1, 6, date(2025, 3, 4))
    total = await store.record_submission(SERVER, 1, 8, date(2025, 3, 5))

    assert total == 14
    assert await store.get_user_total(SERVER, 1, MARCH) == 14


@pytest.mark.asyncio
async def test_zero_and_negative_scores_still_use_the_day(store):
    await store.record_submission(SERVER, 1, 0, date(2025, 3, 4))

    with pytest.raises(DuplicateSubmissionError):
        await store.record_submission(SERVER, 1, 5, date(2025, 3, 4))

    assert await store.record_submission(SERVER, 1, -1, date(2025, 3, 5)) == -1


@pytest.mark.asyncio
async def test_day_guard_is_per_server(store):
    await store.record_submission(SERVER, 1, 6, date(2025, 3, 4))

    assert await store.record_submission(OTHER_SERVER, 1, 3, date(2025, 3, 4)) == 3
    assert await store.get_entries(OTHER_SERVER, MARCH) == [ScoreEntry(user_id=1, score=3)]


@pytest.mark.asyncio
async def test_new_month_starts_from_zero(store):
    await store.record_submission(SERVER, 1, 6, date(2025, 3, 31))
    total = await store.record_submission(SERVER, 1, 4, date(2025, 4, 1))

    assert total == 4
    assert await store.get_user_total(SERVER, 1, MARCH) == 6
    assert await store.get_user_total(SERVER, 1, RotationPeriod(2025, 4)) == 4


@pytest.mark.asyncio
async def test_entries_ordered_by_score_then_first_submission(store):
    await store.record_submission(SERVER, 1, 5, date(2025, 3, 1))
    await store.record_submission(SERVER, 2, 8, date(2025, 3, 1))
    await store.record_submission(SERVER, 3, 5, date(2025, 3, 1))

    entries = await store.get_entries(SERVER, MARCH)

    assert [entry.user_id for entry in entries] == [2, 1, 3]
    assert await store.get_winner(SERVER, MARCH) == ScoreEntry(user_id=2, score=8)


@pytest.mark.asyncio
async def test_winner_tie_goes_to_earliest_entry(store):
    await store.record_submission(SERVER, 1, 5, date(2025, 3, 1))
    await store.record_submission(SERVER, 2, 5, date(2025, 3, 1))

    assert (await store.get_winner(SERVER, MARCH)).user_id == 1


@pytest.mark.asyncio
async def test_winner_of_empty_period_is_none(store):
    assert await store.get_winner(SERVER, MARCH) is None
    assert await store.get_entries(SERVER, MARCH) == []
    assert await store.get_user_total(SERVER, 1, MARCH) == 0


@pytest.mark.asyncio
async def test_archive_is_idempotent(store):
    await store.record_submission(SERVER, 1, 5, date(2025, 3, 1))
    winner = await store.get_winner(SERVER, MARCH)

    assert await store.is_period_archived(SERVER, MARCH) is False
    assert await store.archive_period(SERVER, MARCH, winner) is True
    assert await store.is_period_archived(SERVER, MARCH) is True
    assert await store.archive_period(SERVER, MARCH, winner) is False

    # Archived results stay readable
    assert await store.get_winner(SERVER, MARCH) == ScoreEntry(user_id=1, score=5)
    assert await store.is_period_archived(OTHER_SERVER, MARCH) is False


@pytest.mark.asyncio
async def test_archiving_does_not_touch_the_current_month(store):
    await store.record_submission(SERVER, 1, 5, date(2025, 3, 31))
    await store.record_submission(SERVER, 1, 7, date(2025, 4, 1))

    await store.archive_period(SERVER, MARCH)

    assert await store.get_user_total(SERVER, 1, RotationPeriod(2025, 4)) == 7


@pytest.mark.asyncio
async def test_memory_store_concurrent_same_day_submissions():
    store = InMemoryLeaderboardStore()

    results = await asyncio.gather(
        *(store.record_submission(SERVER, 1, 8, date(2025, 3, 4)) for _ in range(5)),
        return_exceptions=True
    )

    accepted = [result for result in results if not isinstance(result, Exception)]
    rejected = [result for result in results if isinstance(result, DuplicateSubmissionError)]
    assert accepted == [8]
    assert len(rejected) == 4


async def race_same_day(store, user_id, score, today, attempts=8):
    results = await asyncio.gather(
        *(store.record_submission(SERVER, user_id, score, today) for _ in range(attempts)),
        return_exceptions=True
    )
    accepted = [result for result in results if not isinstance(result, Exception)]
    rejected = [result for result in results if isinstance(result, DuplicateSubmissionError)]
    return accepted, rejected


@pytest.mark.asyncio
async def test_sql_store_concurrent_first_submissions(sql_store):
    accepted, rejected = await race_same_day(sql_store, 1, 8, date(2025, 3, 4))

    assert accepted == [8]
    assert len(rejected) == 7
    assert await sql_store.get_user_total(SERVER, 1, MARCH) == 8
    assert await sql_store.get_entries(SERVER, MARCH) == [ScoreEntry(user_id=1, score=8)]


@pytest.mark.asyncio
async def test_sql_store_concurrent_submissions_on_existing_entry(sql_store):
    await sql_store.record_submission(SERVER, 1, 3, date(2025, 3, 3))

    accepted, rejected = await race_same_day(sql_store, 1, 8, date(2025, 3, 4))

    assert accepted == [11]
    assert len(rejected) == 7
    assert await sql_store.get_user_total(SERVER, 1, MARCH) == 11
