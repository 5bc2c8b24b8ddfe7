"""Tests for elimination match time assignment."""
import random
from datetime import timedelta

import pytest

from arena.services.elimination import EliminationScheduler
from conftest import START


@pytest.mark.asyncio
async def test_unplayed_matches_spaced_ten_minutes(seed_alliances, store, scheduler):
    await seed_alliances(8)
    await scheduler.update(START)

    matches = await store.matches_by_type()
    assert len(matches) == 12
    for i, m in enumerate(matches):
        assert m.time == START + timedelta(seconds=600 * i)


@pytest.mark.asyncio
async def test_schedule_interleaves_groups(seed_alliances, store, scheduler):
    """Each quarterfinal plays its first match before any plays its second."""
    await seed_alliances(8)
    await scheduler.update(START)

    names = [m.display_name for m in await store.matches_by_type()]
    assert names[:5] == ["QF1-1", "QF2-1", "QF3-1", "QF4-1", "QF1-2"]


@pytest.mark.asyncio
async def test_completed_matches_keep_their_time(seed_alliances, store, scheduler):
    await seed_alliances(4)
    await scheduler.update(START)
    played = (await store.matches_by_type())[0]
    await store.record_result(played, "R")

    later = START + timedelta(hours=2)
    await scheduler.update(later)
    await scheduler.update(later)

    assert played.time == START
    unplayed = [m for m in await store.matches_by_type() if not m.is_complete]
    assert [m.time for m in unplayed] == [later + timedelta(seconds=600 * i) for i in range(len(unplayed))]


@pytest.mark.asyncio
async def test_custom_spacing(seed_alliances, seeds, store):
    await seed_alliances(2)
    scheduler = EliminationScheduler(seeds, store, rng=random.Random(1), spacing_sec=300)
    await scheduler.update(START)

    times = [m.time for m in await store.matches_by_type()]
    assert times == [START, START + timedelta(seconds=300), START + timedelta(seconds=600)]


@pytest.mark.asyncio
async def test_assign_times_is_a_recomputation(seed_alliances, store, scheduler):
    """Once a match is played the remaining unplayed ones move up a slot."""
    await seed_alliances(2)
    await scheduler.update(START)
    f1, f2, f3 = await store.matches_by_type()
    await store.record_result(f1, "R")
    await scheduler.update(START)

    assert f1.time == START
    assert f2.time == START
    assert f3.time == START + timedelta(seconds=600)


@pytest.mark.asyncio
async def test_spacing_passed_to_assign_times(seed_alliances, store, scheduler):
    await seed_alliances(2)
    await scheduler.update(START)

    await scheduler.assign_times(START, spacing_sec=120)

    times = [m.time for m in await store.matches_by_type()]
    assert times == [START, START + timedelta(seconds=120), START + timedelta(seconds=240)]
