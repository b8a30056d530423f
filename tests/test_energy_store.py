from datetime import timedelta

import pytest

from focusflow.core.models import ValidationError
from focusflow.stores.energy_store import compute_hourly_averages


async def test_set_level_upserts_one_record_per_hour(context, user):
    today = context.energy.today()
    first = await context.energy.set_hourly_level(9, 7, today)
    second = await context.energy.set_hourly_level(9, 5, today, notes="after lunch")

    assert second.id == first.id
    assert [(e.hour, e.level, e.notes) for e in context.energy.hourly_levels] == [(9, 5, "after lunch")]
    assert await context.db.table("hourly_energy_levels").count() == 1


async def test_levels_sorted_by_hour(context, user):
    today = context.energy.today()
    for hour, level in ((14, 4), (8, 6), (11, 9)):
        await context.energy.set_hourly_level(hour, level, today)

    assert [e.hour for e in context.energy.hourly_levels] == [8, 11, 14]

    context.energy.hourly_levels = []
    fetched = await context.energy.fetch_hourly_levels(today)
    assert [(e.hour, e.level) for e in fetched] == [(8, 6), (11, 9), (14, 4)]


async def test_averages_refreshed_after_setting_a_level(context, user):
    today = context.energy.today()
    await context.energy.set_hourly_level(8, 3, today - timedelta(days=1))
    await context.energy.set_hourly_level(8, 4, today)

    averages = context.energy.hourly_averages
    assert len(averages) == 24
    assert (averages[8].average_level, averages[8].record_count) == (3.5, 2)
    assert (averages[0].average_level, averages[0].record_count) == (0, 0)


async def test_levels_older_than_thirty_days_are_ignored(context, user):
    today = context.energy.today()
    await context.energy.set_hourly_level(6, 10, today - timedelta(days=31))
    averages = await context.energy.fetch_hourly_averages()
    assert averages[6].record_count == 0


def test_averages_rounded_to_two_places():
    averages = compute_hourly_averages([
        {"hour": 1, "level": 1},
        {"hour": 1, "level": 2},
        {"hour": 1, "level": 2},
    ])
    assert averages[1].average_level == 1.67
    assert [a.hour for a in averages] == list(range(24))


@pytest.mark.parametrize("hour", [-1, 24])
async def test_hour_out_of_range(context, user, hour):
    with pytest.raises(ValidationError):
        await context.energy.set_hourly_level(hour, 5, context.energy.today())


async def test_invalid_date(context, user):
    with pytest.raises(ValidationError, match="Invalid date provided"):
        await context.energy.set_hourly_level(9, 5, "not-a-date")
