from datetime import datetime

import pytest

from focusflow.core.models import ValidationError


async def test_set_and_fetch_todays_mood(context, user):
    mood = await context.moods.set_todays_mood("happy")
    assert context.moods.todays_mood == mood

    context.moods.todays_mood = None
    fetched = await context.moods.fetch_todays_mood()
    assert fetched.id == mood.id
    assert fetched.mood == "happy"


async def test_latest_mood_of_the_day_wins(context, user):
    await context.moods.set_todays_mood("tired")
    latest = await context.moods.set_todays_mood("focused")

    fetched = await context.moods.fetch_todays_mood()
    assert fetched.id == latest.id


async def test_no_mood_today(context, user):
    assert await context.moods.fetch_todays_mood() is None


async def test_month_range_includes_the_whole_last_day(context, user):
    user_id = context.auth_store.user.id
    for created_at in (datetime(2024, 2, 29, 23, 59), datetime(2024, 3, 1, 0, 0),
                       datetime(2024, 3, 31, 23, 30), datetime(2024, 4, 1, 0, 0)):
        await context.db.table("moods").insert({"user_id": user_id, "mood": "calm", "created_at": created_at})

    moods = await context.moods.fetch_month_moods("2024-03-01", "2024-03-31")
    assert [m.created_at for m in moods] == [datetime(2024, 3, 1, 0, 0), datetime(2024, 3, 31, 23, 30)]


async def test_empty_mood_rejected(context, user):
    with pytest.raises(ValidationError):
        await context.moods.set_todays_mood("  ")
    assert context.moods.error.startswith("Failed to set mood")
