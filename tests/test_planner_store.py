from datetime import date, time

import pytest

from focusflow.core.models import ValidationError

MONDAY = date(2024, 1, 8)


@pytest.fixture
async def goal(context, user):
    return await context.goals.add_goal(
        "Meditate", ["Monday"], "2024-01-01",
        color="#10b981", start_time=time(7, 0), end_time=time(7, 30),
    )


async def test_tasks_merged_with_goals_and_sorted(context, goal):
    await context.planner.add_task("Standup", "09:00", "09:15", MONDAY)
    await context.planner.add_task("Breakfast", "06:30", "07:00", MONDAY)

    entries = await context.planner.fetch_tasks(MONDAY)

    assert [(e.content, e.start_time, e.end_time) for e in entries] == [
        ("Breakfast", "06:30", "07:00"),
        ("Meditate", "07:00", "07:30"),
        ("Standup", "09:00", "09:15"),
    ]
    goal_entry = entries[1]
    assert goal_entry.id == f"goal-{goal.id}"
    assert goal_entry.is_goal
    assert goal_entry.color == "#10b981"


async def test_goal_entries_only_on_scheduled_days(context, goal):
    entries = await context.planner.fetch_tasks(date(2024, 1, 9))
    assert entries == []


async def test_add_task_keeps_timeline_sorted(context, goal):
    await context.planner.fetch_tasks(MONDAY)
    await context.planner.add_task("Early walk", "05:45", "06:15", MONDAY)
    assert [e.start_time for e in context.planner.tasks] == ["05:45", "07:00"]


async def test_delete_goal_entry_is_local_only(context, goal):
    await context.planner.fetch_tasks(MONDAY)
    await context.planner.delete_task(f"goal-{goal.id}")

    assert context.planner.tasks == []
    assert await context.db.table("goals").count() == 1


async def test_delete_task_removes_row(context, goal):
    task = await context.planner.add_task("Standup", "09:00", "09:15", MONDAY)
    await context.planner.delete_task(task.id)

    assert all(e.id != task.id for e in context.planner.tasks)
    assert await context.db.table("daily_tasks").count() == 0


async def test_end_before_start_rejected(context, user):
    with pytest.raises(ValidationError):
        await context.planner.add_task("Backwards", "10:00", "09:00", MONDAY)
