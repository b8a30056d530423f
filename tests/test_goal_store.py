from datetime import date

import pytest

from focusflow.core.auth import NotAuthenticatedError
from focusflow.core.database import Query, RemoteOperationError
from focusflow.core.models import GoalStatus, ValidationError
from focusflow.stores import StoreStatus

MONDAY = date(2024, 1, 8)


@pytest.fixture
async def goal(context, user):
    return await context.goals.add_goal("Morning run", ["Monday"], "2024-01-01")


async def completion_rows(context, goal_id):
    return await context.db.table("goal_completions").eq("goal_id", goal_id).fetch()


async def miss_rows(context, goal_id):
    return await context.db.table("goal_misses").eq("goal_id", goal_id).fetch()


class TestGoals:

    async def test_add_goal_prepends(self, context, goal):
        second = await context.goals.add_goal("Read", ["Tuesday"], "2024-01-01")
        assert [g.id for g in context.goals.goals] == [second.id, goal.id]
        assert goal.user_id == context.auth_store.user.id

    async def test_fetch_goals_newest_first(self, context, goal):
        second = await context.goals.add_goal("Read", ["Tuesday"], "2024-01-01")
        context.goals.goals = []

        goals = await context.goals.fetch_goals()
        assert [g.id for g in goals] == [second.id, goal.id]
        assert context.goals.status is StoreStatus.READY

    async def test_invalid_goal_is_not_sent(self, context, user):
        with pytest.raises(ValidationError):
            await context.goals.add_goal("Run", ["Funday"], "2024-01-01")
        assert context.goals.error.startswith("Failed to add goal")
        assert await context.db.table("goals").count() == 0

    async def test_update_goal_replaces_in_place(self, context, goal):
        goal.title = "Evening run"
        goal.frequency = ["Monday", "Thursday"]
        updated = await context.goals.update_goal(goal)

        assert updated.title == "Evening run"
        assert context.goals.goals[0].frequency == ["Monday", "Thursday"]

    async def test_delete_goal_drops_its_completions(self, context, goal):
        await context.goals.toggle_goal_completion(goal.id, MONDAY)
        await context.goals.delete_goal(goal.id)

        assert context.goals.goals == []
        assert context.goals.completions == []
        assert await completion_rows(context, goal.id) == []

    async def test_goals_for_day(self, context, goal):
        assert context.goals.goals_for_day(MONDAY) == [goal]
        assert context.goals.goals_for_day(date(2024, 1, 9)) == []


class TestCompletionAndMiss:

    async def test_toggle_twice_leaves_no_completion(self, context, goal):
        await context.goals.fetch_completions("2024-01-01", "2024-01-31")
        assert context.goals.completions == []

        completion = await context.goals.toggle_goal_completion(goal.id, MONDAY)
        assert completion is not None
        assert [c.completed_date for c in context.goals.completions] == [MONDAY]
        assert len(await completion_rows(context, goal.id)) == 1

        assert await context.goals.toggle_goal_completion(goal.id, MONDAY) is None
        assert context.goals.completions == []
        assert await completion_rows(context, goal.id) == []

    async def test_completing_a_missed_day_removes_the_miss(self, context, goal):
        await context.goals.mark_goal_missed(goal.id, MONDAY, "overslept", "set an alarm")
        assert context.goals.get_goal_status(goal.id, MONDAY) is GoalStatus.MISSED

        await context.goals.toggle_goal_completion(goal.id, MONDAY)

        assert context.goals.misses == []
        assert await miss_rows(context, goal.id) == []
        assert len(context.goals.completions) == 1
        assert context.goals.get_goal_status(goal.id, MONDAY) is GoalStatus.COMPLETED

    async def test_missing_a_completed_day_removes_the_completion(self, context, goal):
        await context.goals.toggle_goal_completion(goal.id, MONDAY)
        miss = await context.goals.mark_goal_missed(goal.id, MONDAY, "sick")

        assert context.goals.completions == []
        assert await completion_rows(context, goal.id) == []
        assert context.goals.misses == [miss]

    async def test_marking_missed_again_updates_in_place(self, context, goal):
        first = await context.goals.mark_goal_missed(goal.id, MONDAY, "overslept")
        second = await context.goals.mark_goal_missed(goal.id, MONDAY, "traffic", "leave earlier")

        assert second.id == first.id
        assert [(m.reason, m.improvement_plan) for m in context.goals.misses] == [("traffic", "leave earlier")]
        assert len(await miss_rows(context, goal.id)) == 1

    async def test_fetch_misses_newest_first(self, context, goal):
        await context.goals.mark_goal_missed(goal.id, date(2024, 1, 1), "a")
        await context.goals.mark_goal_missed(goal.id, date(2024, 1, 15), "b")

        misses = await context.goals.fetch_misses("2024-01-01", "2024-01-31")
        assert [m.missed_date for m in misses] == [date(2024, 1, 15), date(2024, 1, 1)]

    async def test_status_defaults_to_unset(self, context, goal):
        assert context.goals.get_goal_status(goal.id, MONDAY) is GoalStatus.UNSET


class TestCompletionRate:

    async def test_rate_over_scheduled_days(self, context, goal):
        # January 2024 has five Mondays
        await context.goals.toggle_goal_completion(goal.id, date(2024, 1, 8))
        await context.goals.toggle_goal_completion(goal.id, date(2024, 1, 15))
        assert context.goals.get_goal_completion_rate(goal.id, date(2024, 1, 1)) == 40

    async def test_days_before_start_are_not_eligible(self, context, user):
        goal = await context.goals.add_goal("Swim", ["Monday"], "2024-01-20")
        await context.goals.toggle_goal_completion(goal.id, date(2024, 1, 22))
        assert context.goals.get_goal_completion_rate(goal.id, "2024-01-01") == 50

    async def test_no_eligible_days_gives_zero(self, context, user):
        goal = await context.goals.add_goal("Swim", ["Monday"], "2024-02-01")
        assert context.goals.get_goal_completion_rate(goal.id, "2024-01-01") == 0
        assert context.goals.get_goal_completion_rate("unknown", "2024-01-01") == 0


class TestFailures:

    async def test_requires_a_session(self, context, user):
        await context.auth_store.sign_out()
        with pytest.raises(NotAuthenticatedError):
            await context.goals.fetch_goals()
        assert context.goals.status is StoreStatus.ERRORED
        assert context.goals.error == "Failed to fetch goals: Not authenticated"

    async def test_fetch_retries_transient_failures(self, context, goal, monkeypatch):
        original = Query.fetch
        calls = {"count": 0}

        async def flaky_fetch(self):
            calls["count"] += 1
            if calls["count"] <= 2:
                raise RemoteOperationError("connection reset")
            return await original(self)

        monkeypatch.setattr(Query, "fetch", flaky_fetch)
        goals = await context.goals.fetch_goals()

        assert [g.id for g in goals] == [goal.id]
        assert calls["count"] == 3

    async def test_failed_fetch_empties_the_slice(self, context, goal, monkeypatch):
        async def broken_fetch(self):
            raise RemoteOperationError("database is down")

        monkeypatch.setattr(Query, "fetch", broken_fetch)
        with pytest.raises(RemoteOperationError):
            await context.goals.fetch_goals()

        assert context.goals.goals == []
        assert context.goals.status is StoreStatus.ERRORED
        context.goals.clear_error()
        assert context.goals.error is None

    async def test_inserts_are_not_retried(self, context, user, monkeypatch):
        calls = {"count": 0}

        async def failing_insert(self, values):
            calls["count"] += 1
            raise RemoteOperationError("timeout", table="goals", operation="insert")

        monkeypatch.setattr(Query, "insert", failing_insert)
        with pytest.raises(RemoteOperationError):
            await context.goals.add_goal("Run", ["Monday"], "2024-01-01")

        assert calls["count"] == 1
        assert context.goals.goals == []
        assert context.goals.error == "Failed to add goal: timeout"
