from datetime import date

import pytest

from focusflow.core.models import Goal, GoalCompletion, GoalMiss, ValidationError
from focusflow.stores import reducers
from focusflow.utils.datetime_utils import day_bounds_utc, month_bounds, parse_time, to_date, week_bounds


def make_goal(**overrides):
    values = dict(id="g1", title="Run", start_date=date(2024, 1, 1), frequency=["Monday", "Wednesday"])
    values.update(overrides)
    return Goal(**values)


class TestGoal:

    def test_title_is_stripped(self):
        assert make_goal(title="  Read  ").title == "Read"

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            make_goal(title="   ")

    def test_unknown_weekday_rejected(self):
        with pytest.raises(ValidationError):
            make_goal(frequency=["Funday"])

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            make_goal(end_date=date(2023, 12, 31))

    def test_active_only_on_scheduled_weekdays(self):
        goal = make_goal()
        assert goal.is_active_on(date(2024, 1, 1))  # Monday
        assert not goal.is_active_on(date(2024, 1, 2))  # Tuesday
        assert goal.is_active_on(date(2024, 1, 3))  # Wednesday

    def test_active_within_start_and_end(self):
        goal = make_goal(start_date=date(2024, 1, 8), end_date=date(2024, 1, 15))
        assert not goal.is_active_on(date(2024, 1, 1))
        assert goal.is_active_on(date(2024, 1, 8))
        assert goal.is_active_on(date(2024, 1, 15))
        assert not goal.is_active_on(date(2024, 1, 22))

    def test_from_row_ignores_unknown_columns(self):
        goal = Goal.from_row({
            "id": "g2",
            "title": "Stretch",
            "start_date": date(2024, 1, 1),
            "frequency": ["Friday"],
            "password_hash": "x",
        })
        assert goal.id == "g2"
        assert goal.frequency == ["Friday"]


class TestDates:

    def test_to_date_accepts_iso_strings(self):
        assert to_date("2024-03-05") == date(2024, 3, 5)

    def test_to_date_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid date provided"):
            to_date("yesterday")
        with pytest.raises(ValidationError):
            to_date(None)

    def test_parse_time(self):
        assert parse_time("07:30").hour == 7
        with pytest.raises(ValidationError):
            parse_time("7 o'clock")

    def test_month_bounds_leap_year(self):
        assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_week_starts_on_sunday(self):
        assert week_bounds(date(2024, 3, 13)) == (date(2024, 3, 10), date(2024, 3, 16))
        assert week_bounds(date(2024, 3, 10)) == (date(2024, 3, 10), date(2024, 3, 16))
        assert week_bounds(date(2024, 3, 16)) == (date(2024, 3, 10), date(2024, 3, 16))

    def test_day_bounds_follow_timezone(self):
        start, end = day_bounds_utc(date(2024, 1, 15), "Europe/Berlin")
        assert (start.day, start.hour) == (14, 23)
        assert (end.day, end.hour) == (15, 23)


class TestCompletionMissReducers:

    def test_completion_replaces_miss(self):
        day = date(2024, 1, 8)
        misses = [GoalMiss(id="m1", goal_id="g1", missed_date=day)]
        completion = GoalCompletion(id="c1", goal_id="g1", completed_date=day)

        completions, misses = reducers.add_completion([], misses, completion)
        assert completions == [completion]
        assert misses == []

    def test_miss_replaces_completion_of_same_goal_only(self):
        day = date(2024, 1, 8)
        mine = GoalCompletion(id="c1", goal_id="g1", completed_date=day)
        other = GoalCompletion(id="c2", goal_id="g2", completed_date=day)
        miss = GoalMiss(id="m1", goal_id="g1", missed_date=day, reason="overslept")

        completions, misses = reducers.add_miss([mine, other], [], miss)
        assert completions == [other]
        assert misses == [miss]

    def test_reducers_do_not_mutate_input(self):
        items = [GoalCompletion(id="c1", goal_id="g1", completed_date=date(2024, 1, 1))]
        assert reducers.remove_by_id(items, "c1") == []
        assert len(items) == 1
