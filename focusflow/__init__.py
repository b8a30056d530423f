"""
FocusFlow - habit tracker

Goals with weekday schedules, daily completions and misses, moods, hourly
energy levels, a daily planner and a cached calendar view, on top of an
async SQL data service.
"""

__version__ = "1.0.0"
