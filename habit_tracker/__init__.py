"""Habit Tracker package."""
