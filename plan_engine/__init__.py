"""Periodized cycling training plans: zones, intervals, load, plans and calendar events."""

__version__ = '1.0.0'
