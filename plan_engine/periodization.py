#!/usr/bin/env python3
"""
Periodization: which phase and week type each plan week belongs to.

Phase lengths come from goal-specific fractions of the plan length
(buildup / peak / taper). Boundaries are round(duration x cumulative
fraction), then adjusted so every phase keeps at least one week.

Week types:
    buildup  every 4th week (absolute week number) is a recovery week
    peak     3-week cycle: %3 == 0 recovery, %3 == 1 intensive, else normal
    taper    always taper
"""

from dataclasses import dataclass
from typing import List, Tuple

from plan_engine.constants import (
    BUILDUP_RECOVERY_EVERY,
    DEFAULT_GOAL,
    PEAK_CYCLE_LENGTH,
    PHASE_FRACTIONS,
)
from plan_engine.models import Phase, WeekType
from plan_engine.zones import round_half_up


@dataclass(frozen=True)
class PhaseLayout:
    """Last week number of buildup and peak; taper runs to the end."""
    duration_weeks: int
    buildup_end: int
    peak_end: int

    @property
    def buildup_weeks(self) -> int:
        return self.buildup_end

    @property
    def peak_weeks(self) -> int:
        return self.peak_end - self.buildup_end

    @property
    def taper_weeks(self) -> int:
        return self.duration_weeks - self.peak_end

    def to_dict(self) -> dict:
        return {
            'duration_weeks': self.duration_weeks,
            'buildup_weeks': self.buildup_weeks,
            'peak_weeks': self.peak_weeks,
            'taper_weeks': self.taper_weeks,
        }


def phase_fractions(goal: str) -> Tuple[float, float, float]:
    return PHASE_FRACTIONS.get(goal, PHASE_FRACTIONS[DEFAULT_GOAL])


def phase_layout(duration_weeks: int, goal: str) -> PhaseLayout:
    """Split a plan into buildup / peak / taper week ranges."""
    duration = int(duration_weeks)
    buildup, peak, _ = phase_fractions(goal)

    # round() on the cumulative sum guards against 0.6 + 0.3 = 0.8999...
    buildup_end = round_half_up(duration * round(buildup, 6))
    peak_end = round_half_up(duration * round(buildup + peak, 6))

    if duration >= 3:
        buildup_end = max(1, min(buildup_end, duration - 2))
        peak_end = max(buildup_end + 1, min(peak_end, duration - 1))
    else:
        buildup_end = min(1, duration)
        peak_end = duration

    return PhaseLayout(duration_weeks=duration, buildup_end=buildup_end, peak_end=peak_end)


def phase_for_week(week_number: int, layout: PhaseLayout) -> Phase:
    if week_number <= layout.buildup_end:
        return Phase.BUILDUP
    if week_number <= layout.peak_end:
        return Phase.PEAK
    return Phase.TAPER


def week_type_for_week(week_number: int, phase: Phase) -> WeekType:
    if phase == Phase.TAPER:
        return WeekType.TAPER

    if phase == Phase.PEAK:
        position = week_number % PEAK_CYCLE_LENGTH
        if position == 0:
            return WeekType.RECOVERY
        if position == 1:
            return WeekType.INTENSIVE
        return WeekType.NORMAL

    if week_number % BUILDUP_RECOVERY_EVERY == 0:
        return WeekType.RECOVERY
    return WeekType.NORMAL


def periodize(duration_weeks: int, goal: str) -> List[Tuple[int, Phase, WeekType]]:
    """(week_number, phase, week_type) for weeks 1..duration_weeks."""
    layout = phase_layout(duration_weeks, goal)
    weeks = []
    for week_number in range(1, layout.duration_weeks + 1):
        phase = phase_for_week(week_number, layout)
        weeks.append((week_number, phase, week_type_for_week(week_number, phase)))
    return weeks
