#!/usr/bin/env python3
"""
Workout Templates for Training Plan Generation.

Centralizes the weekly structure and the per-phase workout prescriptions.

Two kinds of templates:
1. CANONICAL_WEEK - the Mon-Sun structure every plan week is cloned from
2. PHASE_WORKOUTS - what each training day kind contains in each phase
"""

import copy
from typing import Callable, Dict, List, Optional, Tuple

from plan_engine.constants import (
    COOLDOWN_DURATION_SEC,
    DAY_ORDER,
    LONG_RIDE_FRACTION,
    STANDARD_DAY_FRACTION,
    WARMUP_DURATION_SEC,
)
from plan_engine.intervals import (
    Synthesis,
    compose,
    cooldown,
    ladder,
    over_under,
    pyramid,
    steady,
    uniform,
    warmup,
)
from plan_engine.models import DayEntry, DayKind, Phase, WorkoutTemplate
from plan_engine.zones import round_half_up, zone_intensity


# Day slot format: (day_kind, title, description, share of weekly hours)
DaySlot = Tuple[DayKind, str, str, float]

_REST = (DayKind.REST, 'Rest Day', 'Full rest or an easy walk', 0.0)
_INTERVALS = (DayKind.INTERVALS, 'Intervals', 'Structured interval session', STANDARD_DAY_FRACTION)
_ENDURANCE = (DayKind.ENDURANCE, 'Endurance Ride', 'Steady Zone 2 riding', STANDARD_DAY_FRACTION)
_POWER = (DayKind.POWER_DEVELOPMENT, 'Power Development', 'Threshold and above, varied structure',
          STANDARD_DAY_FRACTION)
_LONG_RIDE = (DayKind.LONG_RIDE, 'Long Ride', 'Long steady Zone 2 ride', LONG_RIDE_FRACTION)

# Thursday depends on the goal
THURSDAY_BY_GOAL: Dict[str, DaySlot] = {
    'performance': _POWER,
    'endurance': _ENDURANCE,
    'general': _INTERVALS,
}


def week_slots(goal: str) -> List[DaySlot]:
    """Mon-Sun day slots for a goal (unknown goals use the general week)."""
    thursday = THURSDAY_BY_GOAL.get(goal, THURSDAY_BY_GOAL['general'])
    return [_REST, _INTERVALS, _ENDURANCE, thursday, _REST, _LONG_RIDE, _ENDURANCE]


def canonical_week(goal: str, weekly_hours: float) -> Tuple[DayEntry, ...]:
    """The canonical week: 7 day entries with durations but no workouts."""
    entries = []
    for index, (day, (kind, title, description, share)) in enumerate(zip(DAY_ORDER, week_slots(goal))):
        entries.append(DayEntry(
            day=day,
            day_index=index,
            kind=kind,
            title=title,
            description=description,
            duration_minutes=round_half_up(weekly_hours * 60 * share),
        ))
    return tuple(entries)


def clone_week(week: Tuple[DayEntry, ...]) -> Tuple[DayEntry, ...]:
    """Independent copy of a week; plan weeks never share entries."""
    return copy.deepcopy(week)


# ============================================================================
# PHASE WORKOUTS
# ============================================================================
# Main sets take (ftp, repetitions). Repetitions shrink until the session
# fits inside the day's time budget.
# ============================================================================

MainSet = Callable[[float, int], Synthesis]

_THRESHOLD = zone_intensity('z4', 0.5)
_VO2MAX = zone_intensity('z5', 0.5)
_ENDURANCE_INTENSITY = zone_intensity('z2', 0.5)

_BUILDUP_LADDER = [120, 180, 240, 180, 120]

# (title suffix, description, difficulty, default repetitions, main set)
PHASE_WORKOUTS: Dict[Phase, Dict[DayKind, Tuple[str, str, int, int, MainSet]]] = {
    Phase.BUILDUP: {
        DayKind.INTERVALS: (
            'Threshold', 'Threshold: 3x10min @ Zone 4, 5min easy between', 3, 3,
            lambda ftp, reps: uniform(ftp, _THRESHOLD, 600, 300, reps)),
        DayKind.POWER_DEVELOPMENT: (
            'Ladder', 'Ladder: 2-4min steps from 85% to 95% FTP', 3, len(_BUILDUP_LADDER),
            lambda ftp, reps: ladder(ftp, 0.85, 0.95, _BUILDUP_LADDER[:reps], 120)),
    },
    Phase.PEAK: {
        DayKind.INTERVALS: (
            'VO2max', 'VO2max: 5x3min @ Zone 5, equal recovery', 4, 5,
            lambda ftp, reps: uniform(ftp, _VO2MAX, 180, 180, reps)),
        DayKind.POWER_DEVELOPMENT: (
            'Over-Under', 'Over-unders: 3x5min alternating 95% / 110% FTP every minute', 4, 3,
            lambda ftp, reps: over_under(ftp, 0.95, 1.1, 300, 60, reps)),
    },
    Phase.TAPER: {
        DayKind.INTERVALS: (
            'Openers', 'Short openers: 4x30sec @ 130% FTP', 2, 4,
            lambda ftp, reps: uniform(ftp, 1.3, 30, 90, reps)),
        DayKind.POWER_DEVELOPMENT: (
            'Sharpener', 'Short pyramid to stay sharp', 2, 1,
            lambda ftp, reps: pyramid(ftp, 0.9, 1.1, [30, 60, 30], 60)),
    },
}

_STEADY_DIFFICULTY = {DayKind.ENDURANCE: 1, DayKind.LONG_RIDE: 2}

SHORT_SESSION_SEC = 2400  # below this, warmup/cooldown are shortened
SHORT_WARMUP_SEC = 300
SHORT_COOLDOWN_SEC = 180
MIN_FILL_SEC = 300        # shorter gaps are left unfilled


def _ramps(ftp: float, budget: int) -> Tuple[Synthesis, Synthesis]:
    if budget < SHORT_SESSION_SEC:
        return warmup(ftp, SHORT_WARMUP_SEC), cooldown(ftp, SHORT_COOLDOWN_SEC)
    return warmup(ftp, WARMUP_DURATION_SEC), cooldown(ftp, COOLDOWN_DURATION_SEC)


def _fit_main_set(ftp: float, available: int, main_set: MainSet, repetitions: int) -> Synthesis:
    for reps in range(repetitions, 0, -1):
        main = main_set(ftp, reps)
        if main.duration <= available:
            return main
    return main_set(ftp, 1)


def build_day_workout(
    entry: DayEntry,
    phase: Phase,
    ftp: float,
    week_number: int,
) -> Tuple[Optional[WorkoutTemplate], Synthesis]:
    """
    Synthesize the workout for one day entry.

    Returns (template, synthesis); template is None for rest days or a
    zero-minute budget. The synthesis carries any input fallbacks.
    """
    budget = entry.duration_minutes * 60
    if entry.kind == DayKind.REST or budget <= 0:
        return None, Synthesis(segments=())

    warm, cool = _ramps(ftp, budget)
    available = budget - warm.duration - cool.duration

    prescription = PHASE_WORKOUTS[phase].get(entry.kind)
    if prescription is None:
        suffix, description, difficulty = 'Zone 2', entry.description, _STEADY_DIFFICULTY[entry.kind]
        main = steady(ftp, _ENDURANCE_INTENSITY, max(available, MIN_FILL_SEC))
        parts = [warm, main, cool]
    else:
        suffix, description, difficulty, repetitions, main_set = prescription
        main = _fit_main_set(ftp, available, main_set, repetitions)
        parts = [warm, main]
        remaining = available - main.duration
        if remaining >= MIN_FILL_SEC:
            parts.append(steady(ftp, _ENDURANCE_INTENSITY, remaining))
        parts.append(cool)

    synthesis = compose(*parts)
    template = WorkoutTemplate(
        id=f"w{week_number:02d}-{entry.day.lower()}-{entry.kind.value}",
        name=f"{entry.title} - {suffix}",
        segments=synthesis.segments,
        difficulty=difficulty,
        description=description,
    )
    return template, synthesis
