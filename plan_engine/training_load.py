#!/usr/bin/env python3
"""
Training Stress Score (TSS) estimation.

Per workout:
    TSS = 100 x hours x average_power x IF / FTP,  IF = average_power / FTP

average_power is total work (joules) divided by duration. This is a
simplified stand-in for normalized power; it does not apply the 30s rolling
average, so it underestimates stress for very spiky sessions.

Per week the estimate is lookup based (one figure per day kind, scaled by
hours for endurance days) and then scaled by the week type.
"""

from typing import Iterable, Optional

from plan_engine.constants import (
    DAY_TSS_FIXED,
    DAY_TSS_PER_HOUR,
    WEEK_TYPE_MULTIPLIERS,
)
from plan_engine.models import DayEntry, Segment, WorkoutTemplate
from plan_engine.zones import resolve_ftp, round_half_up


def total_work_joules(segments: Iterable[Segment]) -> float:
    return sum(s.average_power() * s.duration for s in segments)


def average_power(segments: Iterable[Segment]) -> float:
    """Mean power in watts over the segments (0 for an empty list)."""
    segments = list(segments)
    duration = sum(s.duration for s in segments)
    if duration <= 0:
        return 0.0
    return total_work_joules(segments) / duration


def intensity_factor(segments: Iterable[Segment], ftp: float) -> float:
    ftp, _ = resolve_ftp(ftp)
    return average_power(segments) / ftp


def workout_tss(segments: Iterable[Segment], ftp: float) -> int:
    """TSS for a list of segments; invalid FTP uses the 200W default."""
    ftp, _ = resolve_ftp(ftp)
    segments = list(segments)
    duration = sum(s.duration for s in segments)
    if duration <= 0:
        return 0

    avg = average_power(segments)
    hours = duration / 3600
    factor = intensity_factor(segments, ftp)
    return max(0, round_half_up(100 * hours * avg * factor / ftp))


def template_tss(template: Optional[WorkoutTemplate], ftp: float) -> int:
    if template is None:
        return 0
    return workout_tss(template.segments, ftp)


def day_tss(entry: DayEntry) -> float:
    """Lookup estimate for one schedule day."""
    kind = entry.kind.value
    if kind in DAY_TSS_FIXED:
        return DAY_TSS_FIXED[kind]
    if kind in DAY_TSS_PER_HOUR:
        return DAY_TSS_PER_HOUR[kind] * entry.hours
    return 0


def base_week_tss(schedule: Iterable[DayEntry]) -> float:
    return sum(day_tss(entry) for entry in schedule)


def week_type_multiplier(week_type: str) -> float:
    key = getattr(week_type, 'value', week_type)
    return WEEK_TYPE_MULTIPLIERS.get(key, 1.0)


def week_tss(schedule: Iterable[DayEntry], week_type: str) -> int:
    """Weekly TSS: day estimates scaled by the week type, as a non-negative int."""
    return max(0, round_half_up(base_week_tss(schedule) * week_type_multiplier(week_type)))
