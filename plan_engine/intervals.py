#!/usr/bin/env python3
"""
Interval synthesis.

Pure, deterministic generators that turn FTP-relative prescriptions into
ordered segment lists:

- uniform:    N x (work / rest), optionally in sets with a longer rest between
- pyramid:    intensity interpolated linearly across a list of durations
- ladder:     same interpolation, ascending or descending
- over_under: one compound segment per repetition (base + peak power)
- ramp:       warmup / cooldown

Inputs are clamped instead of rejected. Every substitution is returned as a
NumericFallback next to the segments so the caller decides how to report
it; nothing here logs.

Powers are watts rounded to the nearest watt and kept inside
[0.3 x FTP, 2 x FTP]. Recovery between efforts is 40% FTP.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from plan_engine.constants import (
    COOLDOWN_DURATION_SEC,
    COOLDOWN_POWER_HIGH,
    COOLDOWN_POWER_LOW,
    DEFAULT_FTP_WATTS,
    DEFAULT_LADDER_DURATIONS,
    DEFAULT_LADDER_MIN_INTENSITY,
    DEFAULT_LADDER_REST_SEC,
    DEFAULT_OVER_UNDER_DURATION_SEC,
    DEFAULT_OVER_UNDER_LOWER,
    DEFAULT_OVER_UNDER_REPETITIONS,
    DEFAULT_PYRAMID_DURATIONS,
    DEFAULT_PYRAMID_MIN_INTENSITY,
    DEFAULT_REPETITIONS,
    DEFAULT_REST_DURATION_SEC,
    DEFAULT_SWITCH_TIME_SEC,
    DEFAULT_UNIFORM_INTENSITY,
    LADDER_MAX_INTENSITY_STEP,
    MAX_INTENSITY,
    MAX_POWER_RATIO,
    MIN_INTENSITY,
    MIN_POWER_RATIO,
    MIN_SEGMENT_DURATION_SEC,
    OVER_UNDER_HIGHER_STEP,
    PYRAMID_MAX_INTENSITY_STEP,
    RECOVERY_POWER_RATIO,
    SET_REST_DURATION_SEC,
    WARMUP_DURATION_SEC,
    WARMUP_POWER_HIGH,
    WARMUP_POWER_LOW,
)
from plan_engine.models import (
    NumericFallback,
    OverUnderSegment,
    RampSegment,
    Segment,
    SimpleSegment,
)
from plan_engine.zones import is_valid_ftp, round_half_up


__all__ = [
    "Synthesis",
    "uniform",
    "pyramid",
    "ladder",
    "over_under",
    "ramp",
    "warmup",
    "cooldown",
    "steady",
    "compose",
    "target_power",
]


@dataclass(frozen=True)
class Synthesis:
    """Segments produced by a generator plus any input substitutions."""
    segments: Tuple[Segment, ...]
    fallbacks: Tuple[NumericFallback, ...] = field(default_factory=tuple)

    @property
    def duration(self) -> int:
        return sum(s.duration for s in self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _power_bounds(ftp: float) -> Tuple[int, int]:
    return math.ceil(ftp * MIN_POWER_RATIO), math.floor(ftp * MAX_POWER_RATIO)


def target_power(ftp: float, intensity: float) -> int:
    """Watts for an FTP fraction, rounded and clamped to [0.3, 2.0] x FTP."""
    low, high = _power_bounds(ftp)
    return max(low, min(high, round_half_up(ftp * intensity)))


def _recovery_power(ftp: float) -> int:
    return target_power(ftp, RECOVERY_POWER_RATIO)


class _InputGuard:
    """Validates generator inputs, recording each substitution."""

    def __init__(self, generator: str):
        self.generator = generator
        self.fallbacks: List[NumericFallback] = []

    def substitute(self, name: str, value: Any, default: Any):
        self.fallbacks.append(NumericFallback(
            field=f"{self.generator}.{name}",
            value=value,
            default=default,
            message_key='interval.fallback',
        ))
        return default

    def ftp(self, ftp: Any) -> float:
        if is_valid_ftp(ftp):
            return ftp
        return self.substitute('ftp', ftp, DEFAULT_FTP_WATTS)

    def intensity(self, name: str, value: Any, default: float) -> float:
        if _is_number(value) and MIN_INTENSITY < value <= MAX_INTENSITY:
            return value
        return self.substitute(name, value, default)

    def upper_intensity(self, name: str, value: Any, lower: float, step: float) -> float:
        """Upper bound of a range: must be valid and above (or equal to) lower."""
        if _is_number(value) and MIN_INTENSITY < value <= MAX_INTENSITY and value >= lower:
            return value
        return self.substitute(name, value, round(min(MAX_INTENSITY, lower + step), 3))

    def duration(self, name: str, value: Any, default: int = MIN_SEGMENT_DURATION_SEC) -> int:
        if _is_number(value) and round_half_up(value) > 0:
            return round_half_up(value)
        return self.substitute(name, value, default)

    def rest(self, name: str, value: Any, default: int) -> int:
        """Rest may be zero (no rest segment) but never negative."""
        if _is_number(value) and value >= 0:
            return round_half_up(value)
        return self.substitute(name, value, default)

    def count(self, name: str, value: Any, default: int) -> int:
        if _is_number(value) and int(value) > 0:
            return int(value)
        return self.substitute(name, value, default)

    def durations(self, name: str, values: Any, default: Sequence[int]) -> List[int]:
        if not isinstance(values, (list, tuple)) or not values:
            return list(self.substitute(name, values, list(default)))
        return [self.duration(f"{name}[{i}]", v) for i, v in enumerate(values)]

    def result(self, segments: Iterable[Segment]) -> Synthesis:
        return Synthesis(segments=tuple(segments), fallbacks=tuple(self.fallbacks))


# =============================================================================
# GENERATORS
# =============================================================================

def uniform(
    ftp: float,
    intensity: float,
    work_duration: int,
    rest_duration: int,
    repetitions: int,
    sets: int = 1,
) -> Synthesis:
    """
    Repeated work/rest intervals at one intensity.

    Rest follows every work segment except the very last one; a 120s rest at
    recovery power is inserted between sets.

    Args:
        ftp: Functional threshold power in watts
        intensity: Work power as FTP fraction, (0, 2.0]; otherwise 0.8
        work_duration: Seconds per effort; non-positive becomes 30
        rest_duration: Seconds between efforts; negative becomes 30, 0 means none
        repetitions: Efforts per set; non-positive becomes 5
        sets: Number of sets; non-positive becomes 1
    """
    guard = _InputGuard('uniform')
    ftp = guard.ftp(ftp)
    intensity = guard.intensity('intensity', intensity, DEFAULT_UNIFORM_INTENSITY)
    work_duration = guard.duration('work_duration', work_duration)
    rest_duration = guard.rest('rest_duration', rest_duration, DEFAULT_REST_DURATION_SEC)
    repetitions = guard.count('repetitions', repetitions, DEFAULT_REPETITIONS)
    sets = guard.count('sets', sets, 1)

    power = target_power(ftp, intensity)
    recovery = _recovery_power(ftp)

    segments: List[Segment] = []
    for set_index in range(sets):
        if set_index > 0:
            segments.append(SimpleSegment('rest', recovery, SET_REST_DURATION_SEC, set_rest=True))

        for rep in range(repetitions):
            segments.append(SimpleSegment('work', power, work_duration, intensity=intensity))

            is_last = rep == repetitions - 1 and set_index == sets - 1
            if not is_last and rest_duration > 0:
                segments.append(SimpleSegment('rest', recovery, rest_duration))

    return guard.result(segments)


def _interpolated_steps(
    ftp: float,
    min_intensity: float,
    max_intensity: float,
    durations: List[int],
    rest_duration: int,
    descending: bool = False,
) -> List[Segment]:
    recovery = _recovery_power(ftp)
    steps = len(durations)
    segments: List[Segment] = []

    for index, duration in enumerate(durations):
        progress = index / (steps - 1) if steps > 1 else 0.0
        if descending:
            intensity = max_intensity - progress * (max_intensity - min_intensity)
        else:
            intensity = min_intensity + progress * (max_intensity - min_intensity)
        intensity = round(intensity, 3)

        segments.append(SimpleSegment('work', target_power(ftp, intensity), duration, intensity=intensity))
        if index < steps - 1 and rest_duration > 0:
            segments.append(SimpleSegment('rest', recovery, rest_duration))

    return segments


def pyramid(
    ftp: float,
    min_intensity: float,
    max_intensity: float,
    durations: Sequence[int],
    rest_duration: int,
) -> Synthesis:
    """
    Pyramid: one effort per duration, intensity rising linearly by step index.

    Invalid min intensity becomes 0.7; an invalid or lower max becomes
    min + 0.2. An empty duration list becomes [30, 60, 90, 60, 30].
    """
    guard = _InputGuard('pyramid')
    ftp = guard.ftp(ftp)
    min_intensity = guard.intensity('min_intensity', min_intensity, DEFAULT_PYRAMID_MIN_INTENSITY)
    max_intensity = guard.upper_intensity('max_intensity', max_intensity, min_intensity,
                                          PYRAMID_MAX_INTENSITY_STEP)
    durations = guard.durations('durations', durations, DEFAULT_PYRAMID_DURATIONS)
    rest_duration = guard.rest('rest_duration', rest_duration, DEFAULT_REST_DURATION_SEC)

    return guard.result(_interpolated_steps(ftp, min_intensity, max_intensity,
                                            durations, rest_duration))


def ladder(
    ftp: float,
    min_intensity: float,
    max_intensity: float,
    durations: Sequence[int],
    rest_duration: int,
    descending: bool = False,
) -> Synthesis:
    """
    Ladder: like pyramid, but the intensity can also step down.

    Invalid min intensity becomes 0.75; an invalid or lower max becomes
    min + 0.1. Empty durations become [30, 60, 90]; negative rest becomes 60s.
    """
    guard = _InputGuard('ladder')
    ftp = guard.ftp(ftp)
    min_intensity = guard.intensity('min_intensity', min_intensity, DEFAULT_LADDER_MIN_INTENSITY)
    max_intensity = guard.upper_intensity('max_intensity', max_intensity, min_intensity,
                                          LADDER_MAX_INTENSITY_STEP)
    durations = guard.durations('durations', durations, DEFAULT_LADDER_DURATIONS)
    rest_duration = guard.rest('rest_duration', rest_duration, DEFAULT_LADDER_REST_SEC)

    return guard.result(_interpolated_steps(ftp, min_intensity, max_intensity,
                                            durations, rest_duration, descending=descending))


def over_under(
    ftp: float,
    lower_intensity: float,
    higher_intensity: float,
    total_duration: int,
    switch_time: int,
    repetitions: int,
) -> Synthesis:
    """
    Over-unders: continuous efforts alternating between two targets.

    Each repetition is a single OverUnderSegment carrying base and peak power
    and the switch time. Repetitions are separated by total_duration / 2 of
    rest.
    """
    guard = _InputGuard('over_under')
    ftp = guard.ftp(ftp)
    lower_intensity = guard.intensity('lower_intensity', lower_intensity, DEFAULT_OVER_UNDER_LOWER)
    if not (_is_number(higher_intensity) and lower_intensity < higher_intensity <= MAX_INTENSITY):
        higher_intensity = guard.substitute(
            'higher_intensity', higher_intensity,
            round(min(MAX_INTENSITY, lower_intensity + OVER_UNDER_HIGHER_STEP), 3))
    total_duration = guard.duration('total_duration', total_duration, DEFAULT_OVER_UNDER_DURATION_SEC)
    if not (_is_number(switch_time) and 0 < switch_time < total_duration):
        default_switch = DEFAULT_SWITCH_TIME_SEC
        if default_switch >= total_duration:
            default_switch = max(1, total_duration // 2)
        switch_time = guard.substitute('switch_time', switch_time, default_switch)
    switch_time = max(1, round_half_up(switch_time))
    repetitions = guard.count('repetitions', repetitions, DEFAULT_OVER_UNDER_REPETITIONS)

    base_power = target_power(ftp, lower_intensity)
    peak_power = target_power(ftp, higher_intensity)
    rest_duration = round_half_up(total_duration / 2)
    recovery = _recovery_power(ftp)

    segments: List[Segment] = []
    for rep in range(repetitions):
        segments.append(OverUnderSegment(
            power=base_power,
            secondary_power=peak_power,
            duration=total_duration,
            switch_time=switch_time,
            intensity=lower_intensity,
            secondary_intensity=higher_intensity,
        ))
        if rep < repetitions - 1:
            segments.append(SimpleSegment('rest', recovery, rest_duration))

    return guard.result(segments)


_RAMP_DEFAULTS = {
    'warmup': (WARMUP_POWER_LOW, WARMUP_POWER_HIGH),
    'cooldown': (COOLDOWN_POWER_HIGH, COOLDOWN_POWER_LOW),
}


def ramp(
    ftp: float,
    start_intensity: Optional[float],
    end_intensity: Optional[float],
    duration: int,
    kind: str = 'warmup',
) -> Synthesis:
    """
    Linear power ramp for a warmup or cooldown.

    Raises:
        ValueError: if kind is not 'warmup' or 'cooldown'
    """
    if kind not in _RAMP_DEFAULTS:
        raise ValueError(f"Ramp kind must be warmup or cooldown, got {kind!r}")

    default_start, default_end = _RAMP_DEFAULTS[kind]
    guard = _InputGuard(kind)
    ftp = guard.ftp(ftp)
    start_intensity = guard.intensity('start_intensity', start_intensity, default_start)
    end_intensity = guard.intensity('end_intensity', end_intensity, default_end)
    duration = guard.duration('duration', duration)

    return guard.result([RampSegment(
        type=kind,
        power=target_power(ftp, start_intensity),
        end_power=target_power(ftp, end_intensity),
        duration=duration,
    )])


def warmup(ftp: float, duration: int = WARMUP_DURATION_SEC) -> Synthesis:
    return ramp(ftp, WARMUP_POWER_LOW, WARMUP_POWER_HIGH, duration, kind='warmup')


def cooldown(ftp: float, duration: int = COOLDOWN_DURATION_SEC) -> Synthesis:
    return ramp(ftp, COOLDOWN_POWER_HIGH, COOLDOWN_POWER_LOW, duration, kind='cooldown')


def steady(ftp: float, intensity: float, duration: int) -> Synthesis:
    """Single steady-state block (endurance riding, long-ride fill)."""
    guard = _InputGuard('steady')
    ftp = guard.ftp(ftp)
    intensity = guard.intensity('intensity', intensity, DEFAULT_UNIFORM_INTENSITY)
    duration = guard.duration('duration', duration)
    return guard.result([SimpleSegment('steady', target_power(ftp, intensity), duration,
                                       intensity=intensity)])


def compose(*parts: Synthesis) -> Synthesis:
    """Concatenate syntheses in order."""
    segments: List[Segment] = []
    fallbacks: List[NumericFallback] = []
    for part in parts:
        segments.extend(part.segments)
        fallbacks.extend(part.fallbacks)
    return Synthesis(segments=tuple(segments), fallbacks=tuple(fallbacks))
