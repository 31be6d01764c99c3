#!/usr/bin/env python3
"""
HIIT workout catalog and segment editing.

Templates are picked by experience level:

    beginner       recovery pyramid, beginner intervals
    intermediate   classic ladder, over-under 90/105
    advanced       VO2max 30/30 x3, advanced pyramid
    elite          supramaximal sprints, elite over-under

plus a 30/30 session for every level. Edits to a template return a new
template; power is held to [0.5, 1.5] x FTP and durations to [5, 600]s.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Sequence, Tuple

from plan_engine.constants import (
    DEFAULT_EXPERIENCE,
    EDIT_DURATION_MAX_SEC,
    EDIT_DURATION_MIN_SEC,
    EDIT_POWER_MAX_RATIO,
    EDIT_POWER_MIN_RATIO,
    EXPERIENCE_LEVELS,
)
from plan_engine.intervals import Synthesis, ladder, over_under, pyramid, target_power, uniform
from plan_engine.models import (
    NumericFallback,
    OverUnderSegment,
    RampSegment,
    SimpleSegment,
    TrainingZone,
    UserProfile,
    WorkoutTemplate,
)
from plan_engine.zones import resolve_ftp, round_half_up, zone_for_power


# (id, name, description, difficulty, builder)
# builder: (ftp) -> Synthesis
_LEVEL_TEMPLATES = {
    'beginner': [
        ('hiit-beginner-1', 'Recovery Pyramid',
         'Progressive-duration intervals suited to new riders', 1,
         lambda ftp: pyramid(ftp, 0.7, 0.85, [30, 60, 90, 60, 30], 60)),
        ('hiit-beginner-2', 'Beginner Intervals',
         'Short moderate-intensity efforts with generous recovery', 1,
         lambda ftp: uniform(ftp, 0.75, 45, 90, 6)),
    ],
    'intermediate': [
        ('hiit-intermediate-1', 'Classic Ladder',
         'Ladder intervals for endurance and power', 2,
         lambda ftp: ladder(ftp, 0.85, 0.95, [30, 60, 90, 120, 120, 90, 60, 30], 60)),
        ('hiit-intermediate-2', 'Over-Under 90/105',
         'Alternating intensity to raise lactate threshold', 2,
         lambda ftp: over_under(ftp, 0.9, 1.05, 180, 30, 4)),
    ],
    'advanced': [
        ('hiit-advanced-1', 'VO2max Intense',
         'Short high-intensity efforts targeting VO2max', 3,
         lambda ftp: uniform(ftp, 1.1, 30, 30, 10, 3)),
        ('hiit-advanced-2', 'Advanced Pyramid',
         'Hard pyramid for experienced riders', 3,
         lambda ftp: pyramid(ftp, 0.9, 1.1, [30, 60, 120, 180, 120, 60, 30], 60)),
    ],
    'elite': [
        ('hiit-elite-1', 'Supramaximal Sprints',
         'Very short, very hard sprints for racers', 3,
         lambda ftp: uniform(ftp, 1.3, 15, 45, 12, 3)),
        ('hiit-elite-2', 'Elite Over-Under',
         'Race-grade over-unders', 3,
         lambda ftp: over_under(ftp, 0.95, 1.2, 240, 30, 5)),
    ],
}

# level -> (intensity, difficulty) for the shared 30/30 session
_THIRTY_THIRTY = {
    'beginner': (0.9, 2),
    'intermediate': (1.0, 1),
    'advanced': (1.05, 1),
    'elite': (1.05, 1),
}


@dataclass(frozen=True)
class WorkoutCatalog:
    templates: Tuple[WorkoutTemplate, ...]
    level: str
    ftp: float
    fallbacks: Tuple[NumericFallback, ...] = field(default_factory=tuple)

    def get(self, template_id: str) -> Optional[WorkoutTemplate]:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'ftp': self.ftp,
            'templates': [t.to_dict() for t in self.templates],
            'fallbacks': [f.to_dict() for f in self.fallbacks],
        }


def emergency_template(ftp: float) -> WorkoutTemplate:
    """Minimal 4 x 60s @ 75% session used when nothing else is available."""
    power = target_power(ftp, 0.75)
    recovery = target_power(ftp, 0.4)
    segments = []
    for rep in range(4):
        segments.append(SimpleSegment('work', power, 60, intensity=0.75))
        if rep < 3:
            segments.append(SimpleSegment('rest', recovery, 60))
    return WorkoutTemplate(
        id='hiit-emergency',
        name='Simple Intervals',
        segments=tuple(segments),
        difficulty=1,
        description='Basic interval session',
    )


def keep_valid_templates(templates: Sequence[WorkoutTemplate], ftp: float) -> List[WorkoutTemplate]:
    """Drop templates without segments; never return an empty list."""
    valid = [t for t in templates if t.segments]
    if not valid:
        valid.append(emergency_template(ftp))
    return valid


def build_workout_templates(profile: UserProfile) -> WorkoutCatalog:
    """Interval templates for the profile's level and FTP."""
    ftp, fallbacks = resolve_ftp(profile.ftp)

    level = profile.experience
    if level not in EXPERIENCE_LEVELS:
        fallbacks.append(NumericFallback('experience', level, DEFAULT_EXPERIENCE, 'level.fallback'))
        level = DEFAULT_EXPERIENCE

    templates = []
    for template_id, name, description, difficulty, build in _LEVEL_TEMPLATES[level]:
        synthesis: Synthesis = build(ftp)
        fallbacks.extend(synthesis.fallbacks)
        templates.append(WorkoutTemplate(template_id, name, synthesis.segments, difficulty, description))

    intensity, difficulty = _THIRTY_THIRTY[level]
    synthesis = uniform(ftp, intensity, 30, 30, 10, 2)
    fallbacks.extend(synthesis.fallbacks)
    templates.append(WorkoutTemplate(
        'hiit-common-1', 'Classic 30/30', synthesis.segments, difficulty,
        'Classic 30/30 intervals for every level',
    ))

    return WorkoutCatalog(
        templates=tuple(keep_valid_templates(templates, ftp)),
        level=level,
        ftp=ftp,
        fallbacks=tuple(fallbacks),
    )


# =============================================================================
# EDITING
# =============================================================================

@dataclass(frozen=True)
class EditResult:
    template: WorkoutTemplate
    applied: bool
    notices: Tuple[str, ...] = field(default_factory=tuple)


_EDITABLE_FIELDS = {
    SimpleSegment: ('power', 'duration'),
    RampSegment: ('power', 'end_power', 'duration'),
    OverUnderSegment: ('power', 'secondary_power', 'duration'),
}


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clamp(value, low, high, notices: List[str], key: str):
    if value < low:
        notices.append(f"{key}_min")
        return low
    if value > high:
        notices.append(f"{key}_max")
        return high
    return value


def edit_segment(
    template: WorkoutTemplate,
    index: int,
    field_name: str,
    value: Any,
    ftp: float,
) -> EditResult:
    """
    Return a copy of template with one segment field changed.

    Power is rounded to the nearest watt and clamped to [0.5, 1.5] x FTP,
    updating the matching intensity. Durations are clamped to [5, 600]s.
    Non-numeric input keeps the current value.
    """
    if not isinstance(index, int) or not 0 <= index < len(template.segments):
        return EditResult(template, False, ('edit.segment_not_found',))

    segment = template.segments[index]
    if field_name not in _EDITABLE_FIELDS[type(segment)]:
        return EditResult(template, False, ('edit.unknown_field',))

    notices: List[str] = []
    number = _parse_number(value)
    if number is None:
        notices.append('edit.invalid_value')
        number = getattr(segment, field_name)

    ftp, _ = resolve_ftp(ftp)
    changes = {}
    if field_name == 'duration':
        duration = _clamp(round_half_up(number), EDIT_DURATION_MIN_SEC, EDIT_DURATION_MAX_SEC,
                          notices, 'edit.duration')
        changes['duration'] = duration
        if isinstance(segment, OverUnderSegment) and segment.switch_time >= duration:
            changes['switch_time'] = max(1, duration // 2)
    else:
        power = _clamp(round_half_up(number),
                       round_half_up(ftp * EDIT_POWER_MIN_RATIO),
                       round_half_up(ftp * EDIT_POWER_MAX_RATIO),
                       notices, 'edit.power')
        changes[field_name] = power
        if field_name == 'power' and not isinstance(segment, RampSegment):
            changes['intensity'] = round(power / ftp, 2)
        elif field_name == 'secondary_power':
            changes['secondary_intensity'] = round(power / ftp, 2)

    segments = list(template.segments)
    segments[index] = replace(segment, **changes)
    return EditResult(replace(template, segments=tuple(segments)), True, tuple(notices))


def primary_zone(
    template: WorkoutTemplate,
    zones: Sequence[TrainingZone],
) -> Optional[TrainingZone]:
    """Zone of the duration-weighted average power of the work efforts."""
    total = 0.0
    seconds = 0
    for segment in template.segments:
        if isinstance(segment, OverUnderSegment) or segment.type == 'work':
            total += segment.average_power() * segment.duration
            seconds += segment.duration
    if not seconds:
        return None
    return zone_for_power(list(zones), total / seconds)
