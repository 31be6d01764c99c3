#!/usr/bin/env python3
"""
Data model for the plan engine.

Every structure here is a frozen dataclass: once a plan is produced it is
only ever replaced, never edited in place. Each type converts to and from
plain dicts so plans can be stored and exported as JSON or YAML verbatim.

Segments are a tagged variant:
- SimpleSegment: one target power (work, rest, steady)
- RampSegment: linear change from power to end_power (warmup, cooldown)
- OverUnderSegment: base power alternating with a peak every switch_time
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from plan_engine.constants import (
    DIFFICULTY_MAX,
    DIFFICULTY_MIN,
    EVENT_CATEGORY,
    WORKOUT_BUFFER_SEC,
)


class DayKind(str, Enum):
    """Tag attached to every schedule entry at generation time."""
    REST = 'rest'
    INTERVALS = 'intervals'
    POWER_DEVELOPMENT = 'power-development'
    LONG_RIDE = 'long-ride'
    ENDURANCE = 'endurance'


class Phase(str, Enum):
    BUILDUP = 'buildup'
    PEAK = 'peak'
    TAPER = 'taper'


class WeekType(str, Enum):
    NORMAL = 'normal'
    RECOVERY = 'recovery'
    INTENSIVE = 'intensive'
    TAPER = 'taper'


# =============================================================================
# PROFILE / ZONES
# =============================================================================

@dataclass(frozen=True)
class UserProfile:
    """Rider inputs. ftp and weight may be missing; see zones.resolve_ftp."""
    ftp: Optional[float] = None
    weight: Optional[float] = None
    experience: str = 'intermediate'
    goal: str = 'general'
    gender: Optional[str] = None
    age: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        return cls(
            ftp=data.get('ftp'),
            weight=data.get('weight'),
            experience=data.get('experience') or data.get('level') or 'intermediate',
            goal=data.get('goal') or 'general',
            gender=data.get('gender'),
            age=data.get('age'),
        )


@dataclass(frozen=True)
class TrainingZone:
    name: str
    label: str
    min: int
    max: int

    def contains(self, watts: float) -> bool:
        return self.min <= watts <= self.max

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'label': self.label, 'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class NumericFallback:
    """Record of an invalid input silently replaced by a documented default."""
    field: str
    value: Any
    default: Any
    message_key: str = 'input.fallback'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field,
            'value': self.value,
            'default': self.default,
            'message_key': self.message_key,
        }


# =============================================================================
# SEGMENTS
# =============================================================================

def _require_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Segment {name} must be a positive number of seconds, got {value!r}")


@dataclass(frozen=True)
class SimpleSegment:
    type: str  # work | rest | steady
    power: int
    duration: int
    intensity: Optional[float] = None
    set_rest: bool = False

    def __post_init__(self):
        _require_positive('duration', self.duration)

    def average_power(self) -> float:
        return float(self.power)

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type, 'power': self.power, 'duration': self.duration}
        if self.intensity is not None:
            data['intensity'] = self.intensity
        if self.set_rest:
            data['set_rest'] = True
        return data


@dataclass(frozen=True)
class RampSegment:
    type: str  # warmup | cooldown
    power: int
    end_power: int
    duration: int

    def __post_init__(self):
        _require_positive('duration', self.duration)

    def average_power(self) -> float:
        return (self.power + self.end_power) / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'power': self.power,
            'end_power': self.end_power,
            'duration': self.duration,
        }


@dataclass(frozen=True)
class OverUnderSegment:
    power: int            # base ("under") power
    secondary_power: int  # peak ("over") power
    duration: int
    switch_time: int
    intensity: Optional[float] = None
    secondary_intensity: Optional[float] = None
    type: str = 'over-under'

    def __post_init__(self):
        _require_positive('duration', self.duration)
        _require_positive('switch_time', self.switch_time)

    def time_split(self) -> Tuple[int, int]:
        """Seconds spent at (base, peak) power; the effort starts at base."""
        blocks, remainder = divmod(self.duration, self.switch_time)
        base_time = ((blocks + 1) // 2) * self.switch_time
        peak_time = (blocks // 2) * self.switch_time
        if blocks % 2 == 0:
            base_time += remainder
        else:
            peak_time += remainder
        return base_time, peak_time

    def average_power(self) -> float:
        base_time, peak_time = self.time_split()
        return (self.power * base_time + self.secondary_power * peak_time) / self.duration

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'type': self.type,
            'power': self.power,
            'secondary_power': self.secondary_power,
            'duration': self.duration,
            'switch_time': self.switch_time,
        }
        if self.intensity is not None:
            data['intensity'] = self.intensity
        if self.secondary_intensity is not None:
            data['secondary_intensity'] = self.secondary_intensity
        return data


Segment = Union[SimpleSegment, RampSegment, OverUnderSegment]


def segment_from_dict(data: Dict[str, Any]) -> Segment:
    """Rebuild a segment from its dict form, dispatching on its type tag."""
    seg_type = data.get('type')
    if seg_type == 'over-under':
        return OverUnderSegment(
            power=data['power'],
            secondary_power=data['secondary_power'],
            duration=data['duration'],
            switch_time=data['switch_time'],
            intensity=data.get('intensity'),
            secondary_intensity=data.get('secondary_intensity'),
        )
    if seg_type in ('warmup', 'cooldown'):
        return RampSegment(
            type=seg_type,
            power=data['power'],
            end_power=data['end_power'],
            duration=data['duration'],
        )
    return SimpleSegment(
        type=seg_type,
        power=data['power'],
        duration=data['duration'],
        intensity=data.get('intensity'),
        set_rest=bool(data.get('set_rest', False)),
    )


# =============================================================================
# WORKOUTS
# =============================================================================

@dataclass(frozen=True)
class WorkoutTemplate:
    id: str
    name: str
    segments: Tuple[Segment, ...]
    difficulty: int = 1
    description: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'segments', tuple(self.segments))
        difficulty = max(DIFFICULTY_MIN, min(DIFFICULTY_MAX, int(self.difficulty)))
        object.__setattr__(self, 'difficulty', difficulty)

    @property
    def segment_seconds(self) -> int:
        return sum(s.duration for s in self.segments)

    @property
    def total_duration(self) -> int:
        """Total seconds: segments plus the fixed warmup/cooldown buffer."""
        return self.segment_seconds + WORKOUT_BUFFER_SEC

    @property
    def duration_minutes(self) -> int:
        return math.ceil(self.total_duration / 60)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'difficulty': self.difficulty,
            'duration_minutes': self.duration_minutes,
            'segments': [s.to_dict() for s in self.segments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkoutTemplate':
        return cls(
            id=data['id'],
            name=data['name'],
            segments=tuple(segment_from_dict(s) for s in data.get('segments', [])),
            difficulty=data.get('difficulty', 1),
            description=data.get('description', ''),
        )


# =============================================================================
# PLAN
# =============================================================================

@dataclass(frozen=True)
class DayEntry:
    day: str
    day_index: int
    kind: DayKind
    title: str
    description: str = ''
    duration_minutes: int = 0
    workout: Optional[WorkoutTemplate] = None
    workout_tss: int = 0

    @property
    def hours(self) -> float:
        return self.duration_minutes / 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            'day': self.day,
            'day_index': self.day_index,
            'kind': self.kind.value,
            'title': self.title,
            'description': self.description,
            'duration_minutes': self.duration_minutes,
            'workout': self.workout.to_dict() if self.workout else None,
            'workout_tss': self.workout_tss,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DayEntry':
        workout = data.get('workout')
        return cls(
            day=data['day'],
            day_index=data['day_index'],
            kind=DayKind(data['kind']),
            title=data['title'],
            description=data.get('description', ''),
            duration_minutes=data.get('duration_minutes', 0),
            workout=WorkoutTemplate.from_dict(workout) if workout else None,
            workout_tss=data.get('workout_tss', 0),
        )


@dataclass(frozen=True)
class WeekPlan:
    week_number: int
    phase: Phase
    week_type: WeekType
    tss: int
    schedule: Tuple[DayEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'schedule', tuple(self.schedule))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'week_number': self.week_number,
            'phase': self.phase.value,
            'week_type': self.week_type.value,
            'tss': self.tss,
            'schedule': [d.to_dict() for d in self.schedule],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeekPlan':
        return cls(
            week_number=data['week_number'],
            phase=Phase(data['phase']),
            week_type=WeekType(data['week_type']),
            tss=data['tss'],
            schedule=tuple(DayEntry.from_dict(d) for d in data.get('schedule', [])),
        )


@dataclass(frozen=True)
class TrainingPlan:
    goal: str
    level: str
    weekly_hours: float
    duration_weeks: int
    start_date: str
    ftp: int
    weeks: Tuple[WeekPlan, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'weeks', tuple(self.weeks))

    @property
    def total_tss(self) -> int:
        return sum(w.tss for w in self.weeks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'goal': self.goal,
            'level': self.level,
            'weekly_hours': self.weekly_hours,
            'duration_weeks': self.duration_weeks,
            'start_date': self.start_date,
            'ftp': self.ftp,
            'weeks': [w.to_dict() for w in self.weeks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainingPlan':
        return cls(
            goal=data['goal'],
            level=data['level'],
            weekly_hours=data['weekly_hours'],
            duration_weeks=data['duration_weeks'],
            start_date=data['start_date'],
            ftp=data['ftp'],
            weeks=tuple(WeekPlan.from_dict(w) for w in data.get('weeks', [])),
        )


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    title: str
    type: str
    date: str   # ISO date (YYYY-MM-DD)
    start: str  # ISO datetime at the fixed time of day, UTC
    description: str
    tss: float
    category: str = EVENT_CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'type': self.type,
            'date': self.date,
            'start': self.start,
            'description': self.description,
            'category': self.category,
            'tss': self.tss,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CalendarEvent':
        return cls(
            id=data['id'],
            title=data['title'],
            type=data['type'],
            date=data['date'],
            start=data['start'],
            description=data.get('description', ''),
            tss=data.get('tss', 0),
            category=data.get('category', EVENT_CATEGORY),
        )


def events_to_dicts(events: List[CalendarEvent]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in events]
