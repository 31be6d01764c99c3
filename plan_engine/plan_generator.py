#!/usr/bin/env python3
"""
Plan generation.

Combines the canonical week, periodization, interval synthesis and load
estimation into a TrainingPlan. Generation is pure: the result carries the
plan (or field errors) and every fallback applied along the way, and the
caller decides how to report them.

Usage:
    result = generate_plan(PlanRequest(weekly_hours=10, duration_weeks=12,
                                       start_date='2024-01-01', goal='performance',
                                       level='intermediate', ftp=250))
    if result.ok:
        plan = result.plan
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from plan_engine.config_loader import get_config
from plan_engine.constants import (
    DEFAULT_EXPERIENCE,
    DEFAULT_FTP_WATTS,
    DEFAULT_GOAL,
    EXPERIENCE_LEVELS,
    GOALS,
)
from plan_engine.models import NumericFallback, TrainingPlan, WeekPlan
from plan_engine.periodization import periodize
from plan_engine.plan_validator import ValidationBounds, parse_start_date, validate_plan_request
from plan_engine.training_load import template_tss, week_tss
from plan_engine.workout_templates import build_day_workout, canonical_week, clone_week
from plan_engine.zones import resolve_ftp


@dataclass(frozen=True)
class PlanRequest:
    weekly_hours: Any
    duration_weeks: Any
    start_date: Any
    goal: str = DEFAULT_GOAL
    level: str = DEFAULT_EXPERIENCE
    ftp: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlanRequest':
        return cls(
            weekly_hours=data.get('weekly_hours'),
            duration_weeks=data.get('duration_weeks'),
            start_date=data.get('start_date'),
            goal=data.get('goal') or DEFAULT_GOAL,
            level=data.get('level') or data.get('experience') or DEFAULT_EXPERIENCE,
            ftp=data.get('ftp'),
        )


@dataclass(frozen=True)
class GenerationResult:
    plan: Optional[TrainingPlan]
    errors: Dict[str, str] = field(default_factory=dict)
    fallbacks: Tuple[NumericFallback, ...] = field(default_factory=tuple)
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.plan is not None and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ok': self.ok,
            'plan': self.plan.to_dict() if self.plan else None,
            'errors': dict(self.errors),
            'fallbacks': [f.to_dict() for f in self.fallbacks],
            'warnings': list(self.warnings),
        }


def _resolve_choice(name: str, value: str, allowed: List[str], default: str,
                    fallbacks: List[NumericFallback]) -> str:
    if value in allowed:
        return value
    fallbacks.append(NumericFallback(name, value, default, f"{name}.fallback"))
    return default


def _build_plan(request: PlanRequest, bounds: Optional[ValidationBounds]) -> GenerationResult:
    validation = validate_plan_request(
        request.weekly_hours,
        request.duration_weeks,
        request.start_date,
        goal=request.goal,
        level=request.level,
        bounds=bounds,
    )
    if not validation.is_valid:
        return GenerationResult(plan=None, errors=dict(validation.field_errors),
                                warnings=tuple(validation.warnings))

    fallbacks: List[NumericFallback] = []
    goal = _resolve_choice('goal', request.goal, GOALS, DEFAULT_GOAL, fallbacks)
    level = _resolve_choice('level', request.level, EXPERIENCE_LEVELS, DEFAULT_EXPERIENCE, fallbacks)

    default_ftp = get_config().get('defaults.ftp_watts', DEFAULT_FTP_WATTS)
    ftp, ftp_fallbacks = resolve_ftp(request.ftp, default_ftp)
    fallbacks.extend(ftp_fallbacks)

    duration_weeks = int(request.duration_weeks)
    start_date = parse_start_date(request.start_date).isoformat()
    base_week = canonical_week(goal, request.weekly_hours)

    weeks = []
    for week_number, phase, week_type in periodize(duration_weeks, goal):
        schedule = []
        for entry in clone_week(base_week):
            template, synthesis = build_day_workout(entry, phase, ftp, week_number)
            fallbacks.extend(synthesis.fallbacks)
            schedule.append(replace(entry, workout=template, workout_tss=template_tss(template, ftp)))

        weeks.append(WeekPlan(
            week_number=week_number,
            phase=phase,
            week_type=week_type,
            tss=week_tss(schedule, week_type),
            schedule=tuple(schedule),
        ))

    plan = TrainingPlan(
        goal=goal,
        level=level,
        weekly_hours=request.weekly_hours,
        duration_weeks=duration_weeks,
        start_date=start_date,
        ftp=ftp,
        weeks=tuple(weeks),
    )
    return GenerationResult(plan=plan, fallbacks=tuple(fallbacks),
                            warnings=tuple(validation.warnings))


def generate_plan(request: PlanRequest, bounds: Optional[ValidationBounds] = None) -> GenerationResult:
    """
    Generate a complete plan, or field errors and no plan.

    Never raises: an unexpected failure is returned under the 'plan' key.
    """
    try:
        return _build_plan(request, bounds)
    except Exception as e:
        return GenerationResult(plan=None, errors={'plan': f"Plan generation failed: {e}"})
