#!/usr/bin/env python3
"""
Pre-generation validation for plan requests.

Validates the request BEFORE generation starts so a bad request fails
fast with per-field errors instead of producing a partial plan.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from plan_engine.config_loader import get_config
from plan_engine.constants import (
    EXPERIENCE_LEVELS,
    GOALS,
    PLAN_WEEKS_MAX,
    PLAN_WEEKS_MIN,
    WEEKLY_HOURS_MAX,
    WEEKLY_HOURS_MIN,
)


@dataclass
class ValidationResult:
    """Result of validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    field_errors: Dict[str, str] = field(default_factory=dict)

    def add_error(self, msg: str, field_name: Optional[str] = None):
        self.errors.append(msg)
        if field_name and field_name not in self.field_errors:
            self.field_errors[field_name] = msg
        self.is_valid = False

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    def merge(self, other: 'ValidationResult'):
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        for name, msg in other.field_errors.items():
            self.field_errors.setdefault(name, msg)
        if not other.is_valid:
            self.is_valid = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
            'field_errors': dict(self.field_errors),
        }


@dataclass(frozen=True)
class ValidationBounds:
    weekly_hours_min: float = WEEKLY_HOURS_MIN
    weekly_hours_max: float = WEEKLY_HOURS_MAX
    plan_weeks_min: int = PLAN_WEEKS_MIN
    plan_weeks_max: int = PLAN_WEEKS_MAX

    @classmethod
    def from_config(cls) -> 'ValidationBounds':
        config = get_config()
        return cls(
            weekly_hours_min=config.get('validation.weekly_hours_min', WEEKLY_HOURS_MIN),
            weekly_hours_max=config.get('validation.weekly_hours_max', WEEKLY_HOURS_MAX),
            plan_weeks_min=config.get('validation.plan_weeks_min', PLAN_WEEKS_MIN),
            plan_weeks_max=config.get('validation.plan_weeks_max', PLAN_WEEKS_MAX),
        )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_start_date(value: Any) -> Optional[date]:
    """Parse an ISO date (YYYY-MM-DD). Returns None when missing or invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def validate_weekly_hours(weekly_hours: Any, bounds: ValidationBounds) -> ValidationResult:
    result = ValidationResult(is_valid=True)
    if not _is_number(weekly_hours):
        result.add_error(f"Weekly hours must be a number, got: {weekly_hours!r}", 'weekly_hours')
    elif not bounds.weekly_hours_min <= weekly_hours <= bounds.weekly_hours_max:
        result.add_error(
            f"Weekly hours {weekly_hours} outside valid range "
            f"({bounds.weekly_hours_min}-{bounds.weekly_hours_max})",
            'weekly_hours',
        )
    return result


def validate_duration_weeks(duration_weeks: Any, bounds: ValidationBounds) -> ValidationResult:
    result = ValidationResult(is_valid=True)
    if not _is_number(duration_weeks) or int(duration_weeks) != duration_weeks:
        result.add_error(f"Plan duration must be a whole number of weeks, got: {duration_weeks!r}",
                         'duration_weeks')
    elif not bounds.plan_weeks_min <= duration_weeks <= bounds.plan_weeks_max:
        result.add_error(
            f"Plan duration {duration_weeks} weeks outside valid range "
            f"({bounds.plan_weeks_min}-{bounds.plan_weeks_max})",
            'duration_weeks',
        )
    return result


def validate_start_date(start_date: Any) -> ValidationResult:
    result = ValidationResult(is_valid=True)
    if start_date is None or (isinstance(start_date, str) and not start_date.strip()):
        result.add_error("Start date is required", 'start_date')
    elif parse_start_date(start_date) is None:
        result.add_error(f"Invalid date format: '{start_date}' (use YYYY-MM-DD)", 'start_date')
    return result


def validate_plan_request(
    weekly_hours: Any,
    duration_weeks: Any,
    start_date: Any,
    goal: Optional[str] = None,
    level: Optional[str] = None,
    bounds: Optional[ValidationBounds] = None,
) -> ValidationResult:
    """
    Validate every generation input.

    Errors block generation. An unknown goal or level is only a warning:
    the generator substitutes the default and records the fallback.
    """
    if bounds is None:
        bounds = ValidationBounds.from_config()

    result = ValidationResult(is_valid=True)
    result.merge(validate_weekly_hours(weekly_hours, bounds))
    result.merge(validate_duration_weeks(duration_weeks, bounds))
    result.merge(validate_start_date(start_date))

    if goal is not None and goal not in GOALS:
        result.add_warning(f"Unknown goal '{goal}', using default")
    if level is not None and level not in EXPERIENCE_LEVELS:
        result.add_warning(f"Unknown experience level '{level}', using default")

    return result
