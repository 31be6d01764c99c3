#!/usr/bin/env python3
"""
Project a training plan onto calendar dates.

Every schedule day becomes one event:
- date = start date + (week index x 7 + day index) days
- start time fixed at 09:00 UTC
- type taken from the day entry's kind tag
- tss = weekly TSS / 7, rounded to 0.1

Rest days are included so the consumer sees the whole week.
"""

import json
from datetime import datetime, timedelta
from typing import Any, List, Optional

from plan_engine.constants import EVENT_CATEGORY, EVENT_TIME_OF_DAY
from plan_engine.models import CalendarEvent, TrainingPlan, events_to_dicts
from plan_engine.plan_validator import parse_start_date


def event_id(week_number: int, day_index: int) -> str:
    return f"plan-w{week_number:02d}-d{day_index}"


def project_events(plan: Optional[TrainingPlan], start_date: Any = None) -> List[CalendarEvent]:
    """
    Calendar events for a plan.

    start_date defaults to the plan's own start date. Returns an empty list
    when there is no plan or no usable start date; callers must check.
    """
    if plan is None:
        return []

    start = parse_start_date(start_date if start_date is not None else plan.start_date)
    if start is None:
        return []

    events = []
    for week_index, week in enumerate(plan.weeks):
        daily_tss = round(week.tss / 7, 1)
        for entry in week.schedule:
            day = start + timedelta(days=week_index * 7 + entry.day_index)
            title = entry.workout.name if entry.workout else entry.title
            events.append(CalendarEvent(
                id=event_id(week.week_number, entry.day_index),
                title=title,
                type=entry.kind.value,
                date=day.isoformat(),
                start=f"{day.isoformat()}T{EVENT_TIME_OF_DAY}Z",
                description=(f"Week {week.week_number} ({week.phase.value}, {week.week_type.value}): "
                             f"{entry.description}"),
                tss=daily_tss,
                category=EVENT_CATEGORY,
            ))
    return events


def events_to_json(events: List[CalendarEvent], indent: int = 2) -> str:
    return json.dumps(events_to_dicts(events), indent=indent)


def event_date_range(events: List[CalendarEvent]):
    """(earliest, latest) ISO dates, or (None, None) for no events."""
    if not events:
        return None, None
    dates = sorted(datetime.strptime(e.date, '%Y-%m-%d').date() for e in events)
    return dates[0].isoformat(), dates[-1].isoformat()
