#!/usr/bin/env python3
"""
ZWO (Zwift / TrainingPeaks) export for plan workouts.

Files are named W{week:02d}_{Day}_{Mon}{day}_{Title}.zwo, e.g.
W01_Tue_Jan2_Intervals_Threshold.zwo. Powers are written as FTP fractions.
"""

import html
import re
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from plan_engine.atomic_write import atomic_write
from plan_engine.constants import MONTH_ABBREV
from plan_engine.models import (
    OverUnderSegment,
    RampSegment,
    Segment,
    TrainingPlan,
    WorkoutTemplate,
)
from plan_engine.plan_validator import parse_start_date


ZWO_TEMPLATE = """<?xml version='1.0' encoding='UTF-8'?>
<workout_file>
  <author>Plan Engine</author>
  <name>{name}</name>
  <description>{description}</description>
  <sportType>bike</sportType>
  <workout>
{blocks}  </workout>
</workout_file>"""


def _fraction(watts: float, ftp: float) -> float:
    return watts / ftp


def generate_steady_state_block(duration: int, power: float) -> str:
    return f'    <SteadyState Duration="{duration}" Power="{power:.2f}"/>\n'


def generate_ramp_block(tag: str, duration: int, power_low: float, power_high: float) -> str:
    return (
        f'    <{tag} Duration="{duration}" '
        f'PowerLow="{power_low:.2f}" PowerHigh="{power_high:.2f}"/>\n'
    )


def generate_over_under_blocks(segment: OverUnderSegment, ftp: float) -> str:
    """
    Alternating base/peak SteadyState blocks, starting at base power.

    Raises:
        ValueError: if switch_time is not positive
    """
    if segment.switch_time <= 0:
        raise ValueError(f"Over-under switch_time must be positive, got {segment.switch_time}")
    blocks = []
    elapsed = 0
    at_peak = False
    while elapsed < segment.duration:
        length = min(segment.switch_time, segment.duration - elapsed)
        watts = segment.secondary_power if at_peak else segment.power
        blocks.append(generate_steady_state_block(length, _fraction(watts, ftp)))
        elapsed += length
        at_peak = not at_peak
    return ''.join(blocks)


def segment_to_blocks(segment: Segment, ftp: float) -> str:
    if isinstance(segment, RampSegment):
        tag = 'Warmup' if segment.type == 'warmup' else 'Cooldown'
        return generate_ramp_block(tag, segment.duration,
                                   _fraction(segment.power, ftp), _fraction(segment.end_power, ftp))
    if isinstance(segment, OverUnderSegment):
        return generate_over_under_blocks(segment, ftp)
    return generate_steady_state_block(segment.duration, _fraction(segment.power, ftp))


def render_zwo(template: WorkoutTemplate, ftp: float) -> str:
    """Complete ZWO XML for a workout."""
    blocks = ''.join(segment_to_blocks(s, ftp) for s in template.segments)
    return ZWO_TEMPLATE.format(
        name=html.escape(template.name, quote=False),
        description=html.escape(template.description, quote=False),
        blocks=blocks,
    )


def safe_title(name: str) -> str:
    """Workout name reduced to [A-Za-z0-9_] for use in a filename."""
    title = re.sub(r'[^A-Za-z0-9]+', '_', name).strip('_')
    return title or 'Workout'


def zwo_filename(week_number: int, day: str, date, name: str) -> str:
    return f"W{week_number:02d}_{day}_{MONTH_ABBREV[date.month - 1]}{date.day}_{safe_title(name)}.zwo"


def export_plan_workouts(plan: TrainingPlan, out_dir: Path, start_date: Optional[str] = None) -> List[Path]:
    """
    Write one .zwo per workout day. Rest days are skipped.

    Returns the written paths in plan order. Each file is written atomically.

    Raises:
        ValueError: if the plan has no usable start date
    """
    start = parse_start_date(start_date if start_date is not None else plan.start_date)
    if start is None:
        raise ValueError(f"Plan has no valid start date: {plan.start_date!r}")

    out_dir = Path(out_dir)
    written = []
    for week_index, week in enumerate(plan.weeks):
        for entry in week.schedule:
            if entry.workout is None:
                continue
            date = start + timedelta(days=week_index * 7 + entry.day_index)
            path = out_dir / zwo_filename(week.week_number, entry.day, date, entry.workout.name)
            with atomic_write(path) as f:
                f.write(render_zwo(entry.workout, plan.ftp))
            written.append(path)
    return written
