#!/usr/bin/env python3
"""
Application service: generation and projection wired to a store and a
notification sink.

Public methods never raise. Store failures are logged, reported as
'store.*' notifications and turned into empty / None results.
"""

from pathlib import Path
from typing import List, Optional

from plan_engine.calendar_events import project_events
from plan_engine.constants import EVENTS_STORE_KEY, PLAN_STORE_KEY
from plan_engine.logger import get_logger
from plan_engine.models import CalendarEvent, TrainingPlan
from plan_engine.plan_generator import GenerationResult, PlanRequest, generate_plan
from plan_engine.plan_store import (
    PlanStore,
    PlanStoreError,
    load_plan,
    save_events,
    save_plan,
)
from plan_engine.reporting import Notifier, report_generation, report_projection
from plan_engine.zwo_export import export_plan_workouts


class PlanService:
    def __init__(self, store: PlanStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    def _store_failed(self, action: str, error: Exception):
        get_logger().error(f"Plan store {action} failed: {error}")
        self.notifier.notify(f"store.{action}_failed", 'error', message=str(error))

    def regenerate(self, request: PlanRequest) -> GenerationResult:
        """
        Generate a plan and replace the stored one when generation succeeds.

        Stored calendar events belong to the replaced plan and are dropped.
        """
        result = generate_plan(request)
        report_generation(result, self.notifier)
        if not result.ok:
            return result

        try:
            save_plan(self.store, result.plan)
            self.store.delete(EVENTS_STORE_KEY)
        except PlanStoreError as e:
            self._store_failed('save', e)
        return result

    def current_plan(self) -> Optional[TrainingPlan]:
        try:
            return load_plan(self.store)
        except PlanStoreError as e:
            self._store_failed('load', e)
            return None

    def export_calendar(self, start_date: Optional[str] = None) -> List[CalendarEvent]:
        """Project the stored plan and store the events. Empty when there is no plan."""
        events = project_events(self.current_plan(), start_date)
        report_projection(events, self.notifier)
        if events:
            try:
                save_events(self.store, events)
            except PlanStoreError as e:
                self._store_failed('save', e)
        return events

    def export_workouts(self, out_dir: Path) -> List[Path]:
        plan = self.current_plan()
        if plan is None:
            self.notifier.notify('zwo.nothing_to_export', 'warning')
            return []
        try:
            paths = export_plan_workouts(plan, out_dir)
        except (OSError, ValueError) as e:
            get_logger().error(f"ZWO export failed: {e}")
            self.notifier.notify('zwo.export_failed', 'error', message=str(e))
            return []
        self.notifier.notify('zwo.exported', 'success', files=len(paths), directory=str(out_dir))
        return paths

    def reset(self) -> bool:
        """Drop the stored plan and events. True when anything was removed."""
        removed = False
        try:
            for key in (PLAN_STORE_KEY, EVENTS_STORE_KEY):
                removed = self.store.delete(key) or removed
        except PlanStoreError as e:
            self._store_failed('delete', e)
            return removed
        self.notifier.notify('plan.reset', 'info', removed=removed)
        return removed
