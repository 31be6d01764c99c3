#!/usr/bin/env python3
"""
Turn generation and projection results into notifications.

The calculators return values only; this module is where results become
(message_key, severity) notifications for a sink.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from plan_engine.logger import get_logger
from plan_engine.models import CalendarEvent, NumericFallback
from plan_engine.plan_generator import GenerationResult


@dataclass(frozen=True)
class Notification:
    message_key: str
    severity: str
    fields: Dict[str, Any] = field(default_factory=dict)


class Notifier(ABC):
    @abstractmethod
    def notify(self, message_key: str, severity: str, **fields) -> None:
        ...


class LoggingNotifier(Notifier):
    """Forwards notifications to the plan engine logger."""

    def notify(self, message_key: str, severity: str, **fields) -> None:
        logger = get_logger()
        if severity == 'success':
            logger.success(message_key, **fields)
        elif severity == 'warning':
            logger.warning(message_key, **fields)
        elif severity == 'error':
            logger.error(message_key, **fields)
        else:
            logger.info(message_key, **fields)


class RecordingNotifier(Notifier):
    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, message_key: str, severity: str, **fields) -> None:
        self.notifications.append(Notification(message_key, severity, dict(fields)))

    def keys(self, severity: Optional[str] = None) -> List[str]:
        return [n.message_key for n in self.notifications
                if severity is None or n.severity == severity]


def report_fallbacks(fallbacks: Iterable[NumericFallback], notifier: Notifier) -> None:
    for fallback in fallbacks:
        notifier.notify(fallback.message_key, 'warning', field=fallback.field,
                        value=fallback.value, default=fallback.default)


def report_generation(result: GenerationResult, notifier: Notifier) -> None:
    if not result.ok:
        for field_name, message in result.errors.items():
            notifier.notify(f"plan.invalid.{field_name}", 'error', message=message)
        return

    report_fallbacks(result.fallbacks, notifier)
    for warning in result.warnings:
        notifier.notify('plan.warning', 'warning', message=warning)
    notifier.notify('plan.generated', 'success',
                    weeks=result.plan.duration_weeks, total_tss=result.plan.total_tss)


def report_projection(events: Sequence[CalendarEvent], notifier: Notifier) -> None:
    if not events:
        notifier.notify('calendar.nothing_to_export', 'warning')
        return
    notifier.notify('calendar.exported', 'success', events=len(events))
