#!/usr/bin/env python3
"""Shared fixtures for plan engine tests."""

import pytest

from plan_engine.config_loader import get_config
from plan_engine.plan_generator import PlanRequest, generate_plan
from plan_engine.plan_service import PlanService
from plan_engine.plan_store import MemoryPlanStore
from plan_engine.reporting import RecordingNotifier


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends on the built-in defaults."""
    get_config().reload()
    yield get_config()
    get_config().reload()


@pytest.fixture
def performance_request():
    return PlanRequest(
        weekly_hours=10,
        duration_weeks=12,
        start_date='2024-01-01',
        goal='performance',
        level='intermediate',
        ftp=200,
    )


@pytest.fixture
def performance_plan(performance_request):
    result = generate_plan(performance_request)
    assert result.ok, result.errors
    return result.plan


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(notifier):
    return PlanService(MemoryPlanStore(), notifier)
