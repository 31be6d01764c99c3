#!/usr/bin/env python3
"""
Tests for structured logging.

Run with: pytest plan_engine/tests/test_logger.py -v
"""

import json
import logging

import pytest

from plan_engine.logger import (
    LOGGER_NAME,
    HumanFormatter,
    PlanLogger,
    StructuredFormatter,
    get_logger,
)


@pytest.fixture
def plan_logger():
    logger = get_logger()
    handlers = list(logging.getLogger(LOGGER_NAME).handlers)
    yield logger
    logger.set_json_mode(False)
    logger.set_level('INFO')
    underlying = logging.getLogger(LOGGER_NAME)
    for handler in list(underlying.handlers):
        if handler not in handlers:
            underlying.removeHandler(handler)
            handler.close()


def _record(msg, level=logging.INFO, **fields):
    record = logging.LogRecord(LOGGER_NAME, level, __file__, 0, msg, (), None)
    if fields:
        record.extra_fields = fields
    return record


class TestFormatters:

    def test_structured(self):
        data = json.loads(StructuredFormatter().format(_record('plan.generated', weeks=12)))
        assert data['level'] == 'INFO'
        assert data['message'] == 'plan.generated'
        assert data['fields'] == {'weeks': 12}
        assert data['timestamp'].endswith('Z')

    def test_human_prefixes(self):
        formatter = HumanFormatter()
        assert formatter.format(_record('hello')) == 'hello'
        assert formatter.format(_record('careful', logging.WARNING)) == '[WARN] careful'


class TestPlanLogger:

    def test_singleton(self, plan_logger):
        assert get_logger() is plan_logger

    def test_file_handler_writes_json(self, plan_logger, tmp_path):
        path = tmp_path / 'engine.log'
        plan_logger.add_file_handler(path)
        plan_logger.warning('calendar.nothing_to_export', events=0)
        line = path.read_text().strip().splitlines()[-1]
        data = json.loads(line)
        assert data['level'] == 'WARNING'
        assert data['fields'] == {'events': 0}

    def test_pairs_only_in_human_mode(self, plan_logger, tmp_path):
        path = tmp_path / 'engine.log'
        plan_logger.add_file_handler(path)
        plan_logger.info('plan.generated', weeks=12)
        plan_logger.set_json_mode(True)
        plan_logger.success('plan.generated', weeks=12)
        first, second = [json.loads(line) for line in path.read_text().splitlines()]
        assert first['message'] == 'plan.generated [weeks=12]'
        assert second['message'] == 'plan.generated'
        assert second['fields']['status'] == 'success'
        assert plan_logger.json_mode is True

    def test_level_filters(self, plan_logger, tmp_path):
        path = tmp_path / 'engine.log'
        plan_logger.add_file_handler(path)
        plan_logger.set_level('ERROR')
        plan_logger.warning('ignored')
        plan_logger.error('kept')
        assert [json.loads(line)['message'] for line in path.read_text().splitlines()] == ['kept']

    @pytest.mark.parametrize('method', ['debug', 'info', 'warning', 'error', 'success'])
    def test_level_methods_documented(self, method):
        assert getattr(PlanLogger, method).__doc__
