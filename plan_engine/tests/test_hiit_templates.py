#!/usr/bin/env python3
"""
Tests for the HIIT workout catalog and segment editing.

Run with: pytest plan_engine/tests/test_hiit_templates.py -v
"""

import pytest

from plan_engine.hiit_templates import (
    build_workout_templates,
    edit_segment,
    emergency_template,
    keep_valid_templates,
    primary_zone,
)
from plan_engine.models import OverUnderSegment, UserProfile, WorkoutTemplate
from plan_engine.zones import calculate_zones


@pytest.fixture
def beginner_catalog():
    return build_workout_templates(UserProfile(ftp=200, experience='beginner'))


class TestBuildWorkoutTemplates:

    @pytest.mark.parametrize('level,ids', [
        ('beginner', ['hiit-beginner-1', 'hiit-beginner-2', 'hiit-common-1']),
        ('intermediate', ['hiit-intermediate-1', 'hiit-intermediate-2', 'hiit-common-1']),
        ('advanced', ['hiit-advanced-1', 'hiit-advanced-2', 'hiit-common-1']),
        ('elite', ['hiit-elite-1', 'hiit-elite-2', 'hiit-common-1']),
    ])
    def test_templates_per_level(self, level, ids):
        catalog = build_workout_templates(UserProfile(ftp=250, experience=level))
        assert [t.id for t in catalog.templates] == ids
        assert catalog.fallbacks == ()

    def test_unknown_level_uses_intermediate(self):
        catalog = build_workout_templates(UserProfile(ftp=250, experience='pro'))
        assert catalog.level == 'intermediate'
        assert catalog.fallbacks[0].message_key == 'level.fallback'

    def test_missing_ftp_uses_200(self):
        catalog = build_workout_templates(UserProfile(ftp=None, experience='advanced'))
        assert catalog.ftp == 200
        assert catalog.fallbacks[0].field == 'ftp'

    def test_advanced_vo2max_structure(self):
        catalog = build_workout_templates(UserProfile(ftp=250, experience='advanced'))
        vo2 = catalog.get('hiit-advanced-1')
        work = [s for s in vo2.segments if s.type == 'work']
        assert len(work) == 30
        assert work[0].power == 275
        assert vo2.duration_minutes == 39

    def test_intermediate_over_under(self):
        catalog = build_workout_templates(UserProfile(ftp=200, experience='intermediate'))
        over_under = catalog.get('hiit-intermediate-2')
        efforts = [s for s in over_under.segments if isinstance(s, OverUnderSegment)]
        assert len(efforts) == 4
        assert (efforts[0].power, efforts[0].secondary_power) == (180, 210)

    def test_common_thirty_thirty_difficulty(self, beginner_catalog):
        common = beginner_catalog.get('hiit-common-1')
        assert common.difficulty == 2
        assert common.segments[0].power == 180

    def test_get_unknown(self, beginner_catalog):
        assert beginner_catalog.get('nope') is None

    def test_empty_templates_replaced_by_emergency(self):
        empty = WorkoutTemplate('empty', 'Empty', ())
        assert [t.id for t in keep_valid_templates([empty], 200)] == ['hiit-emergency']

    def test_emergency_template(self):
        template = emergency_template(200)
        work = [s for s in template.segments if s.type == 'work']
        assert len(work) == 4
        assert all(s.power == 150 and s.duration == 60 for s in work)
        assert template.segments[-1].type == 'work'


class TestEditSegment:

    def test_power_clamped_to_max(self, beginner_catalog):
        template = beginner_catalog.templates[0]
        result = edit_segment(template, 0, 'power', 500, 200)
        assert result.applied
        assert result.template.segments[0].power == 300
        assert result.template.segments[0].intensity == 1.5
        assert result.notices == ('edit.power_max',)

    def test_power_clamped_to_min(self, beginner_catalog):
        result = edit_segment(beginner_catalog.templates[0], 0, 'power', '20', 200)
        assert result.template.segments[0].power == 100
        assert result.notices == ('edit.power_min',)

    def test_power_rounded(self, beginner_catalog):
        result = edit_segment(beginner_catalog.templates[0], 0, 'power', 187.5, 200)
        assert result.template.segments[0].power == 188
        assert result.template.segments[0].intensity == 0.94
        assert result.notices == ()

    @pytest.mark.parametrize('value,expected,notice', [(1000, 600, 'edit.duration_max'),
                                                       (2, 5, 'edit.duration_min')])
    def test_duration_clamped(self, beginner_catalog, value, expected, notice):
        result = edit_segment(beginner_catalog.templates[0], 0, 'duration', value, 200)
        assert result.template.segments[0].duration == expected
        assert result.notices == (notice,)

    def test_non_numeric_keeps_current_value(self, beginner_catalog):
        template = beginner_catalog.templates[0]
        result = edit_segment(template, 0, 'power', 'fast', 200)
        assert result.template.segments[0].power == template.segments[0].power
        assert result.notices == ('edit.invalid_value',)

    def test_source_template_is_untouched(self, beginner_catalog):
        template = beginner_catalog.templates[0]
        before = template.segments[0]
        edit_segment(template, 0, 'duration', 300, 200)
        assert template.segments[0] is before
        assert template.segments[0].duration == 30

    def test_bad_index_or_field(self, beginner_catalog):
        template = beginner_catalog.templates[0]
        assert not edit_segment(template, 99, 'power', 200, 200).applied
        assert edit_segment(template, 0, 'switch_time', 10, 200).notices == ('edit.unknown_field',)

    def test_over_under_switch_time_follows_duration(self):
        catalog = build_workout_templates(UserProfile(ftp=200, experience='intermediate'))
        template = catalog.get('hiit-intermediate-2')
        result = edit_segment(template, 0, 'duration', 20, 200)
        segment = result.template.segments[0]
        assert segment.duration == 20
        assert segment.switch_time == 10

    def test_secondary_power(self):
        catalog = build_workout_templates(UserProfile(ftp=200, experience='intermediate'))
        template = catalog.get('hiit-intermediate-2')
        segment = edit_segment(template, 0, 'secondary_power', 230, 200).template.segments[0]
        assert segment.secondary_power == 230
        assert segment.secondary_intensity == 1.15


class TestPrimaryZone:

    def test_vo2max_session(self):
        catalog = build_workout_templates(UserProfile(ftp=200, experience='advanced'))
        zone = primary_zone(catalog.get('hiit-advanced-1'), calculate_zones(200))
        assert zone.name == 'z5'

    def test_no_work_segments(self):
        template = WorkoutTemplate('r', 'Rest', ())
        assert primary_zone(template, calculate_zones(200)) is None
