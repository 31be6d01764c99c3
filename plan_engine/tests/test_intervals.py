#!/usr/bin/env python3
"""
Tests for interval synthesis.

Run with: pytest plan_engine/tests/test_intervals.py -v
"""

import pytest

from plan_engine.intervals import (
    compose,
    cooldown,
    ladder,
    over_under,
    pyramid,
    ramp,
    steady,
    target_power,
    uniform,
    warmup,
)
from plan_engine.models import OverUnderSegment, RampSegment, SimpleSegment, segment_from_dict


def _work(synthesis):
    return [s for s in synthesis.segments if s.type in ('work', 'over-under')]


def _rests(synthesis):
    return [s for s in synthesis.segments if s.type == 'rest']


class TestTargetPower:

    def test_rounds_to_nearest_watt(self):
        assert target_power(250, 0.75) == 188  # 187.5

    def test_clamped_to_power_bounds(self):
        assert target_power(200, 0.1) == 60
        assert target_power(200, 3.0) == 400


class TestUniform:

    def test_sets_scenario(self):
        result = uniform(200, 1.1, 30, 30, 10, sets=3)
        work = _work(result)
        rests = _rests(result)
        set_rests = [s for s in rests if s.set_rest]
        rep_rests = [s for s in rests if not s.set_rest]

        assert len(work) == 30
        assert all(s.power == 220 and s.duration == 30 for s in work)
        assert len(set_rests) == 2
        assert all(s.duration == 120 and s.power == 80 for s in set_rests)
        assert len(rep_rests) == 29
        assert all(s.duration == 30 for s in rep_rests)
        assert result.fallbacks == ()

    def test_no_rest_after_last_effort(self):
        result = uniform(200, 0.9, 60, 60, 4)
        assert result.segments[-1].type == 'work'
        assert [s.type for s in result.segments] == ['work', 'rest'] * 3 + ['work']

    def test_zero_rest_means_no_rest_segments(self):
        result = uniform(200, 0.9, 60, 0, 4)
        assert len(result) == 4
        assert _rests(result) == []

    def test_set_rest_between_sets(self):
        result = uniform(200, 1.0, 30, 30, 2, sets=2)
        types = [(s.type, s.set_rest) for s in result.segments]
        assert types == [
            ('work', False), ('rest', False), ('work', False), ('rest', False),
            ('rest', True),
            ('work', False), ('rest', False), ('work', False),
        ]

    @pytest.mark.parametrize('intensity', [0, -0.5, 2.5, None, 'hard'])
    def test_invalid_intensity_falls_back(self, intensity):
        result = uniform(200, intensity, 30, 30, 2)
        assert _work(result)[0].power == 160
        assert result.fallbacks[0].field == 'uniform.intensity'
        assert result.fallbacks[0].default == 0.8

    def test_invalid_counts_and_durations(self):
        result = uniform(200, 1.0, -10, -5, 0, sets=-1)
        fields = {f.field for f in result.fallbacks}
        assert fields == {'uniform.work_duration', 'uniform.rest_duration',
                          'uniform.repetitions', 'uniform.sets'}
        assert len(_work(result)) == 5
        assert all(s.duration == 30 for s in result.segments)

    def test_invalid_ftp_uses_200(self):
        result = uniform(0, 1.0, 30, 30, 1)
        assert result.segments[0].power == 200
        assert result.fallbacks[0].field == 'uniform.ftp'

    def test_idempotent(self):
        assert uniform(230, 1.05, 40, 20, 8, 2) == uniform(230, 1.05, 40, 20, 8, 2)


class TestPyramidAndLadder:

    def test_pyramid_interpolates_by_step(self):
        result = pyramid(200, 0.7, 0.85, [30, 60, 90, 60, 30], 60)
        work = _work(result)
        assert [s.duration for s in work] == [30, 60, 90, 60, 30]
        assert work[0].power == 140
        assert work[-1].power == 170
        assert [s.power for s in work] == sorted(s.power for s in work)
        assert len(_rests(result)) == 4
        assert all(s.duration == 60 for s in _rests(result))

    def test_pyramid_max_below_min_falls_back(self):
        result = pyramid(200, 0.8, 0.5, [60, 60], 30)
        assert _work(result)[-1].power == 200  # 0.8 + 0.2
        assert result.fallbacks[0].field == 'pyramid.max_intensity'

    def test_pyramid_empty_durations(self):
        result = pyramid(200, 0.7, 0.9, [], 30)
        assert [s.duration for s in _work(result)] == [30, 60, 90, 60, 30]

    def test_ladder_descending(self):
        up = ladder(200, 0.8, 1.0, [60, 120, 180], 60)
        down = ladder(200, 0.8, 1.0, [60, 120, 180], 60, descending=True)
        assert [s.power for s in _work(up)] == [160, 180, 200]
        assert [s.power for s in _work(down)] == [200, 180, 160]

    def test_ladder_defaults(self):
        result = ladder(200, None, None, None, -1)
        work = _work(result)
        assert [s.duration for s in work] == [30, 60, 90]
        assert work[0].power == 150
        assert work[-1].power == 170
        assert all(s.duration == 60 for s in _rests(result))

    def test_single_step(self):
        result = ladder(200, 0.9, 1.0, [120], 60)
        assert len(result) == 1
        assert result.segments[0].power == 180

    def test_bad_step_duration_uses_minimum(self):
        result = pyramid(200, 0.7, 0.9, [60, -5, 60], 30)
        assert [s.duration for s in _work(result)] == [60, 30, 60]
        assert result.fallbacks[0].field == 'pyramid.durations[1]'


class TestOverUnder:

    def test_compound_segments(self):
        result = over_under(200, 0.9, 1.05, 180, 30, 4)
        efforts = _work(result)
        assert len(efforts) == 4
        assert all(isinstance(s, OverUnderSegment) for s in efforts)
        assert efforts[0].power == 180
        assert efforts[0].secondary_power == 210
        assert efforts[0].switch_time == 30
        rests = _rests(result)
        assert len(rests) == 3
        assert all(s.duration == 90 for s in rests)

    def test_average_power_uses_time_split(self):
        segment = over_under(200, 0.9, 1.05, 180, 30, 1).segments[0]
        assert segment.time_split() == (90, 90)
        assert segment.average_power() == 195

    def test_uneven_split(self):
        segment = OverUnderSegment(power=180, secondary_power=210, duration=100, switch_time=30)
        # base 30, peak 30, base 30, peak 10
        assert segment.time_split() == (60, 40)

    def test_higher_not_above_lower_falls_back(self):
        result = over_under(200, 0.9, 0.8, 180, 30, 1)
        assert result.segments[0].secondary_power == 200
        assert result.fallbacks[0].field == 'over_under.higher_intensity'

    @pytest.mark.parametrize('switch_time', [0, -30, 180, 500])
    def test_invalid_switch_time(self, switch_time):
        result = over_under(200, 0.9, 1.05, 180, switch_time, 1)
        assert result.segments[0].switch_time == 30
        assert result.fallbacks[0].field == 'over_under.switch_time'

    def test_default_repetitions(self):
        result = over_under(200, 0.9, 1.05, 180, 30, 0)
        assert len(_work(result)) == 4

    def test_sub_second_switch_time_rounds_to_one(self):
        result = over_under(200, 0.9, 1.05, 180, 0.3, 1)
        assert result.segments[0].switch_time == 1
        assert result.fallbacks == ()


class TestSegmentValidation:

    @pytest.mark.parametrize('duration', [0, -60, None, '60', True])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            SimpleSegment('work', 200, duration)
        with pytest.raises(ValueError):
            RampSegment('warmup', 100, 150, duration)

    @pytest.mark.parametrize('switch_time', [0, -30])
    def test_over_under_switch_time_rejected(self, switch_time):
        with pytest.raises(ValueError):
            OverUnderSegment(power=180, secondary_power=210, duration=180, switch_time=switch_time)

    def test_from_dict_rejects_zero_switch_time(self):
        data = {'type': 'over-under', 'power': 180, 'secondary_power': 210,
                'duration': 180, 'switch_time': 0}
        with pytest.raises(ValueError):
            segment_from_dict(data)

    def test_from_dict_rejects_zero_duration(self):
        with pytest.raises(ValueError):
            segment_from_dict({'type': 'rest', 'power': 80, 'duration': 0})

    def test_valid_segment_from_dict(self):
        segment = OverUnderSegment(power=180, secondary_power=210, duration=180, switch_time=30)
        assert segment_from_dict(segment.to_dict()) == segment


class TestRampsAndSteady:

    def test_warmup_and_cooldown(self):
        warm = warmup(200).segments[0]
        cool = cooldown(200).segments[0]
        assert isinstance(warm, RampSegment)
        assert (warm.power, warm.end_power, warm.duration) == (100, 150, 600)
        assert (cool.power, cool.end_power, cool.duration) == (140, 90, 300)

    def test_ramp_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            ramp(200, 0.5, 0.7, 300, kind='sprint')

    def test_steady(self):
        segment = steady(200, 0.655, 3600).segments[0]
        assert isinstance(segment, SimpleSegment)
        assert segment.power == 131
        assert segment.type == 'steady'

    def test_compose_keeps_order_and_fallbacks(self):
        result = compose(warmup(200), uniform(200, 5.0, 30, 30, 2), cooldown(200))
        assert result.segments[0].type == 'warmup'
        assert result.segments[-1].type == 'cooldown'
        assert len(result.fallbacks) == 1
        assert result.duration == 600 + 30 * 3 + 300


class TestPowerInvariant:

    @pytest.mark.parametrize('ftp', [100, 200, 347])
    def test_every_power_within_bounds(self, ftp):
        result = compose(
            uniform(ftp, 2.0, 30, 30, 3),
            pyramid(ftp, 0.05, 0.1, [30, 60], 30),
            over_under(ftp, 1.5, 2.0, 120, 30, 2),
            warmup(ftp),
            cooldown(ftp),
        )
        for segment in result.segments:
            for watts in (segment.power, getattr(segment, 'secondary_power', segment.power),
                          getattr(segment, 'end_power', segment.power)):
                assert ftp * 0.3 <= watts <= ftp * 2.0
            assert segment.duration > 0
