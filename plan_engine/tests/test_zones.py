#!/usr/bin/env python3
"""
Tests for power zone calculation.

Run with: pytest plan_engine/tests/test_zones.py -v
"""

import pytest

from plan_engine.zones import (
    InvalidFTPError,
    calculate_zones,
    estimate_ftp,
    resolve_ftp,
    resolve_zones,
    round_half_up,
    zone_for_power,
    zone_intensity,
)


class TestCalculateZones:

    def test_ftp_200_bounds(self):
        zones = calculate_zones(200)
        bounds = [(z.name, z.min, z.max) for z in zones]
        assert bounds == [
            ('z1', 0, 110),
            ('z2', 111, 150),
            ('z3', 151, 180),
            ('z4', 181, 210),
            ('z5', 211, 240),
            ('z6', 241, 300),
            ('z7', 301, 400),
        ]

    def test_upper_bounds_round_half_up(self):
        zones = calculate_zones(250)
        assert zones[0].max == 138  # 137.5
        assert zones[1].max == 188  # 187.5

    @pytest.mark.parametrize('ftp', [1, 7, 50, 123.4, 200, 287, 333, 450, 1000])
    def test_zones_contiguous(self, ftp):
        zones = calculate_zones(ftp)
        assert len(zones) == 7
        assert zones[0].min == 0
        for lower, upper in zip(zones, zones[1:]):
            assert lower.max + 1 == upper.min
        for zone in zones:
            assert zone.min <= zone.max

    @pytest.mark.parametrize('ftp', [50, 200, 333])
    def test_z7_ends_at_twice_ftp(self, ftp):
        assert calculate_zones(ftp)[-1].max == round_half_up(2 * ftp)

    @pytest.mark.parametrize('ftp', [0, -10, None, 'abc', float('nan'), True])
    def test_invalid_ftp_raises(self, ftp):
        with pytest.raises(InvalidFTPError):
            calculate_zones(ftp)

    def test_idempotent(self):
        assert calculate_zones(265) == calculate_zones(265)


class TestResolveZones:

    def test_valid_ftp_has_no_fallback(self):
        result = resolve_zones(250)
        assert result.ftp == 250
        assert not result.used_fallback

    @pytest.mark.parametrize('ftp', [0, -5, None])
    def test_invalid_ftp_uses_200(self, ftp):
        result = resolve_zones(ftp)
        assert result.ftp == 200
        assert result.zones == tuple(calculate_zones(200))
        assert result.used_fallback
        assert result.fallbacks[0].field == 'ftp'
        assert result.fallbacks[0].message_key == 'ftp.fallback'

    def test_to_dict_shape(self):
        data = resolve_zones(200).to_dict()
        assert data['zones'][1] == {'name': 'z2', 'label': 'Endurance', 'min': 111, 'max': 150}
        assert data['fallbacks'] == []

    def test_resolve_ftp(self):
        assert resolve_ftp(240) == (240, [])
        ftp, fallbacks = resolve_ftp(-1, default=180)
        assert ftp == 180
        assert len(fallbacks) == 1


class TestZoneHelpers:

    def test_zone_for_power(self):
        zones = calculate_zones(200)
        assert zone_for_power(zones, 0).name == 'z1'
        assert zone_for_power(zones, 150).name == 'z2'
        assert zone_for_power(zones, 150.4).name == 'z2'
        assert zone_for_power(zones, 220).name == 'z5'
        assert zone_for_power(zones, 900).name == 'z7'
        assert zone_for_power(zones, -1) is None
        assert zone_for_power([], 100) is None

    def test_zone_intensity(self):
        assert zone_intensity('z4', 0.5) == 0.98
        assert zone_intensity('z2', 0.0) == 0.56
        assert zone_intensity('z2', 2.0) == 0.75
        with pytest.raises(KeyError):
            zone_intensity('z9')


class TestEstimateFTP:

    def test_without_weight_uses_level_default(self):
        assert estimate_ftp(None, 'beginner') == 150
        assert estimate_ftp(None, 'elite') == 300

    def test_weight_and_level(self):
        assert estimate_ftp(70, 'intermediate', 'male', 30) == 196
        assert estimate_ftp(60, 'advanced', 'female', 30) == 192

    def test_age_factor_clamped(self):
        young = estimate_ftp(70, 'intermediate', 'male', 30)
        assert estimate_ftp(70, 'intermediate', 'male', 45) == round_half_up(young * 0.95)
        assert estimate_ftp(70, 'intermediate', 'male', 90) == round_half_up(young * 0.8)

    def test_unknown_level_is_intermediate(self):
        assert estimate_ftp(70, 'pro') == estimate_ftp(70, 'intermediate')
