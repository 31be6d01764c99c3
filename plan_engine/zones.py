#!/usr/bin/env python3
"""
Power zone calculation from FTP.

Seven zones with fixed percentage bounds (Coggan-style). Upper bounds are
rounded to the nearest watt; each lower bound is the previous upper bound
plus one watt, so zones are contiguous and cover [0, 2 x FTP].

calculate_zones() raises InvalidFTPError for a missing or non-positive FTP.
resolve_zones() is the entry point callers use: it substitutes the
documented 200W default and returns the substitution as a fallback record
instead of raising.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from plan_engine.constants import (
    DEFAULT_EXPERIENCE,
    DEFAULT_FTP_WATTS,
    EXPERIENCE_LEVELS,
    FTP_DEFAULT_BY_LEVEL,
    FTP_WKG_MULTIPLIERS,
    POWER_ZONE_BOUNDS,
)
from plan_engine.models import NumericFallback, TrainingZone


class InvalidFTPError(ValueError):
    """Raised when FTP is missing, non-numeric or not positive."""

    def __init__(self, ftp: Any):
        self.ftp = ftp
        super().__init__(f"Invalid FTP: {ftp!r}")


@dataclass(frozen=True)
class ZoneResult:
    ftp: float
    zones: Tuple[TrainingZone, ...]
    fallbacks: Tuple[NumericFallback, ...] = field(default_factory=tuple)

    @property
    def used_fallback(self) -> bool:
        return bool(self.fallbacks)

    def to_dict(self) -> dict:
        return {
            'ftp': self.ftp,
            'zones': [z.to_dict() for z in self.zones],
            'fallbacks': [f.to_dict() for f in self.fallbacks],
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def is_valid_ftp(ftp: Any) -> bool:
    if isinstance(ftp, bool) or not isinstance(ftp, (int, float)):
        return False
    return math.isfinite(ftp) and ftp > 0


def resolve_ftp(ftp: Any, default: float = DEFAULT_FTP_WATTS) -> Tuple[float, List[NumericFallback]]:
    """Return a usable FTP and the fallback records for any substitution."""
    if is_valid_ftp(ftp):
        return ftp, []
    return default, [NumericFallback('ftp', ftp, default, 'ftp.fallback')]


def calculate_zones(ftp: float) -> List[TrainingZone]:
    """
    Calculate the 7 power zones for an FTP.

    Raises:
        InvalidFTPError: if ftp is missing, non-numeric or <= 0
    """
    if not is_valid_ftp(ftp):
        raise InvalidFTPError(ftp)

    zones = []
    lower = 0
    for name, label, _, upper_pct in POWER_ZONE_BOUNDS:
        # Tiny FTPs would otherwise produce max < min
        upper = max(round_half_up(ftp * upper_pct), lower)
        zones.append(TrainingZone(name=name, label=label, min=lower, max=upper))
        lower = upper + 1
    return zones


def resolve_zones(ftp: Any, default: float = DEFAULT_FTP_WATTS) -> ZoneResult:
    """Zones for ftp, falling back to the default FTP instead of raising."""
    try:
        return ZoneResult(ftp=ftp, zones=tuple(calculate_zones(ftp)))
    except InvalidFTPError:
        fallback = NumericFallback('ftp', ftp, default, 'ftp.fallback')
        return ZoneResult(ftp=default, zones=tuple(calculate_zones(default)), fallbacks=(fallback,))


def zone_for_power(zones: List[TrainingZone], watts: float) -> Optional[TrainingZone]:
    """Classify a power into its zone. Powers above z7 stay in z7."""
    if not zones or watts is None or watts < 0:
        return None
    rounded = round_half_up(watts)
    for zone in zones:
        if zone.contains(rounded):
            return zone
    return zones[-1]


def zone_intensity(zone_name: str, position: float = 0.5) -> float:
    """
    FTP fraction at a relative position inside a zone's nominal bounds.

    position 0.0 is the lower bound, 1.0 the upper bound.
    """
    for name, _, lower_pct, upper_pct in POWER_ZONE_BOUNDS:
        if name == zone_name:
            position = max(0.0, min(1.0, position))
            return round(lower_pct + (upper_pct - lower_pct) * position, 3)
    raise KeyError(f"Unknown zone: {zone_name}")


def estimate_ftp(
    weight: Optional[float],
    experience: str = DEFAULT_EXPERIENCE,
    gender: Optional[str] = None,
    age: Optional[int] = None,
) -> int:
    """
    Estimate FTP from a rider profile.

    Uses W/kg multipliers by experience and gender, then an age factor
    (about -0.5%/year after 35, reduced under 20) clamped to [0.8, 1.0].
    Without a usable weight the per-level default FTP is returned.
    """
    level = experience if experience in EXPERIENCE_LEVELS else DEFAULT_EXPERIENCE

    if not is_valid_ftp(weight):
        return FTP_DEFAULT_BY_LEVEL[level]

    sex = 'female' if gender == 'female' else 'male'
    estimated = round_half_up(weight * FTP_WKG_MULTIPLIERS[level][sex])

    age_factor = 1.0
    if isinstance(age, (int, float)) and not isinstance(age, bool) and age > 0:
        if age > 35:
            age_factor = 1 - (age - 35) * 0.005
        elif age < 20:
            age_factor = 0.9 + (age - 15) * 0.02
        age_factor = max(0.8, min(1.0, age_factor))

    return round_half_up(estimated * age_factor)
