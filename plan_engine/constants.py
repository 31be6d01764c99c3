#!/usr/bin/env python3
"""
Single source of truth for constants used across the plan engine.

All shared constants should be defined here to avoid duplication.
"""

from typing import Dict, List, Tuple


# === DAY MAPPINGS ===
# Use these everywhere instead of defining locally

DAY_ORDER: List[str] = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']

MONTH_ABBREV: List[str] = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                           'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


# === PROFILE ENUMS ===

EXPERIENCE_LEVELS: List[str] = ['beginner', 'intermediate', 'advanced', 'elite']
DEFAULT_EXPERIENCE: str = 'intermediate'

GOALS: List[str] = ['general', 'performance', 'endurance']
DEFAULT_GOAL: str = 'general'


# === FTP ===

DEFAULT_FTP_WATTS: int = 200  # Documented fallback when FTP is missing or <= 0

# Profile-based FTP estimate (W/kg by level and gender)
FTP_WKG_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    'beginner': {'male': 2.0, 'female': 1.8},
    'intermediate': {'male': 2.8, 'female': 2.5},
    'advanced': {'male': 3.5, 'female': 3.2},
    'elite': {'male': 4.5, 'female': 4.0},
}

# FTP used when the profile has no usable weight
FTP_DEFAULT_BY_LEVEL: Dict[str, int] = {
    'beginner': 150,
    'intermediate': 200,
    'advanced': 250,
    'elite': 300,
}


# === POWER ZONES ===
# (name, label, lower %FTP, upper %FTP)

POWER_ZONE_BOUNDS: List[Tuple[str, str, float, float]] = [
    ('z1', 'Active Recovery', 0.00, 0.55),
    ('z2', 'Endurance', 0.56, 0.75),
    ('z3', 'Tempo', 0.76, 0.90),
    ('z4', 'Threshold', 0.91, 1.05),
    ('z5', 'VO2max', 1.06, 1.20),
    ('z6', 'Anaerobic Capacity', 1.21, 1.50),
    ('z7', 'Neuromuscular', 1.51, 2.00),
]


# === INTERVAL SYNTHESIS ===

MIN_INTENSITY: float = 0.0    # exclusive
MAX_INTENSITY: float = 2.0    # inclusive
MIN_POWER_RATIO: float = 0.3  # every synthesized power >= 30% FTP
MAX_POWER_RATIO: float = 2.0  # every synthesized power <= 200% FTP

RECOVERY_POWER_RATIO: float = 0.4  # 40% FTP between efforts
SET_REST_DURATION_SEC: int = 120   # rest inserted between sets
MIN_SEGMENT_DURATION_SEC: int = 30

# Per-generator fallbacks for out-of-range inputs
DEFAULT_UNIFORM_INTENSITY: float = 0.8
DEFAULT_PYRAMID_MIN_INTENSITY: float = 0.7
PYRAMID_MAX_INTENSITY_STEP: float = 0.2
DEFAULT_LADDER_MIN_INTENSITY: float = 0.75
LADDER_MAX_INTENSITY_STEP: float = 0.1
DEFAULT_OVER_UNDER_LOWER: float = 0.85
OVER_UNDER_HIGHER_STEP: float = 0.1

DEFAULT_REST_DURATION_SEC: int = 30
DEFAULT_LADDER_REST_SEC: int = 60
DEFAULT_REPETITIONS: int = 5
DEFAULT_OVER_UNDER_REPETITIONS: int = 4
DEFAULT_OVER_UNDER_DURATION_SEC: int = 300
DEFAULT_SWITCH_TIME_SEC: int = 30

DEFAULT_PYRAMID_DURATIONS: List[int] = [30, 60, 90, 60, 30]
DEFAULT_LADDER_DURATIONS: List[int] = [30, 60, 90]

# Warmup / cooldown ramps as FTP fractions
WARMUP_POWER_LOW: float = 0.50
WARMUP_POWER_HIGH: float = 0.75
COOLDOWN_POWER_HIGH: float = 0.70
COOLDOWN_POWER_LOW: float = 0.45
WARMUP_DURATION_SEC: int = 600
COOLDOWN_DURATION_SEC: int = 300


# === USER EDITS ===

EDIT_POWER_MIN_RATIO: float = 0.5
EDIT_POWER_MAX_RATIO: float = 1.5
EDIT_DURATION_MIN_SEC: int = 5
EDIT_DURATION_MAX_SEC: int = 600


# === WORKOUT TEMPLATES ===

WORKOUT_BUFFER_SEC: int = 300  # warmup + cooldown allowance added to every template
DIFFICULTY_MIN: int = 1
DIFFICULTY_MAX: int = 5


# === TRAINING LOAD ===

# Lookup-based day estimates for weekly TSS
DAY_TSS_FIXED: Dict[str, float] = {
    'rest': 0,
    'intervals': 100,
    'power-development': 90,
}
DAY_TSS_PER_HOUR: Dict[str, float] = {
    'long-ride': 70,
    'endurance': 60,
}

WEEK_TYPE_MULTIPLIERS: Dict[str, float] = {
    'normal': 1.0,
    'recovery': 0.7,
    'intensive': 1.2,
    'taper': 0.5,
}


# === PERIODIZATION ===

# (buildup, peak, taper) fractions of plan length, per goal
PHASE_FRACTIONS: Dict[str, Tuple[float, float, float]] = {
    'general': (0.6, 0.3, 0.1),
    'performance': (0.5, 0.35, 0.15),
    'endurance': (0.7, 0.2, 0.1),
}

BUILDUP_RECOVERY_EVERY: int = 4  # every 4th week in buildup is a recovery week
PEAK_CYCLE_LENGTH: int = 3


# === WEEKLY STRUCTURE ===

STANDARD_DAY_FRACTION: float = 0.15  # share of weekly hours for a standard day
LONG_RIDE_FRACTION: float = 0.40     # share of weekly hours for the long ride


# === VALIDATION BOUNDS ===

WEEKLY_HOURS_MIN: float = 3
WEEKLY_HOURS_MAX: float = 20

PLAN_WEEKS_MIN: int = 4
PLAN_WEEKS_MAX: int = 24


# === CALENDAR ===

EVENT_TIME_OF_DAY: str = '09:00:00'  # UTC
EVENT_CATEGORY: str = 'training'


# === FILE PATTERNS ===

ZWO_FILENAME_PATTERN: str = r'W(\d+)_(\w{3})_\w+\d+_(.+)\.zwo'

STORE_KEY_PATTERN: str = r'^[a-z0-9][a-z0-9_-]{0,62}$'
PLAN_STORE_KEY: str = 'training_plan'
EVENTS_STORE_KEY: str = 'calendar_events'
