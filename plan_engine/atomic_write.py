#!/usr/bin/env python3
"""
Atomic file writes for stored plans, calendar exports and ZWO files.

A file is either fully written or left untouched: content goes to a temp
file in the same directory, which then replaces the target.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml


@contextmanager
def atomic_write(target_path: Path, mode: str = 'w'):
    """
    Context manager for atomic file writes.

    Usage:
        with atomic_write(Path('plan.json')) as f:
            json.dump(plan.to_dict(), f)

    Args:
        target_path: Final destination path (parent directories are created)
        mode: File mode ('w' for text, 'wb' for binary)
    """
    target_path = Path(target_path)
    target_dir = target_path.parent
    target_dir.mkdir(parents=True, exist_ok=True)

    # Same directory so os.replace stays a rename
    fd, temp_path = tempfile.mkstemp(
        dir=target_dir,
        prefix=f'.{target_path.name}.',
        suffix='.tmp'
    )

    try:
        with os.fdopen(fd, mode) as f:
            yield f
        os.replace(temp_path, target_path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def safe_write_json(path: Path, data: Any, indent: int = 2):
    """Write JSON atomically."""
    with atomic_write(path) as f:
        json.dump(data, f, indent=indent)
        f.write('\n')


def safe_write_yaml(path: Path, data: Any):
    """Write YAML atomically, keeping key order."""
    with atomic_write(path) as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
