# File: utils/math_utils.py
"""Math and calculation utilities for Bloom.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

UTILS PURITY: NO `homeassistant.*` imports allowed.

Functions:
    - round_value: Consistent rounding to configured precision
    - calculate_percentage: Progress percentage calculations
    - calculate_ratio: Completed/total ratio with zero protection
    - clamp: Bound a value to a range
"""

from __future__ import annotations

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default float precision for rounding
DATA_FLOAT_PRECISION = 2


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Used for reported figures; stored progress stays unrounded
    (e.g., 0.1 + 0.2 → 0.3 on display).

    Examples:
        round_value(10.456) → 10.46
        round_value(0.30000000000000004) → 0.3
    """
    return round(value, precision)


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return round_value((current / target) * 100, precision)


def calculate_ratio(completed: int, total: int) -> float:
    """Return completed/total, or 0.0 when there is nothing to complete."""
    if total <= 0:
        return 0.0
    return completed / total


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))
