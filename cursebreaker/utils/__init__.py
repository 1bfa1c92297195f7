# File: utils/__init__.py
"""Pure Python utilities for Cursebreaker Codex.

Submodules:
    - dt_utils: Date/time parsing, conversion and interval arithmetic
    - math_utils: Experience flooring, multipliers and percentages

Usage:
    from . import dt_utils
    from .math_utils import floor_exp
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
