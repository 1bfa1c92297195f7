# File: helpers/__init__.py
"""Helper functions for Cursebreaker Codex that sit at the engine boundary.

NOTE: Pure computation belongs in engines/ or utils/, NOT here.

Submodules:
    - backup_helpers: Versioned save blob build/validate
    - settings_helpers: App settings schema and merge
    - taunt_helpers: Taunt provider port, offline provider and fallback

Usage:
    from . import backup_helpers
    from .taunt_helpers import safe_generate_taunt
"""

from . import backup_helpers, settings_helpers, taunt_helpers

__all__ = ["backup_helpers", "settings_helpers", "taunt_helpers"]
