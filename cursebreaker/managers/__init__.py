"""Manager modules for Cursebreaker Codex.

Managers orchestrate workflows and coordinate between engines.
They are stateful over the coordinator's working snapshot and emit events.
"""

from .base_manager import BaseManager
from .gamification_manager import GamificationManager
from .profile_manager import ProfileManager
from .rival_manager import RivalManager
from .task_manager import TaskManager

__all__ = [
    "BaseManager",
    "GamificationManager",
    "ProfileManager",
    "RivalManager",
    "TaskManager",
]
