"""Engine modules for Cursebreaker Codex.

Contains specialized computation engines:
- rank_engine: Rank/sub-rank thresholds and signed experience deltas
- stat_engine: Per-attribute stat leveling
- schedule_engine: Actionability, completability and ritual due dates
- task_engine: Completion/undo transitions and task exp values
- history_engine: Bounded completion history ledger
- statistics_engine: Daily streak and completion percentage
- rival_engine: Rival daily gain simulation
"""

# Use relative imports within package to avoid mypy module resolution issues
from .history_engine import HistoryEngine
from .rank_engine import LedgerResult, RankEngine
from .rival_engine import RivalEngine, RivalTickResult
from .schedule_engine import RolloverResult, ScheduleEngine
from .stat_engine import StatEngine
from .statistics_engine import StatisticsEngine
from .task_engine import (
    REASON_ALREADY_COMPLETED,
    REASON_NOT_DUE,
    TASK_ACTION_COMPLETE,
    TASK_ACTION_UNDO,
    TaskEngine,
    TransitionEffect,
)

__all__ = [
    "REASON_ALREADY_COMPLETED",
    "REASON_NOT_DUE",
    "TASK_ACTION_COMPLETE",
    "TASK_ACTION_UNDO",
    "HistoryEngine",
    "LedgerResult",
    "RankEngine",
    "RivalEngine",
    "RivalTickResult",
    "RolloverResult",
    "ScheduleEngine",
    "StatEngine",
    "StatisticsEngine",
    "TaskEngine",
    "TransitionEffect",
]
