"""Base manager class for Cursebreaker Codex managers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..coordinator import CodexCoordinator


class BaseManager:
    """Base class for all Cursebreaker Codex managers.

    Provides:
    - Access to the snapshot of the running transaction (data)
    - Event emitting (emit), delivered only after the transaction commits

    Data Persistence:
    - Managers never persist; the coordinator saves the working snapshot
      once the whole transaction has succeeded
    - Buckets are replaced with new dicts/lists from the engines, never
      edited in place
    """

    def __init__(self, coordinator: CodexCoordinator) -> None:
        """Initialize manager.

        Args:
            coordinator: Parent coordinator owning the state snapshot
        """
        self.coordinator = coordinator

    @property
    def data(self) -> dict[str, Any]:
        """Working snapshot inside a transaction, committed state outside."""
        return self.coordinator.data

    def emit(self, event: str, **payload: Any) -> None:
        """Queue a named event for delivery after commit.

        Args:
            event: Event name constant (e.g., const.EVENT_LEVEL_UP)
            **payload: Event data passed to subscribers and the event sink

        Example:
            self.emit(
                const.EVENT_TASK_COMPLETED,
                task_id=task_id,
                exp_awarded=15,
            )
        """
        const.LOGGER.debug(
            "Queueing event '%s' from %s with payload keys: %s",
            event,
            self.__class__.__name__,
            list(payload.keys()),
        )
        self.coordinator.queue_event(event, payload)
