"""Delayed shutdown, restart, suspend and hibernation of the machine."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable

from steambuddy.events import EventLoop

log = logging.getLogger(__name__)


class PcState(Enum):
    NORMAL = "Normal"
    RESTARTING = "Restarting"
    SHUTTING_DOWN = "ShuttingDown"
    SUSPENDING = "Suspending"


class NativePcStateHandler(ABC):
    """Operating-system access to power management."""

    @abstractmethod
    def can_shutdown_pc(self) -> bool: ...

    @abstractmethod
    def can_restart_pc(self) -> bool: ...

    @abstractmethod
    def can_suspend_pc(self) -> bool: ...

    @abstractmethod
    def can_hibernate_pc(self) -> bool: ...

    @abstractmethod
    def shutdown_pc(self) -> bool: ...

    @abstractmethod
    def restart_pc(self) -> bool: ...

    @abstractmethod
    def suspend_pc(self) -> bool: ...

    @abstractmethod
    def hibernate_pc(self) -> bool: ...


class PcStateHandler:
    """Schedules a power state change after a grace period."""

    def __init__(self, native_handler: NativePcStateHandler, loop: EventLoop) -> None:
        self._native = native_handler
        self._loop = loop
        self._state = PcState.NORMAL

    @property
    def state(self) -> PcState:
        return self._state

    def shutdown_pc(self, grace_period_s: int) -> bool:
        return self._change_state(
            grace_period_s, "shut down", "shutdown",
            self._native.can_shutdown_pc, self._native.shutdown_pc, PcState.SHUTTING_DOWN,
        )

    def restart_pc(self, grace_period_s: int) -> bool:
        return self._change_state(
            grace_period_s, "restarted", "restart",
            self._native.can_restart_pc, self._native.restart_pc, PcState.RESTARTING,
        )

    def suspend_pc(self, grace_period_s: int) -> bool:
        return self._change_state(
            grace_period_s, "suspended", "suspend",
            self._native.can_suspend_pc, self._native.suspend_pc, PcState.SUSPENDING,
        )

    def hibernate_pc(self, grace_period_s: int) -> bool:
        return self._change_state(
            grace_period_s, "hibernated", "hibernate",
            self._native.can_hibernate_pc, self._native.hibernate_pc, PcState.SUSPENDING,
        )

    def _change_state(
        self,
        grace_period_s: int,
        cant_do_entry: str,
        failed_to_do_entry: str,
        can_do: Callable[[], bool],
        do: Callable[[], bool],
        new_state: PcState,
    ) -> bool:
        if self._state is not PcState.NORMAL:
            log.debug("PC is already changing state. Aborting request.")
            return False

        if not can_do():
            log.warning("PC cannot be %s!", cant_do_entry)
            return False

        def perform() -> None:
            log.info("Resetting PC state back to normal.")
            self._state = PcState.NORMAL
            if not do():
                log.warning("Failed to %s PC!", failed_to_do_entry)

        self._loop.call_later(grace_period_s * 1000, perform)
        self._state = new_state
        return True