"""Monitoring and closing of processes identified by their executable path."""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

from steambuddy.events import EventLoop, Signal, Timer
from steambuddy.processes import NativeProcessHandler

log = logging.getLogger(__name__)

_CHECK_INTERVAL_MS = 1000
_MATCH_ANYTHING = re.compile("")

PatternLike = Union[str, "re.Pattern[str]"]


def _compile(pattern: PatternLike) -> re.Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


def _matches(exec_path: str, pattern: re.Pattern[str]) -> bool:
    return bool(exec_path) and pattern.search(exec_path) is not None


class ProcessHandler:
    """Keeps track of one process and emits ``process_died`` once it is gone."""

    def __init__(self, native_handler: NativeProcessHandler, loop: EventLoop) -> None:
        self._native = native_handler
        self._loop = loop
        self._pid = 0
        self._pattern: re.Pattern[str] = _MATCH_ANYTHING
        self.process_died = Signal()

        self._check_timer = Timer(loop, _CHECK_INTERVAL_MS, single_shot=True)
        self._check_timer.timeout.connect(self.check_state)
        self._kill_timer = Timer(loop, 0, single_shot=True)
        self._kill_timer.timeout.connect(self.terminate)

    @property
    def pid(self) -> int:
        return self._pid

    def get_pids(self) -> list[int]:
        return self._native.get_pids()

    def get_pids_matching_exec_path(self, pattern: PatternLike) -> list[int]:
        regex = _compile(pattern)
        return [pid for pid in self.get_pids() if _matches(self._native.get_exec_path(pid), regex)]

    def close_detached(self, pattern: PatternLike, auto_termination_ms: int) -> None:
        """Close every matching process and kill the stragglers later."""
        regex = _compile(pattern)
        for pid in self.get_pids_matching_exec_path(regex):
            self.close_detached_pid(pid, regex, auto_termination_ms)

    def close_detached_pid(self, pid: int, pattern: PatternLike, auto_termination_ms: int) -> None:
        """Close ``pid`` if it matches and kill it after the timeout if it still does."""
        regex = _compile(pattern)
        exec_path = self._native.get_exec_path(pid)
        if not _matches(exec_path, regex):
            return

        log.debug("closing detached %s | %s", pid, exec_path)
        self._native.close(pid)

        def finish() -> None:
            current_path = self._native.get_exec_path(pid)
            if _matches(current_path, regex):
                log.debug("terminating detached %s | %s", pid, current_path)
                self._native.terminate(pid)

        self._loop.call_later(auto_termination_ms, finish)

    def start_monitoring(self, pid: int, pattern: PatternLike) -> bool:
        regex = _compile(pattern)
        self.stop_monitoring()

        if pid == 0:
            return False
        if pid == self._pid:
            return True
        if not _matches(self._native.get_exec_path(pid), regex):
            return False

        self._pid = pid
        self._pattern = regex
        self._check_timer.start()
        return True

    def stop_monitoring(self) -> None:
        self._pid = 0
        self._pattern = _MATCH_ANYTHING
        self._check_timer.stop()
        self._kill_timer.stop()

    def close(self, auto_termination_ms: Optional[int] = None) -> None:
        """Ask the monitored process to exit, killing it after the timeout if given."""
        if self.is_running_now():
            self._native.close(self._pid)
            if auto_termination_ms is not None:
                self._kill_timer.start(auto_termination_ms)

    def terminate(self) -> None:
        if self.is_running_now():
            self._native.terminate(self._pid)

    def is_running(self) -> bool:
        return self._pid != 0

    def is_running_now(self) -> bool:
        """Re-check the monitored process before answering."""
        if self.is_running():
            self.check_state()
        return self.is_running()

    def check_state(self) -> None:
        self._check_timer.stop()

        if not _matches(self._native.get_exec_path(self._pid), self._pattern):
            self.stop_monitoring()
            self.process_died.emit()
            return

        self._check_timer.start()