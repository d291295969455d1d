"""Detection of the Steam process and of the games it has started."""

from __future__ import annotations

import logging
import re
from typing import Optional

from steambuddy.events import EventLoop, Signal, Timer
from steambuddy.processes import LinuxProcessHandler

log = logging.getLogger(__name__)

_STEAM_EXEC = re.compile(r".*?Steam.+?steam$", re.IGNORECASE)
_APP_ID = re.compile(r"AppId=([0-9]+)", re.IGNORECASE)
_CHECK_INTERVAL_MS = 2000
_UINT_MAX = 2**32 - 1


class SteamProcessListObserver:
    """Collects the app ids found on the command lines of Steam's children.

    ``list_changed`` is emitted whenever the set of running app ids changes.
    """

    def __init__(self, loop: EventLoop, process_handler: Optional[LinuxProcessHandler] = None) -> None:
        self._processes = process_handler if process_handler is not None else LinuxProcessHandler()
        self._app_ids: frozenset[int] = frozenset()
        self._steam_pid = 0
        self.list_changed = Signal()

        self._check_timer = Timer(loop, _CHECK_INTERVAL_MS, single_shot=True)
        self._check_timer.timeout.connect(self.check_process_list)

    @property
    def app_ids(self) -> frozenset[int]:
        return self._app_ids

    @property
    def steam_pid(self) -> int:
        return self._steam_pid

    def _is_steam(self, pid: int) -> bool:
        exec_path = self._processes.get_exec_path(pid)
        return bool(exec_path) and _STEAM_EXEC.search(exec_path) is not None

    def find_steam_process(self, previous_pid: int) -> int:
        """Return the pid of the running Steam client, preferring ``previous_pid``; 0 if none."""
        pids = self._processes.get_pids()
        if previous_pid in pids and self._is_steam(previous_pid):
            return previous_pid
        return next((pid for pid in pids if self._is_steam(pid)), 0)

    def observe_pid(self, pid: int) -> None:
        self.stop_observing()
        if pid != 0:
            self._steam_pid = pid
            self.check_process_list()

    def stop_observing(self) -> None:
        self._check_timer.stop()
        self._steam_pid = 0

    def check_process_list(self) -> None:
        running: set[int] = set()
        if self._steam_pid != 0:
            for pid in self._processes.get_children_pids(self._steam_pid):
                match = _APP_ID.search(self._processes.get_cmdline(pid))
                if match is None:
                    continue
                app_id = int(match.group(1))
                if app_id <= _UINT_MAX:
                    running.add(app_id)

        if running != self._app_ids:
            self._app_ids = frozenset(running)
            self.list_changed.emit()

        if self._steam_pid != 0:
            self._check_timer.start()