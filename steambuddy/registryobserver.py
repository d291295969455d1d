"""Follows Steam's registry file and process list to report Steam's state."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

from steambuddy.events import EventLoop, Signal, Timer
from steambuddy.processlist import SteamProcessListObserver
from steambuddy.registrywatcher import RegistryFileWatcher
from steambuddy.vdf import Node

log = logging.getLogger(__name__)

PID_PATH = ("Registry", "HKLM", "Software", "Valve", "Steam", "SteamPID")
DEFAULT_STEAM_BINARY = "/usr/bin/steam"

_OBSERVATION_DELAY_MS = 2000
_RECHECK_DELAY_MS = 5000
_MAX_RECHECKS = 10
_UINT_RANGE = 2**32


@dataclass
class TrackedAppData:
    app_id: int
    is_running: bool = False
    is_updating: bool = False


class SteamRegistryObserverInterface(ABC):
    """Source of Steam state changes, reported through signals."""

    def __init__(self) -> None:
        self.steam_exec_path = Signal()
        self.steam_pid = Signal()
        self.global_app_id = Signal()
        self.tracked_app_is_running = Signal()
        self.tracked_app_is_updating = Signal()

    @abstractmethod
    def start_app_observation(self) -> None: ...

    @abstractmethod
    def stop_app_observation(self) -> None: ...

    @abstractmethod
    def start_tracking_app(self, app_id: int) -> None: ...

    @abstractmethod
    def stop_tracking_app(self) -> None: ...


class _RegistrySource(Protocol):
    registry_changed: Signal

    @property
    def data(self) -> list[Node]: ...


class _ProcessList(Protocol):
    list_changed: Signal

    @property
    def app_ids(self) -> frozenset[int]: ...

    def find_steam_process(self, previous_pid: int) -> int: ...

    def observe_pid(self, pid: int) -> None: ...

    def stop_observing(self) -> None: ...


def get_entry(path: Sequence[str], nodes: list[Node]) -> Optional[Any]:
    """Return the value at the key ``path``, following the first match at each level."""
    current = nodes
    for depth, segment in enumerate(path):
        node = next((item for item in current if item.key == segment), None)
        if node is None:
            return None
        if depth == len(path) - 1:
            return node.value
        if not isinstance(node.value, list):
            return None
        current = node.value
    return None


class SteamRegistryObserver(SteamRegistryObserverInterface):
    """Derives Steam's pid and the running apps from the registry and process list."""

    def __init__(
        self,
        loop: EventLoop,
        watcher: _RegistrySource,
        process_list_observer: _ProcessList,
        steam_exec: str | os.PathLike[str],
    ) -> None:
        super().__init__()
        steam_exec = os.fspath(steam_exec)
        if not os.path.exists(steam_exec):
            raise FileNotFoundError(f"Steam binary does not exist at specified path: {steam_exec}")
        log.info("Steam binary path set to %s", steam_exec)

        self._loop = loop
        self._watcher = watcher
        self._process_list = process_list_observer
        self._pending_exec = steam_exec
        self._is_observing_apps = False
        self._pid = 0
        self._global_app_id = 0
        self._recheck_counter = 0
        self._tracked: Optional[TrackedAppData] = None

        watcher.registry_changed.connect(self.registry_changed)
        process_list_observer.list_changed.connect(self.registry_changed)

        self._observation_delay = Timer(loop, _OBSERVATION_DELAY_MS, single_shot=True)
        self._observation_delay.timeout.connect(self._begin_observing)

    @property
    def pid(self) -> int:
        return self._pid

    def _begin_observing(self) -> None:
        self._is_observing_apps = True
        self.registry_changed()

    def start_app_observation(self) -> None:
        self._observation_delay.start()
        self._process_list.observe_pid(self._pid)

    def stop_app_observation(self) -> None:
        self._observation_delay.stop()
        self._process_list.stop_observing()
        self._is_observing_apps = False
        self._global_app_id = 0
        if self._tracked is not None:
            self._tracked.is_running = False
            self._tracked.is_updating = False

    def start_tracking_app(self, app_id: int) -> None:
        self._tracked = TrackedAppData(app_id)
        self.registry_changed()

    def stop_tracking_app(self) -> None:
        self._tracked = None

    def _resolve_pid(self, pid: int) -> int:
        actual = self._process_list.find_steam_process(self._pid)
        if actual == 0:
            do_recheck = self._recheck_counter < _MAX_RECHECKS
            self._recheck_counter += 1
            log.warning(
                "Steam PID from registry.vdf indicates that the Steam process is running, but it's not%s",
                "... Rechecking in 5 seconds." if do_recheck else "...",
            )
            if do_recheck:
                self._loop.call_later(_RECHECK_DELAY_MS, self.registry_changed)
            else:
                self._recheck_counter = 0
        elif actual != pid and self._pid != actual:
            log.warning(
                "Steam PID from registry.vdf does not match what we have found (normal for flatpak or "
                "outdated data)! Using PID %s (instead of %s) to track Steam process.",
                actual,
                pid,
            )
        if actual != 0:
            self._recheck_counter = 0
        return actual

    def registry_changed(self) -> None:
        value = get_entry(PID_PATH, self._watcher.data)
        pid = value % _UINT_RANGE if isinstance(value, int) else 0

        if pid != self._pid:
            if pid != 0:
                pid = self._resolve_pid(pid)
            else:
                self._recheck_counter = 0

            if pid != self._pid:
                self._pid = pid
                self._process_list.observe_pid(pid)
                self.steam_pid.emit(pid)

        if self._pending_exec:
            exec_path, self._pending_exec = self._pending_exec, ""
            self.steam_exec_path.emit(exec_path)

        if not self._is_observing_apps:
            return

        running_apps = self._process_list.app_ids
        first_app = min(running_apps) if running_apps else 0
        if self._tracked is not None:
            tracked_running = self._tracked.app_id in running_apps
            global_app_id = self._tracked.app_id if tracked_running else first_app
            self._set_global_app_id(global_app_id)
            if tracked_running != self._tracked.is_running:
                self._tracked.is_running = tracked_running
                self.tracked_app_is_running.emit(tracked_running)
        else:
            self._set_global_app_id(first_app)

    def _set_global_app_id(self, app_id: int) -> None:
        if app_id != self._global_app_id:
            self._global_app_id = app_id
            self.global_app_id.emit(app_id)


def create_steam_registry_observer(
    loop: EventLoop,
    registry_file_override: str = "",
    steam_binary_override: str = "",
) -> SteamRegistryObserver:
    """Build an observer for the user's registry file and Steam binary."""
    registry_path = registry_file_override or str(Path.home() / ".steam" / "registry.vdf")
    steam_exec = steam_binary_override or DEFAULT_STEAM_BINARY
    watcher = RegistryFileWatcher(registry_path, loop)
    return SteamRegistryObserver(loop, watcher, SteamProcessListObserver(loop), steam_exec)