"""Control of the Steam client: launching apps, closing and state tracking."""

from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional, Sequence

from steambuddy.events import EventLoop, Signal, Timer
from steambuddy.processhandler import ProcessHandler
from steambuddy.registryobserver import SteamRegistryObserverInterface, TrackedAppData

log = logging.getLogger(__name__)

STEAM_EXEC_PATTERN = re.compile(r"[\\/]steam(?:\.exe$|$)", re.IGNORECASE)
_REAPER_PATTERN = re.compile(r".*?Steam.+?reaper", re.IGNORECASE)
_REAPER_TERMINATION_MS = 5000
_TIME_TO_KILL_MS = 10000
_BIG_PICTURE_WAIT_S = 1.0

Launcher = Callable[[str, Sequence[str]], bool]


class SteamHandler:
    """Tracks the Steam process and the app it runs.

    ``launcher(program, args)`` starts a detached program and reports success.
    ``process_state_changed`` is emitted when Steam starts or stops.
    """

    def __init__(
        self,
        process_handler: ProcessHandler,
        registry_observer: SteamRegistryObserverInterface,
        loop: EventLoop,
        launcher: Launcher,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._process = process_handler
        self._observer = registry_observer
        self._launch = launcher
        self._sleep = sleep
        self._steam_exec_path = ""
        self._global_app_id = 0
        self._tracked: Optional[TrackedAppData] = None
        self.process_state_changed = Signal()

        process_handler.process_died.connect(self._steam_process_died)
        registry_observer.steam_exec_path.connect(self._set_steam_exec_path)
        registry_observer.steam_pid.connect(self._steam_pid)
        registry_observer.global_app_id.connect(self._set_global_app_id)
        registry_observer.tracked_app_is_running.connect(self._tracked_app_is_running)
        registry_observer.tracked_app_is_updating.connect(self._tracked_app_is_updating)

        self._close_timer = Timer(loop, 0, single_shot=True)
        self._close_timer.timeout.connect(self._terminate_steam)

    @property
    def steam_exec_path(self) -> str:
        return self._steam_exec_path

    def is_running(self) -> bool:
        return self._process.is_running()

    def is_running_now(self) -> bool:
        return self._process.is_running_now()

    def close(self, grace_period_s: Optional[int] = None) -> bool:
        """Ask Steam to shut down, killing it after the grace period if given."""
        if not self._process.is_running_now():
            self._close_timer.stop()
            return True

        if self._steam_exec_path:
            if not self._launch(self._steam_exec_path, ["-shutdown"]):
                log.warning("Failed to start Steam shutdown sequence! Using others means to close steam...")
                self._process.close(None)
        else:
            log.warning("Steam EXEC path is not available yet, using other means of closing!")
            self._process.close(None)

        if grace_period_s is not None:
            time_ms = grace_period_s * 1000
            if not self._close_timer.is_active or self._close_timer.interval != time_ms:
                self._close_timer.start(time_ms)

        return True

    def launch_app(self, app_id: int, force_big_picture: bool = False) -> bool:
        if not self._steam_exec_path:
            log.warning("Steam EXEC path is not available yet!")
            return False
        if self._close_timer.is_active:
            log.warning("Already closing Steam, will not launch new app!")
            return False
        if app_id == 0:
            log.warning("Will not launch app with 0 ID!")
            return False

        if self.get_running_app() == app_id:
            return True

        is_steam_running = self._process.is_running_now()
        if force_big_picture and is_steam_running:
            if not self._launch(self._steam_exec_path, ["steam://open/bigpicture"]):
                log.warning("Failed to open Steam in big picture mode!")
                return False
            # Steam needs a moment to actually switch into big picture mode.
            self._sleep(_BIG_PICTURE_WAIT_S)

        prefix = ["-bigpicture"] if force_big_picture and not is_steam_running else []
        if not self._launch(self._steam_exec_path, [*prefix, "-applaunch", str(app_id)]):
            log.warning("Failed to start Steam app launch sequence!")
            return False

        self._tracked = TrackedAppData(app_id)
        self._observer.start_tracking_app(app_id)
        return True

    def get_running_app(self) -> int:
        if not self._process.is_running():
            return 0
        if self._tracked is not None and self._tracked.is_running:
            return self._tracked.app_id
        return self._global_app_id

    def get_tracked_active_app(self) -> Optional[int]:
        tracked = self._tracked
        if self._process.is_running() and tracked is not None and (tracked.is_running or tracked.is_updating):
            return tracked.app_id
        return None

    def get_tracked_updating_app(self) -> Optional[int]:
        tracked = self._tracked
        if self._process.is_running() and tracked is not None and tracked.is_updating:
            return tracked.app_id
        return None

    def clear_tracked_app(self) -> None:
        self._observer.stop_tracking_app()
        self._tracked = None

    def _steam_process_died(self) -> None:
        log.debug("Steam is no longer running!")
        self._observer.stop_app_observation()
        self.clear_tracked_app()
        self._close_timer.stop()
        self._global_app_id = 0

        # A crashed Steam may leave its reaper (the game) running.
        self._process.close_detached(_REAPER_PATTERN, _REAPER_TERMINATION_MS)
        self.process_state_changed.emit()

    def _set_steam_exec_path(self, path: str) -> None:
        self._steam_exec_path = path
        log.info("Steam exec path: %s", path)

    def _steam_pid(self, pid: int) -> None:
        currently_running = self._process.is_running()
        if pid == 0:
            if currently_running:
                log.debug("Steam is no longer running according to registry. Waiting for actual shutdown.")
            return

        if not self._process.start_monitoring(pid, STEAM_EXEC_PATTERN):
            log.debug("Failed to start monitoring Steam process %s (probably outdated)...", pid)
            if currently_running:
                self.process_state_changed.emit()
            return

        if not currently_running:
            log.debug("Steam is running!")
            self._observer.start_app_observation()
            self.process_state_changed.emit()

    def _set_global_app_id(self, app_id: int) -> None:
        if app_id != self._global_app_id:
            self._global_app_id = app_id
            log.debug("Running appID change detected (via global key): %s", app_id)

    def _tracked_app_is_running(self, state: bool) -> None:
        if self._tracked is None:
            log.debug("Received update for tracked app that is no longer tracked")
            return
        log.debug('App %s "running" value change detected: %s', self._tracked.app_id, state)
        self._tracked.is_running = state

    def _tracked_app_is_updating(self, state: bool) -> None:
        if self._tracked is None:
            log.debug("Received update for tracked app that is no longer tracked")
            return
        log.debug('App %s "updating" value change detected: %s', self._tracked.app_id, state)
        self._tracked.is_updating = state

    def _terminate_steam(self) -> None:
        log.warning("Forcefully killing Steam...")
        self._process.close(_TIME_TO_KILL_MS)