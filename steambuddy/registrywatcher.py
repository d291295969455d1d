"""Watches a registry file and re-parses it after it changes."""

from __future__ import annotations

import logging
import os

from steambuddy.events import EventLoop, Signal, Timer
from steambuddy.vdf import Node, RegistryFileParser, VdfParseError

log = logging.getLogger(__name__)

_RETRY_INTERVAL_MS = 1000
_PARSE_DELAY_MS = 1000
_POLL_INTERVAL_MS = 1000


def _stat_signature(path: str) -> tuple[int, int, int] | None:
    try:
        info = os.stat(path)
    except OSError:
        return None
    return (info.st_mtime_ns, info.st_size, info.st_ino)


class RegistryFileWatcher:
    """Parses a registry file a short while after each change and emits
    ``registry_changed`` once the new data is available."""

    def __init__(self, path: str | os.PathLike[str], loop: EventLoop) -> None:
        self.path = os.fspath(path)
        if not os.path.exists(self.path):
            raise FileNotFoundError(f"registry.vdf file does not exist at specified path: {self.path}")
        log.info("registry.vdf file path set to %s", self.path)

        self.registry_changed = Signal()
        self._parser = RegistryFileParser()
        self._signature: tuple[int, int, int] | None = None

        self._retry_timer = Timer(loop, _RETRY_INTERVAL_MS, single_shot=True)
        self._retry_timer.timeout.connect(self._retry)
        self._parse_timer = Timer(loop, _PARSE_DELAY_MS, single_shot=True)
        self._parse_timer.timeout.connect(self.parse_file)
        self._poll_timer = Timer(loop, _POLL_INTERVAL_MS)
        self._poll_timer.timeout.connect(self.poll)

        loop.call_later(0, self._retry)

    @property
    def data(self) -> list[Node]:
        return self._parser.root

    def poll(self) -> None:
        """Check the file for changes and schedule a parse if it changed."""
        signature = _stat_signature(self.path)
        if signature is None:
            self._poll_timer.stop()
            self._retry()
            return
        if signature != self._signature:
            self._signature = signature
            self._schedule_parse()

    def _retry(self) -> None:
        signature = _stat_signature(self.path)
        if signature is None:
            self._retry_timer.start()
            return
        self._signature = signature
        if not self._poll_timer.is_active:
            self._poll_timer.start()
        self._schedule_parse()

    def _schedule_parse(self) -> None:
        if not self._parse_timer.is_active:
            self._parse_timer.start()

    def parse_file(self) -> None:
        try:
            self._parser.parse(self.path)
        except (OSError, VdfParseError) as exc:
            log.warning("failed at parsing registry file %s: %s", self.path, exc)
        self.registry_changed.emit()