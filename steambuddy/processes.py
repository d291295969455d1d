"""Process listing and signalling backed by the ``/proc`` filesystem."""

from __future__ import annotations

import logging
import os
import signal
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

log = logging.getLogger(__name__)


class NativeProcessHandler(ABC):
    """Operating-system access to running processes."""

    @abstractmethod
    def get_pids(self) -> list[int]:
        """Return the ids of all running processes."""

    @abstractmethod
    def get_exec_path(self, pid: int) -> str:
        """Return the canonical executable path of ``pid`` or ``""``."""

    @abstractmethod
    def close(self, pid: int) -> None:
        """Ask ``pid`` and its descendants to exit."""

    @abstractmethod
    def terminate(self, pid: int) -> None:
        """Kill ``pid`` and its descendants."""


class LinuxProcessHandler(NativeProcessHandler):
    """Reads process data from a ``/proc`` tree and signals with ``kill``."""

    def __init__(
        self,
        proc_root: str | os.PathLike[str] = "/proc",
        kill: Callable[[int, int], None] = os.kill,
    ) -> None:
        self._proc_root = Path(proc_root)
        self._kill = kill

    def get_pids(self) -> list[int]:
        try:
            names = [entry.name for entry in os.scandir(self._proc_root) if entry.is_dir()]
        except OSError:
            return []
        names.sort(key=str.lower)
        return [int(name) for name in names if name.isascii() and name.isdigit()]

    def get_exec_path(self, pid: int) -> str:
        link = self._proc_root / str(pid) / "exe"
        try:
            target = os.readlink(link)
        except OSError:
            return ""
        target_path = os.path.join(link.parent, target)
        if not os.path.exists(target_path):
            return ""
        return os.path.realpath(target_path)

    def get_parent_pid(self, pid: int) -> int:
        try:
            text = (self._proc_root / str(pid) / "stat").read_text(errors="replace")
            fields = text[text.rindex(")") + 1 :].split()
            parent = int(fields[1])
        except (OSError, ValueError, IndexError):
            return 0
        return max(parent, 0)

    def get_cmdline(self, pid: int) -> str:
        try:
            data = (self._proc_root / str(pid) / "cmdline").read_bytes()
        except OSError:
            return ""
        parts = data.split(b"\0")
        if parts and parts[-1] == b"":
            parts.pop()
        return " ".join(part.decode("utf-8", errors="replace") for part in parts)

    def _process_tree(self) -> tuple[list[int], list[int]]:
        pids = self.get_pids()
        return pids, [self.get_parent_pid(pid) for pid in pids]

    def get_related_pids(self, pid: int) -> list[int]:
        """Return ``pid`` followed by all of its descendants."""
        pids, parents = self._process_tree()
        related = [pid]
        # The list grows while it is walked, so every descendant gets visited.
        for related_pid in related:
            related.extend(
                child for child, parent in zip(pids, parents) if parent == related_pid and child != related_pid
            )
        return related

    def get_children_pids(self, pid: int) -> list[int]:
        """Return the sorted children and grandchildren of ``pid``."""
        pids, parents = self._process_tree()
        if pid not in pids:
            return []

        def search(needle: int) -> list[int]:
            return [child for child, parent in zip(pids, parents) if parent == needle and child != needle]

        children = search(pid)
        nested = list(children)
        for child in children:
            nested.extend(search(child))
        return sorted(set(nested))

    def _signal_all(self, pid: int, sig: int, action: str) -> None:
        for related_pid in self.get_related_pids(pid):
            try:
                self._kill(related_pid, sig)
            except ProcessLookupError:
                pass
            except OSError as exc:
                log.warning("Failed to %s process %s - %s", action, related_pid, exc)

    def close(self, pid: int) -> None:
        self._signal_all(pid, signal.SIGTERM, "close")

    def terminate(self, pid: int) -> None:
        self._signal_all(pid, signal.SIGKILL, "terminate")