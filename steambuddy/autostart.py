"""Desktop-entry based autostart on freedesktop systems."""

from __future__ import annotations

import os
from pathlib import Path


def desktop_entry(app_name: str, exec_command: str) -> str:
    """Return the autostart desktop entry for the application."""
    return (
        "[Desktop Entry]\n"
        "Type=Application\n"
        f"Name={app_name}\n"
        f"Exec={exec_command}\n"
        f"Icon={app_name}\n"
    )


class AutoStartHandler:
    """Creates or removes the autostart desktop entry at ``autostart_path``."""

    def __init__(self, app_name: str, exec_command: str, autostart_path: str | os.PathLike[str]) -> None:
        self.app_name = app_name
        self.exec_command = exec_command
        self.path = Path(autostart_path)

    def _contents(self) -> str:
        return desktop_entry(self.app_name, self.exec_command)

    def set_auto_start(self, enable: bool) -> None:
        """Write or remove the entry; raises ``OSError`` on failure."""
        self.path.unlink(missing_ok=True)
        if enable:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(self._contents().encode("utf-8"))

    def is_auto_start_enabled(self) -> bool:
        if not self.path.exists():
            return False
        return self.path.read_bytes() == self._contents().encode("utf-8")