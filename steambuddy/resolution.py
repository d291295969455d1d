"""Display resolution changes that can be undone later."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from steambuddy.events import EventLoop, Timer

log = logging.getLogger(__name__)

_RETRY_TIME_S = 10


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int


DisplayPredicate = Callable[[str, bool], Optional[Resolution]]


class NativeResolutionHandler(ABC):
    """Operating-system access to display modes."""

    @abstractmethod
    def change_resolution(self, predicate: DisplayPredicate) -> dict[str, Optional[Resolution]]:
        """Apply ``predicate(display_name, is_primary)`` to every display.

        Returns, per handled display, the resolution it had before the change,
        or ``None`` when it already had the requested one.
        """


class ResolutionHandler:
    """Changes resolutions and remembers the originals for restoring."""

    def __init__(
        self,
        native_handler: NativeResolutionHandler,
        loop: EventLoop,
        handled_displays: Iterable[str] = (),
    ) -> None:
        self._native = native_handler
        self._handled_displays = frozenset(handled_displays)
        self._original: dict[str, Resolution] = {}
        self._retry_timer = Timer(loop, _RETRY_TIME_S * 1000, single_shot=True)
        self._retry_timer.timeout.connect(self.restore_resolution)

    @property
    def original_resolutions(self) -> dict[str, Resolution]:
        return dict(self._original)

    def change_resolution(self, width: int, height: int) -> bool:
        log.debug("Trying to change resolution.")
        target = Resolution(width, height)

        def predicate(display_name: str, is_primary: bool) -> Optional[Resolution]:
            if (not self._handled_displays and is_primary) or display_name in self._handled_displays:
                return target
            return None

        result = self._native.change_resolution(predicate)
        if not result:
            return False

        for display_name, previous in result.items():
            if previous is None or display_name in self._original:
                continue
            self._original[display_name] = previous
        return True

    def restore_resolution(self) -> None:
        self._retry_timer.stop()
        if not self._original:
            return

        log.debug("Trying to restore resolution.")
        result = self._native.change_resolution(lambda name, _is_primary: self._original.get(name))
        for display_name in result:
            self._original.pop(display_name, None)

        if self._original:
            log.debug("Failed to restore resolution. Trying again in %s seconds.", _RETRY_TIME_S)
            self._retry_timer.start()

    def close(self) -> None:
        """Restore whatever is still changed."""
        self.restore_resolution()
        self._retry_timer.stop()