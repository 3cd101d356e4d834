"""
Action requests and the press classifier that turns button hold times into
them.

    hold < 2s       ignored
    2s <= hold < 5s toggle WiFi / remote access
    5s <= hold < 8s start WPS
    hold >= 8s      ignored
"""
from dataclasses import dataclass
from typing import Optional

from evdev import ecodes

from remoteaccessd import settings

KEY_UP = 0
KEY_DOWN = 1


@dataclass(frozen=True)
class KeyEvent:
    type: int
    code: int
    value: int
    timestamp: float


@dataclass(frozen=True)
class ToggleAccess:
    pass


@dataclass(frozen=True)
class StartProvisioning:
    pass


@dataclass(frozen=True)
class ImportConfiguration:
    path: str


@dataclass(frozen=True)
class Ignore:
    pass


class PressClassifier:
    def __init__(
        self,
        keycode=settings.TOGGLE_KEYCODE,
        toggle_after=settings.WIFI_TOGGLE_DURATION_SEC,
        wps_after=settings.WPS_START_DURATION_SEC,
        ignore_after=settings.IGNORE_DURATION_SEC,
    ):
        self.keycode = keycode
        self.toggle_after = toggle_after
        self.wps_after = wps_after
        self.ignore_after = ignore_after
        self.key_down = False
        self.press_start: Optional[float] = None

    def classify(self, duration):
        if self.toggle_after <= duration < self.wps_after:
            return ToggleAccess()
        if self.wps_after <= duration < self.ignore_after:
            return StartProvisioning()
        return Ignore()

    def feed(self, event: KeyEvent):
        """Returns an action on key release, None for every other event."""
        if event.type != ecodes.EV_KEY or event.code != self.keycode:
            return None
        if event.value == KEY_DOWN:
            # only the transition starts the timer, not a repeated "down"
            if not self.key_down:
                self.key_down = True
                self.press_start = event.timestamp
            return None
        if event.value == KEY_UP:
            if not self.key_down:
                return Ignore()
            duration = event.timestamp - self.press_start
            self.key_down = False
            self.press_start = None
            return self.classify(duration)
        # autorepeat
        return None
