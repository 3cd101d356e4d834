"""
The dtoverlay=disable-wifi line in /boot/config.txt. Changes only take
effect after a reboot.
"""
import logging

from remoteaccessd import settings

log = logging.getLogger(__name__)

ABSENT = "absent"
ACTIVE = "active"        # WiFi disabled at boot
COMMENTED = "commented"  # WiFi enabled at boot


class BootConfig:
    def __init__(self, path=settings.BOOT_CONFIG, marker=settings.DISABLE_WIFI_OVERLAY):
        self.path = path
        self.marker = marker

    def _read_lines(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read().splitlines()
        except FileNotFoundError:
            return []

    def _find(self, lines):
        """Return (index, state) of the marker line."""
        for i, line in enumerate(lines):
            stripped = line.strip()
            if stripped == self.marker:
                return i, ACTIVE
            if stripped.startswith("#") and stripped.lstrip("#").strip() == self.marker:
                return i, COMMENTED
        return None, ABSENT

    def marker_state(self):
        return self._find(self._read_lines())[1]

    def wifi_enabled(self) -> bool:
        return self.marker_state() != ACTIVE

    def set_wifi_enabled(self, enable) -> bool:
        """
        Write the marker line for the wanted state. Returns True when the
        persisted state changed, i.e. a reboot is needed.
        """
        lines = self._read_lines()
        index, state = self._find(lines)
        wanted = "#" + self.marker if enable else self.marker
        if state == ABSENT:
            lines.append(wanted)
            changed = not enable
        elif (state == COMMENTED) == enable:
            log.info("WiFi already %s in %s", "on" if enable else "off", self.path)
            return False
        else:
            lines[index] = wanted
            changed = True
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        return changed
