"""
WiFi adapter queries and switches (iwconfig, ip, systemctl).
"""
import logging
import re

from remoteaccessd import settings

log = logging.getLogger(__name__)

_WIFI_DEVICE_RE = re.compile(r"^(\w+)\s+IEEE 802", re.MULTILINE)
_ACCESS_POINT_RE = re.compile(r"Access Point:\s*((?:[0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2})")
_IPV4_RE = re.compile(r"\binet\s+((?:\d{1,3}\.){3}\d{1,3})")


class NetworkInspector:
    def __init__(self, runner, services=settings.SERVICES_TO_TOGGLE):
        self.runner = runner
        self.services = services

    def wifi_device_name(self):
        """Name of the first IEEE 802.11 interface, or None."""
        ok, out = self.runner.run_capture(["iwconfig"])
        if not ok:
            return None
        m = _WIFI_DEVICE_RE.search(out)
        return m.group(1) if m else None

    def peer_address(self, device):
        """Hardware address of the access point the adapter is associated with."""
        ok, out = self.runner.run_capture(["iwconfig", device])
        if not ok:
            return None
        m = _ACCESS_POINT_RE.search(out)
        return m.group(1) if m else None

    def has_peer_address(self, device) -> bool:
        return self.peer_address(device) is not None

    def ipv4_address(self, device):
        ok, out = self.runner.run_capture(["ip", "-4", "addr", "show", "dev", device])
        if not ok:
            return None
        m = _IPV4_RE.search(out)
        return m.group(1) if m else None

    def has_ipv4_address(self, device) -> bool:
        return self.ipv4_address(device) is not None

    def set_power_saving(self, device, enable):
        # With power saving on the Pi drops WiFi after a few idle minutes
        self.runner.run(["iwconfig", device, "power", "on" if enable else "off"])

    def set_radio(self, device, enable):
        """Raise or cut transmit power directly. Takes effect immediately."""
        if enable:
            # the driver tends to ignore the first txpower command
            self.runner.run(["iwconfig", device, "txpower", "auto"])
            self.runner.run(["iwconfig", device, "txpower", "auto"])
            self.set_power_saving(device, False)
        else:
            self.set_power_saving(device, True)
            self.runner.run(["iwconfig", device, "txpower", "off"])

    def set_services_enabled(self, enable):
        action = "enable" if enable else "disable"
        log.info("%s services %s", "Enabling" if enable else "Disabling", " ".join(self.services))
        for service in self.services:
            if not self.runner.run(["systemctl", action, service]):
                log.error("systemctl %s %s failed", action, service)

    def set_services_running(self, start):
        action = "start" if start else "stop"
        log.info("%s services %s", "Starting" if start else "Stopping", " ".join(self.services))
        for service in self.services:
            if not self.runner.run(["systemctl", action, service]):
                log.error("systemctl %s %s failed", action, service)
