"""
WPS push button connection through wpa_cli. wpa_supplicant writes the new
network block to its config file when the handshake succeeds.
"""
import logging
import os
import re
import time
from dataclasses import dataclass

from remoteaccessd import settings

log = logging.getLogger(__name__)

_UPDATE_CONFIG_RE = re.compile(r"^\s*update_config\s*=\s*1\s*$", re.MULTILINE | re.IGNORECASE)
_NETWORK_RE = re.compile(r"^\s*network\s*=", re.MULTILINE | re.IGNORECASE)
_BSSID_RE = re.compile(r"^(?:[0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2}$")


@dataclass
class ScanResult:
    bssid: str
    frequency: int
    signal: int
    flags: str
    ssid: str

    @property
    def supports_wps(self) -> bool:
        return "WPS" in self.flags


def parse_scan_results(text):
    """Parse `wpa_cli scan_results` output. Header and junk lines are skipped."""
    results = []
    for line in text.splitlines():
        fields = line.split("\t")
        if len(fields) < 4 or not _BSSID_RE.match(fields[0]):
            continue
        try:
            frequency = int(fields[1])
            signal = int(fields[2])
        except ValueError:
            continue
        ssid = fields[4] if len(fields) > 4 else ""
        results.append(ScanResult(fields[0], frequency, signal, fields[3], ssid))
    return results


def strongest_wps_peer(results):
    peers = [r for r in results if r.supports_wps]
    if not peers:
        return None
    return max(peers, key=lambda r: r.signal)


class WpsSession:
    def __init__(self, runner, device, config_path, sleep=time.sleep, clock=time.time):
        self.runner = runner
        self.device = device
        self.config_path = config_path
        self.sleep = sleep
        self.clock = clock

    def _wpa_cli(self, *args):
        return ["wpa_cli", "-i", self.device] + list(args)

    def _read_config(self):
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError:
            return ""

    def ensure_update_config(self):
        """
        wpa_supplicant only saves WPS credentials with update_config=1. If it
        is missing, add it and restart wpa_supplicant.
        """
        if _UPDATE_CONFIG_RE.search(self._read_config()):
            return True
        log.info("Adding update_config=1 to %s", self.config_path)
        self.runner.run(["killall", "-q", "wpa_supplicant"])
        self.sleep(1)
        ok = True
        try:
            with open(self.config_path, "a", encoding="utf-8") as f:
                f.write("update_config=1\n")
        except OSError as e:
            log.error("Could not update %s: %s", self.config_path, e)
            ok = False
        # bring wpa_supplicant back either way, WiFi is dead without it
        self.runner.run(["wpa_supplicant", "-B", "-i", self.device, "-c", self.config_path])
        self.sleep(settings.WPA_RESTART_WAIT_SEC)
        return ok

    def remove_networks(self):
        ok, out = self.runner.run_capture(self._wpa_cli("list_networks"))
        if not ok:
            return
        for line in out.splitlines():
            network_id = line.split("\t", 1)[0].strip()
            if network_id.isdigit():
                self.runner.run(self._wpa_cli("remove_network", network_id))

    def find_peer(self):
        """Strongest access point advertising WPS, or None."""
        self.runner.run(self._wpa_cli("scan"))
        self.sleep(settings.WPS_SCAN_WAIT_SEC)
        ok, out = self.runner.run_capture(self._wpa_cli("scan_results"))
        if not ok:
            return None
        return strongest_wps_peer(parse_scan_results(out))

    def push_button(self, bssid) -> bool:
        return self.runner.run(self._wpa_cli("wps_pbc", bssid))

    def config_updated(self, max_age=settings.WPS_CONFIG_MAX_AGE_SEC) -> bool:
        """True if a network block was written to the config within max_age seconds."""
        if not _NETWORK_RE.search(self._read_config()):
            return False
        try:
            modified = os.stat(self.config_path).st_mtime
        except OSError:
            return False
        return self.clock() - modified < max_age
