"""
Runs the actions requested by the button and the USB watcher.

Only one action runs at a time. Requests arriving while an action is running
are dropped, not queued: the user simply presses again once the device has
settled. Actions that change boot time configuration end with a reboot and
leave the orchestrator in PENDING_REBOOT, which accepts nothing.
"""
import filecmp
import logging
import os
import shutil
import tempfile
import threading
import time
from enum import Enum

from remoteaccessd import settings
from remoteaccessd import sounds as cues
from remoteaccessd.bootconfig import BootConfig
from remoteaccessd.network import NetworkInspector
from remoteaccessd.presses import Ignore, ImportConfiguration, StartProvisioning, ToggleAccess
from remoteaccessd.sounds import Sounds
from remoteaccessd.wps import WpsSession

log = logging.getLogger(__name__)


class ToggleMode(Enum):
    OVERLAY = "useOverlay"       # dtoverlay in /boot/config.txt + reboot
    DIRECT_CONFIG = "useIwconfig"  # iwconfig txpower, immediate


class State(Enum):
    IDLE = "idle"
    BUSY = "busy"
    PENDING_REBOOT = "pending reboot"


class OrchestratorFault(RuntimeError):
    """An action died half way. The orchestrator stays busy for good."""


def install_file(source, dest):
    """
    Copy source over dest atomically. The copy is made owner-only in the
    destination directory and renamed over dest, so a stick pulled mid-copy
    leaves dest as it was.
    """
    fd, tmp = tempfile.mkstemp(dir=os.path.dirname(dest), prefix="." + os.path.basename(dest) + ".")
    try:
        with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
            out.flush()
            os.fsync(out.fileno())
        os.replace(tmp, dest)
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def same_content(a, b) -> bool:
    try:
        return filecmp.cmp(a, b, shallow=False)
    except OSError:
        return False


class ActionOrchestrator:
    def __init__(
        self,
        runner,
        mode=ToggleMode.OVERLAY,
        network=None,
        boot_config=None,
        sounds=None,
        wpa_config_dir=settings.WPA_CONFIG_DIRECTORY,
        sleep=time.sleep,
        clock=time.time,
    ):
        self.runner = runner
        self.mode = mode
        self.network = network or NetworkInspector(runner)
        self.boot_config = boot_config or BootConfig()
        self.sounds = sounds or Sounds(runner)
        self.wpa_config_dir = wpa_config_dir
        self.sleep = sleep
        self.clock = clock
        self.state = State.IDLE
        self._guard = threading.Lock()
        self._handlers = {
            ToggleAccess: self._toggle_access,
            StartProvisioning: self._start_provisioning,
            ImportConfiguration: self._import_configuration,
        }

    @property
    def wpa_config_path(self):
        return os.path.join(self.wpa_config_dir, settings.WPA_CONFIG_FILENAME)

    def submit(self, action) -> bool:
        """
        Run action to completion if nothing else is running. Returns False
        if the action was ignored or dropped.
        """
        if isinstance(action, Ignore):
            return False
        handler = self._handlers[type(action)]
        if not self._guard.acquire(blocking=False):
            log.info("Ignoring %s, %s", type(action).__name__, self.state.value)
            return False
        self.state = State.BUSY
        try:
            if handler(action):
                self._reboot()
                return True
        except OrchestratorFault:
            raise
        except Exception as e:
            raise OrchestratorFault(f"{type(action).__name__} failed: {e!r}") from e
        self.state = State.IDLE
        self._guard.release()
        return True

    def _reboot(self):
        log.info("Rebooting...")
        self.sounds.play(cues.REBOOTING)
        self.state = State.PENDING_REBOOT
        if not self.runner.reboot():
            raise OrchestratorFault("reboot command failed")

    # Each flow returns True when the device has to reboot.

    def _toggle_access(self, action=None):
        device = self.network.wifi_device_name()
        if device is None:
            log.error("Failed to find WiFi device name")
            return False
        if self.mode is ToggleMode.OVERLAY:
            return self._toggle_overlay(device)
        enable = not self.network.has_peer_address(device)
        log.info("Turning WiFi %s", "on" if enable else "off")
        self.sounds.play(cues.WIFI_ON if enable else cues.WIFI_OFF)
        self.network.set_radio(device, enable)
        self.network.set_services_running(enable)
        return False

    def _toggle_overlay(self, device):
        enable = not self.boot_config.wifi_enabled()
        try:
            must_reboot = self.boot_config.set_wifi_enabled(enable)
        except OSError as e:
            log.error("Could not update %s: %s", self.boot_config.path, e)
            return False
        if must_reboot:
            log.info("Turning WiFi %s", "on" if enable else "off")
            self.sounds.play(cues.WIFI_ON if enable else cues.WIFI_OFF)
            self.network.set_power_saving(device, not enable)
        # services have to be in the right state after the reboot too
        self.network.set_services_enabled(enable)
        if not must_reboot:
            self.network.set_services_running(enable)
        return must_reboot

    def _start_provisioning(self, action=None):
        device = self.network.wifi_device_name()
        if device is None:
            log.warning("Failed to find WiFi device name. Enabling WiFi")
            return self._toggle_access()
        if self.network.has_ipv4_address(device):
            log.info("WiFi already connected")
            return False
        log.info("Starting WPS connection...")
        wps = WpsSession(self.runner, device, self.wpa_config_path, sleep=self.sleep, clock=self.clock)
        if not wps.ensure_update_config():
            self.sounds.play(cues.FAILED)
            return False
        wps.remove_networks()
        peer = wps.find_peer()
        if peer is None:
            log.error("Failed to find WPS-enabled WiFi access points")
            self.sounds.play(cues.FAILED)
            return False
        log.info("Connecting to %s (%s)", peer.ssid, peer.bssid)
        self.sounds.play(cues.WPS_STARTED)
        if not wps.push_button(peer.bssid):
            log.error("Failed to connect to access point %s", peer.bssid)
            self.sounds.play(cues.FAILED)
            return False
        self.sleep(settings.WPS_SETTLE_SEC)
        if wps.config_updated():
            log.info("Connected to %s (%s). %s updated", peer.ssid, peer.bssid, self.wpa_config_path)
            self.sounds.play(cues.SUCCEEDED)
        else:
            log.error("WPS with %s did not store a network in %s", peer.bssid, self.wpa_config_path)
            self.sounds.play(cues.FAILED)
        return False

    def _import_configuration(self, action):
        source = action.path
        dest = os.path.join(self.wpa_config_dir, os.path.basename(source))
        if same_content(source, dest):
            log.info("File in %s is the same as %s", source, dest)
            return False
        log.info("Copying %s to %s", source, dest)
        try:
            install_file(source, dest)
        except OSError as e:
            log.error("Copying failed: %s", e)
            return False
        self.sounds.play(cues.WPA_UPDATED)
        return True
