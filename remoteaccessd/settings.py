"""
Constants for remoteaccessd. Paths and switches can be overridden from the
environment (systemd unit Environment= lines).
"""
import os

from evdev import ecodes


def _flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("", "0", "false", "no", "off")


DEBUG = _flag("REMOTEACCESSD_DEBUG", False)

# Audio feedback
PLAY_AUDIO = _flag("REMOTEACCESSD_AUDIO", True)
AUDIO_CMD = os.environ.get("REMOTEACCESSD_AUDIO_CMD", "aplay")
DATA_PATH = os.environ.get("REMOTEACCESSD_DATA", "/usr/local/share/remoteaccessd")

# WiFi configuration files
WPA_CONFIG_FILENAME = "wpa_supplicant.conf"
WPA_CONFIG_DIRECTORY = os.environ.get("REMOTEACCESSD_WPA_DIR", "/etc/wpa_supplicant")
BOOT_CONFIG = os.environ.get("REMOTEACCESSD_BOOT_CONFIG", "/boot/config.txt")
DISABLE_WIFI_OVERLAY = "dtoverlay=disable-wifi"

# Services that follow the WiFi state (remote shell + address assignment)
SERVICES_TO_TOGGLE = tuple(
    s.strip()
    for s in os.environ.get("REMOTEACCESSD_SERVICES", "ssh,dhcpcd").split(",")
    if s.strip()
)


def keycode(name):
    """evdev code for a key name like KEY_F12, None if there is no such key."""
    if not name.startswith(("KEY_", "BTN_")):
        return None
    return ecodes.ecodes.get(name)


# Button
TOGGLE_KEY = os.environ.get("REMOTEACCESSD_KEY", "KEY_F12")
TOGGLE_KEYCODE = keycode(TOGGLE_KEY)  # checked by the daemon at startup
WIFI_TOGGLE_DURATION_SEC = 2.0
WPS_START_DURATION_SEC = 5.0
IGNORE_DURATION_SEC = 8.0
GPIO_BOUNCE_SEC = 0.2

# Main loop
POLL_TIMEOUT_SEC = 3.0

# WPS
WPS_SCAN_WAIT_SEC = 3
WPS_SETTLE_SEC = 10
WPS_CONFIG_MAX_AGE_SEC = 13
WPA_RESTART_WAIT_SEC = 3

COMMAND_TIMEOUT_SEC = 30
