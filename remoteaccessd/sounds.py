"""Audio cues played on the device speaker."""
import logging
import os

from remoteaccessd import settings

log = logging.getLogger(__name__)

WIFI_ON = "wifi_on"
WIFI_OFF = "wifi_off"
WPS_STARTED = "wps_started"
SUCCEEDED = "succeeded"
FAILED = "failed"
WPA_UPDATED = "wpa_updated"
REBOOTING = "rebooting"


class Sounds:
    def __init__(self, runner, enabled=settings.PLAY_AUDIO, data_path=settings.DATA_PATH):
        self.runner = runner
        self.enabled = enabled
        self.data_path = data_path

    def play(self, name):
        if not self.enabled:
            return
        path = os.path.join(self.data_path, name + ".wav")
        if not self.runner.run([settings.AUDIO_CMD, "-q", path]):
            log.warning("Could not play %s", path)
