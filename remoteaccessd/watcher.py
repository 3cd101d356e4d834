"""
Watches a USB stick mount point for a wpa_supplicant.conf. Fires once per
insertion: the directory has to disappear (or become empty) before the file
triggers an import again.
"""
import logging
import os

from remoteaccessd import settings
from remoteaccessd.presses import ImportConfiguration

log = logging.getLogger(__name__)


class DirectoryWatcher:
    def __init__(self, directory, filename=settings.WPA_CONFIG_FILENAME):
        self.directory = directory
        self.filename = filename
        self.previously_present = False

    def _has_content(self):
        if not os.path.isdir(self.directory):
            return False
        with os.scandir(self.directory) as it:
            return any(True for _ in it)

    def _find_target(self):
        with os.scandir(self.directory) as it:
            for entry in it:
                if entry.name == self.filename and entry.is_file():
                    return entry.path
        return None

    def poll(self):
        """Returns ImportConfiguration on the absent -> present edge, else None."""
        try:
            if not self._has_content():
                self.previously_present = False
                return None
            if self.previously_present:
                return None
            log.debug("New content found in %s", self.directory)
            path = self._find_target()
        except OSError as e:
            log.debug("Cannot read %s: %s", self.directory, e)
            self.previously_present = False
            return None
        if path is None:
            # media may still be mounting, look again on the next poll
            return None
        self.previously_present = True
        return ImportConfiguration(path)
