"""
Host command execution. Everything remoteaccessd does to the system
(iwconfig, systemctl, wpa_cli, aplay, reboot) goes through CommandRunner so
the decision logic can be tested with a scripted runner.
"""
import logging
import subprocess

from remoteaccessd import settings

log = logging.getLogger(__name__)


class CommandRunner:
    """Runs commands given as argument lists. Never raises on failure."""

    def __init__(self, timeout=settings.COMMAND_TIMEOUT_SEC):
        self.timeout = timeout

    def run(self, cmd) -> bool:
        ok, _ = self.run_capture(cmd)
        return ok

    def run_capture(self, cmd):
        """Run cmd, return (success, stdout)."""
        log.debug("+ %s", " ".join(cmd))
        try:
            r = subprocess.run(
                cmd,
                timeout=self.timeout,
                capture_output=True,
                text=True,
            )
        except subprocess.TimeoutExpired:
            log.error("%s: timeout after %ss", cmd[0], self.timeout)
            return False, ""
        except OSError as e:
            log.error("%s: %s", cmd[0], e)
            return False, ""
        if r.returncode != 0:
            log.debug("%s exit %d stderr=%r", cmd[0], r.returncode, r.stderr.strip())
            return False, r.stdout
        return True, r.stdout

    def reboot(self) -> bool:
        return self.run(["reboot"])
