"""
remoteaccessd main loop. Run as root from systemd:

    remoteaccessd /dev/input/event2 /media/usb useOverlay

Arguments: input device to watch for the toggle key (or gpio:<pin>),
directory to watch for a wpa_supplicant.conf and optionally the WiFi toggle
mode, "useOverlay" (default) or "useIwconfig".
"""
import argparse
import logging
import os
import signal
import sys
import time

from remoteaccessd import __version__, settings
from remoteaccessd.commands import CommandRunner
from remoteaccessd.orchestrator import ActionOrchestrator, OrchestratorFault, ToggleMode
from remoteaccessd.presses import PressClassifier
from remoteaccessd.sources import InputDeviceError, open_source
from remoteaccessd.watcher import DirectoryWatcher

log = logging.getLogger("remoteaccessd")

EXIT_OK = 0
EXIT_NO_INPUT = 1
EXIT_USAGE = 2  # argparse errors
EXIT_FAULT = 3
EXIT_NOT_ROOT = 4


class Daemon:
    def __init__(self, source, watcher, orchestrator, classifier=None,
                 poll_timeout=settings.POLL_TIMEOUT_SEC, clock=time.time):
        self.source = source
        self.watcher = watcher
        self.orchestrator = orchestrator
        self.classifier = classifier or PressClassifier()
        self.poll_timeout = poll_timeout
        self.clock = clock
        # end of the last action; key events stamped earlier were made while
        # it ran and are dropped, not replayed
        self.settled_at = None
        self.quit = False

    def request_quit(self, signum, frame=None):
        log.info("Signal received: %d. Quitting...", signum)
        self.quit = True

    def install_signal_handlers(self):
        for sig in (signal.SIGINT, signal.SIGHUP, signal.SIGTERM):
            # keep signals ignored if the parent said so (nohup)
            if signal.getsignal(sig) == signal.SIG_IGN:
                continue
            signal.signal(sig, self.request_quit)

    def _submit(self, action):
        if self.orchestrator.submit(action):
            self.settled_at = self.clock()

    def step(self):
        """One iteration: wait for key events, then look at the watch directory."""
        for event in self.source.read(self.poll_timeout):
            if self.settled_at is not None and event.timestamp < self.settled_at:
                log.debug("Dropping key event from while busy: %s", event)
                continue
            action = self.classifier.feed(event)
            if action is not None:
                self._submit(action)
        action = self.watcher.poll()
        if action is not None:
            self._submit(action)

    def run(self):
        while not self.quit:
            self.step()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="remoteaccessd",
        description="Toggle WiFi remote access with a button, connect via WPS "
        "or import a wpa_supplicant.conf from a USB stick.",
        epilog="e.g. remoteaccessd /dev/input/event2 /media/usb/ useOverlay",
    )
    parser.add_argument("input_device", help="input event device, or gpio:<pin>")
    parser.add_argument("watch_dir", help=f"directory to watch for {settings.WPA_CONFIG_FILENAME}")
    parser.add_argument(
        "mode",
        nargs="?",
        default=ToggleMode.OVERLAY.value,
        choices=[m.value for m in ToggleMode],
        help="how to toggle WiFi (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def setup_logging(debug=settings.DEBUG):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="remoteaccessd: %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    if settings.TOGGLE_KEYCODE is None:
        log.error("Unknown key %r in REMOTEACCESSD_KEY", settings.TOGGLE_KEY)
        return EXIT_USAGE
    if os.geteuid() != 0:
        log.error("Must be run as root!")
        return EXIT_NOT_ROOT
    mode = ToggleMode(args.mode)
    try:
        source = open_source(args.input_device)
    except InputDeviceError as e:
        log.error("%s", e)
        return EXIT_NO_INPUT
    log.info('Watching directory "%s" for %s', args.watch_dir, settings.WPA_CONFIG_FILENAME)
    daemon = Daemon(
        source,
        DirectoryWatcher(args.watch_dir),
        ActionOrchestrator(CommandRunner(), mode),
    )
    daemon.install_signal_handlers()
    try:
        daemon.run()
    except OrchestratorFault as e:
        log.critical("%s", e, exc_info=True)
        return EXIT_FAULT
    finally:
        source.close()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
