"""
Key event sources. Either a Linux input device (/dev/input/eventN, e.g. a
keyboard or an IR remote) or a push button on a GPIO pin ("gpio:27").
Both deliver KeyEvents for the classifier.
"""
import logging
import queue
import select
import time

from evdev import InputDevice, ecodes
from gpiozero import Button
from gpiozero.exc import GPIOZeroError

from remoteaccessd import settings
from remoteaccessd.presses import KEY_DOWN, KEY_UP, KeyEvent

log = logging.getLogger(__name__)

GPIO_PREFIX = "gpio:"


class InputDeviceError(Exception):
    pass


class EvdevKeySource:
    def __init__(self, path):
        try:
            self.device = InputDevice(path)
        except OSError as e:
            raise InputDeviceError(f'Failed to open "{path}" for reading: {e}') from e
        log.info('Opened "%s" for reading. Device name: "%s"', path, self.device.name)

    def read(self, timeout):
        """Wait up to timeout seconds, return the events that arrived."""
        r, _, _ = select.select([self.device.fd], [], [], timeout)
        if not r:
            return []
        try:
            return [
                KeyEvent(ev.type, ev.code, ev.value, ev.timestamp())
                for ev in self.device.read()
            ]
        except BlockingIOError:
            return []
        except OSError as e:
            log.error("Input device read failed: %s", e)
            return []

    def close(self):
        self.device.close()


class GpioKeySource:
    """
    A button between a GPIO pin and ground. gpiozero calls back from its own
    thread, so events go through a queue and are consumed by the main loop.
    """

    def __init__(self, pin, keycode=settings.TOGGLE_KEYCODE):
        self.keycode = keycode
        self.events = queue.Queue()
        try:
            self.button = Button(pin, bounce_time=settings.GPIO_BOUNCE_SEC)
        except GPIOZeroError as e:
            raise InputDeviceError(f"Failed to open GPIO {pin}: {e}") from e
        self.button.when_pressed = lambda: self._put(KEY_DOWN)
        self.button.when_released = lambda: self._put(KEY_UP)
        log.info("Listening to button on GPIO %s", pin)

    def _put(self, value):
        self.events.put(KeyEvent(ecodes.EV_KEY, self.keycode, value, time.time()))

    def read(self, timeout):
        try:
            events = [self.events.get(timeout=timeout)]
        except queue.Empty:
            return []
        while True:
            try:
                events.append(self.events.get_nowait())
            except queue.Empty:
                return events

    def close(self):
        self.button.close()


def open_source(name):
    """Open "gpio:<pin>" or an input device path."""
    if name.startswith(GPIO_PREFIX):
        pin = name[len(GPIO_PREFIX):]
        if not pin.isdigit():
            raise InputDeviceError(f"Bad GPIO pin {pin!r}")
        return GpioKeySource(int(pin))
    return EvdevKeySource(name)
