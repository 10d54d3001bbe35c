import os
import select
import threading
from evdev import InputDevice, list_devices, ecodes

from . import Watcher, DeviceAccessError, now_micros

# Only motion counts; key and sync events carry no polling information
MOTION_TYPES = (ecodes.EV_REL, ecodes.EV_ABS)
POLL_TIMEOUT = 0.1


def _node_number(path):
    name = os.path.basename(path)
    digits = name[len("event"):]
    return int(digits) if digits.isdigit() else -1


class EvdevWatcher(Watcher):
    """Polls every readable /dev/input/event* node from a single thread."""

    def __init__(self):
        self._stop = threading.Event()
        self._thread = None
        self.devices = {}  # device id -> InputDevice

    def check_access(self):
        if not list_devices():
            raise DeviceAccessError(
                "Cannot access /dev/input devices.\n"
                "To run without root, add your user to the 'input' group:\n"
                "  sudo usermod -aG input $USER\n"
                "Then log out and log back in, or run with sudo."
            )

    def discover(self):
        found = {}
        for path in sorted(list_devices(), key=_node_number):
            try:
                device = InputDevice(path)
            except OSError:
                # Unplugged or not ours to read, skip it
                continue
            device_id = os.path.basename(path)
            self.devices[device_id] = device
            found[device_id] = device.name or "Unknown"
        return found

    def _dispatch(self, device_id, events, store):
        for event in events:
            if event.type in MOTION_TYPES:
                store.update(device_id, now_micros())

    def _drop(self, device_id):
        device = self.devices.pop(device_id, None)
        if device is not None:
            try:
                device.close()
            except OSError:
                pass

    def _poll_loop(self, store):
        while not self._stop.is_set():
            by_fd = {dev.fd: device_id for device_id, dev in self.devices.items()}
            if not by_fd:
                self._stop.wait(POLL_TIMEOUT)
                continue

            # poll() has no FD_SETSIZE ceiling on descriptor numbers
            poller = select.poll()
            for fd in by_fd:
                poller.register(fd, select.POLLIN)

            for fd, _ in poller.poll(int(POLL_TIMEOUT * 1000)):
                device_id = by_fd[fd]
                try:
                    events = list(self.devices[device_id].read())
                except BlockingIOError:
                    continue
                except OSError:
                    # Device went away mid-run
                    self._drop(device_id)
                    continue
                self._dispatch(device_id, events, store)

    def start(self, store):
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            args=(store,),
            daemon=True,
            name="EvdevWatcher-poll"
        )
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
        for device_id in list(self.devices):
            self._drop(device_id)
