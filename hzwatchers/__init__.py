import time
import threading
from collections import deque
from typing import Dict, List, Optional

# Number of instantaneous samples kept per device
HZ_LIST = 64
# Samples at or above this rate are clock artifacts or double fires
MAX_HZ = 20000


def now_micros() -> int:
    """Monotonic timestamp in whole microseconds."""
    return time.monotonic_ns() // 1000


class DeviceAccessError(Exception):
    """The OS refused access to the input devices a watcher needs."""


class DeviceRecord:
    def __init__(self, display_name: str):
        self.lock = threading.Lock()
        self.display_name = display_name
        self.recent_rates = deque(maxlen=HZ_LIST)
        self.smoothed_rate = 0
        self.last_event_time: Optional[int] = None

    def update(self, now: int, verbose: bool = False):
        """Fold one event seen at `now` (microseconds) into the running average."""
        with self.lock:
            if self.last_event_time is not None:
                delta = now - self.last_event_time
                if delta > 0:
                    hz = 1_000_000 // delta
                    if 0 < hz < MAX_HZ:
                        # deque drops the oldest sample once full
                        self.recent_rates.append(hz)
                        self.smoothed_rate = sum(self.recent_rates) // len(self.recent_rates)
                        if verbose:
                            print(f"{self.display_name}: Latest {hz:5d}Hz, "
                                  f"Average {self.smoothed_rate:5d}Hz", flush=True)
            self.last_event_time = now

    def report_final(self):
        with self.lock:
            if self.smoothed_rate > 0:
                print(f"Average for {self.display_name}: {self.smoothed_rate:5d}Hz")


class Watcher:
    # Fixed {device_id: display_name} set for sources without enumeration
    DEVICES: Dict[str, str] = {}

    def check_access(self):
        """Raise DeviceAccessError when the source cannot observe input."""

    def discover(self) -> Dict[str, str]:
        return dict(self.DEVICES)

    def start(self, store: "RateStore"):
        raise NotImplementedError

    def stop(self):
        pass


class RateStore:
    def __init__(self, watchers: List[Watcher], verbose: bool = True):
        self.verbose = verbose
        self.watchers = watchers

        # One record per discovered device, in discovery order
        self.records: Dict[str, DeviceRecord] = {}
        for w in watchers:
            for device_id, name in w.discover().items():
                self.records[device_id] = DeviceRecord(name)

    def announce(self):
        for device_id, record in self.records.items():
            print(f"{device_id}: {record.display_name}")
        print()

    def update(self, device_id: str, now: int):
        record = self.records.get(device_id)
        if record is None:
            return
        record.update(now, self.verbose)

    def report_final(self):
        print()
        for record in self.records.values():
            record.report_final()
