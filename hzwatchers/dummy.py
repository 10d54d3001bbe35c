import threading

from . import Watcher, now_micros


# === Synthetic device, no input privileges needed ===
class DummyWatcher(Watcher):
    def __init__(self, rate_hz=500):
        self.rate_hz = rate_hz
        self._stop = threading.Event()
        self._thread = None

    def discover(self):
        return {'dummy0': f'Dummy {self.rate_hz}Hz'}

    def start(self, store):
        def _fake_events():
            interval = 1.0 / self.rate_hz
            while not self._stop.wait(interval):
                store.update('dummy0', now_micros())

        self._stop.clear()
        self._thread = threading.Thread(target=_fake_events, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
