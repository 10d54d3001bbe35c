import threading
from Xlib import display, error
from Xlib.ext import record
from Xlib.protocol import rq

from . import Watcher, DeviceAccessError, now_micros


class RecordWatcher(Watcher):
    """Feeds one fixed device from X11 RECORD device events.

    Subclasses set DEVICE_ID, DEVICE_NAME and EVENT_TYPE. The record
    callback runs on the recorder thread, so it only timestamps and hands
    off to the store.
    """
    DEVICE_ID = None
    DEVICE_NAME = None
    EVENT_TYPE = None

    def __init__(self):
        self._control = None
        self._ctx = None
        self._thread = None

    def check_access(self):
        try:
            d = display.Display()
        except error.DisplayError as e:
            raise DeviceAccessError(
                f"Cannot open X display: {e}\n"
                "Run inside an X11 session or set DISPLAY."
            ) from e
        try:
            if not d.has_extension('RECORD'):
                raise DeviceAccessError(
                    "X server has no RECORD extension.\n"
                    "Enable it in the X server config, or use HZWATCH_BACKEND=evdev."
                )
        finally:
            d.close()

    def discover(self):
        return {self.DEVICE_ID: self.DEVICE_NAME}

    def _handle_event(self, event, store):
        if event.type == self.EVENT_TYPE:
            store.update(self.DEVICE_ID, now_micros())

    def start(self, store):
        # Recording blocks its connection, so disabling goes through a second one
        self._control = display.Display()
        record_display = display.Display()

        self._ctx = record_display.record_create_context(
            0,
            [record.AllClients],
            [{
                'core_requests': (0, 0),
                'core_replies': (0, 0),
                'ext_requests': (0, 0, 0, 0),
                'ext_replies': (0, 0, 0, 0),
                'delivered_events': (0, 0),
                'device_events': (self.EVENT_TYPE, self.EVENT_TYPE),
                'errors': (0, 0),
                'client_started': False,
                'client_died': False,
            }]
        )

        def callback(reply):
            if reply.category != record.FromServer or reply.client_swapped:
                return
            if not reply.data or len(reply.data) < 2:
                return

            data = reply.data
            while data:
                event, data = rq.EventField(None).parse_binary_value(
                    data, record_display.display, None, None
                )
                self._handle_event(event, store)

        def record_thread():
            try:
                record_display.record_enable_context(self._ctx, callback)
            finally:
                record_display.record_free_context(self._ctx)
                record_display.close()

        self._thread = threading.Thread(
            target=record_thread,
            daemon=True,
            name=f"{type(self).__name__}-X11"
        )
        self._thread.start()

    def stop(self):
        if self._control is None:
            return
        # start() may have failed before the recorder was running
        if self._ctx is not None and self._thread is not None:
            self._control.record_disable_context(self._ctx)
            self._control.flush()
            self._thread.join(timeout=1.0)
        self._control.close()
        self._control = None
