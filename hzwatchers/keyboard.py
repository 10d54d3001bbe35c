from Xlib import X

from .x11 import RecordWatcher


# Only presses count; releases would double the measured rate
class KeyboardWatcher(RecordWatcher):
    DEVICE_ID = 'device1'
    DEVICE_NAME = 'Keyboard'
    EVENT_TYPE = X.KeyPress
