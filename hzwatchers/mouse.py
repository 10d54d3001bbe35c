# hzwatchers/mouse.py
from Xlib import X

from .x11 import RecordWatcher


class MouseWatcher(RecordWatcher):
    DEVICE_ID = 'device0'
    DEVICE_NAME = 'Mouse'
    EVENT_TYPE = X.MotionNotify
