from . import Watcher, now_micros


class HookWatcher(Watcher):
    """Global mouse/keyboard hooks through pynput (Windows, macOS).

    pynput delivers every callback on its own listener thread, one for the
    mouse and one for the keyboard. There is no per-device enumeration, so
    all mice report as Mouse and all keyboards as Keyboard.
    """
    DEVICES = {
        'device0': 'Mouse',
        'device1': 'Keyboard',
    }

    def __init__(self):
        self._store = None
        self._mouse_listener = None
        self._keyboard_listener = None

    def _on_move(self, x, y):
        self._store.update('device0', now_micros())

    def _on_press(self, key):
        self._store.update('device1', now_micros())

    def start(self, store):
        # pynput picks its OS backend at import time
        from pynput import keyboard, mouse

        self._store = store
        self._mouse_listener = mouse.Listener(on_move=self._on_move)
        self._keyboard_listener = keyboard.Listener(on_press=self._on_press)
        self._mouse_listener.start()
        self._keyboard_listener.start()

    def stop(self):
        if self._mouse_listener:
            self._mouse_listener.stop()
        if self._keyboard_listener:
            self._keyboard_listener.stop()
