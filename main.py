#!/usr/bin/env python3
import os
import sys
import signal
import threading

from hzwatchers import RateStore, DeviceAccessError

POLL_INTERVAL = 0.1
BACKEND_ENV = "HZWATCH_BACKEND"

USAGE = """Usage: {prog} [-n|-h]
-n, --nonverbose    nonverbose mode
-h, --help          show this help"""

# Process-wide run flag; signal handlers can only reach it as a global
shutdown = threading.Event()


def _request_shutdown(signum, frame):
    shutdown.set()


def install_signal_handlers():
    signal.signal(signal.SIGINT, _request_shutdown)
    signal.signal(signal.SIGTERM, _request_shutdown)


def default_backend(platform=None):
    platform = platform or sys.platform
    if platform.startswith(("linux", "freebsd")):
        return "evdev"
    return "hooks"


def load_watchers(backend):
    # Imports stay local: each backend pulls in an OS-specific library
    if backend == "evdev":
        from hzwatchers.evdev_watcher import EvdevWatcher
        return [EvdevWatcher()]
    if backend == "x11":
        from hzwatchers.mouse import MouseWatcher
        from hzwatchers.keyboard import KeyboardWatcher
        return [MouseWatcher(), KeyboardWatcher()]
    if backend == "hooks":
        from hzwatchers.hooks import HookWatcher
        return [HookWatcher()]
    if backend == "dummy":
        from hzwatchers.dummy import DummyWatcher
        return [DummyWatcher()]
    raise ValueError(f"Unknown backend: {backend}")


def run_core(watchers, verbose=True, stop_event=shutdown):
    store = RateStore(watchers, verbose)
    if not store.records:
        print("No input devices found", file=sys.stderr)
        return 1

    if verbose:
        store.announce()
    print("Press CTRL-C to exit.\n", flush=True)

    try:
        for w in watchers:
            w.start(store)
        while not stop_event.wait(POLL_INTERVAL):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        for w in watchers:
            w.stop()

    store.report_final()
    return 0


def main(argv=None):
    argv = sys.argv if argv is None else argv
    verbose = True

    for arg in argv[1:]:
        if arg in ("-h", "--help"):
            print(USAGE.format(prog=argv[0]))
            return 0
        elif arg in ("-n", "--nonverbose"):
            verbose = False
        else:
            print(f"Unknown option: {arg}", file=sys.stderr)
            return 0

    backend = os.environ.get(BACKEND_ENV) or default_backend()
    try:
        watchers = load_watchers(backend)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    try:
        for w in watchers:
            w.check_access()
    except DeviceAccessError as e:
        print(e, file=sys.stderr)
        return 1

    install_signal_handlers()
    return run_core(watchers, verbose)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
