"""
hang: Shutdown Listener
==========================

What:  Logs "<process>: stopped by the user" and ends the process when the
       user stops the service (SIGINT / SIGTERM).
How:   The listener waits on a cancellation token (a threading.Event).
       Operating-system signals reach it only through
       install_signal_handlers(), a small bridge installed by the entry
       point, so nothing else in hang depends on signal handling and the
       listener can be driven directly with trigger() in tests.

State machine:
    ARMED ──trigger()──▶ TRIGGERED ──log + exit(0)──▶ EXITED

    There is no way back: once armed the listener cannot be disarmed, and the
    default exit function (os._exit) ends the process immediately without
    draining in-flight requests. SIGKILL cannot be caught and is not logged.
"""

import enum
import os
import signal
import threading
from typing import Callable, Iterable, Optional, Union

from hang.logger import Logger, get_logger

ExitFunc = Callable[[int], object]
ProcessName = Union[str, Callable[[], str]]

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ListenerState(str, enum.Enum):
    ARMED = "armed"
    TRIGGERED = "triggered"
    EXITED = "exited"


class ShutdownListener:
    """
    Waits for a stop request, logs it once, and exits with code 0.

    `process_name` is a string or a callable returning one; a callable is read
    when the stop line is written, so a later rename is reflected.
    """

    def __init__(
        self,
        process_name: ProcessName,
        log: Optional[Logger] = None,
        exit_func: ExitFunc = os._exit,
    ):
        self._process_name = process_name
        self.log = log if log is not None else get_logger()
        self._exit = exit_func
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.state = ListenerState.ARMED

    @property
    def process_name(self) -> str:
        if callable(self._process_name):
            return self._process_name()
        return self._process_name

    @property
    def triggered(self) -> bool:
        return self._stop.is_set()

    def trigger(self) -> None:
        """Request shutdown. Safe to call from a signal handler or any thread."""
        self._stop.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until trigger() is called, then log and exit.

        Returns False if `timeout` elapsed first. With the default exit
        function it never returns once triggered.
        """
        if not self._stop.wait(timeout):
            return False

        with self._lock:
            if self.state is not ListenerState.ARMED:
                return True
            self.state = ListenerState.TRIGGERED

        self.log.info("%s: stopped by the user", self.process_name)
        self.state = ListenerState.EXITED
        self._exit(0)
        return True

    def start(self) -> threading.Thread:
        """Run wait() on a daemon thread; returns the thread."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.wait,
                name=f"{self.process_name}-shutdown",
                daemon=True,
            )
            self._thread.start()
        return self._thread


def install_signal_handlers(
    listener: ShutdownListener,
    signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
) -> None:
    """
    Bridge OS stop signals to `listener.trigger()`.

    Must be called from the main thread (a `signal` module constraint).
    """
    def _on_signal(signum, frame):
        listener.trigger()

    for sig in signals:
        signal.signal(sig, _on_signal)


def log_start_and_stop(
    process_name: ProcessName,
    log: Optional[Logger] = None,
    exit_func: ExitFunc = os._exit,
) -> ShutdownListener:
    """
    Log "<process>: started" and arm a background listener on SIGINT/SIGTERM.

    For processes that are not hang services (workers, consumers) but want
    the same start/stop log lines.
    """
    listener = ShutdownListener(process_name, log, exit_func)
    install_signal_handlers(listener)
    listener.start()
    listener.log.info("%s: started", listener.process_name)
    return listener
