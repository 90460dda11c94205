"""Signal bookkeeping for the treegen command line.

SIGINT and SIGPIPE are recorded rather than left to interrupt the process, so
that output stops at a line boundary and the CLI exits with the conventional
status code for the signal.
"""

import atexit
import os
import signal
import sys
from threading import Event
from types import FrameType
from typing import Any, Dict, List, Optional, Tuple

SIGINT_EXIT_CODE = 130
SIGPIPE_EXIT_CODE = 141


class SignalHandler:
    """Records SIGINT and SIGPIPE and restores the previous handler after the first one.

    SIGPIPE is only handled on platforms that define it.

    Attributes:
        sigpipe_received: Event that is set when a SIGPIPE signal is received.
        sigint_received: Event that is set when a SIGINT signal is received.
    """

    def __init__(self) -> None:
        self.sigpipe_received = Event()
        self.sigint_received = Event()
        self._original_handlers: Dict[int, Any] = {}

    def _signals(self) -> List[Tuple[int, Any]]:
        handled: List[Tuple[int, Any]] = [(signal.SIGINT, self.handle_sigint)]
        if hasattr(signal, "SIGPIPE"):
            handled.append((signal.SIGPIPE, self.handle_sigpipe))
        return handled

    def install(self) -> None:
        """Install the handlers, remembering the ones they replace."""
        for signum, handler in self._signals():
            self._original_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, handler)

    def _restore(self, signum: int) -> None:
        original = self._original_handlers.get(signum)
        signal.signal(signum, original if original is not None else signal.SIG_DFL)

    def handle_sigpipe(self, signum: int, frame: Optional[FrameType]) -> None:
        """Record SIGPIPE, e.g. when the reading end of a pipe went away."""
        self.sigpipe_received.set()
        self._restore(signum)

    def handle_sigint(self, signum: int, frame: Optional[FrameType]) -> None:
        """Record SIGINT (Ctrl+C)."""
        self.sigint_received.set()
        self._restore(signum)

    @property
    def interrupted(self) -> bool:
        """Whether either signal has been received."""
        return self.sigpipe_received.is_set() or self.sigint_received.is_set()

    def exit_code(self) -> Optional[int]:
        """Exit status matching the received signal, or None if none was received."""
        if self.sigpipe_received.is_set():
            return SIGPIPE_EXIT_CODE
        if self.sigint_received.is_set():
            return SIGINT_EXIT_CODE
        return None


# Create a singleton instance for the application
signal_handler = SignalHandler()


def setup_signal_handling() -> None:
    """Install the application's signal handlers."""
    signal_handler.install()


def cleanup() -> None:
    """Point stdout at the null device after an interruption.

    This keeps the interpreter from reporting a broken stdout while shutting down.
    """
    if signal_handler.interrupted:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())


atexit.register(cleanup)
