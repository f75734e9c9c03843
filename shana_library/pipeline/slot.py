"""Single-slot register for the currently running child process."""

import logging
import threading

import psutil

logger = logging.getLogger(__name__)


class ProcessSlot:
    """Holds at most one running process, shared with the interrupt listener.

    The pipeline is the only writer (publish on start, clear on exit); the
    listener only reads it through signal().
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._process: psutil.Popen | None = None

    def publish(self, process: psutil.Popen) -> None:
        with self._lock:
            self._process = process

    def clear(self) -> None:
        with self._lock:
            self._process = None

    def current(self) -> psutil.Popen | None:
        with self._lock:
            return self._process

    def signal(self) -> bool:
        """Ask the published process to terminate gracefully (SIGTERM).

        Returns:
            True if a termination request was sent
        """
        with self._lock:
            process = self._process
            if process is None:
                return False
            try:
                process.terminate()
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                logger.debug(f"Could not terminate pid {process.pid}: {e}")
                return False
            logger.debug(f"Sent SIGTERM to pid {process.pid}")
            return True
