"""Background listener turning SIGINT into pipeline interrupts.

The signal handler only enqueues the notification; a daemon thread drains
the queue and calls the interrupt callback, so the foreground stage can
keep blocking on its child process.
"""

import logging
import queue
import signal
import threading
from collections.abc import Callable
from collections.abc import Iterable

logger = logging.getLogger(__name__)

_STOP = object()


class InterruptListener:
    """Delivers OS interrupt notifications to a callback for its lifetime.

    Example:
        >>> with InterruptListener(controller.interrupt):
        ...     controller.run(workspace.path, build_flags)
    """

    def __init__(
        self,
        on_interrupt: Callable[[], None],
        signals: Iterable[signal.Signals] = (signal.SIGINT,),
    ) -> None:
        self.on_interrupt = on_interrupt
        self.signals = tuple(signals)
        # SimpleQueue.put is safe to call from a signal handler
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread: threading.Thread | None = None
        self._previous_handlers: dict[signal.Signals, object] = {}

    def notify(self, signum: int = signal.SIGINT) -> None:
        """Deliver one interrupt notification."""
        self._queue.put(signum)

    def _handle_signal(self, signum, frame) -> None:
        self._queue.put(signum)

    def _listen(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                self.on_interrupt()
            except Exception as e:
                logger.error(f"Interrupt handler failed: {e}")

    def start(self) -> None:
        if self._thread is not None:
            return

        self._thread = threading.Thread(target=self._listen, name="shana-interrupt-listener", daemon=True)
        self._thread.start()

        # Handlers can only be installed from the main thread
        if threading.current_thread() is threading.main_thread():
            for signum in self.signals:
                self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)
        else:
            logger.debug("Not on the main thread, OS signals will not be observed")

    def stop(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join()
            self._thread = None

    def __enter__(self) -> "InterruptListener":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
