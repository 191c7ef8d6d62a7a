"""
Headless mode: run one start/stop cycle driven by OS termination signals.
"""
import signal
import logging
import threading
from typing import Iterable, Optional

from vision_service.lifecycle import LifecycleController

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Wake interval so the wait also returns promptly where lock waits are not
# interruptible by signals.
_WAIT_INTERVAL = 0.5


def run_headless(
    controller: LifecycleController,
    stop_event: Optional[threading.Event] = None,
    signals: Iterable[signal.Signals] = TERMINATION_SIGNALS,
) -> None:
    """Start the service, block until a termination signal, then stop once.

    Must be called from the main thread. ``stop_event`` may be set by other
    code to request the same shutdown a signal would.
    """
    stop_event = stop_event or threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, initiating graceful shutdown...")
        stop_event.set()

    previous = {sig: signal.signal(sig, signal_handler) for sig in signals}
    try:
        controller.start()
        logger.info("Service running in headless mode")

        while not stop_event.is_set():
            stop_event.wait(_WAIT_INTERVAL)

        controller.stop()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
