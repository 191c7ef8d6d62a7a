"""
Interactive mode: an operator starts and stops the service from a prompt.

A reader thread hands one command at a time to the control loop through a
single-slot queue; the control loop is the only code that calls the
controller.
"""
import sys
import queue
import logging
import threading
from typing import Optional, TextIO

from vision_service.lifecycle import LifecycleController

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[H\033[2J"
BANNER = (
    "Computer Vision Service Control",
    "==============================",
    "Press 's' to start the service",
    "Press 'q' to stop the service",
    "Press 'x' to exit",
    "==============================",
)

CMD_START = "s"
CMD_STOP = "q"
CMD_EXIT = "x"
END_OF_INPUT = None

MSG_STARTED = "Service started successfully"
MSG_ALREADY_RUNNING = "Service is already running"
MSG_STOPPED = "Service stopped successfully"
MSG_NOT_RUNNING = "Service is not running"
MSG_EXITING = "Exiting..."
MSG_USAGE = "Invalid command. Use 's' to start, 'q' to stop, or 'x' to exit"


class InteractiveConsole:
    """Single-character command loop over a LifecycleController.

    ``running`` is the console's own view of whether it started the
    service; it is not read back from the controller.
    """

    def __init__(
        self,
        controller: LifecycleController,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.controller = controller
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.running = False
        self._commands: "queue.Queue[Optional[str]]" = queue.Queue(maxsize=1)
        self._reader: Optional[threading.Thread] = None

    def _say(self, message: str) -> None:
        print(message, file=self.stdout, flush=True)

    def print_banner(self) -> None:
        self.stdout.write(CLEAR_SCREEN)
        for line in BANNER:
            self._say(line)

    def _read_input(self) -> None:
        """Publish the first token of each non-blank line, then end-of-input."""
        for line in iter(self.stdin.readline, ""):
            tokens = line.split()
            if tokens:
                self._commands.put(tokens[0])
        self._commands.put(END_OF_INPUT)

    def start_reader(self) -> None:
        self._reader = threading.Thread(target=self._read_input, name="stdin-reader", daemon=True)
        self._reader.start()

    def dispatch(self, command: Optional[str]) -> bool:
        """Handle one command. Returns False when the loop should end."""
        if command == CMD_START:
            if not self.running:
                self.controller.start()
                self.running = True
                self._say(MSG_STARTED)
            else:
                self._say(MSG_ALREADY_RUNNING)
        elif command == CMD_STOP:
            if self.running:
                self.controller.stop()
                self.running = False
                self._say(MSG_STOPPED)
            else:
                self._say(MSG_NOT_RUNNING)
        elif command == CMD_EXIT or command is END_OF_INPUT:
            if self.running:
                self.controller.stop()
                self.running = False
            self._say(MSG_EXITING)
            return False
        else:
            logger.debug(f"Rejected interactive command {command!r}")
            self._say(MSG_USAGE)
        return True

    def run(self) -> None:
        """Show the banner and process commands until exit or end of input."""
        self.print_banner()
        self.start_reader()
        while self.dispatch(self._commands.get()):
            pass
