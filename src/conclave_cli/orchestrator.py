"""
Session Orchestrator

Single-threaded polling loop of the console client. Every tick it:

    1. advances the identity session
    2. creates the coordination session once, on the first logged-in tick
    3. advances the coordination session
    4. renders responses whose version counter changed since the last tick
    5. polls the line console and dispatches a completed line, or shuts
       down once input has ended
    6. sleeps for the rest of the tick

The order is fixed so that a change produced in step 3 is rendered in the
same tick. Asynchronous output never corrupts the input line: the line is
erased, the notification written, and the prompt and buffered input are
drawn again, one kind at a time.
"""

import logging
import signal
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .commands import build_registry
from .config import ClientConfig
from .console import LineConsole, LineStatus
from .coordination import CoordinationSession, ResponseKind
from .errors import CommandError, CoordinationError
from .identity import IdentitySession
from .output import acquire_output
from .registry import CommandRegistry
from .render import RENDERERS

logger = logging.getLogger(__name__)

PROMPT = "conclave> "

# Render order when several kinds change in the same tick
TRACKED_KINDS = (
    ResponseKind.ROOM_INFO,
    ResponseKind.ROOM_CONNECTION,
    ResponseKind.ROOM_LIST,
)


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass
class SessionState:
    """
    Lifecycle flags and the last rendered version of each response kind.

    Attributes:
        identity_ready: Identity session reported logged in this tick
        coordination_initialized: Coordination session has been created
        last_seen: Version of each kind that was last rendered
    """

    identity_ready: bool = False
    coordination_initialized: bool = False
    last_seen: Dict[ResponseKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in TRACKED_KINDS}
    )


@dataclass
class AppContext:
    """
    Everything the loop, the signal handler and the command handlers share.

    Attributes:
        config: Client configuration
        identity: Identity session
        state: Lifecycle state owned by the orchestrator
        coordination: Coordination session, None until identity is ready
        shutdown: Set by "quit" or SIGINT, checked at tick boundaries
    """

    config: ClientConfig
    identity: IdentitySession
    state: SessionState = field(default_factory=SessionState)
    coordination: Optional[CoordinationSession] = None
    shutdown: threading.Event = field(default_factory=threading.Event)


class SessionOrchestrator:
    """
    Drives the collaborators and the prompt from one polling loop.

    Attributes:
        context: Shared application context
        console: Line console owning the terminal
        registry: Command table used for dispatch
    """

    def __init__(
        self,
        context: AppContext,
        console: LineConsole,
        coordination_factory: Callable[[int], CoordinationSession],
        registry: Optional[CommandRegistry] = None,
        clock: Callable[[], int] = monotonic_ms,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the orchestrator.

        Args:
            context: Shared application context
            console: Line console for input and output
            coordination_factory: Creates the coordination session from the
                                  identity's user session id
            registry: Command table (defaults to build_registry())
            clock: Monotonic clock in milliseconds
            sleep: Sleep function taking seconds
        """
        self.context = context
        self.console = console
        self.registry = registry or build_registry()
        self._coordination_factory = coordination_factory
        self._clock = clock
        self._sleep = sleep

    def request_shutdown(self) -> None:
        self.context.shutdown.set()

    def install_signal_handlers(self):
        """
        Route SIGINT to the shutdown flag.

        Returns:
            The previous SIGINT handler
        """
        return signal.signal(signal.SIGINT, self._on_interrupt)

    def _on_interrupt(self, signum, frame) -> None:
        self.request_shutdown()

    def run(self) -> int:
        """
        Run ticks until shutdown.

        Returns:
            0 after "quit" or SIGINT, or the negative code of a fatal
            coordination failure
        """
        previous_handler = self.install_signal_handlers()
        exit_code = 0
        self._draw_prompt()
        try:
            while not self.context.shutdown.is_set():
                started = self._clock()
                self.tick(started)
                if self.context.shutdown.is_set():
                    break
                self._sleep_remaining(started)
        except CoordinationError as e:
            logger.error("Coordination session failed (%d): %s", e.code, e)
            self.console.erase_displayed_line()
            self.console.write(f"conclave failed: {e} ({e.code})\n")
            exit_code = e.code
        finally:
            self.console.close()
            signal.signal(signal.SIGINT, previous_handler)

        logger.info("Shutting down with exit code %d", exit_code)
        return exit_code

    def tick(self, now_ms: int) -> None:
        """
        Run one iteration of the loop.

        Raises:
            CoordinationError: If advancing the coordination session fails
        """
        context = self.context
        state = context.state

        context.identity.advance(now_ms)
        state.identity_ready = context.identity.is_logged_in

        if state.identity_ready and not state.coordination_initialized:
            self._start_coordination()

        if state.coordination_initialized:
            context.coordination.advance(now_ms)
            self.render_changes()

        status = self.console.poll()
        if status is LineStatus.READY:
            self.dispatch_line(self.console.current_line())
        elif status is LineStatus.CLOSED:
            logger.info("Input closed, shutting down")
            self.request_shutdown()

    def render_changes(self) -> int:
        """
        Show every response whose version differs from the last one shown.

        Each changed kind gets its own erase/render/restore cycle.

        Returns:
            Number of kinds rendered
        """
        coordination = self.context.coordination
        last_seen = self.context.state.last_seen
        rendered = 0

        for kind in TRACKED_KINDS:
            observed = coordination.observed(kind)
            # Inequality, not ordering: counters wrap
            if observed.version == last_seen[kind]:
                continue

            self.console.erase_displayed_line()
            with acquire_output() as sink:
                RENDERERS[kind](observed.payload, sink)
                sink.flush_to(self.console)
            self._draw_prompt()
            self.console.restore_displayed_line()

            last_seen[kind] = observed.version
            rendered += 1

        return rendered

    def dispatch_line(self, line: str) -> None:
        """Handle one completed input line."""
        text = line.strip()
        if text == "quit":
            logger.info("Quit requested")
            self.request_shutdown()
            return

        with acquire_output() as sink:
            if text == "help":
                self.registry.write_usage(sink)
            elif text:
                try:
                    self.registry.dispatch(text, self.context, sink)
                except CommandError as e:
                    logger.info("Dispatch of '%s' failed: %s", text, e)
                    sink.write(f"unknown command {e.code}: {e}\n", style="red")
            self.console.clear_editing()
            sink.flush_to(self.console)

        self._draw_prompt()
        self.console.reset_for_next_line()

    def _start_coordination(self) -> None:
        user_session_id = self.context.identity.user_session_id
        logger.info("conclave init (user session %s)", user_session_id)
        self.context.coordination = self._coordination_factory(user_session_id)
        self.context.state.coordination_initialized = True

    def _draw_prompt(self) -> None:
        self.console.set_prompt(PROMPT)

    def _sleep_remaining(self, started_ms: int) -> None:
        elapsed = self._clock() - started_ms
        remaining = self.context.config.tick_interval_ms - elapsed
        if remaining <= 0:
            return
        try:
            self._sleep(remaining / 1000.0)
        except OSError as e:
            logger.error("Tick sleep failed: %s", e)
