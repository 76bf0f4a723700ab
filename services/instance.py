"""
Single instance coordination.

The first launcher process listens on a fixed loopback port. Every later
launch connects to it, sends the instance token and exits, which makes the
running instance show its window again.
"""

import socket
import threading
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from config.data import INSTANCE_BACKLOG, INSTANCE_HOST, INSTANCE_PORT, INSTANCE_TOKEN

ACCEPT_POLL_INTERVAL = 0.2
SIGNAL_READ_TIMEOUT = 2.0
MAX_SIGNAL_LENGTH = 1024


class Role(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class CoordinatorState(Enum):
    UNBOUND = "unbound"
    LISTENING = "listening"
    FAILED = "failed"


class ClosePolicy:
    """
    Decides what closing the launcher window does.

    Hiding is only safe while the coordinator can bring the window back, so
    the policy is downgraded to terminate-on-close once the listener dies.
    """

    def __init__(self, terminate_on_close: bool = False):
        self._terminate_on_close = terminate_on_close
        self._lock = threading.Lock()

    @property
    def terminate_on_close(self) -> bool:
        with self._lock:
            return self._terminate_on_close

    def downgrade(self):
        with self._lock:
            if not self._terminate_on_close:
                logger.warning(
                    "[Instance] Launcher can no longer run in background, "
                    "closing the window will quit"
                )
            self._terminate_on_close = True

    def on_window_close(self, hide: Callable[[], None], quit: Callable[[], None]):
        if self.terminate_on_close:
            quit()
        else:
            hide()


def send_show_signal(
    host: str = INSTANCE_HOST,
    port: int = INSTANCE_PORT,
    token: str = INSTANCE_TOKEN,
    timeout: float = 1.0,
) -> bool:
    """
    Ask a running instance to show itself.

    Returns:
        True if an instance accepted the connection, False if none is running
    """
    try:
        with socket.create_connection((host, port), timeout=timeout) as client:
            client.sendall(f"{token}\n".encode("utf-8"))
    except OSError as e:
        logger.debug(f"[Instance] No running instance found on {host}:{port}: {e}")
        return False
    return True


class InstanceCoordinator:
    """
    Owns the single instance listener of the primary process.

    Connections are handled one at a time on a background thread. A matching
    token calls on_show; anything else is ignored. If binding or accepting
    fails the listener stops for good, the close policy is downgraded and
    on_failure is called.
    """

    def __init__(
        self,
        on_show: Callable[[], None],
        host: str = INSTANCE_HOST,
        port: int = INSTANCE_PORT,
        token: str = INSTANCE_TOKEN,
        backlog: int = INSTANCE_BACKLOG,
        close_policy: Optional[ClosePolicy] = None,
        on_failure: Optional[Callable[[], None]] = None,
    ):
        self.on_show = on_show
        self.host = host
        self.port = port
        self.token = token
        self.backlog = backlog
        self.close_policy = close_policy
        self.on_failure = on_failure

        self._state = CoordinatorState.UNBOUND
        self._server: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def state(self) -> CoordinatorState:
        return self._state

    def try_become_primary(self) -> Role:
        """
        Signal a running instance, or become the running instance.

        A secondary process should exit after this returns SECONDARY. A
        primary whose listener could not be bound keeps running in the
        FAILED state.
        """
        if send_show_signal(self.host, self.port, self.token):
            logger.info("[Instance] Another instance is running, asked it to show itself")
            return Role.SECONDARY

        logger.debug("[Instance] No instance found running, starting a new instance")
        try:
            self.start()
        except OSError as e:
            logger.warning(
                f"[Instance] Could not start the single instance server, "
                f"the launcher won't run in background: {e}"
            )
        return Role.PRIMARY

    def start(self):
        """Bind the listener and start the acceptor thread."""
        with self._lock:
            if self._state is not CoordinatorState.UNBOUND:
                raise RuntimeError(f"Coordinator already {self._state.value}")

            self._stop_event.clear()

            server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                server.bind((self.host, self.port))
                server.listen(self.backlog)
                server.settimeout(ACCEPT_POLL_INTERVAL)
            except OSError:
                server.close()
                self._fail()
                raise

            self._server = server
            self.port = server.getsockname()[1]
            self._state = CoordinatorState.LISTENING
            self._thread = threading.Thread(
                target=self._serve, name="SingleInstanceServer", daemon=True
            )
            self._thread.start()

        logger.info(f"[Instance] Listening for other instances on {self.host}:{self.port}")

    def stop(self, timeout: Optional[float] = None):
        """Stop the acceptor thread and release the port."""
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        if self._server is not None:
            self._server.close()
        if self._state is CoordinatorState.LISTENING:
            self._state = CoordinatorState.UNBOUND

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _serve(self):
        server = self._server
        try:
            while not self._stop_event.is_set():
                try:
                    client, _ = server.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self._stop_event.is_set():
                        break
                    logger.error(f"[Instance] Single instance server socket error: {e}")
                    self._fail()
                    break

                with client:
                    self._handle_client(client)
        finally:
            server.close()

    def _handle_client(self, client: socket.socket):
        client.settimeout(SIGNAL_READ_TIMEOUT)
        try:
            with client.makefile("rb") as stream:
                line = stream.readline(MAX_SIGNAL_LENGTH)
            message = line.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"[Instance] Ignoring unreadable signal: {e}")
            return

        if message.strip() != self.token.strip():
            logger.warning(f"[Instance] Ignoring unexpected signal: {message.strip()!r}")
            return

        logger.debug("[Instance] Another instance tried to start, showing the running instance")
        try:
            self.on_show()
        except Exception as e:
            logger.opt(exception=e).warning(f"[Instance] Failed to show the launcher: {e}")

    def _fail(self):
        self._state = CoordinatorState.FAILED
        if self.close_policy is not None:
            self.close_policy.downgrade()
        if self.on_failure is not None:
            self.on_failure()
