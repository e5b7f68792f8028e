import logging
import threading
from typing import Any, Callable, List, Optional

from veto.errors import SessionError
from .broadcasts import REJECTED, Broadcast, Outbox, to_sender
from .manager import SessionManager

Transition = Callable[[SessionManager], List[Broadcast]]


class SessionHub:
    """Single writer for the session.

    `execute` runs one transition under the session lock, queues its
    broadcasts, releases the lock and only then hands the queue to the
    dispatcher, so a slow client never holds up other intents.
    """

    def __init__(self, manager: SessionManager, send: Callable[[Broadcast], None], logger: Optional[logging.Logger] = None):
        self.manager = manager
        self._send = send
        self.logger = logger or manager.logger
        self._lock = threading.Lock()
        self._outbox = Outbox()

    def execute(self, connection_id: Optional[str], transition: Transition) -> List[Broadcast]:
        with self._lock:
            try:
                broadcasts = transition(self.manager)
            except SessionError as exc:
                self.logger.info(f"[rejected] sid={connection_id} reason={exc.reason}")
                broadcasts = [to_sender(connection_id, REJECTED, exc.to_dict())] if connection_id else []
            self._outbox.put(broadcasts)
        self._outbox.flush(self._deliver)
        return broadcasts

    def reject(self, connection_id: str, error: SessionError) -> None:
        """Report a rejection raised before a transition was attempted."""
        def _raise(_manager):
            raise error
        self.execute(connection_id, _raise)

    def read(self, view: Callable[[SessionManager], Any]) -> Any:
        with self._lock:
            return view(self.manager)

    def _deliver(self, broadcast: Broadcast) -> None:
        try:
            self._send(broadcast)
        except Exception:
            # Delivery is fire-and-forget; the state is already committed
            self.logger.exception(f"[dispatch-fail] event={broadcast.event} scope={broadcast.scope}")
