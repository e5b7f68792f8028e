from typing import List, Set

from .broadcasts import Broadcast
from .hub import SessionHub
from .manager import SessionManager


class ConnectionSupervisor:
    """Tracks live connection ids and feeds connect/disconnect to the session."""

    def __init__(self, hub: SessionHub):
        self._hub = hub
        self._live: Set[str] = set()

    def connect(self, connection_id: str) -> List[Broadcast]:
        def _transition(manager: SessionManager) -> List[Broadcast]:
            self._live.add(connection_id)
            return manager.snapshot(connection_id)
        return self._hub.execute(connection_id, _transition)

    def disconnect(self, connection_id: str) -> List[Broadcast]:
        def _transition(manager: SessionManager) -> List[Broadcast]:
            self._live.discard(connection_id)
            return manager.on_disconnect(connection_id)
        # Nobody is left to receive a rejection, so pass no origin
        return self._hub.execute(None, _transition)

    def is_live(self, connection_id: str) -> bool:
        return connection_id in self._live

    @property
    def live_count(self) -> int:
        return len(self._live)
