import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Iterable, Optional

SENDER = 'sender'
OTHERS = 'others'
ALL = 'all'

# Outbound event names
GAME_STATE = 'gameState'
PARTICIPANTS_UPDATE = 'participantsUpdate'
CAPTAINS_UPDATE = 'captainsUpdate'
TOURNAMENT_UPDATE = 'tournamentUpdate'
ROLE_ASSIGNED = 'roleAssigned'
NICKNAME_ACCEPTED = 'nicknameAccepted'
NOTICE = 'notice'
REJECTED = 'rejected'


@dataclass(frozen=True)
class Broadcast:
    """One emission a transition asks for.

    `connection_id` is the originating connection; it is the target for
    SENDER scope and the excluded connection for OTHERS scope.
    """

    scope: str
    event: str
    payload: Any
    connection_id: Optional[str] = None


def to_sender(connection_id: str, event: str, payload: Any) -> Broadcast:
    return Broadcast(SENDER, event, payload, connection_id)


def to_others(connection_id: str, event: str, payload: Any) -> Broadcast:
    return Broadcast(OTHERS, event, payload, connection_id)


def to_all(event: str, payload: Any) -> Broadcast:
    return Broadcast(ALL, event, payload)


class Outbox:
    """FIFO of pending broadcasts.

    Producers `put` while holding the session lock, so queue order is the
    order in which transitions were applied. `flush` drains under its own
    lock; whichever thread flushes sends everything queued so far in order.
    """

    def __init__(self):
        self._pending: Deque[Broadcast] = deque()
        self._flush_lock = threading.Lock()

    def put(self, broadcasts: Iterable[Broadcast]) -> None:
        self._pending.extend(broadcasts)

    def flush(self, send: Callable[[Broadcast], None]) -> int:
        sent = 0
        with self._flush_lock:
            while self._pending:
                send(self._pending.popleft())
                sent += 1
        return sent

    def __len__(self):
        return len(self._pending)
