from typing import List, Optional

from veto.errors import AlreadyRegistered, DuplicateDevice, NotRegistered, RosterFull
from veto.models import Participant, Registrant


class TournamentRoster:
    """Tournament registration rules over the session's roster list.

    Registrants are decoupled from live connections: a disconnect leaves
    them in place, and a later join with the same device token re-points
    the entry at the new connection.
    """

    def __init__(self, entries: List[Registrant], capacity: int = 10):
        self._entries = entries
        self.capacity = capacity

    def __len__(self):
        return len(self._entries)

    def by_device(self, device_token: Optional[str]) -> Optional[Registrant]:
        if not device_token:
            return None
        for entry in self._entries:
            if entry.device_token == device_token:
                return entry
        return None

    def by_connection(self, connection_id: str) -> Optional[Registrant]:
        for entry in self._entries:
            if entry.connection_id == connection_id:
                return entry
        return None

    def register(self, participant: Participant, device_token: Optional[str], now: float) -> Registrant:
        if self.by_device(device_token):
            raise DuplicateDevice()
        if self.by_connection(participant.connection_id):
            raise AlreadyRegistered()
        if len(self._entries) >= self.capacity:
            raise RosterFull()
        entry = Registrant(
            connection_id=participant.connection_id,
            nickname=participant.nickname,
            seat_number=participant.seat_number,
            joined_at=now,
            device_token=device_token,
        )
        self._entries.append(entry)
        return entry

    def unregister(self, connection_id: str, device_token: Optional[str]) -> Registrant:
        # The device may be leaving from a different connection than it joined with
        entry = self.by_device(device_token) or self.by_connection(connection_id)
        if entry is None:
            raise NotRegistered()
        self._entries.remove(entry)
        return entry

    def reassociate(self, participant: Participant) -> Optional[Registrant]:
        entry = self.by_device(participant.device_token)
        own = self.by_connection(participant.connection_id)
        if entry is not None and own is not None and own is not entry:
            # One entry per connection; the connection keeps the one it already has
            return None
        if entry is not None:
            entry.connection_id = participant.connection_id
            entry.nickname = participant.nickname
            entry.seat_number = participant.seat_number
        return entry

    def rename(self, connection_id: str, nickname: str) -> Optional[Registrant]:
        entry = self.by_connection(connection_id)
        if entry is not None:
            entry.nickname = nickname
        return entry
