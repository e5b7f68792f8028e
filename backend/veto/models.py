from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'icon': self.icon}


@dataclass
class Participant:
    connection_id: str
    nickname: str
    seat_number: int
    is_captain: bool = False
    device_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # Device tokens stay server-side
        return {
            'connection_id': self.connection_id,
            'nickname': self.nickname,
            'seat_number': self.seat_number,
            'is_captain': self.is_captain,
        }


@dataclass
class CaptainRef:
    """Mirror of a captain participant, kept in the captain set."""

    connection_id: str
    nickname: str
    seat_number: int

    @classmethod
    def of(cls, participant: Participant) -> 'CaptainRef':
        return cls(participant.connection_id, participant.nickname, participant.seat_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'connection_id': self.connection_id,
            'nickname': self.nickname,
            'seat_number': self.seat_number,
        }


@dataclass(frozen=True)
class RemovedItem:
    item: Item
    removed_by_seat: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict()
        data['removed_by_seat'] = self.removed_by_seat
        return data


@dataclass
class Registrant:
    """Tournament roster entry. Outlives the connection that created it."""

    connection_id: str
    nickname: str
    seat_number: int
    joined_at: float
    device_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'connection_id': self.connection_id,
            'nickname': self.nickname,
            'seat_number': self.seat_number,
            'joined_at': self.joined_at,
        }


@dataclass
class SessionState:
    """The one mutable aggregate. Only the session manager writes to it."""

    catalog: Tuple[Item, ...]
    pool: List[Item] = field(default_factory=list)
    removed: List[RemovedItem] = field(default_factory=list)
    current_turn: int = 1
    is_active: bool = False
    last_item_standing: bool = False
    is_exhausted: bool = False
    participants: Dict[str, Participant] = field(default_factory=dict)
    captains: Dict[str, CaptainRef] = field(default_factory=dict)
    roster: List[Registrant] = field(default_factory=list)

    def __post_init__(self):
        if not self.pool and not self.removed:
            self.pool = list(self.catalog)

    def restart_pool(self) -> None:
        self.pool = list(self.catalog)
        self.removed = []
        self.current_turn = 1
        self.last_item_standing = False
        self.is_exhausted = False

    def captain_seats(self) -> List[int]:
        return sorted(c.seat_number for c in self.captains.values())

    def remaining_item(self) -> Optional[Item]:
        return self.pool[0] if self.last_item_standing and self.pool else None

    def game_view(self) -> Dict[str, Any]:
        remaining = self.remaining_item()
        return {
            'current_turn': self.current_turn,
            'pool': [item.to_dict() for item in self.pool],
            'removed': [entry.to_dict() for entry in self.removed],
            'is_active': self.is_active,
            'last_item_standing': self.last_item_standing,
            'is_exhausted': self.is_exhausted,
            'remaining_item': remaining.to_dict() if remaining else None,
        }

    def participants_view(self) -> Dict[str, Dict[str, Any]]:
        return {cid: p.to_dict() for cid, p in self.participants.items()}

    def captains_view(self) -> Dict[str, Dict[str, Any]]:
        return {cid: c.to_dict() for cid, c in self.captains.items()}

    def tournament_view(self) -> Dict[str, Dict[str, Any]]:
        return {r.connection_id: r.to_dict() for r in self.roster}
