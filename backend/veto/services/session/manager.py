import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from veto.errors import (
    AlreadyCaptain,
    CaptainLimitReached,
    ItemAlreadyRemoved,
    NotACaptain,
    NotCaptain,
    NotJoined,
    NotYourTurn,
)
from veto.models import CaptainRef, Item, Participant, RemovedItem, SessionState
from .broadcasts import (
    CAPTAINS_UPDATE,
    GAME_STATE,
    NICKNAME_ACCEPTED,
    NOTICE,
    PARTICIPANTS_UPDATE,
    ROLE_ASSIGNED,
    TOURNAMENT_UPDATE,
    Broadcast,
    to_all,
    to_others,
    to_sender,
)
from .roster import TournamentRoster

MAX_CAPTAINS = 2


class SessionManager:
    """State machine for one veto session.

    Each `on_*` method validates an intent against the current state,
    applies it and returns the broadcasts it produced. Rejections raise a
    SessionError before anything is mutated. The manager does no locking
    and no I/O; SessionHub serializes calls and delivers the broadcasts.
    """

    def __init__(
        self,
        catalog: Tuple[Item, ...],
        tournament_capacity: int = 10,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog = tuple(catalog)
        self.tournament_capacity = tournament_capacity
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._state = SessionState(catalog=self.catalog)

    @property
    def state(self) -> SessionState:
        return self._state

    def views(self) -> Dict[str, Any]:
        return {
            'game': self._state.game_view(),
            'participants': self._state.participants_view(),
            'captains': self._state.captains_view(),
            'tournament': self._state.tournament_view(),
        }

    # ---- view broadcasts ----

    def _game(self) -> Broadcast:
        return to_all(GAME_STATE, self._state.game_view())

    def _participants(self) -> Broadcast:
        return to_all(PARTICIPANTS_UPDATE, self._state.participants_view())

    def _captains(self) -> Broadcast:
        return to_all(CAPTAINS_UPDATE, self._state.captains_view())

    def _tournament(self) -> Broadcast:
        return to_all(TOURNAMENT_UPDATE, self._state.tournament_view())

    def _roster(self) -> TournamentRoster:
        return TournamentRoster(self._state.roster, self.tournament_capacity)

    def _participant(self, connection_id: str) -> Participant:
        participant = self._state.participants.get(connection_id)
        if participant is None:
            raise NotJoined()
        return participant

    def _lowest_free_seat(self) -> int:
        taken = {p.seat_number for p in self._state.participants.values()}
        # N seats taken, so one of 1..N+1 is always free
        return next(seat for seat in range(1, len(taken) + 2) if seat not in taken)

    def _activate(self) -> None:
        state = self._state
        state.current_turn = state.captain_seats()[0]
        state.is_active = len(state.pool) >= 2
        self.logger.info(
            f"[activate] captains={state.captain_seats()} turn={state.current_turn} "
            f"pool={len(state.pool)} active={state.is_active}"
        )

    def _deactivate_if_short(self) -> None:
        state = self._state
        if len(state.captains) < MAX_CAPTAINS and state.is_active:
            state.is_active = False
            self.logger.info(f"[pause] captains={len(state.captains)} pool={len(state.pool)}")

    # ---- connection lifecycle ----

    def snapshot(self, connection_id: str) -> List[Broadcast]:
        """Everything a freshly connected client needs to render the session."""
        return [
            to_sender(connection_id, GAME_STATE, self._state.game_view()),
            to_sender(connection_id, PARTICIPANTS_UPDATE, self._state.participants_view()),
            to_sender(connection_id, CAPTAINS_UPDATE, self._state.captains_view()),
            to_sender(connection_id, TOURNAMENT_UPDATE, self._state.tournament_view()),
        ]

    def on_join(self, connection_id: str, nickname: str, device_token: Optional[str] = None) -> List[Broadcast]:
        state = self._state
        participant = state.participants.get(connection_id)
        if participant is not None:
            # Re-join from the same connection keeps seat and captaincy
            participant.nickname = nickname
            if device_token:
                participant.device_token = device_token
            if connection_id in state.captains:
                state.captains[connection_id].nickname = nickname
        else:
            participant = Participant(
                connection_id=connection_id,
                nickname=nickname,
                seat_number=self._lowest_free_seat(),
                device_token=device_token,
            )
            state.participants[connection_id] = participant

        roster = self._roster()
        registrant = roster.reassociate(participant) if participant.device_token else None
        if registrant is None:
            registrant = roster.rename(connection_id, nickname)

        self.logger.info(
            f"[join] sid={connection_id} seat={participant.seat_number} nickname={nickname} "
            f"tournament={registrant is not None}"
        )
        return [
            to_sender(connection_id, ROLE_ASSIGNED, {
                'seat_number': participant.seat_number,
                'is_captain': participant.is_captain,
                'is_in_tournament': registrant is not None,
            }),
            self._participants(),
            self._captains(),
            self._tournament(),
        ]

    def on_disconnect(self, connection_id: str) -> List[Broadcast]:
        state = self._state
        participant = state.participants.pop(connection_id, None)
        state.captains.pop(connection_id, None)
        if participant is None:
            return []
        self._deactivate_if_short()
        self.logger.info(
            f"[leave] sid={connection_id} seat={participant.seat_number} remaining={len(state.participants)}"
        )
        return [self._participants(), self._captains(), self._game()]

    # ---- roles ----

    def on_become_captain(self, connection_id: str) -> List[Broadcast]:
        state = self._state
        participant = self._participant(connection_id)
        if len(state.captains) >= MAX_CAPTAINS:
            raise CaptainLimitReached()
        if participant.is_captain:
            raise AlreadyCaptain()

        participant.is_captain = True
        state.captains[connection_id] = CaptainRef.of(participant)
        self.logger.info(f"[captain] sid={connection_id} seat={participant.seat_number} captains={len(state.captains)}")

        broadcasts = [self._participants(), self._captains()]
        if len(state.captains) == MAX_CAPTAINS:
            # Resets the turn but leaves a finished veto (pool < 2) closed
            self._activate()
            broadcasts.append(self._game())
        return broadcasts

    def on_leave_captain(self, connection_id: str) -> List[Broadcast]:
        state = self._state
        participant = state.participants.get(connection_id)
        if participant is None or not participant.is_captain:
            raise NotACaptain()

        participant.is_captain = False
        state.captains.pop(connection_id, None)
        self.logger.info(f"[uncaptain] sid={connection_id} seat={participant.seat_number}")
        self._deactivate_if_short()
        return [self._participants(), self._captains(), self._game()]

    def on_change_nickname(self, connection_id: str, nickname: str) -> List[Broadcast]:
        state = self._state
        participant = self._participant(connection_id)
        old_nickname = participant.nickname
        participant.nickname = nickname
        if connection_id in state.captains:
            state.captains[connection_id].nickname = nickname
        self._roster().rename(connection_id, nickname)

        self.logger.info(f"[rename] sid={connection_id} old={old_nickname} new={nickname}")
        return [
            to_sender(connection_id, NICKNAME_ACCEPTED, {'nickname': nickname}),
            to_others(connection_id, NOTICE, {'text': f'{old_nickname} is now {nickname}'}),
            self._participants(),
            self._captains(),
            self._tournament(),
        ]

    # ---- elimination ----

    def on_eliminate(self, connection_id: str, item_id: str) -> List[Broadcast]:
        state = self._state
        if not state.is_active:
            return []

        participant = state.participants.get(connection_id)
        if participant is None or not participant.is_captain:
            raise NotCaptain()
        if participant.seat_number != state.current_turn:
            raise NotYourTurn()
        index = next((i for i, item in enumerate(state.pool) if item.id == item_id), None)
        if index is None:
            raise ItemAlreadyRemoved()

        item = state.pool.pop(index)
        state.removed.append(RemovedItem(item=item, removed_by_seat=participant.seat_number))

        if len(state.pool) == 1:
            state.last_item_standing = True
            state.is_active = False
        elif not state.pool:
            state.is_active = False
            state.last_item_standing = False
            state.is_exhausted = True
        else:
            state.current_turn = next(s for s in state.captain_seats() if s != state.current_turn)

        self.logger.info(
            f"[eliminate] seat={participant.seat_number} item={item.id} remaining={len(state.pool)} "
            f"next_turn={state.current_turn} active={state.is_active}"
        )
        if state.last_item_standing:
            self.logger.info(f"[finish] remaining_item={state.pool[0].id}")
        return [self._game()]

    # ---- tournament ----

    def on_join_tournament(self, connection_id: str, device_token: Optional[str] = None) -> List[Broadcast]:
        participant = self._participant(connection_id)
        entry = self._roster().register(participant, device_token or participant.device_token, self._clock())
        self.logger.info(f"[tournament-join] sid={connection_id} nickname={entry.nickname} size={len(self._state.roster)}")
        return [
            self._tournament(),
            to_others(connection_id, NOTICE, {'text': f'{entry.nickname} joined the tournament'}),
        ]

    def on_leave_tournament(self, connection_id: str, device_token: Optional[str] = None) -> List[Broadcast]:
        participant = self._state.participants.get(connection_id)
        if not device_token and participant is not None:
            device_token = participant.device_token
        entry = self._roster().unregister(connection_id, device_token)
        self.logger.info(f"[tournament-leave] sid={connection_id} nickname={entry.nickname} size={len(self._state.roster)}")
        return [
            self._tournament(),
            to_others(connection_id, NOTICE, {'text': f'{entry.nickname} left the tournament'}),
        ]

    # ---- resets ----

    def reset_game(self, connection_id: Optional[str] = None) -> List[Broadcast]:
        """New game with the same people: participants, captains and roster are kept."""
        self._state.restart_pool()
        self._state.is_active = len(self._state.captains) >= MAX_CAPTAINS
        if self._state.captains:
            self._state.current_turn = self._state.captain_seats()[0]
        self.logger.info(f"[reset-game] sid={connection_id} active={self._state.is_active}")
        return [self._game()]

    def reset_all(self, connection_id: Optional[str] = None) -> List[Broadcast]:
        """Clear the game and everyone in it; the tournament roster survives."""
        self._state = SessionState(catalog=self.catalog, roster=self._state.roster)
        self.logger.info(f"[reset-all] sid={connection_id} roster={len(self._state.roster)}")
        return [
            self._game(),
            self._participants(),
            self._captains(),
            self._tournament(),
            to_all(NOTICE, {'text': 'The session was reset'}),
        ]

    def reset_tournament(self, connection_id: Optional[str] = None) -> List[Broadcast]:
        self._state = SessionState(catalog=self.catalog)
        self.logger.info(f"[reset-tournament] sid={connection_id}")
        return [
            self._game(),
            self._participants(),
            self._captains(),
            self._tournament(),
            to_all(NOTICE, {'text': 'The session and tournament roster were reset'}),
        ]
