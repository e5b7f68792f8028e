import pytest

from conftest import scoped
from veto.errors import (
    AlreadyCaptain,
    CaptainLimitReached,
    ItemAlreadyRemoved,
    NotACaptain,
    NotCaptain,
    NotJoined,
    NotYourTurn,
)
from veto.models import Item
from veto.services.session import SessionManager
from veto.services.session.broadcasts import ALL, OTHERS, SENDER


def start_game(manager):
    """Seats 1 and 2 join and both become captains."""
    manager.on_join('a', 'Alice')
    manager.on_join('b', 'Bob')
    manager.on_become_captain('a')
    manager.on_become_captain('b')


def test_join_assigns_lowest_free_seat(manager):
    for sid, name in [('a', 'Alice'), ('b', 'Bob'), ('c', 'Cara')]:
        manager.on_join(sid, name)
    seats = {sid: p.seat_number for sid, p in manager.state.participants.items()}
    assert seats == {'a': 1, 'b': 2, 'c': 3}

    manager.on_disconnect('b')
    manager.on_join('d', 'Dan')
    assert manager.state.participants['d'].seat_number == 2

    manager.on_join('e', 'Eve')
    assert manager.state.participants['e'].seat_number == 4
    seats = [p.seat_number for p in manager.state.participants.values()]
    assert len(seats) == len(set(seats))


def test_join_acknowledges_sender_and_broadcasts_views(manager):
    broadcasts = manager.on_join('a', 'Alice')
    role = scoped(broadcasts, 'roleAssigned')
    assert len(role) == 1
    assert role[0].scope == SENDER and role[0].connection_id == 'a'
    assert role[0].payload == {'seat_number': 1, 'is_captain': False, 'is_in_tournament': False}
    for event in ('participantsUpdate', 'captainsUpdate', 'tournamentUpdate'):
        assert scoped(broadcasts, event)[0].scope == ALL
    assert scoped(broadcasts, 'participantsUpdate')[0].payload['a']['nickname'] == 'Alice'


def test_rejoin_from_same_connection_keeps_seat(manager):
    manager.on_join('a', 'Alice')
    manager.on_join('b', 'Bob')
    manager.on_become_captain('b')
    manager.on_join('b', 'Bobby')
    bob = manager.state.participants['b']
    assert bob.seat_number == 2
    assert bob.is_captain
    assert manager.state.captains['b'].nickname == 'Bobby'
    assert len(manager.state.participants) == 2


def test_become_captain_requires_join(manager):
    with pytest.raises(NotJoined):
        manager.on_become_captain('ghost')


def test_captain_limit_is_two(manager):
    start_game(manager)
    manager.on_join('c', 'Cara')
    with pytest.raises(CaptainLimitReached):
        manager.on_become_captain('c')
    assert len(manager.state.captains) == 2
    assert not manager.state.participants['c'].is_captain


def test_already_captain(manager):
    manager.on_join('a', 'Alice')
    manager.on_become_captain('a')
    with pytest.raises(AlreadyCaptain):
        manager.on_become_captain('a')


def test_second_captain_activates_game(manager):
    manager.on_join('a', 'Alice')
    manager.on_join('b', 'Bob')
    first = manager.on_become_captain('a')
    assert not scoped(first, 'gameState')
    assert not manager.state.is_active

    second = manager.on_become_captain('b')
    game = scoped(second, 'gameState')
    assert len(game) == 1
    assert game[0].payload['is_active'] is True
    assert game[0].payload['current_turn'] == 1
    assert manager.state.captains['b'].seat_number == 2


def test_eliminate_alternates_turns(manager):
    start_game(manager)
    broadcasts = manager.on_eliminate('a', 'bind')
    state = manager.state
    assert len(state.pool) == 8
    assert [r.item.id for r in state.removed] == ['bind']
    assert state.removed[0].removed_by_seat == 1
    assert state.current_turn == 2
    assert broadcasts[0].event == 'gameState' and broadcasts[0].scope == ALL

    manager.on_eliminate('b', 'haven')
    assert state.current_turn == 1
    assert state.removed[1].removed_by_seat == 2
    assert [item.id for item in state.pool] == [
        'abyss', 'ascent', 'corrode', 'icebox', 'lotus', 'pearl', 'sunset',
    ]


def test_eliminate_out_of_turn_is_rejected_without_change(manager):
    start_game(manager)
    before = manager.views()
    for _ in range(2):
        with pytest.raises(NotYourTurn):
            manager.on_eliminate('b', 'bind')
    assert manager.views() == before


def test_eliminate_by_non_captain(manager):
    start_game(manager)
    manager.on_join('c', 'Cara')
    with pytest.raises(NotCaptain):
        manager.on_eliminate('c', 'bind')
    with pytest.raises(NotCaptain):
        manager.on_eliminate('nobody', 'bind')


def test_eliminate_removed_or_unknown_item(manager):
    start_game(manager)
    manager.on_eliminate('a', 'bind')
    with pytest.raises(ItemAlreadyRemoved):
        manager.on_eliminate('b', 'bind')
    with pytest.raises(ItemAlreadyRemoved):
        manager.on_eliminate('b', 'dust2')
    assert manager.state.current_turn == 2


def test_eliminate_until_last_map_standing(manager):
    start_game(manager)
    state = manager.state
    turns = []
    sids = {1: 'a', 2: 'b'}
    while state.is_active:
        turns.append(state.current_turn)
        before = len(state.pool)
        manager.on_eliminate(sids[state.current_turn], state.pool[0].id)
        assert len(state.pool) == before - 1

    assert turns == [1, 2, 1, 2, 1, 2, 1, 2]
    assert len(state.pool) == 1
    assert len(state.removed) == 8
    assert state.last_item_standing
    assert state.game_view()['remaining_item']['id'] == 'sunset'

    # Further eliminations are ignored
    assert manager.on_eliminate(sids[state.current_turn], 'sunset') == []
    assert len(state.pool) == 1


def test_inactive_game_ignores_eliminate(manager):
    manager.on_join('a', 'Alice')
    manager.on_become_captain('a')
    assert manager.on_eliminate('a', 'bind') == []
    assert len(manager.state.pool) == 9


def test_exhausted_pool_is_a_no_winner_terminal_state():
    manager = SessionManager((Item('solo', 'Solo', ''), Item('duo', 'Duo', '')))
    start_game(manager)
    # Force a one-map pool while still active
    manager.state.pool.pop()
    manager.on_eliminate('a', 'solo')
    view = manager.state.game_view()
    assert view['pool'] == []
    assert view['is_active'] is False
    assert view['is_exhausted'] is True
    assert view['last_item_standing'] is False
    assert view['remaining_item'] is None


def test_activation_needs_two_maps_left(manager):
    start_game(manager)
    sids = {1: 'a', 2: 'b'}
    while manager.state.is_active:
        manager.on_eliminate(sids[manager.state.current_turn], manager.state.pool[0].id)
    manager.on_leave_captain('b')
    manager.on_become_captain('b')
    assert manager.state.current_turn == 1
    assert manager.state.is_active is False
    assert manager.state.last_item_standing


def test_turns_follow_captain_seats(manager):
    manager.on_join('a', 'Alice')
    manager.on_join('b', 'Bob')
    manager.on_join('c', 'Cara')
    manager.on_become_captain('c')
    manager.on_become_captain('b')
    assert manager.state.current_turn == 2
    manager.on_eliminate('b', 'bind')
    assert manager.state.current_turn == 3
    with pytest.raises(NotYourTurn):
        manager.on_eliminate('b', 'lotus')
    manager.on_eliminate('c', 'lotus')
    assert manager.state.removed[-1].removed_by_seat == 3


def test_captain_disconnect_pauses_game(manager):
    start_game(manager)
    manager.on_eliminate('a', 'bind')
    broadcasts = manager.on_disconnect('a')
    state = manager.state
    assert not state.is_active
    assert 'a' not in state.captains and 'a' not in state.participants
    assert len(state.pool) == 8
    assert [b.event for b in broadcasts] == ['participantsUpdate', 'captainsUpdate', 'gameState']
    # Remaining captain can't keep playing alone
    assert manager.on_eliminate('b', 'haven') == []
    assert len(state.pool) == 8


def test_disconnect_of_unjoined_connection_is_silent(manager):
    assert manager.on_disconnect('spectator') == []


def test_new_captain_resumes_paused_pool(manager):
    start_game(manager)
    manager.on_eliminate('a', 'bind')
    manager.on_disconnect('a')
    manager.on_join('c', 'Cara')
    broadcasts = manager.on_become_captain('c')
    state = manager.state
    assert state.is_active
    assert len(state.pool) == 8
    # Bob keeps seat 2, Cara takes freed seat 1
    assert state.current_turn == 1
    assert state.participants['c'].seat_number == 1
    assert scoped(broadcasts, 'gameState')


def test_leave_captain(manager):
    start_game(manager)
    broadcasts = manager.on_leave_captain('b')
    assert not manager.state.is_active
    assert not manager.state.participants['b'].is_captain
    assert 'b' not in manager.state.captains
    assert [b.event for b in broadcasts] == ['participantsUpdate', 'captainsUpdate', 'gameState']

    with pytest.raises(NotACaptain):
        manager.on_leave_captain('b')
    with pytest.raises(NotACaptain):
        manager.on_leave_captain('nobody')


def test_change_nickname_updates_every_copy(manager):
    manager.on_join('a', 'Alice', device_token='dev-a')
    manager.on_become_captain('a')
    manager.on_join_tournament('a')
    broadcasts = manager.on_change_nickname('a', 'Ally')

    assert manager.state.participants['a'].nickname == 'Ally'
    assert manager.state.captains['a'].nickname == 'Ally'
    assert manager.state.roster[0].nickname == 'Ally'

    ack = scoped(broadcasts, 'nicknameAccepted')[0]
    assert ack.scope == SENDER and ack.payload == {'nickname': 'Ally'}
    notice = scoped(broadcasts, 'notice')[0]
    assert notice.scope == OTHERS and notice.connection_id == 'a'
    assert 'Alice' in notice.payload['text'] and 'Ally' in notice.payload['text']
    assert scoped(broadcasts, 'tournamentUpdate')[0].payload['a']['nickname'] == 'Ally'


def test_change_nickname_requires_join(manager):
    with pytest.raises(NotJoined):
        manager.on_change_nickname('ghost', 'Boo')


def test_snapshot_is_sender_only(manager):
    manager.on_join('a', 'Alice')
    broadcasts = manager.snapshot('new')
    assert [b.event for b in broadcasts] == [
        'gameState', 'participantsUpdate', 'captainsUpdate', 'tournamentUpdate',
    ]
    assert all(b.scope == SENDER and b.connection_id == 'new' for b in broadcasts)


def test_reset_game_keeps_people(manager):
    start_game(manager)
    manager.on_join_tournament('a')
    manager.on_eliminate('a', 'bind')
    manager.on_eliminate('b', 'haven')
    broadcasts = manager.reset_game('a')
    state = manager.state
    assert len(state.pool) == 9 and state.removed == []
    assert state.is_active and state.current_turn == 1
    assert set(state.participants) == {'a', 'b'}
    assert set(state.captains) == {'a', 'b'}
    assert len(state.roster) == 1
    assert [b.event for b in broadcasts] == ['gameState']


def test_reset_game_reopens_finished_veto(manager):
    start_game(manager)
    sids = {1: 'a', 2: 'b'}
    while manager.state.is_active:
        manager.on_eliminate(sids[manager.state.current_turn], manager.state.pool[0].id)
    assert manager.state.last_item_standing
    manager.reset_game()
    view = manager.state.game_view()
    assert view['last_item_standing'] is False and view['remaining_item'] is None
    assert view['is_active'] is True and view['current_turn'] == 1
    assert len(view['pool']) == 9


def test_reset_game_with_one_captain_stays_inactive(manager):
    manager.on_join('a', 'Alice')
    manager.on_become_captain('a')
    manager.reset_game()
    assert not manager.state.is_active


def test_reset_all_keeps_tournament_roster(manager):
    start_game(manager)
    manager.on_join_tournament('a')
    manager.on_eliminate('a', 'bind')
    broadcasts = manager.reset_all('b')
    state = manager.state
    assert state.participants == {} and state.captains == {}
    assert not state.is_active
    assert len(state.pool) == 9
    tournament = scoped(broadcasts, 'tournamentUpdate')[0].payload
    assert list(tournament) == ['a']
    assert tournament['a']['nickname'] == 'Alice'


def test_reset_tournament_clears_everything(manager):
    start_game(manager)
    manager.on_join_tournament('a')
    broadcasts = manager.reset_tournament('a')
    state = manager.state
    assert state.participants == {} and state.captains == {} and state.roster == []
    assert not state.is_active
    assert scoped(broadcasts, 'tournamentUpdate')[0].payload == {}
    assert scoped(broadcasts, 'notice')[0].scope == ALL
