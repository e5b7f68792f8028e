"""Session domain: the veto state machine and its single-writer plumbing.

Transport concerns live in `veto.socketio_events` and `veto.dispatch`;
everything here is importable and testable without a socket server.
"""

from .broadcasts import Broadcast, Outbox
from .hub import SessionHub
from .manager import MAX_CAPTAINS, SessionManager
from .roster import TournamentRoster
from .supervisor import ConnectionSupervisor

__all__ = [
    'Broadcast',
    'ConnectionSupervisor',
    'MAX_CAPTAINS',
    'Outbox',
    'SessionHub',
    'SessionManager',
    'TournamentRoster',
]
