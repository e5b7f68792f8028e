from typing import Any, Callable

from flask import current_app, request
from flask_socketio import emit

from veto import socketio
from veto.errors import InvalidPayload
from veto.schemas import (
    parse_change_nickname,
    parse_device_token,
    parse_eliminate,
    parse_empty,
    parse_join,
)
from veto.services.session import ConnectionSupervisor, SessionHub, SessionManager


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _hub() -> SessionHub:
    return current_app.extensions['veto']['hub']


def _supervisor() -> ConnectionSupervisor:
    return current_app.extensions['veto']['supervisor']


def _nickname_limit() -> int:
    return int(current_app.config.get('NICKNAME_MAX_LENGTH', 32))


def _submit(data: Any, parse: Callable[[Any], Any], apply: Callable[[SessionManager, str, Any], Any]) -> None:
    """Validate a payload, then run the intent through the session hub.

    Malformed payloads are rejected to the sender without touching the session.
    """
    sid = _get_sid()
    hub = _hub()
    try:
        value = parse(data)
    except InvalidPayload as exc:
        hub.reject(sid, exc)
        return
    hub.execute(sid, lambda manager: apply(manager, sid, value))


def handle_connect(auth=None):
    _supervisor().connect(_get_sid())


def handle_disconnect(reason=None):
    _supervisor().disconnect(_get_sid())


def handle_join(data=None):
    _submit(
        data,
        lambda d: parse_join(d, _nickname_limit()),
        lambda m, sid, req: m.on_join(sid, req.nickname, req.device_token),
    )


def handle_become_captain(data=None):
    _submit(data, parse_empty, lambda m, sid, _: m.on_become_captain(sid))


def handle_leave_captain(data=None):
    _submit(data, parse_empty, lambda m, sid, _: m.on_leave_captain(sid))


def handle_change_nickname(data=None):
    _submit(
        data,
        lambda d: parse_change_nickname(d, _nickname_limit()),
        SessionManager.on_change_nickname,
    )


def handle_eliminate(data=None):
    _submit(data, parse_eliminate, SessionManager.on_eliminate)


def handle_join_tournament(data=None):
    _submit(data, parse_device_token, SessionManager.on_join_tournament)


def handle_leave_tournament(data=None):
    _submit(data, parse_device_token, SessionManager.on_leave_tournament)


def handle_reset_game(data=None):
    _submit(data, parse_empty, lambda m, sid, _: m.reset_game(sid))


def handle_reset_all(data=None):
    _submit(data, parse_empty, lambda m, sid, _: m.reset_all(sid))


def handle_reset_tournament(data=None):
    _submit(data, parse_empty, lambda m, sid, _: m.reset_tournament(sid))


def handle_ping(data=None):
    emit('pong', data or {})


INTENT_HANDLERS = {
    'join': handle_join,
    'become_captain': handle_become_captain,
    'leave_captain': handle_leave_captain,
    'change_nickname': handle_change_nickname,
    'eliminate': handle_eliminate,
    'join_tournament': handle_join_tournament,
    'leave_tournament': handle_leave_tournament,
    'reset_game': handle_reset_game,
    'reset_all': handle_reset_all,
    'reset_tournament': handle_reset_tournament,
    'ping': handle_ping,
}

# Event names used by the first browser client
LEGACY_ALIASES = {
    'joinGame': handle_join,
    'becomeCaptain': handle_become_captain,
    'leaveCaptain': handle_leave_captain,
    'changeNickname': handle_change_nickname,
    'removeCard': handle_eliminate,
    'resetGame': handle_reset_game,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the session namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event, handler in INTENT_HANDLERS.items():
        socketio.on_event(event, handler, namespace=namespace)
    for event, handler in LEGACY_ALIASES.items():
        socketio.on_event(event, handler, namespace=namespace)
