"""Request parsing for inbound socket events.

Payloads arrive as whatever the client sent. Each parser returns a typed
request or raises InvalidPayload before anything reaches the session.
Older clients send bare strings for join/change_nickname/eliminate, so
those are accepted alongside objects.
"""

from dataclasses import dataclass
from typing import Any, Optional

from veto.errors import InvalidPayload

DEVICE_TOKEN_MAX_LENGTH = 128


@dataclass(frozen=True)
class JoinRequest:
    nickname: str
    device_token: Optional[str] = None


def _as_dict(data: Any, bare_key: Optional[str] = None) -> dict:
    if data is None:
        return {}
    if isinstance(data, dict):
        return data
    if bare_key and isinstance(data, str):
        return {bare_key: data}
    raise InvalidPayload('Payload must be an object')


def _nickname(value: Any, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidPayload('nickname is required')
    nickname = value.strip()
    if len(nickname) > max_length:
        raise InvalidPayload(f'nickname must be at most {max_length} characters')
    return nickname


def _device_token(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidPayload('device_token must be a string')
    token = value.strip()
    if len(token) > DEVICE_TOKEN_MAX_LENGTH:
        raise InvalidPayload('device_token is too long')
    return token or None


def parse_join(data: Any, max_length: int) -> JoinRequest:
    payload = _as_dict(data, bare_key='nickname')
    return JoinRequest(
        nickname=_nickname(payload.get('nickname'), max_length),
        device_token=_device_token(payload.get('device_token')),
    )


def parse_change_nickname(data: Any, max_length: int) -> str:
    payload = _as_dict(data, bare_key='nickname')
    return _nickname(payload.get('nickname'), max_length)


def parse_eliminate(data: Any) -> str:
    payload = _as_dict(data, bare_key='item_id')
    item_id = payload.get('item_id')
    if not isinstance(item_id, str) or not item_id:
        raise InvalidPayload('item_id is required')
    return item_id


def parse_device_token(data: Any) -> Optional[str]:
    """For join_tournament / leave_tournament, whose payload is optional."""
    return _device_token(_as_dict(data).get('device_token'))


def parse_empty(data: Any) -> None:
    # Intents without arguments tolerate null/{} and nothing else
    _as_dict(data)
