"""Rejections raised by session transitions.

Every rejection is recoverable: it is reported to the originating
connection only and leaves the session untouched.
"""


class SessionError(Exception):
    """Base class; `reason` is the stable code sent to clients."""

    reason = 'Rejected'
    message = 'Request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'reason': self.reason, 'message': self.message}


class InvalidPayload(SessionError):
    reason = 'InvalidPayload'
    message = 'Malformed request'


class NotJoined(SessionError):
    reason = 'NotJoined'
    message = 'Join the session first'


class AlreadyCaptain(SessionError):
    reason = 'AlreadyCaptain'
    message = 'You are already a captain'


class NotACaptain(SessionError):
    reason = 'NotACaptain'
    message = 'You are not a captain'


class NotCaptain(SessionError):
    reason = 'NotCaptain'
    message = 'Only captains can eliminate maps'


class CaptainLimitReached(SessionError):
    reason = 'CaptainLimitReached'
    message = 'Captain limit reached (2)'


class NotYourTurn(SessionError):
    reason = 'NotYourTurn'
    message = 'It is not your turn'


class ItemAlreadyRemoved(SessionError):
    reason = 'ItemAlreadyRemoved'
    message = 'That map has already been removed'


class DuplicateDevice(SessionError):
    reason = 'DuplicateDevice'
    message = 'This device is already registered for the tournament'


class AlreadyRegistered(SessionError):
    reason = 'AlreadyRegistered'
    message = 'You are already registered for the tournament'


class RosterFull(SessionError):
    reason = 'RosterFull'
    message = 'The tournament roster is full'


class NotRegistered(SessionError):
    reason = 'NotRegistered'
    message = 'You are not registered for the tournament'
