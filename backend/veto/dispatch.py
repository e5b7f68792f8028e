from flask_socketio import SocketIO

from veto.services.session.broadcasts import ALL, OTHERS, SENDER, Broadcast


class SocketIODispatcher:
    """Delivers broadcast instructions over a Flask-SocketIO server."""

    def __init__(self, socketio: SocketIO, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send_to(self, connection_id, event, payload):
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)

    def broadcast_all(self, event, payload):
        self.socketio.emit(event, payload, namespace=self.namespace)

    def broadcast_except(self, connection_id, event, payload):
        self.socketio.emit(event, payload, skip_sid=connection_id, namespace=self.namespace)

    def __call__(self, broadcast: Broadcast) -> None:
        if broadcast.scope == SENDER:
            self.send_to(broadcast.connection_id, broadcast.event, broadcast.payload)
        elif broadcast.scope == OTHERS:
            self.broadcast_except(broadcast.connection_id, broadcast.event, broadcast.payload)
        elif broadcast.scope == ALL:
            self.broadcast_all(broadcast.event, broadcast.payload)
        else:
            raise ValueError(f'unknown broadcast scope {broadcast.scope!r}')
