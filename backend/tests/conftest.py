import os
import sys
import pytest

# Ensure the backend root (containing the `veto` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from veto import create_app, socketio
from veto.catalog import DEFAULT_MAPS
from veto.services.session import SessionManager


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['*']
    SOCKETIO_NAMESPACE = '/'
    TOURNAMENT_CAPACITY = 10
    NICKNAME_MAX_LENGTH = 32
    CATALOG_PATH = None
    LOG_LEVEL = 'DEBUG'


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        self.now += 1.0
        return self.now


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Builds connected Socket.IO test clients; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/'):
                test_client.disconnect(namespace='/')
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def manager(clock):
    return SessionManager(DEFAULT_MAPS, tournament_capacity=10, clock=clock)


def events(received, name):
    """Payloads of every `name` packet in a get_received() result."""
    return [pkt['args'][0] if pkt['args'] else None for pkt in received if pkt['name'] == name]


def scoped(broadcasts, event):
    return [b for b in broadcasts if b.event == event]
