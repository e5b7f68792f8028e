import logging

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

cors = CORS()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    if '*' in origins:
        origins = '*'
    cors.init_app(flask_app, supports_credentials=origins != '*', origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # Session state lives on the app so every test app starts clean
    from veto.catalog import load_catalog
    from veto.dispatch import SocketIODispatcher
    from veto.services.session import ConnectionSupervisor, SessionHub, SessionManager

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    catalog = load_catalog(flask_app.config.get('CATALOG_PATH'))
    manager = SessionManager(
        catalog,
        tournament_capacity=int(flask_app.config.get('TOURNAMENT_CAPACITY', 10)),
        logger=flask_app.logger,
    )
    hub = SessionHub(manager, SocketIODispatcher(socketio, namespace))
    flask_app.extensions['veto'] = {
        'hub': hub,
        'supervisor': ConnectionSupervisor(hub),
        'catalog': catalog,
    }
    flask_app.logger.info(f"[startup] maps={len(catalog)} namespace={namespace}")

    from veto.routes import main
    flask_app.register_blueprint(main)

    from veto.api.session import session_api
    flask_app.register_blueprint(session_api, url_prefix='/api/session')

    # Imported here so the handlers bind to the initialized socketio instance
    from veto.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('catalog')
    def catalog_command():
        """Prints the map pool the session starts with."""
        for item in catalog:
            click.echo(f'{item.id}\t{item.name}\t{item.icon}')

    flask_app.cli.add_command(catalog_command)

    return flask_app
