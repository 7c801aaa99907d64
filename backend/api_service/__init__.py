from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)

    # Import and register blueprints here
    from api_service.main import main
    flask_app.register_blueprint(main)

    from api_service.api.torrents import torrents
    flask_app.register_blueprint(torrents)

    from api_service.api.private import private
    # Score tables and game lookups used by the chat bots
    flask_app.register_blueprint(private, url_prefix='/api/private')

    # A shared daemon session is built up front so concurrent first requests reuse it
    if flask_app.config.get('DELUGE_SESSION_SCOPE', 'request') == 'process':
        from api_service.services.deluge import build_session_client
        flask_app.extensions['deluge_session'] = build_session_client(flask_app.config)

    @click.command('add-torrent')
    @click.argument('url')
    def add_torrent_command(url):
        """Logs in to Deluge and adds the torrent at URL."""
        from api_service.services.deluge import DelugeError, add_torrent, session_client_for
        client = session_client_for(flask_app)
        try:
            job = add_torrent(client, url, file_slots=flask_app.config['DELUGE_FILE_SLOTS'])
        except DelugeError as exc:
            raise click.ClickException(f'{type(exc).__name__}: {exc}')
        finally:
            if flask_app.config.get('DELUGE_SESSION_SCOPE', 'request') != 'process':
                client.close()
        click.echo(f'Torrent added: {job}')

    @click.command('create-score-table')
    @click.argument('name')
    def create_score_table_command(name):
        """Creates an empty score table."""
        from api_service.services.scores import ScoreStoreError, create_table
        with flask_app.app_context():
            try:
                click.echo(create_table(name))
            except ScoreStoreError as exc:
                raise click.ClickException(str(exc))

    flask_app.cli.add_command(add_torrent_command)
    flask_app.cli.add_command(create_score_table_command)

    return flask_app
