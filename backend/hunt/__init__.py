from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = list(allowed_origins)
    client_url = flask_app.config.get('CLIENT_URL')
    if client_url and client_url not in origins:
        origins.append(client_url)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # Import and register blueprints here
    from hunt.main import main
    flask_app.register_blueprint(main)

    from hunt.api.game import game
    from hunt.api.rounds import rounds
    from hunt.api.clues import clues
    from hunt.api.teams import teams, team_auth
    from hunt.api.hints import hints
    # Mounted under /api to match the frontend API client
    flask_app.register_blueprint(game, url_prefix='/api/game')
    flask_app.register_blueprint(rounds, url_prefix='/api/rounds')
    flask_app.register_blueprint(clues, url_prefix='/api/clues')
    flask_app.register_blueprint(teams, url_prefix='/api/teams')
    flask_app.register_blueprint(team_auth, url_prefix='/api/teams/auth')
    flask_app.register_blueprint(hints, url_prefix='/api/hints')

    from hunt.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Admin sessions travel as bearer tokens, not cookies
    from hunt.auth import load_admin_from_request

    @login_manager.request_loader
    def load_user_from_request(req):
        return load_admin_from_request(req)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    _register_error_handlers(flask_app)

    @click.command('db-reset')
    @click.option('--rounds', 'round_count', default=3, show_default=True, help='Number of rounds to seed.')
    def db_reset_command(round_count):
        """Drops, recreates, and seeds the database with numbered rounds."""
        from hunt.models import Round, generate_qr_id
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for number in range(1, round_count + 1):
                db.session.add(Round(
                    round_number=number,
                    clue_text=f'Clue for round {number}',
                    unlock_code=f'ROUND{number}',
                    qr_id=generate_qr_id(number),
                ))

            db.session.commit()
            click.echo(f'Database has been reset and seeded with {round_count} rounds!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


def _register_error_handlers(flask_app):
    from hunt.errors import HuntError

    @flask_app.errorhandler(HuntError)
    def handle_hunt_error(exc):
        db.session.rollback()
        flask_app.logger.info(f"[client-error] status={exc.status_code} message={exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({'error': 'Route not found'}), 404

    @flask_app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return jsonify({'error': 'Method not allowed'}), 405

    @flask_app.errorhandler(500)
    def handle_server_error(exc):
        db.session.rollback()
        original = getattr(exc, 'original_exception', None) or exc
        flask_app.logger.error(f"[server-error] {original!r}", exc_info=original)
        return jsonify({'error': 'Internal server error'}), 500
