import os
import logging
from flask import Flask, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from bracket_engine import HttpRemoteClient, count_rounds, is_valid_bracket_size
from shared.pubsub import PubSubClient
from .config import config
from .models import db
from .run_registry import RunRegistry

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """Application factory for the gateway service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions
    db.init_app(app)

    # Initialize services
    pubsub = PubSubClient(app.config['REDIS_URL']) if app.config['PUBLISH_EVENTS'] else None
    registry = RunRegistry(pubsub=pubsub)

    # Create tables
    with app.app_context():
        db.create_all()

    # Store services on app for access in routes
    app.registry = registry
    app.pubsub = pubsub
    app.client_factory = lambda: HttpRemoteClient(
        app.config['REMOTE_SERVICE_URL'],
        timeout=app.config['REMOTE_TIMEOUT']
    )

    register_api_routes(app)

    return app


def register_api_routes(app: Flask):
    """Register API routes."""

    # ==================== Tournament Runs ====================

    @app.route('/api/v1/tournaments', methods=['GET'])
    def api_list_runs():
        """List runs with optional filtering."""
        status = request.args.get('status')
        limit = request.args.get('limit', 50, type=int)
        offset = request.args.get('offset', 0, type=int)

        runs = app.registry.list_runs(
            status=status,
            limit=limit,
            offset=offset
        )

        return jsonify({
            'tournaments': [r.to_dict() for r in runs],
            'count': len(runs),
            'limit': limit,
            'offset': offset
        })

    @app.route('/api/v1/tournaments', methods=['POST'])
    def api_start_tournament():
        """Create a tournament remotely and play it to the end."""
        data = request.json or {}

        teams_per_match = data.get('teams_per_match')
        total_teams = data.get('total_teams')
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in (teams_per_match, total_teams)):
            return jsonify({'error': 'teams_per_match and total_teams must be integers'}), 400

        if not is_valid_bracket_size(teams_per_match, total_teams):
            return jsonify({
                'error': f'total_teams must be a power of teams_per_match '
                         f'(got {total_teams} teams, {teams_per_match} per match)'
            }), 400

        run = app.registry.create_run(teams_per_match, total_teams)
        logger.info(
            f"Starting run {run.run_id}: {total_teams} teams, {teams_per_match} per match, "
            f"{count_rounds(teams_per_match, total_teams)} rounds expected"
        )

        client = app.client_factory()
        try:
            final = app.registry.execute_run(run, client)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Could not record run {run.run_id}")
            return jsonify({'error': f'Could not record tournament run: {str(e)}', 'run_id': run.run_id}), 500
        finally:
            client.close()

        db.session.refresh(run)
        body = {
            'tournament': run.to_dict(),
            'result': final.to_dict()
        }

        if run.status == 'completed':
            return jsonify(body), 201
        return jsonify(body), 502

    @app.route('/api/v1/tournaments/<run_id>', methods=['GET'])
    def api_get_run(run_id: str):
        """Get run details."""
        run = app.registry.get_run(run_id)
        if not run:
            return jsonify({'error': 'Tournament run not found'}), 404

        return jsonify(run.to_dict())

    @app.route('/api/v1/tournaments/<run_id>/events', methods=['GET'])
    def api_run_events(run_id: str):
        """Get the recorded event stream of a run."""
        events = app.registry.get_events(run_id)
        if events is None:
            return jsonify({'error': 'Tournament run not found'}), 404

        return jsonify({
            'run_id': run_id,
            'events': [e.to_dict() for e in events],
            'count': len(events)
        })

    # ==================== Health Check ====================

    @app.route('/api/v1/health')
    def health_check():
        """Health check endpoint."""
        try:
            db.session.execute(db.text('SELECT 1'))
            db_ok = True
        except Exception:
            logger.exception("Database health check failed")
            db_ok = False

        body = {
            'status': 'healthy' if db_ok else 'unhealthy',
            'database': 'connected' if db_ok else 'disconnected',
            'publishing': app.pubsub is not None
        }

        if app.pubsub is not None:
            try:
                app.pubsub.redis.ping()
                body['redis'] = 'connected'
            except Exception:
                body['redis'] = 'disconnected'
                body['status'] = 'unhealthy'

        return jsonify(body), 200 if body['status'] == 'healthy' else 503
