"""Flask application factory."""
import logging

from flask import Flask, jsonify, request
from flask_wtf.csrf import CSRFProtect, CSRFError
from werkzeug.exceptions import HTTPException

from rab_maker.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize CSRF protection
    csrf = CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({'status': 'error', 'message': 'Sesi telah berakhir. Muat ulang halaman.'}), 400

    # Initialize database
    init_db(app)

    from rab_maker.middleware import load_current_user

    @app.before_request
    def before_request_handler():
        """Load the current user for each request."""
        load_current_user()

    # Error Handlers
    from rab_maker.exceptions import RabError

    @app.errorhandler(RabError)
    def handle_rab_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"RabError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"RabError [{error.status_code}] {request.method} {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Tidak ditemukan'}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}", exc_info=True)
        return jsonify({'status': 'error', 'message': 'Terjadi kesalahan internal'}), 500

    # Register blueprints
    from rab_maker.blueprints.main import main_bp
    from rab_maker.blueprints.auth import auth_bp
    from rab_maker.blueprints.catalog import materials_bp, labor_types_bp
    from rab_maker.blueprints.templates import templates_bp
    from rab_maker.blueprints.work_categories import work_categories_bp
    from rab_maker.blueprints.projects import projects_bp
    from rab_maker.blueprints.summary import summary_bp
    from rab_maker.blueprints.dashboard import dashboard_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(materials_bp)
    app.register_blueprint(labor_types_bp)
    app.register_blueprint(templates_bp)
    app.register_blueprint(work_categories_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(summary_bp)
    app.register_blueprint(dashboard_bp)

    # Register CLI commands
    from rab_maker.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Database: {app.config.get('SQLALCHEMY_DATABASE_URI')}")

    return app
