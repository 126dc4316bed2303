from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .extensions import db, login_manager, migrate


def create_app(config_object='config.Config'):
    """App factory. Tests pass 'config.TestConfig'."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # registers the bearer-token request loader
    from . import auth  # noqa: F401
    from . import models  # noqa: F401

    from .blueprints.assessment import bp as assessment_bp
    app.register_blueprint(assessment_bp, url_prefix="/assessment")

    from .blueprints.employees import bp as employees_bp
    app.register_blueprint(employees_bp, url_prefix="/employees")

    from .blueprints.analytics import bp as analytics_bp
    app.register_blueprint(analytics_bp, url_prefix="/analytics")

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def unhandled_error(e):
        app.logger.exception('Unhandled error')
        return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.get('/')
    def index():
        return jsonify({"message": "Training assessment API", "status": "ok"})

    return app
