import logging

from flask import Flask, jsonify
from flask_cors import CORS

from fitdesk.config import config
from fitdesk.errors import register_error_handlers
from fitdesk.extensions import db, jwt, limiter, ma, migrate, scheduler, socketio
from fitdesk.filters import register_filters
from fitdesk.logging_config import configure_logging

logger = logging.getLogger(__name__)

OVERDUE_JOB_ID = "overdue_payments_check"


def configure_scheduler(app):
    """Start the scheduler and register the overdue payment check."""
    if not app.config.get("SCHEDULER_ENABLED") or app.config.get("SCHEDULER_INITIALIZED", False):
        return
    from fitdesk.services.billing import run_overdue_check

    if not scheduler.running:
        scheduler.init_app(app)
        scheduler.start()
    minutes = app.config["OVERDUE_CHECK_MINUTES"]
    scheduler.add_job(
        id=OVERDUE_JOB_ID,
        func=run_overdue_check,
        args=[app],
        trigger="interval",
        minutes=minutes,
        replace_existing=True,
    )
    app.config["SCHEDULER_INITIALIZED"] = True
    logger.info("Overdue check scheduled every %s minutes", minutes)


def register_jwt_callbacks():
    from fitdesk.models import User

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"msg": "Token has expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"msg": "Invalid token"}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(error):
        return jsonify({"msg": "Missing authorization"}), 401

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        return db.session.get(User, int(jwt_data["sub"]))


def create_app(config_name="default"):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(app)

    # Extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, supports_credentials=True, resources={r"/api/*": {
        "origins": app.config["CORS_ORIGINS"],
        "allow_headers": ["Content-Type", "Authorization", "X-CSRF-TOKEN"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    }})
    from fitdesk import sockets  # noqa: F401
    socketio.init_app(app, async_mode=app.config.get("SOCKETIO_ASYNC_MODE"))

    register_jwt_callbacks()
    register_error_handlers(app)
    register_filters(app)

    # Blueprints
    from fitdesk.routes.auth import auth_bp
    from fitdesk.routes.files import files_bp
    from fitdesk.routes.company import company_bp
    from fitdesk.routes.communication import communication_bp
    from fitdesk.routes.admin import admin_bp
    from fitdesk.routes.portal import portal_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(files_bp, url_prefix="/api/files")
    app.register_blueprint(company_bp, url_prefix="/api")
    app.register_blueprint(communication_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(portal_bp, url_prefix="/api/portal")

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"}), 200

    configure_scheduler(app)
    logger.info("FitDesk app created with %s config", config_name)
    return app
