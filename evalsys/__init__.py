import logging
import os
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from .extensions import db, migrate, login_manager, notifier
from .utils.validation import ValidationError


def create_app(config_object="config.Config"):
    """App factory. Every route lives under /api and speaks JSON."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    db.init_app(app)
    migrate.init_app(app, db, directory="alembic")
    login_manager.init_app(app)
    notifier.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        # session ids look like "admin:1" / "evaluator:3"
        from .models import Admin, Evaluator
        role, _, raw_id = str(user_id).partition(":")
        if not raw_id.isdigit():
            return None
        model = {"admin": Admin, "evaluator": Evaluator}.get(role)
        if model is None:
            return None
        account = db.session.get(model, int(raw_id))
        if account is None or not account.is_active:
            return None
        return account

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"message": "Authentication required"}), 401

    from .blueprints.auth import bp as auth_bp
    from .blueprints.system import bp as system_bp
    from .blueprints.candidates import bp as candidates_bp
    from .blueprints.evaluators import bp as evaluators_bp
    from .blueprints.items import bp as items_bp
    from .blueprints.evaluations import bp as evaluations_bp
    from .blueprints.results import bp as results_bp
    from .blueprints.events import bp as events_bp
    for bp in (auth_bp, system_bp, candidates_bp, evaluators_bp, items_bp,
               evaluations_bp, results_bp, events_bp):
        app.register_blueprint(bp, url_prefix="/api")

    register_error_handlers(app)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "realtime": notifier.enabled})

    if not os.getenv("SKIP_CREATE_ALL"):
        with app.app_context():
            from . import models  # noqa: F401
            db.create_all()
            from .services.records import ensure_default_admin
            ensure_default_admin()

    return app


def register_error_handlers(app):
    messages = {401: "Authentication required", 403: "Forbidden", 404: "Not found",
                405: "Method not allowed", 413: "Upload too large"}

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"message": e.message, "errors": e.errors}), 400

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return jsonify({"message": messages.get(e.code, e.name)}), e.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db(e):
        db.session.rollback()
        app.logger.exception("Database error")
        return jsonify({"message": "Database operation failed", "error": str(e)}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled error")
        return jsonify({"message": "Internal server error", "error": str(e)}), 500
