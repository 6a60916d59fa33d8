from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, jsonify, render_template
from werkzeug.exceptions import HTTPException

from falconids.app.config import Config
from falconids.app.extensions import init_extensions
from falconids.app.backend.connection import BackendFactory, get_actor, init_backend
from falconids.app.backend.interface import BackendTrap
from falconids.app.common.admin_session import AdminPanelSessionStore, admin_panel_session, init_admin_sessions
from falconids.app.common.errors import ApiError, from_backend_trap, wants_json
from falconids.app.common.error_formatting import format_error_message
from falconids.app.common.formatting import (
    dollars,
    format_order_date,
    format_order_status,
    format_payment_contact_status,
)
from falconids.app.common.identity import current_principal
from falconids.app.common.request_context import echo_request_id, init_request_id
from falconids.app.queries.access import check_admin_access
from falconids.app.api.register import register_api_blueprints
from falconids.app.cli import cli_bp


def create_app(
    config_object: type[Config] = Config,
    backend_factory: BackendFactory | None = None,
    admin_session_store: AdminPanelSessionStore | None = None,
) -> Flask:
    app = Flask(__name__, instance_relative_config=True, template_folder="../templates", static_folder="../static")
    app.config.from_object(config_object)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    init_extensions(app)
    init_backend(app, backend_factory)
    init_admin_sessions(app, admin_session_store)

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    app.after_request(echo_request_id)

    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    # Navbar state for every page
    @app.context_processor
    def inject_nav():
        principal = current_principal()
        is_admin = False
        if principal:
            is_admin = check_admin_access(get_actor()).is_admin
        return {
            "nav_principal": principal,
            "nav_is_admin": is_admin,
            "nav_admin_panel": admin_panel_session(principal).is_logged_in,
            "current_year": datetime.now(timezone.utc).year,
        }

    app.add_template_filter(dollars, "dollars")
    app.add_template_filter(format_order_date, "order_date")
    app.add_template_filter(format_order_status, "order_status")
    app.add_template_filter(format_payment_contact_status, "payment_contact_status")

    register_api_blueprints(app)

    from falconids.app.ui import ui_bp
    from falconids.app.admin_ui import admin_ui_bp

    app.register_blueprint(ui_bp)
    app.register_blueprint(admin_ui_bp)

    # CLI (flask init-db / seed / grant-admin)
    app.register_blueprint(cli_bp)

    # Error handlers
    def _respond(err: ApiError, page_message: str | None = None):
        if wants_json():
            return jsonify(err.payload()), err.status_code
        message = page_message or err.message
        return render_template("errors/error.html", status=err.status_code, message=message), err.status_code

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return _respond(err)

    @app.errorhandler(BackendTrap)
    def handle_backend_trap(err: BackendTrap):
        api_error = from_backend_trap(err)
        app.logger.warning("backend rejected %s: %s", api_error.code, format_error_message(err))
        return _respond(api_error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return _respond(ApiError(err.code or 500, "http_error", err.description, {"name": err.name}))

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception: %s", format_error_message(err))
        return _respond(ApiError(500, "internal_error", "Internal server error"), "Something went wrong.")

    return app
