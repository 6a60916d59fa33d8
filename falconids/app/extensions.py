from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

from falconids.app.queries.client import QueryClient

# Singletons (initialized in app factory)
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()


def init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    # JSON API only
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})

    # Shared by every request of this app
    app.extensions["query_client"] = QueryClient(stale_after=app.config.get("QUERY_STALE_SECONDS", 30.0))
