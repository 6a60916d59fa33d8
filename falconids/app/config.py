import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///falconids.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Principal that may claim the admin role on first login
    BOOTSTRAP_ADMIN_PRINCIPAL = os.getenv("BOOTSTRAP_ADMIN_PRINCIPAL", "")

    # Admin panel login (separate from the role-based admin check)
    ADMIN_PANEL_USERNAME = os.getenv("ADMIN_PANEL_USERNAME", "admin")
    ADMIN_PANEL_PASSWORD_HASH = os.getenv("ADMIN_PANEL_PASSWORD_HASH", "")

    # role | panel | both
    ADMIN_GATE = os.getenv("ADMIN_GATE", "role")
    # cookie | memory
    ADMIN_PANEL_SESSION_STORE = os.getenv("ADMIN_PANEL_SESSION_STORE", "cookie")

    QUERY_STALE_SECONDS = float(os.getenv("QUERY_STALE_SECONDS", "30"))
    ADMIN_CHECK_RETRIES = int(os.getenv("ADMIN_CHECK_RETRIES", "2"))
    ADMIN_CHECK_RETRY_DELAY = float(os.getenv("ADMIN_CHECK_RETRY_DELAY", "0.5"))
    # Invitation check backs off 1s, 2s, 3s
    ADMIN_INVITATION_RETRIES = int(os.getenv("ADMIN_INVITATION_RETRIES", "3"))
    ADMIN_INVITATION_RETRY_BASE = float(os.getenv("ADMIN_INVITATION_RETRY_BASE", "1.0"))
    ADMIN_INVITATION_RETRY_CAP = float(os.getenv("ADMIN_INVITATION_RETRY_CAP", "3.0"))

    MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    PRICE_PER_ID_CENTS = int(os.getenv("PRICE_PER_ID_CENTS", "10000"))
