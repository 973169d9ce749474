import os
from datetime import timedelta
from dotenv import load_dotenv
load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SESSION_SECRET") or os.getenv("SECRET_KEY", "evaluation-system-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///evaluation.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REALTIME_CHANNEL = os.getenv("REALTIME_CHANNEL", "evalsys:changes")
    PORT = int(os.getenv("PORT", "5000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # session cookie lives for 24h
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    WTF_CSRF_ENABLED = False

    PASS_THRESHOLD = float(os.getenv("PASS_THRESHOLD", "70"))
    DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin")
    DEFAULT_ADMIN_NAME = os.getenv("DEFAULT_ADMIN_NAME", "시스템 관리자")
    DEFAULT_EVALUATION_TITLE = "종합평가시스템"

    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # excel uploads


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REDIS_URL = None
    PASS_THRESHOLD = 70.0
    DEFAULT_ADMIN_USERNAME = "admin"
    DEFAULT_ADMIN_PASSWORD = "admin"
