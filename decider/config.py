import os
from datetime import timedelta
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent  # project root (where wsgi.py is)
load_dotenv(BASE_DIR / ".env")


def _optional_int(name: str):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'decider.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-dev-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MIN", "30"))
    )

    # Decision rules
    POINT_BUDGET = int(os.getenv("POINT_BUDGET", "10"))
    DEFAULT_MAX_OPTIONS = int(os.getenv("DEFAULT_MAX_OPTIONS", "7"))
    MAX_OPTIONS_LIMIT = int(os.getenv("MAX_OPTIONS_LIMIT", "20"))
    MAX_PARTICIPANTS = _optional_int("MAX_PARTICIPANTS")  # None = unlimited
    INVITE_CODE_LENGTH = int(os.getenv("INVITE_CODE_LENGTH", "6"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SWAGGER = {"title": "Decider API", "uiversion": 3}


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    MAX_PARTICIPANTS = None
