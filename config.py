"""
config.py

Environment variable reads for the SkySmart server. Values are resolved once
at import; a local .env file is loaded first when present.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./skysmart.db")

# Heroku style services still hand out 'postgres://' URLs.
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)

# WARNING: override in any shared environment.
SECRET_KEY = os.getenv("SECRET_KEY", "a-very-secret-key-that-should-be-in-an-env-file")
ACCESS_TOKEN_TTL = int(os.getenv("ACCESS_TOKEN_TTL", "3600"))

# Publishable key the web client sends when nobody is logged in.
ANON_KEY = os.getenv("ANON_KEY", "skysmart-anon-key")

API_PREFIX = os.getenv("API_PREFIX", "/make-server-e56e4e4c").rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEMO_ADMIN_EMAIL = os.getenv("DEMO_ADMIN_EMAIL")
DEMO_ADMIN_PASSWORD = os.getenv("DEMO_ADMIN_PASSWORD")

SERVER_NAME = "SkySmart Edge Server"
SERVER_VERSION = "1.0.0"
