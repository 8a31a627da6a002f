# config.py
"""
Application configuration loaded from the environment.

Values are read once at import time from the process environment
(and a local .env file when present).

Usage:
     from config import MIN_CONTRACT_MONTHS, INCLUDE_ADVANCE_ON_ASSIGN
"""
import os

from dotenv import load_dotenv

# Load .env
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
     return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


# Database
DB_SERVER = os.getenv("DB_SERVER")
DB_PORT = os.getenv("DB_PORT", "1433")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")
DATABASE_URL = os.getenv("DATABASE_URL")  # Overrides the DB_* settings when set
SQL_ECHO = _env_bool("SQL_ECHO", "false")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# HTTP
CORS_ORIGINS = [o for o in os.getenv("CORS_ORIGINS", "").split(",") if o]
PORT = int(os.getenv("PORT", 10000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Lease policy
MIN_CONTRACT_MONTHS = int(os.getenv("MIN_CONTRACT_MONTHS", 3))
INCLUDE_ADVANCE_ON_ASSIGN = _env_bool("INCLUDE_ADVANCE_ON_ASSIGN", "true")

# Notifications
BREVO_API_KEY = os.getenv("BREVO_API_KEY")
MAIL_SENDER = os.getenv("MAIL_SENDER", "noreply@rentcycle.app")
MAIL_SENDER_NAME = os.getenv("MAIL_SENDER_NAME", "RentCycle")

# Contract storage
AZURE_STORAGE_ACCOUNT = os.getenv("AZURE_STORAGE_ACCOUNT")
AZURE_STORAGE_KEY = os.getenv("AZURE_STORAGE_KEY")
CONTRACTS_CONTAINER = os.getenv("CONTRACTS_CONTAINER", "contracts")
