"""Configuration module for the help system.

This module provides centralized configuration management, including directory
paths, API server settings, security settings, and application defaults.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()

DATA_DIR = Path(os.getenv("HELP_SYSTEM_DATA_DIR", str(ROOT_DIR / "data")))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/help_system.db")

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24))
)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Days until a registration invitation code expires
INVITATION_EXPIRE_DAYS: int = int(os.getenv("INVITATION_EXPIRE_DAYS", "30"))

# Days a one-time password stays valid when no expiry is given
OTP_VALID_DAYS: int = int(os.getenv("OTP_VALID_DAYS", "1"))

# --- Article Configuration ---

# Url-safe base64 encoded 32 byte key used to wrap group article bodies.
# When unset, group article bodies are stored in plain text.
GROUP_CODEC_KEY: Optional[str] = os.getenv("GROUP_CODEC_KEY")

# Group identifier carried by articles that answer student questions
QUERY_GROUP_IDENTIFIER: str = os.getenv("QUERY_GROUP_IDENTIFIER", "Query")

# Attempts at drawing a free 64-bit unique ID before giving up
UNIQUE_ID_MAX_ATTEMPTS: int = int(os.getenv("UNIQUE_ID_MAX_ATTEMPTS", "16"))

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
