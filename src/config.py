"""Configuration module for the Learning Hub backend.

This module provides centralized configuration management, including directory
paths, database credentials, API server settings, authentication and quiz
scoring defaults. All configuration values can be overridden via environment
variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

# Public credential level: used for reads that are safe in a client context.
DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/learning_hub.db"
)

# Privileged credential level: used for admin mutations only. Never exposed
# through any endpoint.
SERVICE_DATABASE_URL: str = os.getenv("SERVICE_DATABASE_URL", DATABASE_URL)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# Public base URL of the web client, used to build password recovery links
APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:3000")

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv(
    "JWT_SECRET_KEY", "your-secret-key-change-in-production"
)
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))  # 7 days
)

# Fixed administrator credential pair. The admin has no row in the users table.
ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "careerexp@admin.com")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "password")
ADMIN_FULL_NAME: str = os.getenv("ADMIN_FULL_NAME", "Admin Teacher")
ADMIN_USER_ID: str = "admin-id"

MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

# Hours until a password recovery token expires
PASSWORD_RESET_EXPIRE_HOURS: int = int(
    os.getenv("PASSWORD_RESET_EXPIRE_HOURS", "24")
)

# --- Invitation Configuration ---

INVITE_CODE_MIN: int = 100000
INVITE_CODE_MAX: int = 999999

# Upper bound on invite code generation attempts before giving up
INVITE_CODE_MAX_ATTEMPTS: int = int(os.getenv("INVITE_CODE_MAX_ATTEMPTS", "10"))

# Days until an unregistered invitation expires
INVITATION_EXPIRE_DAYS: int = int(os.getenv("INVITATION_EXPIRE_DAYS", "30"))

# --- Quiz Configuration ---

# Every question is worth this many points when reporting attempt totals
POINTS_PER_QUESTION: int = int(os.getenv("POINTS_PER_QUESTION", "10"))

DEFAULT_STUDENT_NAME: str = "Unknown Student"
DEFAULT_STUDENT_EMAIL: str = "unknown@example.com"
PRACTICE_QUIZ_ID: str = "practice"
PRACTICE_QUIZ_TITLE: str = "Practice Quiz"
