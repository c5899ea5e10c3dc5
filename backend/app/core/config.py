"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All backend-related configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: backend/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

# Load .env into environment BEFORE pydantic reads. override=True ensures .env
# values override any shell env.
# When .env doesn't exist (prod), this is a no-op; platform env vars are used.
if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "Student Feedback Portal"
    app_version: str = "1.0.0"
    port: int = 5000

    # Database
    database_url: str = "sqlite:///./feedback.db"

    # Auth
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    admin_email_marker: str = "admin"

    # Password reset
    otp_ttl_seconds: int = 600

    # Upload & storage
    upload_dir: str = "uploads"

    # Feedback milestones (1..milestone_count)
    milestone_count: int = 3

    # Admin listings
    resume_page_size: int = 10
    recent_submissions_limit: int = 10

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


# --- Constants (non-env, business config) ---

# Resume uploads
ALLOWED_RESUME_EXTENSIONS: frozenset[str] = frozenset({".pdf", ".doc", ".docx"})
MAX_RESUME_BYTES: int = 5 * 1024 * 1024

# Password reset
OTP_LENGTH: int = 6

# Placeholder values for resume files no student could be matched to
UNKNOWN_STUDENT_NAME: str = "Unknown Student"
UNKNOWN_STUDENT_EMAIL: str = "unknown@example.com"
UNKNOWN_STUDENT_COLLEGE: str = "Unknown College"
UNKNOWN_ROLL_NUMBER: str = "N/A"

# Student registration
MIN_STUDENT_SEMESTER: int = 1
MAX_STUDENT_SEMESTER: int = 12
