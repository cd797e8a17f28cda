"""
config.py - environment-driven settings for ShareVault.

Values come from the process environment (or a local .env file). Everything
has a development default; SECRET_KEY and the bootstrap admin password must be
overridden in production.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ─── Tokens ───────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-in-production-minimum-32-chars!")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ADMIN_TOKEN_EXPIRE_HOURS = int(os.getenv("ADMIN_TOKEN_EXPIRE_HOURS", "24"))
SHARE_TOKEN_EXPIRE_HOURS = int(os.getenv("SHARE_TOKEN_EXPIRE_HOURS", "2"))

# ─── Persistence ──────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sharevault.db")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

USE_MINIO = _env_bool("USE_MINIO")
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "http://localhost:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ROOT_USER", "admin")
MINIO_SECRET_KEY = os.getenv("MINIO_ROOT_PASSWORD", "StrongPassword123")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "sharevault")

# ─── Admin bootstrap ──────────────────────────────────────────────────────────
BOOTSTRAP_ADMIN_USERNAME = os.getenv("BOOTSTRAP_ADMIN_USERNAME", "admin")
BOOTSTRAP_ADMIN_PASSWORD = os.getenv("BOOTSTRAP_ADMIN_PASSWORD", "admin")

# ─── Misc ─────────────────────────────────────────────────────────────────────
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
