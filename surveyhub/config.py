# surveyhub/config.py
import os
import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT_DIR = Path(__file__).resolve().parent.parent

# .env im Projekt-Root bevorzugen, sonst Standard-Suche von python-dotenv
dotenv_path = PROJECT_ROOT_DIR / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)
else:
    load_dotenv()


def _env_flag(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes")


# --- Datenbank ---
DATABASE_URL = os.getenv("DATABASE_URL")
if DATABASE_URL is None:
    sqlite_db_path = PROJECT_ROOT_DIR / "surveyhub_fallback.db"
    DATABASE_URL = f"sqlite+aiosqlite:///{sqlite_db_path}"
    logger.warning(
        "DATABASE_URL not set, falling back to local SQLite database at %s",
        sqlite_db_path,
    )
SQL_ECHO = _env_flag("SQL_ECHO")
AUTO_CREATE_TABLES = _env_flag("AUTO_CREATE_TABLES")

# --- Auth ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# --- Bilder / statische Dateien ---
# Bilder landen unter PUBLIC_DIR/images und werden unter /images ausgeliefert
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", str(PROJECT_ROOT_DIR / "public")))
IMAGES_ROUTE = "/images"
BACKEND_BASE_URL = os.getenv("BACKEND_BASE_URL", "http://127.0.0.1:8000")

# --- API ---
SURVEYS_PER_PAGE = int(os.getenv("SURVEYS_PER_PAGE", "2"))
FALLBACK_ORIGINS = [
    "http://127.0.0.1:5173",
    "http://localhost:5173",
]
env_origins = os.getenv("BACKEND_ALLOWED_ORIGINS")
ALLOWED_ORIGINS = (
    [origin.strip() for origin in env_origins.split(",") if origin.strip()]
    if env_origins
    else []
) or FALLBACK_ORIGINS

# --- Server ---
APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
RELOAD_APP = _env_flag("RELOAD_APP", "true")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
