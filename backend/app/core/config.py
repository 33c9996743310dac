"""Application configuration.

Environment variables override all defaults. DATABASE_URL has no default:
the server refuses to start without it.
"""

import os
from pathlib import Path


# Load .env for local development (safe no-op if not installed)
try:
    from dotenv import load_dotenv  # type: ignore

    _BACKEND_DIR = Path(__file__).resolve().parents[2]
    load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)
except ImportError:
    pass


class Settings:
    # Database Configuration (required, checked at startup)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # HTTP server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))

    # CORS: the admin panel / portal dev server only
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "http://localhost:3000")

    # Mail relay (Must be set via .env, never in code)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: str = os.getenv("SMTP_PORT", "")
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "")
    FROM_NAME: str = os.getenv("FROM_NAME", "") or "Khata System"

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def smtp_configured(self) -> bool:
        return all((self.SMTP_HOST, self.SMTP_PORT, self.SMTP_USER, self.SMTP_PASS))

    @property
    def sender_address(self) -> str:
        return self.FROM_EMAIL or self.SMTP_USER


settings = Settings()
