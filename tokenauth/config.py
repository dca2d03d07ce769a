"""Application configuration loaded from .env."""

from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv
import os

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:
    # Issuer side
    JWT_KEY_PATH: str = os.getenv("JWT_KEY_PATH", str(BASE_DIR / "keys" / "jwt_private.der"))
    JWT_ISSUER_NAME: str = os.getenv("JWT_ISSUER_NAME", "tokenauth")
    TOKEN_EXPIRE_MINUTES: int = int(os.getenv("TOKEN_EXPIRE_MINUTES", "720"))

    # Audience side
    JWT_AUDIENCE_NAME: str = os.getenv("JWT_AUDIENCE_NAME", "tokenauth")
    JWT_PUBLIC_KEY_URL: str = os.getenv("JWT_PUBLIC_KEY_URL", "http://localhost:8000/jwtkeypub")
    JWT_FETCH_TIMEOUT: float = float(os.getenv("JWT_FETCH_TIMEOUT", "5.0"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
