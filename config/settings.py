# config/settings.py
import os
import json
import base64
import binascii
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _project_id_from_service_key(encoded: Optional[str]) -> Optional[str]:
    """Reads `project_id` out of a base64 encoded Firebase service-account JSON."""
    if not encoded:
        return None
    try:
        service_account = json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return service_account.get("project_id")


class Settings:
    PROJECT_NAME: str = "Plantora"

    def __init__(self, **overrides):
        # --- Database ---
        self.MONGODB_URI: Optional[str] = os.getenv("MONGODB_URI")
        self.DB_NAME: str = os.getenv("DB_NAME", "Plantora_DB")

        # --- Payments (Stripe Checkout) ---
        self.STRIPE_SECRET_KEY: Optional[str] = os.getenv("STRIPE_SECRET_KEY")
        self.STRIPE_API_BASE: str = os.getenv("STRIPE_API_BASE", "https://api.stripe.com")
        self.CURRENCY: str = os.getenv("CURRENCY", "usd")

        # --- Identity (Firebase ID tokens) ---
        self.FIREBASE_PROJECT_ID: Optional[str] = (
            os.getenv("FIREBASE_PROJECT_ID")
            or _project_id_from_service_key(os.getenv("FB_SERVICE_KEY"))
        )

        # --- Server ---
        self.CLIENT_DOMAIN: str = os.getenv("CLIENT_DOMAIN", "http://localhost:5173")
        self.PORT: int = int(os.getenv("PORT", "3000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


@lru_cache
def get_settings() -> Settings:
    return Settings()
