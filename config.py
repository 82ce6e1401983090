"""
Runtime configuration for the RentCare API.

Values come from the environment, optionally seeded from a .env file.
"""
import logging
import os
import secrets

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)


def _session_secret() -> str:
    secret = os.getenv("SESSION_SECRET")
    if secret:
        return secret
    # Tokens signed with this die with the process
    log.error("SESSION_SECRET is not set; using a random secret. Sessions will not survive a restart.")
    return secrets.token_urlsafe(32)


class Settings:
    def __init__(self):
        self.client_url = os.getenv("CLIENT_URL", "http://localhost:3000")
        self.database_url = os.getenv("DATABASE_URL")
        self.database_name = os.getenv("DATABASE_NAME")
        self.stripe_secret_key = os.getenv("STRIPE_SECRET_KEY")
        self.stripe_webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")
        self.stripe_currency = os.getenv("STRIPE_CURRENCY", "usd")
        self.session_secret = _session_secret()
        self.session_ttl_minutes = int(os.getenv("SESSION_TTL_MINUTES", 720))
        self.port = int(os.getenv("PORT", 8000))


settings = Settings()
