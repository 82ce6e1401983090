import os
from dataclasses import dataclass, field
from typing import Optional

from frontend.api import ApiClient

API_URL_MISSING = "Configuration Error: API URL is not set. Please contact support."
STRIPE_MISCONFIGURED = (
    "Configuration Error: Stripe is not configured correctly. Payment functionality will be disabled."
)


@dataclass
class ClientConfig:
    api_base_url: Optional[str] = None
    stripe_publishable_key: str = ""

    @classmethod
    def from_env(cls):
        return cls(
            api_base_url=os.getenv("API_BASE_URL") or os.getenv("REACT_APP_API_BASE_URL"),
            stripe_publishable_key=(
                os.getenv("STRIPE_PUBLISHABLE_KEY") or os.getenv("REACT_APP_STRIPE_PUBLISHABLE_KEY") or ""
            ),
        )

    @property
    def payments_enabled(self) -> bool:
        return self.stripe_publishable_key.startswith("pk_")


@dataclass
class Redirect:
    path: str
    state: dict = field(default_factory=dict)


class Page:
    """Banner message, configuration error and API client shared by every page."""

    def __init__(self, api: Optional[ApiClient] = None, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig.from_env()
        if api is None and self.config.api_base_url:
            api = ApiClient(self.config.api_base_url)
        self.api = api
        self.message = ""
        self.config_error = ""

    def dismiss_message(self):
        self.message = ""

    def _check_api(self) -> bool:
        if self.api is None:
            self.config_error = API_URL_MISSING
            return False
        return True
