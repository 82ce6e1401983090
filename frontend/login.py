import logging
from enum import Enum
from typing import Optional

from frontend.api import ApiError
from frontend.common import Page, Redirect

log = logging.getLogger(__name__)

MISSING_FIELDS = "Please enter both email/username and password."
INVALID_CREDENTIALS = "Invalid email/username or password."


class LoginState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS_OWNER = "success-owner"
    SUCCESS_TENANT = "success-tenant"
    ERROR = "error"


class LoginPage(Page):
    """
    idle -> submitting -> success-owner | success-tenant | error.
    Success states end in a redirect; an error drops back to idle.
    """

    def __init__(self, api=None, config=None):
        super().__init__(api, config)
        self.state = LoginState.IDLE
        self.outcome = None
        self.session = None

    @property
    def is_submitting(self) -> bool:
        return self.state == LoginState.SUBMITTING

    def _fail(self, message: str):
        self.message = message
        self.outcome = LoginState.ERROR
        self.state = LoginState.IDLE

    def submit(self, identifier: str, password: str) -> Optional[Redirect]:
        self.message = ""
        self.outcome = None
        if not identifier or not password:
            self._fail(MISSING_FIELDS)
            return None
        if not self._check_api():
            self._fail(self.config_error)
            return None

        self.state = LoginState.SUBMITTING
        try:
            result = self.api.login(identifier, password)
        except ApiError as e:
            log.warning(f"Login error: {e.message}")
            if e.status == 401:
                self._fail(INVALID_CREDENTIALS)
            else:
                self._fail(f"Login failed: {e.message or 'An unexpected error occurred.'}")
            return None

        self.session = result
        self.api.token = result["token"]
        if result["role"] == "owner":
            self.state = LoginState.SUCCESS_OWNER
            self.message = "Welcome, Owner!"
        else:
            self.state = LoginState.SUCCESS_TENANT
            self.message = "Welcome, Tenant!"
        self.outcome = self.state
        return Redirect(result["redirect"])
