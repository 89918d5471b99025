import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

ONBOARDING_STATUS_PATH = "/api/user/onboarding/status"


class OnboardingStatusError(Exception):
    def __init__(self, detail, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self):
        return str(self.detail)


class OnboardingClient:
    """HTTP client for the onboarding status snapshot of the signed-in user."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 5,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        if access_token:
            self.session.headers["Authorization"] = f"Bearer {access_token}"

    def fetch_status(self) -> dict:
        url = f"{self.base_url}{ONBOARDING_STATUS_PATH}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Onboarding status request failed: {e}")
            raise OnboardingStatusError(f"Failed to fetch onboarding status: {e}")

        if not response.ok:
            logger.error(
                "Onboarding status request returned %s: %s",
                response.status_code,
                response.text,
            )
            raise OnboardingStatusError(
                "Failed to fetch onboarding status", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise OnboardingStatusError(f"Invalid onboarding status payload: {e}")
