"""
Auth Collaborators - establish a logged-in session for a role
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .driver import BaseDriver
from .. import selectors
from ..config import settings
from ..errors import AuthError, DriverTimeout, ElementNotFound
from ..models.role import Credentials, Role, SessionHandle

logger = logging.getLogger(__name__)

LOGIN_ERROR_GRACE_MS = 1500


class BaseAuthenticator(ABC):
    """Logs a browsing context in as a role."""

    @abstractmethod
    async def login(self, driver: BaseDriver, role: Role, credentials: Credentials) -> SessionHandle:
        """
        Log in.

        Raises:
            AuthError: when the session cannot be established
        """


class FormLoginAuthenticator(BaseAuthenticator):
    """
    Logs in through the application's email/password form.

    Only submits the form; confirming the session against a role landing
    marker is left to the caller.
    """

    def __init__(self, login_path: Optional[str] = None):
        self.login_path = login_path or settings.LOGIN_PATH

    async def login(self, driver: BaseDriver, role: Role, credentials: Credentials) -> SessionHandle:
        logger.debug(f"Logging in as {role.value} at {self.login_path}")
        try:
            await driver.navigate(self.login_path)
            email = await driver.locate_first_matching(selectors.EMAIL_INPUT)
            password = await driver.locate_first_matching(selectors.PASSWORD_INPUT)
            submit = await driver.locate_first_matching(selectors.SUBMIT_BUTTON)

            await driver.fill(email, credentials.email)
            await driver.fill(password, credentials.password.get_secret_value())
            await driver.click(submit)
        except ElementNotFound as e:
            raise AuthError(role.value, f"login form not found ({e})") from e
        except DriverTimeout as e:
            raise AuthError(role.value, str(e)) from e

        await self._raise_on_rejection(driver, role)
        return SessionHandle(role=role, landing_url=self.login_path)

    async def _raise_on_rejection(self, driver: BaseDriver, role: Role):
        try:
            matched = await driver.wait_for(selectors.LOGIN_ERROR, LOGIN_ERROR_GRACE_MS)
        except DriverTimeout:
            return  # no error banner shown
        alert = await driver.observe([matched])
        message = alert.text if alert and alert.text else "error banner shown"
        raise AuthError(role.value, f"login rejected: {message}")
