"""
Configuration settings for the Layout Conformance Tester
"""
from pydantic import SecretStr
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional

from .models.role import Credentials


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Layout Conformance Tester"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent
    ARTIFACTS_DIR: Path = BASE_DIR / "artifacts"
    REPORTS_DIR: Path = BASE_DIR / "reports"

    # Application under test
    BASE_URL: str = "http://localhost:4000"
    LOGIN_PATH: str = "/login"

    # Browser settings
    BROWSER_HEADLESS: bool = True
    BROWSER_TIMEOUT: int = 30000  # ms
    AUTH_TIMEOUT: int = 15000  # ms
    NAVIGATION_TIMEOUT: int = 10000  # ms
    SETTLE_DELAY_MS: int = 1000

    # Run settings
    MAX_PARALLEL_SCENARIOS: int = 4
    RUN_TIMEOUT: float = 600.0  # seconds, whole matrix
    LOAD_BUDGET_MS: int = 3000
    LOW_POWER_BUDGET_FACTOR: float = 1.8
    CHECK_ACCESS_GUARD: bool = True  # open role paths without a session first
    CAPTURE_SCREENSHOTS: bool = True
    SAVE_REPORTS: bool = True

    # Credentials (owned by the auth collaborator)
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[SecretStr] = None
    TRAINER_EMAIL: Optional[str] = None
    TRAINER_PASSWORD: Optional[SecretStr] = None
    CUSTOMER_EMAIL: Optional[str] = None
    CUSTOMER_PASSWORD: Optional[SecretStr] = None

    class Config:
        env_file = ".env"
        extra = "allow"

    def url(self, path: str) -> str:
        """Join a role path onto the base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.BASE_URL.rstrip('/')}/{path.lstrip('/')}"

    def credentials_for(self, role: str):
        """
        Look up the configured credentials for a role.

        Args:
            role: Role value (admin, trainer, customer)

        Returns:
            Credentials, or None when the role has no account configured
        """
        prefix = str(getattr(role, "value", role)).upper()
        email = getattr(self, f"{prefix}_EMAIL", None)
        password = getattr(self, f"{prefix}_PASSWORD", None)
        if not email or password is None:
            return None
        return Credentials(email=email, password=password)


settings = Settings()

# Ensure directories exist
settings.ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
settings.REPORTS_DIR.mkdir(parents=True, exist_ok=True)
