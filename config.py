"""
Configuration module for the barbershop booking service.
Loads environment variables and provides typed configuration.
"""

from pathlib import Path
from typing import Dict, NamedTuple, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


class BarberAccount(NamedTuple):
    """Dashboard login entry parsed from BARBER_ACCOUNTS."""

    username: str
    password: str
    is_admin: bool


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    storage_bucket: str = "appointment-files"

    # Telegram booking wizard (disabled when empty)
    bot_token: Optional[str] = None

    # Shop rules
    shop_timezone: str = "Asia/Manila"
    priority_fee: int = 20  # Added to the first block of every online booking
    booking_window_days: int = 15
    strict_duration_check: bool = True

    # Dashboard accounts: "name:password[:admin]" separated by commas
    barber_accounts: str = "Kean:Barber:admin,Pao:Barber,Gelo:Barber"
    admin_session_hours: int = 12

    # Web developer gallery page
    webdev_password: str = ""
    webdev_session_hours: int = 24

    # Uploads
    max_upload_bytes: int = 5 * 1024 * 1024

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"  # development, staging, production

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def get_barber_accounts(self) -> Dict[str, BarberAccount]:
        """
        Parse the configured dashboard accounts.

        Returns:
            Mapping of username to account
        """
        accounts: Dict[str, BarberAccount] = {}
        for entry in self.barber_accounts.split(","):
            parts = [p.strip() for p in entry.split(":")]
            if len(parts) < 2 or not parts[0]:
                continue
            is_admin = len(parts) > 2 and parts[2].lower() == "admin"
            accounts[parts[0]] = BarberAccount(parts[0], parts[1], is_admin)
        return accounts

    def get_barber_account(self, username: str) -> Optional[BarberAccount]:
        """Look up a single dashboard account by username."""
        return self.get_barber_accounts().get(username)

    def validate_all_required(self) -> None:
        """
        Validate that all required settings are present.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        required_fields = [
            "supabase_url",
            "supabase_key",
            "webdev_password",
        ]

        missing = []
        for field in required_fields:
            value = getattr(self, field, None)

            if not value:
                missing.append(field)
                continue

            # Check for placeholder values
            if str(value).lower().startswith("your_"):
                missing.append(field)

        if not self.get_barber_accounts():
            missing.append("barber_accounts")

        if missing:
            raise ValueError(
                f"Missing or invalid required configuration: "
                f"{', '.join(missing)}. "
                f"Please check your .env file and ensure all required "
                f"values are set."
            )


# Global settings instance
settings = Settings()
