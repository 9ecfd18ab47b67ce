from typing import Optional

from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://api.mailgun.net/v3"
EU_BASE_URL = "https://api.eu.mailgun.net/v3"


class MailgunSettings(BaseSettings):
    # Mailgun API credentials. Both are required to send.
    api_key: str = ""
    domain: str = ""

    # Override for EU domains or a sandbox host
    base_url: Optional[str] = None

    # Seconds before the default HTTP client gives up
    timeout: float = 15

    model_config = {"env_prefix": "MAILGUN_", "env_file": ".env", "extra": "ignore"}

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.domain)

    def to_config(self) -> dict:
        return self.model_dump(exclude_none=True)


def get_settings() -> MailgunSettings:
    return MailgunSettings()
