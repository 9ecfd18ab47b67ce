"""Config validation for email providers."""

from typing import Optional
from urllib.parse import urlparse

VALID_PROVIDER_TYPES = {"mailgun"}


def validate_provider_config(provider_type: str, config: dict) -> Optional[str]:
    """
    Validate email provider config.
    Returns None if valid, or an error message string if invalid.
    """
    if provider_type not in VALID_PROVIDER_TYPES:
        return f"Unknown provider type: {provider_type}"

    err = _require_fields(config, ["api_key", "domain"])
    if err:
        return err
    if config.get("base_url") is not None:
        return _validate_url(config["base_url"], "base_url")
    return None


# --- Internal validators ---


def _require_fields(config: dict, fields: list[str]) -> Optional[str]:
    for field in fields:
        if not config.get(field):
            return f"Missing required field: {field}"
    return None


def _validate_url(value, field_name: str) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return f"Missing required field: {field_name}"
    try:
        parsed = urlparse(value)
    except ValueError:
        return f"{field_name} is not a valid URL"
    if parsed.scheme not in ("http", "https"):
        return f"{field_name} must use http or https protocol"
    if not parsed.netloc:
        return f"{field_name} is not a valid URL"
    return None
