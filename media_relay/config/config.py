import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from media_relay.constants import DEFAULT_MMM_API_URL, DEFAULT_PORT, DEFAULT_TRIAL_PERIOD_DAYS
from media_relay.utils.exceptions import ConfigError

# Load environment variables from .env file
load_dotenv()

# Environment variable -> Config attribute. Every entry must be present at startup.
REQUIRED_ENV_VARS: dict[str, str] = {
    "STRIPE_SECRET_KEY": "stripe_secret_key",
    "STRIPE_PRICE_ID": "stripe_price_id",
    "STRIPE_WEBHOOK_SECRET": "stripe_webhook_secret",
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_SERVICE_ROLE_KEY": "supabase_service_role_key",
    "APP_URL": "app_url",
    "GEMINI_API_KEY": "gemini_api_key",
    "MMM_API_KEY": "mmm_api_key",
}

# Older deployments exported the Gemini key as API_KEY
ENV_VAR_FALLBACKS: dict[str, str] = {"GEMINI_API_KEY": "API_KEY"}


def _get_env_var(
    environ: Mapping[str, str], name: str, default: str | None = None, *, strip: bool = True
) -> str | None:
    """
    Fetch an environment variable with optional whitespace trimming.

    Args:
        environ: Mapping to read from (normally os.environ).
        name: Environment variable to look up.
        default: Value to return when the env var is unset or empty.
        strip: Whether to strip leading/trailing whitespace (default: True).

    Returns:
        The normalized string value or the provided default when empty.
    """
    value = environ.get(name)
    if strip and value is not None:
        value = value.strip()

    # Unset and empty both defer to the legacy name
    if not value and name in ENV_VAR_FALLBACKS:
        value = environ.get(ENV_VAR_FALLBACKS[name])
        if strip and value is not None:
            value = value.strip()

    if value is None:
        return default

    return value or default


@dataclass(frozen=True)
class ConfigValidationResult:
    """Outcome of the startup environment check."""

    is_valid: bool
    missing: list[str] = field(default_factory=list)

    def describe(self) -> str:
        if self.is_valid:
            return "All required environment variables are set"
        return f"Missing required environment variables: {', '.join(self.missing)}"


def validate_environment(environ: Mapping[str, str] | None = None) -> ConfigValidationResult:
    """
    Check that every required environment variable is set.

    Returns:
        ConfigValidationResult listing missing variable names in declaration order.
    """
    environ = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not _get_env_var(environ, name)]
    return ConfigValidationResult(is_valid=not missing, missing=missing)


@dataclass(frozen=True)
class Config:
    """Configuration for the relay, built once at startup"""

    stripe_secret_key: str
    stripe_price_id: str
    stripe_webhook_secret: str
    supabase_url: str
    supabase_service_role_key: str
    app_url: str
    gemini_api_key: str
    mmm_api_key: str
    mmm_api_url: str = DEFAULT_MMM_API_URL
    port: int = DEFAULT_PORT
    app_env: str = "production"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    trial_period_days: int = DEFAULT_TRIAL_PERIOD_DAYS

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def sentry_enabled(self) -> bool:
        return bool(self.sentry_dsn)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """
        Build the configuration from environment variables.

        Raises:
            ConfigError: if a required variable is missing or a value is malformed.
        """
        environ = os.environ if environ is None else environ

        result = validate_environment(environ)
        if not result.is_valid:
            raise ConfigError(result.describe(), details=", ".join(result.missing))

        values = {attr: _get_env_var(environ, name) for name, attr in REQUIRED_ENV_VARS.items()}

        supabase_url = values["supabase_url"].rstrip("/")
        if not supabase_url.startswith(("http://", "https://")):
            raise ConfigError(
                "SUPABASE_URL must start with 'http://' or 'https://'",
                details=f"Current value: '{supabase_url}'",
            )
        values["supabase_url"] = supabase_url
        values["app_url"] = values["app_url"].rstrip("/")

        return cls(
            **values,
            mmm_api_url=_get_env_var(environ, "MMM_API_URL", DEFAULT_MMM_API_URL),
            port=_parse_int(environ, "PORT", DEFAULT_PORT),
            app_env=_get_env_var(environ, "APP_ENV", "production").lower(),
            log_level=_get_env_var(environ, "LOG_LEVEL", "INFO").upper(),
            sentry_dsn=_get_env_var(environ, "SENTRY_DSN"),
            trial_period_days=_parse_int(
                environ, "CHECKOUT_TRIAL_DAYS", DEFAULT_TRIAL_PERIOD_DAYS
            ),
        )


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _get_env_var(environ, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer", details=f"Current value: '{raw}'") from None
