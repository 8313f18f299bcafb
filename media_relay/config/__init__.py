from media_relay.config.config import Config, ConfigValidationResult, validate_environment

__all__ = ["Config", "ConfigValidationResult", "validate_environment"]
