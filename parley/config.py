"""Dispatch configuration."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DispatchSettings(BaseSettings):
    """Settings for the listener dispatch engine."""

    model_config = SettingsConfigDict(env_prefix="PARLEY_")

    # Fan-out: maximum matched listeners invoked per occurrence, negative = no limit
    fan_out_limit: int = -1

    # Per-listener processing timeout in seconds, None = wait forever
    listener_timeout: float | None = None

    # Messages must mention @bot_user_name when set
    bot_user_name: str | None = None

    # Plain text reply for messages addressed to the bot that nothing handles
    unknown_message_reply: str | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("listener_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("listener_timeout must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def effective_fan_out(self, matched: int) -> int:
        """Number of matched listeners that will actually be invoked."""
        if self.fan_out_limit < 0 or self.fan_out_limit > matched:
            return matched
        return self.fan_out_limit
