# intentnet/config/settings.py
"""
Configuration settings using Pydantic for type safety and validation
"""

from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake
from pydantic_settings import BaseSettings, SettingsConfigDict

# Options that hold callables and never go into a persisted record
NON_SERIALIZABLE_OPTIONS = ("processor",)


class Settings(BaseSettings):
    """
    Application settings with validation
    """

    model_config = ConfigDict(
        extra="ignore",
        env_prefix="INTENTNET_",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "intentnet"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)")

    # Logging
    LOG_FORMAT: str = Field(default="text", pattern="^(text|json)$")
    LOG_DIR: str = "logs"


class NeuralSettings(BaseSettings):
    """
    Resolved, immutable hyperparameters for a perceptron classifier.

    Values come from (highest priority first) the options given by the
    caller, INTENTNET_* environment variables and the defaults below.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="INTENTNET_",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    # Training loop
    iterations: int = Field(default=20000, gt=0)
    error_thresh: float = Field(default=0.00005, ge=0)
    delta_error_thresh: float = Field(default=0.000001, ge=0)
    learning_rate: float = Field(default=0.6, gt=0)
    momentum: float = Field(default=0.5, ge=0)
    alpha: float = Field(default=0.07, gt=0)
    log: bool | Callable[..., Any] = False

    # Inference
    multi: bool = False
    use_cache: bool = True
    cache_size: int = Field(default=10000, gt=0)
    none_intent: str = "None"

    # Persistence
    keep_weights_and_changes: bool = False

    # Encoding
    processor: Callable[[str], list[str]] | None = None

    @field_validator("none_intent")
    @classmethod
    def validate_none_intent(cls, v):
        if not v:
            raise ValueError("none_intent cannot be empty")
        return v

    @property
    def log_sink(self) -> Callable[..., Any] | None:
        """Epoch sink supplied through the ``log`` option, if any"""
        if callable(self.log):
            return self.log
        return None

    def to_options(self) -> dict[str, Any]:
        """
        Dump the serializable options using their public camelCase names
        """
        values = self.model_dump(exclude=set(NON_SERIALIZABLE_OPTIONS))
        if callable(values.get("log")):
            values["log"] = True
        return {to_camel(key): value for key, value in values.items()}

    def merge(self, options: Mapping[str, Any] | None = None) -> "NeuralSettings":
        """
        Return a new settings record with ``options`` layered on top of this one
        """
        current = self.model_dump()
        current.update(normalize_options(options))
        return NeuralSettings(**current)


def normalize_options(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Convert option names such as ``errorThresh`` to field names (``error_thresh``)

    Unknown keys are kept so pydantic can ignore them; ``None`` values are
    dropped so they never override a default.
    """
    if not options:
        return {}
    normalized = {}
    for key, value in options.items():
        if value is None:
            continue
        name = to_snake(key)
        normalized[name] = value
    return normalized


def resolve_settings(
    options: Mapping[str, Any] | NeuralSettings | None = None, **kwargs: Any
) -> NeuralSettings:
    """
    Resolve caller options into one immutable settings record

    Args:
        options: Partial options (camelCase or snake_case) or a resolved record
        **kwargs: Extra options, applied after ``options``

    Returns:
        NeuralSettings
    """
    if isinstance(options, NeuralSettings):
        return options.merge(kwargs) if kwargs else options

    merged = normalize_options(options)
    merged.update(normalize_options(kwargs))
    return NeuralSettings(**merged)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance
    """
    return Settings()
