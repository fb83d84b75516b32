"""Configuration management for tfaws."""

from .models import (
    AssumeRoleConfig,
    IgnoreTagsConfig,
    ProviderConfig,
    SweepConfig,
    TfawsConfig,
)
from .parser import Config, ConfigValidationError

__all__ = [
    "AssumeRoleConfig",
    "IgnoreTagsConfig",
    "ProviderConfig",
    "SweepConfig",
    "TfawsConfig",
    "Config",
    "ConfigValidationError",
]
