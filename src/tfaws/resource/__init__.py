"""Resource handler interface."""

from .base import ChangeType, ResourceConfig, ResourceHandler, ResourceState

__all__ = [
    "ChangeType",
    "ResourceConfig",
    "ResourceHandler",
    "ResourceState",
]
