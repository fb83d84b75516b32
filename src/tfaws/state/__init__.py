"""State of applied resources."""

from .models import ResourceInstance, State, flatten_attributes

__all__ = [
    "ResourceInstance",
    "State",
    "flatten_attributes",
]
