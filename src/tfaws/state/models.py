"""State of applied resources, and flat attribute views for assertions."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def flatten_attributes(values: Dict[str, Any], prefix: str = '') -> Dict[str, str]:
    """Flatten nested attribute values into dotted string keys.

    Maps get a ``<name>.%`` count and lists a ``<name>.#`` count, with list
    elements addressed by index: ``delivery_address.simple_address``,
    ``tags.%``, ``tags.Name``, ``resources.#``, ``resources.0``. Unset (None)
    values are omitted.
    """
    flat: Dict[str, str] = {}
    for key, value in values.items():
        path = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, dict):
            flat[f"{path}.%"] = str(len(value))
            flat.update(flatten_attributes(value, f"{path}."))
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = sorted(value) if isinstance(value, (set, frozenset)) else list(value)
            flat[f"{path}.#"] = str(len(items))
            flat.update(flatten_attributes({str(i): item for i, item in enumerate(items)}, f"{path}."))
        elif isinstance(value, bool):
            flat[path] = 'true' if value else 'false'
        else:
            flat[path] = str(value)
    return flat


class ResourceInstance(BaseModel):
    """One applied resource block."""

    type: str = Field(..., description="Resource type, e.g. aws_ssmcontacts_contact_channel")
    name: str = Field(..., description="Block name within the configuration")
    id: str = Field(..., description="Remote identifier (ARN or service-assigned ID)")
    attributes: Dict[str, Any] = Field(default_factory=dict)
    dependencies: List[str] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def flat_attributes(self) -> Dict[str, str]:
        """Attributes flattened to dotted keys, including ``id``."""
        flat = flatten_attributes(self.attributes)
        flat['id'] = self.id
        return flat


class State(BaseModel):
    """All resources applied by one scenario or session, keyed by address."""

    version: str = "1"
    resources: Dict[str, ResourceInstance] = Field(default_factory=dict)

    def add_resource(self, instance: ResourceInstance) -> None:
        self.resources[instance.address] = instance

    def remove_resource(self, address: str) -> Optional[ResourceInstance]:
        return self.resources.pop(address, None)

    def get_resource(self, address: str) -> Optional[ResourceInstance]:
        return self.resources.get(address)

    def has_resource(self, address: str) -> bool:
        return address in self.resources

    def list_resources(self, type_name: Optional[str] = None) -> List[ResourceInstance]:
        """All instances, optionally only those of one resource type."""
        return [
            r for r in self.resources.values()
            if type_name is None or r.type == type_name
        ]

    def copy_state(self) -> 'State':
        return self.model_copy(deep=True)
