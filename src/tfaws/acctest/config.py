"""Declarative scenario configuration: resource blocks and references between them."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from tfaws.state.models import State, flatten_attributes
from tfaws.utils.errors import ConfigurationError, DependencyError, ErrorContext


@dataclass(frozen=True)
class Ref:
    """Reference to an attribute of another block, resolved at apply time.

    ``Ref("aws_ssmcontacts_contact.test", "arn")``
    """

    address: str
    attribute: str = "id"

    def resolve(self, state: State) -> str:
        instance = state.get_resource(self.address)
        if instance is None:
            raise DependencyError(
                f"reference to {self.address}.{self.attribute}: {self.address} is not applied",
                context=ErrorContext(resource_id=self.address)
            )
        value = instance.flat_attributes().get(self.attribute)
        if value is None:
            raise DependencyError(
                f"reference to {self.address}.{self.attribute}: no such attribute",
                context=ErrorContext(resource_id=self.address)
            )
        return value


@dataclass
class ResourceBlock:
    """One ``resource "type" "name" { ... }`` block."""

    type: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def references(self) -> Set[str]:
        """Addresses this block refers to, explicitly or through Ref values."""
        found = set(self.depends_on)
        _collect_refs(self.arguments, found)
        return found

    def resolve(self, state: State) -> Dict[str, Any]:
        """Arguments with every Ref replaced by its value in state."""
        return _resolve(self.arguments, state)


def _collect_refs(value: Any, found: Set[str]) -> None:
    if isinstance(value, Ref):
        found.add(value.address)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_refs(item, found)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_refs(item, found)


def _resolve(value: Any, state: State) -> Any:
    if isinstance(value, Ref):
        return value.resolve(state)
    if isinstance(value, dict):
        return {k: _resolve(v, state) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve(v, state) for v in value]
    return value


class Configuration:
    """An ordered set of resource blocks with unique addresses."""

    def __init__(self, *blocks: ResourceBlock):
        self.blocks: Dict[str, ResourceBlock] = {}
        for block in blocks:
            self.add(block)

    def add(self, block: ResourceBlock) -> None:
        if block.address in self.blocks:
            raise ConfigurationError(
                f"duplicate resource block {block.address}",
                context=ErrorContext(resource_id=block.address, resource_type=block.type)
            )
        self.blocks[block.address] = block

    def get(self, address: str) -> ResourceBlock:
        return self.blocks[address]

    def addresses(self) -> List[str]:
        return list(self.blocks)

    def __iter__(self):
        return iter(self.blocks.values())

    def __len__(self) -> int:
        return len(self.blocks)

    def __contains__(self, address: str) -> bool:
        return address in self.blocks

    def describe(self) -> str:
        """Short human-readable rendering, used in failure messages."""
        lines = []
        for block in self:
            lines.append(f'resource "{block.type}" "{block.name}"')
            for key, value in sorted(flatten_attributes(_render(block.arguments)).items()):
                lines.append(f"  {key} = {value}")
        return "\n".join(lines)


def _render(value: Any) -> Any:
    if isinstance(value, Ref):
        return f"${{{value.address}.{value.attribute}}}"
    if isinstance(value, dict):
        return {k: _render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_render(v) for v in value]
    return value


def compose(*configs: Configuration) -> Configuration:
    """Concatenate configurations; block addresses must stay unique."""
    composed = Configuration()
    for config in configs:
        for block in config:
            composed.add(block)
    return composed
