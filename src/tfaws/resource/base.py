"""Resource handler interface shared by all managed AWS resource types."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from tfaws.tags.keyvalue import KeyValueTags
from tfaws.tags.sync import merge_default_tags
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import ErrorContext, NotFoundError, ValidationError
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)


class ChangeType(Enum):
    """Type of change for a resource."""
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NO_CHANGE = "no_change"


class ResourceConfig(BaseModel):
    """Arguments of a resource, validated once when the handler receives them."""

    model_config = ConfigDict(extra='forbid')


class ResourceState(BaseModel):
    """Read-back representation of one managed object."""

    model_config = ConfigDict(extra='forbid')

    id: str


C = TypeVar('C', bound=ResourceConfig)
S = TypeVar('S', bound=ResourceState)


class ResourceHandler(ABC, Generic[C, S]):
    """Create, read, update, delete and import one AWS resource type.

    Subclasses declare their typed argument and state models and the
    arguments whose change forces replacement. ``read`` raises
    NotFoundError when the identifier no longer resolves.
    """

    type_name: ClassVar[str]
    service: ClassVar[str]
    config_model: ClassVar[Type[ResourceConfig]]
    state_model: ClassVar[Type[ResourceState]]
    force_new: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, clients: ClientRegistry):
        """Initialize handler.

        Args:
            clients: Client registry owned by the provider instance
        """
        self.clients = clients

    @property
    def default_tags(self) -> Dict[str, str]:
        return self.clients.config.default_tags

    @property
    def ignore_tags(self):
        return self.clients.config.ignore_tags

    def validate(self, arguments: Dict[str, Any]) -> C:
        """Validate raw arguments into the typed config model.

        Raises:
            ValidationError: Arguments don't match the resource schema
        """
        if isinstance(arguments, self.config_model):
            return arguments
        try:
            return self.config_model.model_validate(arguments)
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(
                f"invalid arguments for {self.type_name}: {details}",
                context=ErrorContext(resource_type=self.type_name, operation='validate'),
                cause=e
            ) from e

    @abstractmethod
    def create(self, config: C) -> S:
        """Create the remote object and return its read-back state."""

    @abstractmethod
    def read(self, identifier: str) -> S:
        """Read the remote object.

        Raises:
            NotFoundError: The object doesn't exist
        """

    @abstractmethod
    def update(self, current: S, desired: C) -> S:
        """Apply in-place changes and return the new state."""

    @abstractmethod
    def delete(self, identifier: str) -> None:
        """Delete the remote object; an already-missing object is not an error."""

    def import_state(self, identifier: str) -> S:
        """Adopt an existing object by identifier."""
        logger.info(f"Importing {self.type_name}: {identifier}")
        return self.read(identifier)

    def exists(self, identifier: str) -> bool:
        try:
            self.read(identifier)
        except NotFoundError:
            return False
        return True

    def comparable(self, name: str, value: Any) -> Any:
        """Normalize an argument value before diffing; override for sets etc."""
        return value

    def diff(self, current: S, desired: C) -> List[str]:
        """Names of arguments whose desired value differs from the current state.

        An argument left unset (None) in the desired config is optional and
        computed: whatever the remote side holds is accepted. ``tags`` is
        compared as the merged set with provider default tags, since a
        resource tag equal to a default one reads back only in ``tags_all``.
        """
        changed = []
        current_values = current.model_dump()
        desired_values = desired.model_dump()
        for name, desired_value in desired_values.items():
            if desired_value is None:
                continue
            if name == 'tags' and 'tags_all' in current_values:
                if current_values['tags_all'] != self.tags_all(desired_value).ignore_aws().map():
                    changed.append(name)
                continue
            if self.comparable(name, current_values.get(name)) != self.comparable(name, desired_value):
                changed.append(name)
        return changed

    def plan(self, current: Optional[S], desired: Optional[C]) -> Tuple[ChangeType, List[str]]:
        """Decide how to move from current to desired.

        Returns:
            The change type and the argument names that differ
        """
        if desired is None:
            return (ChangeType.DELETE, []) if current is not None else (ChangeType.NO_CHANGE, [])
        if current is None:
            return ChangeType.CREATE, []

        changed = self.diff(current, desired)
        if not changed:
            return ChangeType.NO_CHANGE, []
        if any(name in self.force_new for name in changed):
            return ChangeType.REPLACE, changed
        return ChangeType.UPDATE, changed

    def tags_all(self, tags: Optional[Dict[str, str]]) -> KeyValueTags:
        """Resource tags merged over provider default tags, minus ignored keys."""
        return merge_default_tags(self.default_tags, tags).ignore_config(self.ignore_tags)

    def tags_for_state(self, remote: KeyValueTags) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Split remote tags into (tags, tags_all) for the state.

        ``tags`` leaves out default tags that the remote side carries with the
        default value, so they don't show up as drift in the resource's own tags.
        """
        all_tags = remote.ignore_aws().ignore_config(self.ignore_tags)
        defaults = KeyValueTags.new(self.default_tags)
        own = {
            k: v for k, v in all_tags.map().items()
            if not (k in defaults and defaults.get(k) == v)
        }
        return own, all_tags.map()
