"""Reconcile observed tags with desired tags using untag/tag calls."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from tfaws.config.models import IgnoreTagsConfig
from tfaws.tags.keyvalue import KeyValueTags
from tfaws.utils.errors import ErrorContext, TaggingError
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

UntagFunc = Callable[[str, List[str]], Any]
TagFunc = Callable[[str, KeyValueTags], Any]


@dataclass
class TagChanges:
    """The calls needed to move a resource from one tag set to another."""

    removed: KeyValueTags = field(default_factory=KeyValueTags)
    updated: KeyValueTags = field(default_factory=KeyValueTags)

    def is_empty(self) -> bool:
        return not self.removed and not self.updated

    def call_count(self) -> int:
        return int(bool(self.removed)) + int(bool(self.updated))


def plan_tag_changes(
    old: Any,
    new: Any,
    service: str,
    ignore_config: Optional[IgnoreTagsConfig] = None
) -> TagChanges:
    """Work out which keys to untag and which to (re)tag.

    Keys whose value is unchanged appear in neither set, and keys reserved by
    AWS or the service are never touched.
    """
    old_tags = KeyValueTags.new(old).ignore_config(ignore_config)
    new_tags = KeyValueTags.new(new).ignore_config(ignore_config)

    return TagChanges(
        removed=old_tags.removed(new_tags).ignore_system(service),
        updated=old_tags.updated(new_tags).ignore_system(service),
    )


def apply_tag_changes(
    identifier: str,
    changes: TagChanges,
    untag: UntagFunc,
    tag: TagFunc
) -> None:
    """Issue the untag call, then the tag call.

    Raises:
        TaggingError: Either call failed; a failed untag skips the tag call
    """
    if changes.removed:
        try:
            untag(identifier, changes.removed.keys())
        except Exception as e:
            raise TaggingError(
                f"untagging resource ({identifier}): {e}",
                context=ErrorContext(resource_id=identifier, operation='untagging'),
                cause=e
            ) from e
        logger.debug(f"Removed tags {changes.removed.keys()} from {identifier}")

    if changes.updated:
        try:
            tag(identifier, changes.updated)
        except Exception as e:
            raise TaggingError(
                f"tagging resource ({identifier}): {e}",
                context=ErrorContext(resource_id=identifier, operation='tagging'),
                cause=e
            ) from e
        logger.debug(f"Set tags {changes.updated.keys()} on {identifier}")


def update_tags(
    identifier: str,
    old: Any,
    new: Any,
    service: str,
    untag: UntagFunc,
    tag: TagFunc,
    ignore_config: Optional[IgnoreTagsConfig] = None
) -> TagChanges:
    """Plan and apply tag changes for one resource.

    Returns:
        The changes that were applied
    """
    changes = plan_tag_changes(old, new, service, ignore_config)
    apply_tag_changes(identifier, changes, untag, tag)
    return changes


def merge_default_tags(default_tags: Optional[Dict[str, str]], resource_tags: Any) -> KeyValueTags:
    """Resolve provider default tags with resource tags; resource tags win."""
    return KeyValueTags.new(default_tags).merge(KeyValueTags.new(resource_tags))
