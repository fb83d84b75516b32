"""Tag sets and tag reconciliation."""

from tfaws.tags.keyvalue import KeyValueTags
from tfaws.tags.sync import (
    TagChanges,
    plan_tag_changes,
    apply_tag_changes,
    update_tags,
    merge_default_tags,
)

__all__ = [
    "KeyValueTags",
    "TagChanges",
    "plan_tag_changes",
    "apply_tag_changes",
    "update_tags",
    "merge_default_tags",
]
