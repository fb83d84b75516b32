"""Tag glue for CloudWatch Internet Monitor (tag map wire type, keyed by ARN)."""

from typing import Any, Dict, Optional

from tfaws import names
from tfaws.config.models import IgnoreTagsConfig
from tfaws.tags.keyvalue import KeyValueTags
from tfaws.tags.sync import TagChanges
from tfaws.tags.sync import update_tags as sync_tags


def tags(kv: KeyValueTags) -> Dict[str, str]:
    return kv.to_dict()


def key_value_tags(service_tags: Optional[Dict[str, Optional[str]]]) -> KeyValueTags:
    return KeyValueTags.new(service_tags)


def update_tags(
    conn,
    identifier: str,
    old_tags: Any,
    new_tags: Any,
    ignore_config: Optional[IgnoreTagsConfig] = None
) -> TagChanges:
    return sync_tags(
        identifier,
        old_tags,
        new_tags,
        names.INTERNET_MONITOR,
        untag=lambda arn, keys: conn.untag_resource(ResourceArn=arn, TagKeys=keys),
        tag=lambda arn, kv: conn.tag_resource(ResourceArn=arn, Tags=tags(kv)),
        ignore_config=ignore_config,
    )
