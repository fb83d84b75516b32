"""Tag glue for SSM Contacts ([{"Key", "Value"}] wire type, keyed by ARN)."""

from typing import Any, Dict, List, Optional

from tfaws import names
from tfaws.config.models import IgnoreTagsConfig
from tfaws.tags.keyvalue import KeyValueTags
from tfaws.tags.sync import TagChanges
from tfaws.tags.sync import update_tags as sync_tags
from tfaws.utils.errors import ErrorContext, ProviderError


def tags(kv: KeyValueTags) -> List[Dict[str, str]]:
    return kv.to_list()


def key_value_tags(service_tags: Optional[List[Dict[str, str]]]) -> KeyValueTags:
    return KeyValueTags.new(service_tags or [])


def list_tags(conn, identifier: str) -> KeyValueTags:
    try:
        output = conn.list_tags_for_resource(ResourceARN=identifier)
    except Exception as e:
        raise ProviderError(
            f"listing tags for resource ({identifier}): {e}",
            context=ErrorContext(resource_id=identifier, operation='list tags', aws_service=names.SSM_CONTACTS),
            cause=e
        ) from e
    return key_value_tags(output.get('Tags'))


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
        names.SSM_CONTACTS,
        untag=lambda arn, keys: conn.untag_resource(ResourceARN=arn, TagKeys=keys),
        tag=lambda arn, kv: conn.tag_resource(ResourceARN=arn, Tags=tags(kv)),
        ignore_config=ignore_config,
    )
