"""Tag glue for Amazon MSK (Kafka).

Kafka takes tags as a ``{key: value}`` map and removes them by key list,
both addressed by the resource ARN.
"""

from typing import Any, Dict, Optional

from tfaws import names
from tfaws.config.models import IgnoreTagsConfig
from tfaws.tags.keyvalue import KeyValueTags
from tfaws.tags.sync import TagChanges
from tfaws.tags.sync import update_tags as sync_tags
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import ErrorContext, ProviderError


def tags(kv: KeyValueTags) -> Dict[str, str]:
    """Kafka service tags from generic tags."""
    return kv.to_dict()


def key_value_tags(service_tags: Optional[Dict[str, Optional[str]]]) -> KeyValueTags:
    """Generic tags from Kafka service tags."""
    return KeyValueTags.new(service_tags)


def list_tags(conn, identifier: str) -> KeyValueTags:
    """List the tags of a Kafka resource."""
    try:
        output = conn.list_tags_for_resource(ResourceArn=identifier)
    except Exception as e:
        raise ProviderError(
            f"listing tags for resource ({identifier}): {e}",
            context=ErrorContext(resource_id=identifier, operation='list tags', aws_service=names.KAFKA),
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
    """Update Kafka resource tags.

    The identifier is the resource ARN.
    """
    return sync_tags(
        identifier,
        old_tags,
        new_tags,
        names.KAFKA,
        untag=lambda arn, keys: conn.untag_resource(ResourceArn=arn, TagKeys=keys),
        tag=lambda arn, kv: conn.tag_resource(ResourceArn=arn, Tags=tags(kv)),
        ignore_config=ignore_config,
    )


class ServicePackage:
    """Entry points of the Kafka package used by the rest of the provider."""

    name = names.KAFKA

    def resources(self):
        return []

    def register_sweepers(self, registry) -> None:
        """Kafka ships no sweepers."""

    def update_tags(self, clients: ClientRegistry, identifier: str, old_tags: Any, new_tags: Any) -> TagChanges:
        conn = clients.client(names.client_name(names.KAFKA))
        return update_tags(conn, identifier, old_tags, new_tags, clients.config.ignore_tags)

    def list_tags(self, clients: ClientRegistry, identifier: str) -> KeyValueTags:
        conn = clients.client(names.client_name(names.KAFKA))
        return list_tags(conn, identifier).ignore_config(clients.config.ignore_tags)
