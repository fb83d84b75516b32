"""Amazon MSK (Kafka) service package."""

from tfaws.service.kafka.tags import ServicePackage, key_value_tags, list_tags, tags, update_tags

__all__ = ["ServicePackage", "key_value_tags", "list_tags", "tags", "update_tags"]
