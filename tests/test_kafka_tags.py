"""Unit tests for the Kafka tag glue."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from tfaws.config.models import IgnoreTagsConfig
from tfaws.service import kafka
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import ProviderError, TaggingError

ARN = "arn:aws:kafka:us-west-2:123456789012:cluster/test/abc"


@pytest.fixture
def conn():
    return MagicMock()


class TestKafkaTags:
    """Wire conversion and update calls."""

    def test_tags_round_trip_shape(self):
        kv = kafka.key_value_tags({"Name": "test", "env": None})
        assert kafka.tags(kv) == {"Name": "test", "env": ""}

    def test_update_tags_calls(self, conn):
        kafka.update_tags(conn, ARN, {"old": "1", "keep": "x"}, {"keep": "x", "new": "2"})

        conn.untag_resource.assert_called_once_with(ResourceArn=ARN, TagKeys=["old"])
        conn.tag_resource.assert_called_once_with(ResourceArn=ARN, Tags={"new": "2"})

    def test_update_tags_noop(self, conn):
        kafka.update_tags(conn, ARN, {"a": "1"}, {"a": "1"})
        conn.untag_resource.assert_not_called()
        conn.tag_resource.assert_not_called()

    def test_ignore_config_applied(self, conn):
        kafka.update_tags(conn, ARN, {}, {"ext:owner": "a"}, IgnoreTagsConfig(key_prefixes=["ext:"]))
        conn.tag_resource.assert_not_called()

    def test_untag_error_wrapped(self, conn):
        conn.untag_resource.side_effect = ClientError(
            {"Error": {"Code": "BadRequestException", "Message": "bad"}}, "UntagResource"
        )

        with pytest.raises(TaggingError, match=r"^untagging resource \(arn:aws:kafka"):
            kafka.update_tags(conn, ARN, {"a": "1"}, {"b": "2"})
        conn.tag_resource.assert_not_called()

    def test_list_tags(self, conn):
        conn.list_tags_for_resource.return_value = {"Tags": {"Name": "x", "aws:internal": "y"}}
        assert kafka.list_tags(conn, ARN).keys() == ["Name", "aws:internal"]
        conn.list_tags_for_resource.assert_called_once_with(ResourceArn=ARN)

    def test_list_tags_error(self, conn):
        conn.list_tags_for_resource.side_effect = RuntimeError("timeout")
        with pytest.raises(ProviderError, match="listing tags for resource"):
            kafka.list_tags(conn, ARN)


class TestKafkaServicePackage:
    """Entry point resolving the client from an explicit registry."""

    def test_update_tags_through_registry(self, clients, conn):
        clients.register("kafka", conn)

        changes = kafka.ServicePackage().update_tags(clients, ARN, {"a": "1"}, {"a": "2"})

        assert changes.updated.map() == {"a": "2"}
        conn.tag_resource.assert_called_once_with(ResourceArn=ARN, Tags={"a": "2"})
        conn.untag_resource.assert_not_called()

    def test_list_tags_applies_ignore_config(self, provider_config, conn):
        config = provider_config.model_copy(update={"ignore_tags": IgnoreTagsConfig(keys=["skip"])})
        clients = ClientRegistry(config)
        clients.register("kafka", conn)
        conn.list_tags_for_resource.return_value = {"Tags": {"skip": "1", "keep": "2"}}

        assert kafka.ServicePackage().list_tags(clients, ARN).map() == {"keep": "2"}
