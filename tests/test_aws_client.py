"""Unit tests for ClientRegistry."""

from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import NoCredentialsError

from tfaws.config.models import AssumeRoleConfig, ProviderConfig
from tfaws.utils.aws_client import ClientRegistry


class TestClientRegistry:
    """Client creation and caching."""

    @patch("tfaws.utils.aws_client.boto3.Session")
    def test_session_uses_profile_and_region(self, mock_session_class):
        registry = ClientRegistry(ProviderConfig(region="us-west-2", profile="sandbox"))

        registry.session

        mock_session_class.assert_called_once_with(profile_name="sandbox", region_name="us-west-2")

    @patch("tfaws.utils.aws_client.boto3.Session")
    def test_client_caching(self, mock_session_class):
        mock_session = Mock()
        mock_session.client.side_effect = lambda service, **kwargs: Mock(name=service)
        mock_session_class.return_value = mock_session
        registry = ClientRegistry(ProviderConfig(region="us-west-2"))

        first = registry.client("ssm-contacts")
        second = registry.client("ssm-contacts")
        other_region = registry.client("ssm-contacts", "us-east-1")

        assert first is second
        assert other_region is not first
        assert mock_session.client.call_count == 2

    def test_register_stub(self):
        registry = ClientRegistry(ProviderConfig(region="us-west-2"), session=Mock())
        stub = Mock()

        registry.register("kafka", stub)

        assert registry.client("kafka") is stub
        assert registry.client("kafka", "us-west-2") is stub

    def test_for_region_builds_separate_registry(self):
        registry = ClientRegistry(ProviderConfig(region="us-west-2", default_tags={"a": "b"}))
        registry.register("kafka", Mock())

        regional = registry.for_region("eu-west-1")

        assert regional.region == "eu-west-1"
        assert regional.config.default_tags == {"a": "b"}
        assert regional is not registry
        assert ("kafka", "eu-west-1") not in regional._clients

    def test_caller_identity(self, clients):
        identity = clients.caller_identity()

        assert identity.account_id == "123456789012"
        assert identity.partition == "aws"
        assert clients.account_id == "123456789012"
        clients.client("sts").get_caller_identity.assert_called_once()

    def test_no_credentials(self):
        registry = ClientRegistry(ProviderConfig(region="us-west-2"), session=Mock())
        sts = Mock()
        sts.get_caller_identity.side_effect = NoCredentialsError()
        registry.register("sts", sts)

        with pytest.raises(NoCredentialsError):
            registry.caller_identity()

    @patch("tfaws.utils.aws_client.boto3.Session")
    def test_assume_role(self, mock_session_class):
        base = Mock()
        base.client.return_value.assume_role.return_value = {"Credentials": {
            "AccessKeyId": "AKIA", "SecretAccessKey": "secret", "SessionToken": "token",
        }}
        assumed = Mock()
        mock_session_class.side_effect = [base, assumed]
        config = ProviderConfig(
            region="us-west-2",
            assume_role=AssumeRoleConfig(role_arn="arn:aws:iam::123456789012:role/test"),
        )

        session = ClientRegistry(config).session

        assert session is assumed
        params = base.client.return_value.assume_role.call_args.kwargs
        assert params["RoleArn"] == "arn:aws:iam::123456789012:role/test"
        assert params["RoleSessionName"] == "tfaws"

    def test_clear_cache(self):
        registry = ClientRegistry(ProviderConfig(region="us-west-2"), session=Mock())
        registry.register("kafka", Mock())
        registry.clear_cache()
        assert registry._clients == {}
