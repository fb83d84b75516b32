"""Unit tests for the SSM Contacts handlers."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from tfaws.config.models import ProviderConfig
from tfaws.resource.base import ChangeType
from tfaws.service.ssmcontacts import ContactChannelHandler, ContactHandler, find_contact_channel_by_id
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import NotFoundError, ProviderError, ValidationError

CONTACT_ARN = "arn:aws:ssm-contacts:us-west-2:123456789012:contact/test"
CHANNEL_ARN = "arn:aws:ssm-contacts:us-west-2:123456789012:contact-channel/test/abc"


def _client_error(code, message="error", operation="GetContactChannel"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def _channel(channel_type="EMAIL", address="default@example.com", name="test"):
    return {
        "ContactArn": CONTACT_ARN,
        "ContactChannelArn": CHANNEL_ARN,
        "Name": name,
        "Type": channel_type,
        "DeliveryAddress": {"SimpleAddress": address},
        "ActivationStatus": "NOT_ACTIVATED",
    }


@pytest.fixture
def conn(clients):
    conn = MagicMock()
    clients.register("ssm-contacts", conn)
    return conn


def _config(handler, channel_type="EMAIL", address="default@example.com", name="test"):
    return handler.validate({
        "contact_id": CONTACT_ARN,
        "delivery_address": {"simple_address": address},
        "name": name,
        "type": channel_type,
    })


class TestContactChannelHandler:
    """Contact channel CRUD and planning."""

    def test_create_defers_activation(self, clients, conn):
        conn.create_contact_channel.return_value = {"ContactChannelArn": CHANNEL_ARN}
        conn.get_contact_channel.return_value = _channel()
        handler = ContactChannelHandler(clients)

        state = handler.create(_config(handler))

        params = conn.create_contact_channel.call_args.kwargs
        assert params["DeferActivation"] is True
        assert params["DeliveryAddress"] == {"SimpleAddress": "default@example.com"}
        assert state.id == CHANNEL_ARN
        assert state.activation_status == "NOT_ACTIVATED"

    def test_create_retries_until_contact_visible(self, clients, conn, no_sleep):
        conn.create_contact_channel.side_effect = [
            _client_error("ResourceNotFoundException", "contact not found", "CreateContactChannel"),
            {"ContactChannelArn": CHANNEL_ARN},
        ]
        conn.get_contact_channel.return_value = _channel()
        handler = ContactChannelHandler(clients)

        handler.create(_config(handler))

        assert conn.create_contact_channel.call_count == 2

    def test_create_error_wrapped(self, clients, conn):
        conn.create_contact_channel.side_effect = _client_error("ValidationException", "bad address")
        handler = ContactChannelHandler(clients)

        with pytest.raises(ProviderError, match=r"creating SSM Contacts Contact Channel \(test\)"):
            handler.create(_config(handler))

    def test_find_not_found(self, conn):
        conn.get_contact_channel.side_effect = _client_error("ResourceNotFoundException")
        with pytest.raises(NotFoundError):
            find_contact_channel_by_id(conn, CHANNEL_ARN)

    def test_find_other_error_propagates(self, conn):
        conn.get_contact_channel.side_effect = _client_error("AccessDeniedException")
        with pytest.raises(ClientError):
            find_contact_channel_by_id(conn, CHANNEL_ARN)

    def test_plan_address_change_updates(self, clients, conn):
        conn.get_contact_channel.return_value = _channel()
        handler = ContactChannelHandler(clients)
        current = handler.read(CHANNEL_ARN)

        change, changed = handler.plan(current, _config(handler, address="second@example.com"))

        assert change == ChangeType.UPDATE
        assert changed == ["delivery_address"]

    def test_plan_type_change_replaces(self, clients, conn):
        conn.get_contact_channel.return_value = _channel()
        handler = ContactChannelHandler(clients)
        current = handler.read(CHANNEL_ARN)

        change, _ = handler.plan(current, _config(handler, "SMS", "+12065550100"))

        assert change == ChangeType.REPLACE

    def test_update_keeps_identifier(self, clients, conn):
        conn.get_contact_channel.side_effect = [_channel(), _channel(address="second@example.com")]
        handler = ContactChannelHandler(clients)
        current = handler.read(CHANNEL_ARN)

        state = handler.update(current, _config(handler, address="second@example.com"))

        conn.update_contact_channel.assert_called_once_with(
            ContactChannelId=CHANNEL_ARN,
            DeliveryAddress={"SimpleAddress": "second@example.com"},
        )
        assert state.id == CHANNEL_ARN

    def test_delete_missing_is_success(self, clients, conn):
        conn.delete_contact_channel.side_effect = _client_error("ResourceNotFoundException")
        ContactChannelHandler(clients).delete(CHANNEL_ARN)

    def test_validate_rejects_unknown_type(self, clients):
        handler = ContactChannelHandler(clients)
        with pytest.raises(ValidationError, match="type"):
            _config(handler, channel_type="PAGER")

    def test_validate_rejects_unknown_argument(self, clients):
        handler = ContactChannelHandler(clients)
        with pytest.raises(ValidationError):
            handler.validate({
                "contact_id": CONTACT_ARN,
                "delivery_address": {"simple_address": "a@example.com"},
                "name": "n",
                "type": "EMAIL",
                "color": "blue",
            })


class TestContactHandler:
    """Contact CRUD with default tags."""

    @pytest.fixture
    def tagged_clients(self, sts_client):
        registry = ClientRegistry(ProviderConfig(region="us-west-2", default_tags={"env": "test"}))
        registry.register("sts", sts_client)
        return registry

    def test_create_merges_default_tags(self, tagged_clients):
        conn = MagicMock()
        tagged_clients.register("ssm-contacts", conn)
        conn.create_contact.return_value = {"ContactArn": CONTACT_ARN}
        conn.get_contact.return_value = {"ContactArn": CONTACT_ARN, "Alias": "test", "Type": "PERSONAL"}
        conn.list_tags_for_resource.return_value = {"Tags": [
            {"Key": "env", "Value": "test"}, {"Key": "Name", "Value": "c"},
        ]}
        handler = ContactHandler(tagged_clients)

        state = handler.create(handler.validate({"alias": "test", "type": "PERSONAL", "tags": {"Name": "c"}}))

        assert conn.create_contact.call_args.kwargs["Tags"] == [
            {"Key": "Name", "Value": "c"}, {"Key": "env", "Value": "test"},
        ]
        assert state.tags == {"Name": "c"}
        assert state.tags_all == {"env": "test", "Name": "c"}

    def test_tag_equal_to_default_plans_no_change(self, tagged_clients):
        conn = MagicMock()
        tagged_clients.register("ssm-contacts", conn)
        conn.get_contact.return_value = {"ContactArn": CONTACT_ARN, "Alias": "test", "Type": "PERSONAL"}
        conn.list_tags_for_resource.return_value = {"Tags": [{"Key": "env", "Value": "test"}]}
        handler = ContactHandler(tagged_clients)
        current = handler.read(CONTACT_ARN)

        same = handler.validate({"alias": "test", "type": "PERSONAL", "tags": {"env": "test"}})
        overridden = handler.validate({"alias": "test", "type": "PERSONAL", "tags": {"env": "prod"}})

        assert current.tags == {}
        assert handler.plan(current, same) == (ChangeType.NO_CHANGE, [])
        assert handler.plan(current, overridden) == (ChangeType.UPDATE, ["tags"])

    def test_update_tags_through_sync(self, clients):
        conn = MagicMock()
        clients.register("ssm-contacts", conn)
        conn.get_contact.return_value = {"ContactArn": CONTACT_ARN, "Alias": "test", "Type": "PERSONAL"}
        conn.list_tags_for_resource.return_value = {"Tags": [{"Key": "a", "Value": "1"}]}
        handler = ContactHandler(clients)
        current = handler.read(CONTACT_ARN)

        handler.update(current, handler.validate({"alias": "test", "type": "PERSONAL", "tags": {"b": "2"}}))

        conn.untag_resource.assert_called_once_with(ResourceARN=CONTACT_ARN, TagKeys=["a"])
        conn.tag_resource.assert_called_once_with(ResourceARN=CONTACT_ARN, Tags=[{"Key": "b", "Value": "2"}])

    def test_alias_change_replaces(self, clients):
        conn = MagicMock()
        clients.register("ssm-contacts", conn)
        conn.get_contact.return_value = {"ContactArn": CONTACT_ARN, "Alias": "test", "Type": "PERSONAL"}
        conn.list_tags_for_resource.return_value = {"Tags": []}
        handler = ContactHandler(clients)
        current = handler.read(CONTACT_ARN)

        change, changed = handler.plan(current, handler.validate({"alias": "other", "type": "PERSONAL"}))

        assert change == ChangeType.REPLACE
        assert changed == ["alias"]
