"""Shared fixtures: in-memory AWS API fakes and a provider wired to them."""

import os
import uuid
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from tfaws.acctest import acceptance_enabled
from tfaws.config.models import ProviderConfig
from tfaws.provider import Provider
from tfaws.utils.aws_client import ClientRegistry

ACCOUNT_ID = "123456789012"
REGION = "us-west-2"


def client_error(code, message="error", operation="Operation"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeSSMContacts:
    """Enough of the SSM Contacts API for contact and contact channel handlers."""

    def __init__(self, region=REGION):
        self.region = region
        self.contacts = {}
        self.channels = {}
        self.tags = {}

    def _not_found(self, operation, identifier):
        return client_error("ResourceNotFoundException", f"Resource {identifier} not found", operation)

    def create_contact(self, Alias, Type, Plan, IdempotencyToken=None, DisplayName=None, Tags=None):
        arn = f"arn:aws:ssm-contacts:{self.region}:{ACCOUNT_ID}:contact/{Alias}"
        if arn in self.contacts:
            raise client_error("ConflictException", f"Contact {Alias} already exists", "CreateContact")
        self.contacts[arn] = {"ContactArn": arn, "Alias": Alias, "Type": Type, "Plan": Plan}
        if DisplayName:
            self.contacts[arn]["DisplayName"] = DisplayName
        self.tags[arn] = {t["Key"]: t["Value"] for t in Tags or []}
        return {"ContactArn": arn}

    def get_contact(self, ContactId):
        if ContactId not in self.contacts:
            raise self._not_found("GetContact", ContactId)
        return dict(self.contacts[ContactId])

    def update_contact(self, ContactId, DisplayName=None, Plan=None):
        if ContactId not in self.contacts:
            raise self._not_found("UpdateContact", ContactId)
        if DisplayName is not None:
            self.contacts[ContactId]["DisplayName"] = DisplayName
        return {}

    def delete_contact(self, ContactId):
        if ContactId not in self.contacts:
            raise self._not_found("DeleteContact", ContactId)
        del self.contacts[ContactId]
        for arn in [a for a, c in self.channels.items() if c["ContactArn"] == ContactId]:
            del self.channels[arn]
        return {}

    def create_contact_channel(self, ContactId, Name, Type, DeliveryAddress, DeferActivation=False,
                               IdempotencyToken=None):
        if ContactId not in self.contacts:
            raise self._not_found("CreateContactChannel", ContactId)
        alias = self.contacts[ContactId]["Alias"]
        arn = f"arn:aws:ssm-contacts:{self.region}:{ACCOUNT_ID}:contact-channel/{alias}/{uuid.uuid4()}"
        self.channels[arn] = {
            "ContactArn": ContactId,
            "ContactChannelArn": arn,
            "Name": Name,
            "Type": Type,
            "DeliveryAddress": dict(DeliveryAddress),
            "ActivationStatus": "NOT_ACTIVATED" if DeferActivation else "ACTIVATED",
        }
        return {"ContactChannelArn": arn}

    def get_contact_channel(self, ContactChannelId):
        if ContactChannelId not in self.channels:
            raise self._not_found("GetContactChannel", ContactChannelId)
        channel = dict(self.channels[ContactChannelId])
        channel["DeliveryAddress"] = dict(channel["DeliveryAddress"])
        return channel

    def update_contact_channel(self, ContactChannelId, Name=None, DeliveryAddress=None):
        if ContactChannelId not in self.channels:
            raise self._not_found("UpdateContactChannel", ContactChannelId)
        if Name is not None:
            self.channels[ContactChannelId]["Name"] = Name
        if DeliveryAddress is not None:
            self.channels[ContactChannelId]["DeliveryAddress"] = dict(DeliveryAddress)
        return {}

    def delete_contact_channel(self, ContactChannelId):
        if ContactChannelId not in self.channels:
            raise self._not_found("DeleteContactChannel", ContactChannelId)
        del self.channels[ContactChannelId]
        return {}

    def list_tags_for_resource(self, ResourceARN):
        if ResourceARN not in self.tags:
            raise self._not_found("ListTagsForResource", ResourceARN)
        return {"Tags": [{"Key": k, "Value": v} for k, v in sorted(self.tags[ResourceARN].items())]}

    def tag_resource(self, ResourceARN, Tags):
        self.tags.setdefault(ResourceARN, {}).update({t["Key"]: t["Value"] for t in Tags})
        return {}

    def untag_resource(self, ResourceARN, TagKeys):
        for key in TagKeys:
            self.tags.get(ResourceARN, {}).pop(key, None)
        return {}


class FakeSSMIncidents:
    """Replication set API; a new set reads CREATING once, a deleted one DELETING once."""

    def __init__(self):
        self.replication_sets = {}

    def create_replication_set(self, regions, clientToken=None, tags=None):
        arn = f"arn:aws:ssm-incidents::{ACCOUNT_ID}:replication-set/{uuid.uuid4()}"
        self.replication_sets[arn] = {
            "arn": arn,
            "regionMap": {r: {"status": "ACTIVE", "sseKmsKeyId": "DefaultKey"} for r in regions},
            "status": "CREATING",
            "deletionProtected": False,
        }
        return {"arn": arn}

    def get_replication_set(self, arn):
        if arn not in self.replication_sets:
            raise client_error("ResourceNotFoundException", "Replication set not found", "GetReplicationSet")
        replication_set = self.replication_sets[arn]
        result = dict(replication_set)
        if replication_set["status"] == "CREATING":
            replication_set["status"] = "ACTIVE"
        elif replication_set["status"] == "DELETING":
            del self.replication_sets[arn]
        return {"replicationSet": result}

    def update_replication_set(self, arn, actions, clientToken=None):
        replication_set = self.replication_sets[arn]
        for action in actions:
            if "addRegionAction" in action:
                region = action["addRegionAction"]["regionName"]
                replication_set["regionMap"][region] = {"status": "ACTIVE"}
            if "deleteRegionAction" in action:
                replication_set["regionMap"].pop(action["deleteRegionAction"]["regionName"], None)
        return {}

    def delete_replication_set(self, arn):
        if arn not in self.replication_sets:
            raise client_error("ResourceNotFoundException", "Replication set not found", "DeleteReplicationSet")
        self.replication_sets[arn]["status"] = "DELETING"
        return {}


@pytest.fixture
def no_sleep():
    with patch("tfaws.utils.retry.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def provider_config():
    return ProviderConfig(region=REGION)


@pytest.fixture
def sts_client():
    sts = Mock()
    sts.get_caller_identity.return_value = {
        "Account": ACCOUNT_ID,
        "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user/test",
        "UserId": "AIDATEST",
    }
    return sts


@pytest.fixture
def clients(provider_config, sts_client):
    registry = ClientRegistry(provider_config, session=Mock())
    registry.register("sts", sts_client)
    return registry


@pytest.fixture
def fake_contacts():
    return FakeSSMContacts()


@pytest.fixture
def fake_incidents():
    return FakeSSMIncidents()


@pytest.fixture
def provider(clients, fake_contacts, fake_incidents):
    clients.register("ssm-contacts", fake_contacts)
    clients.register("ssm-incidents", fake_incidents)
    return Provider(clients=clients)


@pytest.fixture
def acc_provider(request):
    """Live provider when TFAWS_ACC is set, otherwise the in-memory one."""
    if acceptance_enabled():
        yield Provider(ProviderConfig(region=os.environ.get("AWS_REGION", REGION)))
        return

    provider = request.getfixturevalue("provider")
    with patch("tfaws.utils.retry.time.sleep"):
        yield provider
