"""SSM Contacts contact channel resource."""

import uuid
from typing import Any, Dict, Literal

from botocore.exceptions import ClientError
from pydantic import BaseModel, ConfigDict, Field

from tfaws import names
from tfaws.resource.base import ResourceConfig, ResourceHandler, ResourceState
from tfaws.utils.errors import ErrorContext, NotFoundError, ProviderError, is_error_code
from tfaws.utils.logging import get_logger
from tfaws.utils.retry import with_retry

logger = get_logger(__name__)

RES_NAME = "Contact Channel"

# A freshly created contact can take a moment to become visible.
@with_retry(max_retries=4, base_delay=2.0, max_delay=20.0, retryable_codes=['ResourceNotFoundException'])
def create_contact_channel(conn, params: Dict[str, Any]) -> Dict[str, Any]:
    return conn.create_contact_channel(**params)


class DeliveryAddress(BaseModel):
    model_config = ConfigDict(extra='forbid')

    simple_address: str = Field(..., min_length=1, max_length=320)


class ContactChannelConfig(ResourceConfig):
    contact_id: str = Field(..., min_length=1)
    delivery_address: DeliveryAddress
    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["EMAIL", "SMS", "VOICE"]


class ContactChannelState(ResourceState):
    contact_id: str
    delivery_address: DeliveryAddress
    name: str
    type: str
    activation_status: str
    arn: str


def find_contact_channel_by_id(conn, channel_id: str) -> Dict[str, Any]:
    """GetContactChannel, with a missing channel reported as NotFoundError."""
    try:
        return conn.get_contact_channel(ContactChannelId=channel_id)
    except ClientError as e:
        if is_error_code(e, 'ResourceNotFoundException'):
            raise NotFoundError(
                f"SSM Contacts {RES_NAME} ({channel_id}) not found",
                context=ErrorContext(resource_id=channel_id, resource_type=ContactChannelHandler.type_name),
                cause=e
            ) from e
        raise


class ContactChannelHandler(ResourceHandler[ContactChannelConfig, ContactChannelState]):
    """aws_ssmcontacts_contact_channel; the identifier is the channel ARN.

    Channels are created with deferred activation, so a new channel reads
    back as NOT_ACTIVATED until the owner confirms the activation code.
    Changing the contact or the channel type replaces the channel.
    """

    type_name = "aws_ssmcontacts_contact_channel"
    service = names.SSM_CONTACTS
    config_model = ContactChannelConfig
    state_model = ContactChannelState
    force_new = frozenset({"contact_id", "type"})

    @property
    def conn(self):
        return self.clients.client(names.client_name(self.service))

    def create(self, config: ContactChannelConfig) -> ContactChannelState:
        params = {
            'ContactId': config.contact_id,
            'Name': config.name,
            'Type': config.type,
            'DeliveryAddress': {'SimpleAddress': config.delivery_address.simple_address},
            'DeferActivation': True,
            'IdempotencyToken': str(uuid.uuid4()),
        }

        try:
            output = create_contact_channel(self.conn, params)
        except ClientError as e:
            raise self._error("creating", config.name, e) from e

        arn = output['ContactChannelArn']
        logger.info(f"Created SSM Contacts {RES_NAME}: {arn}")
        return self.read(arn)

    def read(self, identifier: str) -> ContactChannelState:
        channel = find_contact_channel_by_id(self.conn, identifier)

        return ContactChannelState(
            id=identifier,
            contact_id=channel['ContactArn'],
            delivery_address=DeliveryAddress(
                simple_address=channel['DeliveryAddress']['SimpleAddress']
            ),
            name=channel['Name'],
            type=channel['Type'],
            activation_status=channel['ActivationStatus'],
            arn=channel['ContactChannelArn'],
        )

    def update(self, current: ContactChannelState, desired: ContactChannelConfig) -> ContactChannelState:
        changed = self.diff(current, desired)
        params: Dict[str, Any] = {}

        if "name" in changed:
            params['Name'] = desired.name
        if "delivery_address" in changed:
            params['DeliveryAddress'] = {'SimpleAddress': desired.delivery_address.simple_address}

        if params:
            try:
                self.conn.update_contact_channel(ContactChannelId=current.id, **params)
            except ClientError as e:
                raise self._error("updating", current.id, e) from e

        return self.read(current.id)

    def delete(self, identifier: str) -> None:
        logger.info(f"Deleting SSM Contacts {RES_NAME}: {identifier}")
        try:
            self.conn.delete_contact_channel(ContactChannelId=identifier)
        except ClientError as e:
            if is_error_code(e, 'ResourceNotFoundException'):
                return
            raise self._error("deleting", identifier, e) from e

    def _error(self, action: str, identifier: str, cause: Exception) -> ProviderError:
        return ProviderError(
            f"{action} SSM Contacts {RES_NAME} ({identifier}): {cause}",
            context=ErrorContext(
                resource_id=identifier,
                resource_type=self.type_name,
                operation=action,
                aws_service=self.service
            ),
            cause=cause
        )
