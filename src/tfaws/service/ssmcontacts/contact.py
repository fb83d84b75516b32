"""SSM Contacts contact resource."""

import uuid
from typing import Any, Dict, Literal, Optional

from botocore.exceptions import ClientError
from pydantic import Field

from tfaws import names
from tfaws.resource.base import ResourceConfig, ResourceHandler, ResourceState
from tfaws.service.ssmcontacts.tags import list_tags, tags, update_tags
from tfaws.utils.errors import ErrorContext, NotFoundError, ProviderError, is_error_code
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

RES_NAME = "Contact"


class ContactConfig(ResourceConfig):
    alias: str = Field(..., min_length=1, max_length=255, pattern=r"^[a-z0-9_\-]*$")
    type: Literal["PERSONAL", "ESCALATION"]
    display_name: Optional[str] = Field(None, max_length=255)
    tags: Dict[str, str] = Field(default_factory=dict)


class ContactState(ResourceState):
    alias: str
    type: str
    display_name: Optional[str] = None
    arn: str
    tags: Dict[str, str] = Field(default_factory=dict)
    tags_all: Dict[str, str] = Field(default_factory=dict)


def find_contact_by_id(conn, contact_id: str) -> Dict[str, Any]:
    try:
        return conn.get_contact(ContactId=contact_id)
    except ClientError as e:
        if is_error_code(e, 'ResourceNotFoundException'):
            raise NotFoundError(
                f"SSM Contacts {RES_NAME} ({contact_id}) not found",
                context=ErrorContext(resource_id=contact_id, resource_type=ContactHandler.type_name),
                cause=e
            ) from e
        raise


class ContactHandler(ResourceHandler[ContactConfig, ContactState]):
    """aws_ssmcontacts_contact; the identifier is the contact ARN."""

    type_name = "aws_ssmcontacts_contact"
    service = names.SSM_CONTACTS
    config_model = ContactConfig
    state_model = ContactState
    force_new = frozenset({"alias", "type"})

    @property
    def conn(self):
        return self.clients.client(names.client_name(self.service))

    def create(self, config: ContactConfig) -> ContactState:
        params: Dict[str, Any] = {
            'Alias': config.alias,
            'Type': config.type,
            'Plan': {'Stages': []},
            'IdempotencyToken': str(uuid.uuid4()),
        }
        if config.display_name:
            params['DisplayName'] = config.display_name
        tags_all = self.tags_all(config.tags)
        if tags_all:
            params['Tags'] = tags(tags_all)

        try:
            output = self.conn.create_contact(**params)
        except ClientError as e:
            raise self._error("creating", config.alias, e) from e

        arn = output['ContactArn']
        logger.info(f"Created SSM Contacts {RES_NAME}: {arn}")
        return self.read(arn)

    def read(self, identifier: str) -> ContactState:
        contact = find_contact_by_id(self.conn, identifier)
        own_tags, all_tags = self.tags_for_state(list_tags(self.conn, identifier))

        return ContactState(
            id=identifier,
            alias=contact['Alias'],
            type=contact['Type'],
            display_name=contact.get('DisplayName'),
            arn=contact['ContactArn'],
            tags=own_tags,
            tags_all=all_tags,
        )

    def update(self, current: ContactState, desired: ContactConfig) -> ContactState:
        changed = self.diff(current, desired)

        if "display_name" in changed:
            try:
                self.conn.update_contact(ContactId=current.id, DisplayName=desired.display_name)
            except ClientError as e:
                raise self._error("updating", current.id, e) from e

        if "tags" in changed:
            update_tags(self.conn, current.arn, current.tags_all, self.tags_all(desired.tags), self.ignore_tags)

        return self.read(current.id)

    def delete(self, identifier: str) -> None:
        logger.info(f"Deleting SSM Contacts {RES_NAME}: {identifier}")
        try:
            self.conn.delete_contact(ContactId=identifier)
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
