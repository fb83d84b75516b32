"""SSM Incidents replication set resource.

Incident Manager (and with it SSM Contacts) only works in accounts that
have a replication set, so scenarios create one first.
"""

import uuid
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError
from pydantic import Field, field_validator

from tfaws import names
from tfaws.resource.base import ResourceConfig, ResourceHandler, ResourceState
from tfaws.utils.errors import ErrorContext, NotFoundError, ProviderError, is_error_code
from tfaws.utils.logging import get_logger
from tfaws.utils.retry import wait_for_status

logger = get_logger(__name__)

RES_NAME = "Replication Set"

STATUS_ACTIVE = "ACTIVE"
STATUS_CREATING = "CREATING"
STATUS_UPDATING = "UPDATING"
STATUS_DELETING = "DELETING"

TIMEOUT = 1800.0
POLL_INTERVAL = 10.0


class ReplicationSetConfig(ResourceConfig):
    regions: List[str] = Field(..., min_length=1, max_length=3)

    @field_validator("regions")
    @classmethod
    def unique_regions(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("regions must be unique")
        return v


class ReplicationSetState(ResourceState):
    regions: List[str]
    arn: str
    status: str
    deletion_protected: bool = False


def find_replication_set_by_arn(conn, arn: str) -> Dict[str, Any]:
    try:
        return conn.get_replication_set(arn=arn)['replicationSet']
    except ClientError as e:
        if is_error_code(e, 'ResourceNotFoundException'):
            raise NotFoundError(
                f"SSM Incidents {RES_NAME} ({arn}) not found",
                context=ErrorContext(resource_id=arn, resource_type=ReplicationSetHandler.type_name),
                cause=e
            ) from e
        raise


def status_replication_set(conn, arn: str) -> Optional[str]:
    try:
        return find_replication_set_by_arn(conn, arn)['status']
    except NotFoundError:
        return None


class ReplicationSetHandler(ResourceHandler[ReplicationSetConfig, ReplicationSetState]):
    """aws_ssmincidents_replication_set; the identifier is the replication set ARN."""

    type_name = "aws_ssmincidents_replication_set"
    service = names.SSM_INCIDENTS
    config_model = ReplicationSetConfig
    state_model = ReplicationSetState

    @property
    def conn(self):
        return self.clients.client(names.client_name(self.service))

    def comparable(self, name: str, value: Any) -> Any:
        if name == "regions":
            return sorted(value or [])
        return value

    def create(self, config: ReplicationSetConfig) -> ReplicationSetState:
        try:
            output = self.conn.create_replication_set(
                regions={region: {} for region in config.regions},
                clientToken=str(uuid.uuid4())
            )
        except ClientError as e:
            raise self._error("creating", ",".join(config.regions), e) from e

        arn = output['arn']
        logger.info(f"Created SSM Incidents {RES_NAME}: {arn}")
        self._wait(arn, [STATUS_ACTIVE], [STATUS_CREATING, STATUS_UPDATING])
        return self.read(arn)

    def read(self, identifier: str) -> ReplicationSetState:
        replication_set = find_replication_set_by_arn(self.conn, identifier)
        return ReplicationSetState(
            id=identifier,
            regions=sorted(replication_set.get('regionMap', {})),
            arn=replication_set['arn'],
            status=replication_set['status'],
            deletion_protected=replication_set.get('deletionProtected', False),
        )

    def update(self, current: ReplicationSetState, desired: ReplicationSetConfig) -> ReplicationSetState:
        to_add = sorted(set(desired.regions) - set(current.regions))
        to_remove = sorted(set(current.regions) - set(desired.regions))

        # Regions are added and removed one action per call.
        actions = [{'addRegionAction': {'regionName': r}} for r in to_add]
        actions += [{'deleteRegionAction': {'regionName': r}} for r in to_remove]
        for action in actions:
            try:
                self.conn.update_replication_set(
                    arn=current.id, actions=[action], clientToken=str(uuid.uuid4())
                )
            except ClientError as e:
                raise self._error("updating", current.id, e) from e
            self._wait(current.id, [STATUS_ACTIVE], [STATUS_UPDATING])

        return self.read(current.id)

    def delete(self, identifier: str) -> None:
        logger.info(f"Deleting SSM Incidents {RES_NAME}: {identifier}")
        try:
            self.conn.delete_replication_set(arn=identifier)
        except ClientError as e:
            if is_error_code(e, 'ResourceNotFoundException'):
                return
            raise self._error("deleting", identifier, e) from e

        self._wait(identifier, [], [STATUS_DELETING, STATUS_ACTIVE, STATUS_UPDATING])

    def _wait(self, arn: str, target: List[str], pending: List[str]) -> Optional[str]:
        return wait_for_status(
            lambda: status_replication_set(self.conn, arn),
            target=target,
            pending=pending,
            timeout=TIMEOUT,
            poll_interval=POLL_INTERVAL,
            description=f"SSM Incidents {RES_NAME} ({arn})"
        )

    def _error(self, action: str, identifier: str, cause: Exception) -> ProviderError:
        return ProviderError(
            f"{action} SSM Incidents {RES_NAME} ({identifier}): {cause}",
            context=ErrorContext(
                resource_id=identifier,
                resource_type=self.type_name,
                operation=action,
                aws_service=self.service
            ),
            cause=cause
        )
