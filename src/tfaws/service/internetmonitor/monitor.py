"""Internet Monitor monitor resource."""

import uuid
from typing import Any, Dict, List, Literal, Optional

from botocore.exceptions import ClientError
from pydantic import Field

from tfaws import names
from tfaws.resource.base import ResourceConfig, ResourceHandler, ResourceState
from tfaws.service.internetmonitor.tags import key_value_tags, tags, update_tags
from tfaws.utils.errors import ErrorContext, NotFoundError, ProviderError, is_error_code
from tfaws.utils.logging import get_logger
from tfaws.utils.retry import wait_for_status

logger = get_logger(__name__)

RES_NAME = "Monitor"

STATUS_PENDING = "PENDING"
STATUS_ACTIVE = "ACTIVE"
STATUS_INACTIVE = "INACTIVE"
STATUS_ERROR = "ERROR"

CREATE_TIMEOUT = 300.0
UPDATE_TIMEOUT = 300.0
DELETE_TIMEOUT = 300.0
POLL_INTERVAL = 5.0


class MonitorConfig(ResourceConfig):
    monitor_name: str = Field(..., min_length=1, max_length=255, pattern=r"^[a-zA-Z0-9_.-]+$")
    resources: List[str] = Field(default_factory=list)
    status: Literal["ACTIVE", "INACTIVE"] = STATUS_ACTIVE
    max_city_networks_to_monitor: Optional[int] = Field(None, ge=1, le=500000)
    traffic_percentage_to_monitor: Optional[int] = Field(None, ge=1, le=100)
    tags: Dict[str, str] = Field(default_factory=dict)


class MonitorState(ResourceState):
    monitor_name: str
    arn: str
    resources: List[str] = Field(default_factory=list)
    status: str
    max_city_networks_to_monitor: Optional[int] = None
    traffic_percentage_to_monitor: Optional[int] = None
    tags: Dict[str, str] = Field(default_factory=dict)
    tags_all: Dict[str, str] = Field(default_factory=dict)


def find_monitor_by_name(conn, name: str) -> Dict[str, Any]:
    """GetMonitor, with a missing monitor reported as NotFoundError."""
    try:
        return conn.get_monitor(MonitorName=name)
    except ClientError as e:
        if is_error_code(e, 'ResourceNotFoundException'):
            raise NotFoundError(
                f"Internet Monitor Monitor ({name}) not found",
                context=ErrorContext(resource_id=name, resource_type=MonitorHandler.type_name),
                cause=e
            ) from e
        raise


def status_monitor(conn, name: str) -> Optional[str]:
    try:
        return find_monitor_by_name(conn, name)['Status']
    except NotFoundError:
        return None


def wait_monitor(conn, name: str, target: str, timeout: float) -> Optional[str]:
    """Wait for a monitor to settle in target status."""
    return wait_for_status(
        lambda: status_monitor(conn, name),
        target=[target],
        pending=[STATUS_PENDING, STATUS_ACTIVE, STATUS_INACTIVE],
        timeout=timeout,
        poll_interval=POLL_INTERVAL,
        description=f"Internet Monitor Monitor ({name})"
    )


class MonitorHandler(ResourceHandler[MonitorConfig, MonitorState]):
    """aws_internetmonitor_monitor; the identifier is the monitor name."""

    type_name = "aws_internetmonitor_monitor"
    service = names.INTERNET_MONITOR
    config_model = MonitorConfig
    state_model = MonitorState
    force_new = frozenset({"monitor_name"})

    @property
    def conn(self):
        return self.clients.client(names.client_name(self.service))

    def comparable(self, name: str, value: Any) -> Any:
        if name == "resources":
            return sorted(value or [])
        return value

    def create(self, config: MonitorConfig) -> MonitorState:
        name = config.monitor_name
        params: Dict[str, Any] = {
            'MonitorName': name,
            'ClientToken': str(uuid.uuid4()),
            'Resources': list(config.resources),
        }
        if config.max_city_networks_to_monitor is not None:
            params['MaxCityNetworksToMonitor'] = config.max_city_networks_to_monitor
        if config.traffic_percentage_to_monitor is not None:
            params['TrafficPercentageToMonitor'] = config.traffic_percentage_to_monitor
        tags_all = self.tags_all(config.tags)
        if tags_all:
            params['Tags'] = tags(tags_all)

        try:
            self.conn.create_monitor(**params)
        except ClientError as e:
            raise self._error("creating", name, e) from e

        logger.info(f"Created Internet Monitor Monitor: {name}")
        wait_monitor(self.conn, name, STATUS_ACTIVE, CREATE_TIMEOUT)

        if config.status == STATUS_INACTIVE:
            self._set_status(name, STATUS_INACTIVE, UPDATE_TIMEOUT)

        return self.read(name)

    def read(self, identifier: str) -> MonitorState:
        monitor = find_monitor_by_name(self.conn, identifier)
        own_tags, all_tags = self.tags_for_state(key_value_tags(monitor.get('Tags')))

        return MonitorState(
            id=identifier,
            monitor_name=monitor['MonitorName'],
            arn=monitor['MonitorArn'],
            resources=list(monitor.get('Resources', [])),
            status=monitor['Status'],
            max_city_networks_to_monitor=monitor.get('MaxCityNetworksToMonitor'),
            traffic_percentage_to_monitor=monitor.get('TrafficPercentageToMonitor'),
            tags=own_tags,
            tags_all=all_tags,
        )

    def update(self, current: MonitorState, desired: MonitorConfig) -> MonitorState:
        name = current.monitor_name
        changed = self.diff(current, desired)
        params: Dict[str, Any] = {}

        if "resources" in changed:
            to_add = sorted(set(desired.resources) - set(current.resources))
            to_remove = sorted(set(current.resources) - set(desired.resources))
            if to_add:
                params['ResourcesToAdd'] = to_add
            if to_remove:
                params['ResourcesToRemove'] = to_remove
        if "max_city_networks_to_monitor" in changed:
            params['MaxCityNetworksToMonitor'] = desired.max_city_networks_to_monitor
        if "traffic_percentage_to_monitor" in changed:
            params['TrafficPercentageToMonitor'] = desired.traffic_percentage_to_monitor
        if "status" in changed:
            params['Status'] = desired.status

        if params:
            try:
                self.conn.update_monitor(MonitorName=name, ClientToken=str(uuid.uuid4()), **params)
            except ClientError as e:
                raise self._error("updating", name, e) from e
            wait_monitor(self.conn, name, desired.status, UPDATE_TIMEOUT)

        if "tags" in changed:
            update_tags(self.conn, current.arn, current.tags_all, self.tags_all(desired.tags), self.ignore_tags)

        return self.read(name)

    def delete(self, identifier: str) -> None:
        logger.info(f"Deleting Internet Monitor Monitor: {identifier}")
        try:
            self._set_status(identifier, STATUS_INACTIVE, DELETE_TIMEOUT)
        except NotFoundError:
            return

        try:
            self.conn.delete_monitor(MonitorName=identifier)
        except ClientError as e:
            if is_error_code(e, 'ResourceNotFoundException'):
                return
            raise self._error("deleting", identifier, e) from e

    def _set_status(self, name: str, status: str, timeout: float) -> None:
        try:
            self.conn.update_monitor(MonitorName=name, Status=status, ClientToken=str(uuid.uuid4()))
        except ClientError as e:
            if is_error_code(e, 'ResourceNotFoundException'):
                raise NotFoundError(f"Internet Monitor Monitor ({name}) not found", cause=e) from e
            raise self._error("updating", name, e) from e
        wait_monitor(self.conn, name, status, timeout)

    def _error(self, action: str, name: str, cause: Exception) -> ProviderError:
        return ProviderError(
            f"{action} Internet Monitor {RES_NAME} ({name}): {cause}",
            context=ErrorContext(
                resource_id=name,
                resource_type=self.type_name,
                operation=action,
                aws_service=self.service
            ),
            cause=cause
        )
