"""SSM Incident Manager Incidents service package."""

from tfaws import names
from tfaws.service.ssmincidents.replication_set import (
    ReplicationSetConfig,
    ReplicationSetHandler,
    ReplicationSetState,
)


class ServicePackage:
    name = names.SSM_INCIDENTS

    def resources(self):
        return [ReplicationSetHandler]

    def register_sweepers(self, registry) -> None:
        """The account's replication set is shared and never swept."""


__all__ = [
    "ReplicationSetConfig",
    "ReplicationSetHandler",
    "ReplicationSetState",
    "ServicePackage",
]
