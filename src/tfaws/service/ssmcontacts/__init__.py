"""SSM Incident Manager Contacts service package."""

from tfaws import names
from tfaws.service.ssmcontacts.contact import ContactConfig, ContactHandler, ContactState
from tfaws.service.ssmcontacts.contact_channel import (
    ContactChannelConfig,
    ContactChannelHandler,
    ContactChannelState,
    DeliveryAddress,
    find_contact_channel_by_id,
)


class ServicePackage:
    name = names.SSM_CONTACTS

    def resources(self):
        return [ContactHandler, ContactChannelHandler]

    def register_sweepers(self, registry) -> None:
        """Contacts have no sweeper."""


__all__ = [
    "ContactConfig",
    "ContactHandler",
    "ContactState",
    "ContactChannelConfig",
    "ContactChannelHandler",
    "ContactChannelState",
    "DeliveryAddress",
    "ServicePackage",
    "find_contact_channel_by_id",
]
