"""Provider instance: configuration, clients, resource handlers and sweepers."""

from typing import Dict, List, Optional, Type

from tfaws.config.models import IgnoreTagsConfig, ProviderConfig
from tfaws.resource.base import ResourceHandler
from tfaws.service import internetmonitor, kafka, ssmcontacts, ssmincidents
from tfaws.sweep.registry import SweeperRegistry
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import ConfigurationError, ErrorContext
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE_PACKAGES = (
    internetmonitor.ServicePackage,
    kafka.ServicePackage,
    ssmcontacts.ServicePackage,
    ssmincidents.ServicePackage,
)


class Provider:
    """Everything one configured provider needs, passed around explicitly.

    The provider owns its client registry; handlers it creates share it.
    """

    def __init__(self, config: Optional[ProviderConfig] = None, clients: Optional[ClientRegistry] = None):
        """Initialize provider.

        Args:
            config: Provider configuration, defaults to an empty one
            clients: Client registry; built from config when omitted
        """
        self.config = config or (clients.config if clients else ProviderConfig())
        self.clients = clients or ClientRegistry(self.config)
        self.service_packages = [package() for package in SERVICE_PACKAGES]

        self._handlers: Dict[str, Type[ResourceHandler]] = {}
        for package in self.service_packages:
            for handler_class in package.resources():
                self._handlers[handler_class.type_name] = handler_class

        logger.debug(f"Provider initialized with {len(self._handlers)} resource types")

    @property
    def default_tags(self) -> Dict[str, str]:
        return self.config.default_tags

    @property
    def ignore_tags(self) -> IgnoreTagsConfig:
        return self.config.ignore_tags

    def resource_types(self) -> List[str]:
        return sorted(self._handlers)

    def resource(self, type_name: str) -> ResourceHandler:
        """Handler for a resource type, bound to this provider's clients.

        Raises:
            ConfigurationError: Unknown resource type
        """
        handler_class = self._handlers.get(type_name)
        if handler_class is None:
            raise ConfigurationError(
                f"unsupported resource type: {type_name}",
                context=ErrorContext(resource_type=type_name),
                suggestions=[f"Supported types: {', '.join(self.resource_types())}"]
            )
        return handler_class(self.clients)

    def service_package(self, name: str):
        for package in self.service_packages:
            if package.name == name:
                return package
        raise ConfigurationError(f"unknown service package: {name}")

    def sweepers(self) -> SweeperRegistry:
        """A sweeper registry holding every service package's sweepers.

        Each region swept gets its own client registry built from this
        provider's configuration.
        """
        registry = SweeperRegistry(client_factory=self.clients.for_region)
        for package in self.service_packages:
            package.register_sweepers(registry)
        return registry
