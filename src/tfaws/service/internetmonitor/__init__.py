"""CloudWatch Internet Monitor service package."""

from tfaws import names
from tfaws.service.internetmonitor.monitor import MonitorConfig, MonitorHandler, MonitorState
from tfaws.service.internetmonitor.sweep import register_sweepers, sweep_monitors


class ServicePackage:
    name = names.INTERNET_MONITOR

    def resources(self):
        return [MonitorHandler]

    def register_sweepers(self, registry) -> None:
        register_sweepers(registry)


__all__ = [
    "MonitorConfig",
    "MonitorHandler",
    "MonitorState",
    "ServicePackage",
    "register_sweepers",
    "sweep_monitors",
]
