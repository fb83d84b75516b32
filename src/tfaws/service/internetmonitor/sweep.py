"""Sweeper for leaked Internet Monitor monitors."""

from typing import List

from tfaws import names
from tfaws.service.internetmonitor.monitor import MonitorHandler
from tfaws.sweep.sweep import SweepResource, skip_sweep_error, sweep_orchestrator
from tfaws.utils.aws_client import ClientRegistry
from tfaws.utils.errors import ErrorContext, SweepError
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)


def register_sweepers(registry) -> None:
    registry.add(MonitorHandler.type_name, sweep_monitors)


def sweep_monitors(region: str, clients: ClientRegistry) -> None:
    """Delete every monitor in the region."""
    conn = clients.client(names.client_name(names.INTERNET_MONITOR), region)
    handler = MonitorHandler(clients)
    sweep_resources: List[SweepResource] = []

    pages = conn.get_paginator('list_monitors').paginate()
    try:
        for page in pages:
            for monitor in page.get('Monitors', []):
                sweep_resources.append(SweepResource(handler, monitor['MonitorName']))
    except Exception as e:
        if skip_sweep_error(e):
            logger.warning(f"[WARN] Skipping Internet Monitor Monitor sweep for {region}: {e}")
            return
        raise SweepError(
            f"error listing Internet Monitor Monitors ({region}): {e}",
            context=ErrorContext(region=region, operation='list', aws_service=names.INTERNET_MONITOR),
            cause=e
        ) from e

    try:
        sweep_orchestrator(sweep_resources)
    except SweepError as e:
        raise SweepError(
            f"error sweeping Internet Monitor Monitors ({region}): {e}",
            errors=e.errors,
            context=ErrorContext(region=region, operation='delete', aws_service=names.INTERNET_MONITOR),
            cause=e
        ) from e
