"""State assertions run after each scenario step.

A check is any callable taking the current State and raising CheckError
when the assertion doesn't hold.
"""

import re
from typing import Callable, Optional

from tfaws.state.models import ResourceInstance, State
from tfaws.utils.errors import ErrorCategory, ErrorContext, NotFoundError, ProviderError
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

CheckFunc = Callable[[State], None]


class ScenarioError(ProviderError):
    """An acceptance scenario step failed."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.STATE)
        super().__init__(message, **kwargs)


class CheckError(ScenarioError):
    """A state check failed."""


def _instance(state: State, address: str) -> ResourceInstance:
    instance = state.get_resource(address)
    if instance is None:
        raise CheckError(f"Not found: {address} in state", context=ErrorContext(resource_id=address))
    return instance


def _is_empty_count(key: str, value: str) -> bool:
    return value == "0" and (key.endswith(".#") or key.endswith(".%"))


def check_resource_attr(address: str, key: str, value: str) -> CheckFunc:
    """The attribute at key has exactly value.

    A missing collection count (``x.#`` / ``x.%``) equals "0".
    """
    def check(state: State) -> None:
        attributes = _instance(state, address).flat_attributes()
        if key not in attributes:
            if _is_empty_count(key, value):
                return
            raise CheckError(f"{address}: Attribute '{key}' not found")
        if attributes[key] != value:
            raise CheckError(f"{address}: Attribute '{key}' expected {value!r}, got {attributes[key]!r}")
    return check


def check_resource_attr_set(address: str, key: str) -> CheckFunc:
    def check(state: State) -> None:
        if not _instance(state, address).flat_attributes().get(key):
            raise CheckError(f"{address}: Attribute '{key}' expected to be set")
    return check


def check_resource_attr_pair(address: str, key: str, other_address: str, other_key: str) -> CheckFunc:
    """Two attributes, possibly of different resources, are equal."""
    def check(state: State) -> None:
        first = _instance(state, address).flat_attributes()
        second = _instance(state, other_address).flat_attributes()
        if address == other_address and key == other_key:
            raise CheckError(f"comparing self: {address}.{key}")
        value, other_value = first.get(key), second.get(other_key)
        if value is None and other_value is None:
            return
        if value != other_value:
            raise CheckError(
                f"{address}: Attribute '{key}' expected {other_value!r} "
                f"(from {other_address}.{other_key}), got {value!r}"
            )
    return check


def match_resource_attr_regional_arn(
    provider,
    address: str,
    key: str,
    arn_service: str,
    arn_resource_pattern: str
) -> CheckFunc:
    """The attribute is an ARN of the provider's partition, region and account.

    ``arn_resource_pattern`` is a regular expression for the resource part,
    e.g. ``contact-channel/.+``.
    """
    def check(state: State) -> None:
        value = _instance(state, address).flat_attributes().get(key)
        if value is None:
            raise CheckError(f"{address}: Attribute '{key}' not found")

        clients = provider.clients
        expected = (
            f"^arn:{re.escape(clients.partition)}:{re.escape(arn_service)}:"
            f"{re.escape(clients.region)}:{re.escape(clients.account_id)}:{arn_resource_pattern}$"
        )
        if not re.match(expected, value):
            raise CheckError(f"{address}: Attribute '{key}' {value!r} doesn't match {expected}")
    return check


def check_resource_disappears(provider, address: str) -> CheckFunc:
    """Delete the resource out of band, so the next plan must recreate it.

    Steps using this set ``expect_non_empty_plan``.
    """
    def check(state: State) -> None:
        instance = _instance(state, address)
        handler = provider.resource(instance.type)
        logger.info(f"Deleting {address} ({instance.id}) out of band")
        handler.delete(instance.id)
    return check


def check_resource_exists(provider, address: str, out: Optional[dict] = None) -> CheckFunc:
    """The resource reads back by its identifier; ``out['state']`` receives it."""
    def check(state: State) -> None:
        instance = _instance(state, address)
        try:
            remote = provider.resource(instance.type).read(instance.id)
        except NotFoundError as e:
            raise CheckError(f"{address} ({instance.id}) does not exist", cause=e) from e
        if out is not None:
            out['state'] = remote
    return check


def compose_check(*checks: CheckFunc) -> CheckFunc:
    """Run checks in order, stopping at the first failure."""
    def check(state: State) -> None:
        for i, func in enumerate(checks, 1):
            try:
                func(state)
            except CheckError as e:
                raise CheckError(f"Check {i}/{len(checks)} error: {e}", cause=e) from e
    return check
