"""Deleting leaked resources: sweep candidates, the delete orchestrator, skip rules."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from botocore.exceptions import EndpointConnectionError

from tfaws.resource.base import ResourceHandler
from tfaws.utils.errors import (
    ErrorContext,
    NotFoundError,
    SweepError,
    error_code,
    error_message_contains,
)
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 10

# (error code, message fragment); a None fragment matches any message.
SKIP_SWEEP_ERRORS: Tuple[Tuple[str, Optional[str]], ...] = (
    ('UnsupportedOperation', None),
    ('UnsupportedOperationException', None),
    ('AccessDeniedException', None),
    ('UnrecognizedClientException', None),
    ('InvalidAction', 'is not supported'),
    ('InvalidAction', 'is not valid'),
    ('InvalidAction', 'Unavailable Operation'),
    ('InvalidParameterValue', 'not permitted in this API version for your account'),
    ('InvalidParameterValue', 'Access Denied to API Version'),
    ('BadRequestException', 'not supported'),
    ('UnknownOperationException', 'Operation is disabled in this region'),
    ('UnknownOperationException', 'The requested operation is not supported in the called region'),
    ('UnsupportedCommandException', 'command is only supported in'),
    ('ValidationException', 'Account is not whitelisted to use this feature'),
    ('ValidationException', 'not supported in this region'),
    ('SubscriptionRequiredException', None),
    ('OptInRequired', None),
    ('InvalidClientTokenId', None),
)


def skip_sweep_error(error: Optional[BaseException]) -> bool:
    """Whether a listing error means "this region can't be swept" rather than failure.

    Covers services that are unsupported, not enabled or not opted in for
    the region, and regions without an endpoint for the service.
    """
    if error is None:
        return False
    if isinstance(error, EndpointConnectionError):
        return True

    code = error_code(error)
    if code is None:
        return False

    for skip_code, fragment in SKIP_SWEEP_ERRORS:
        if fragment is None and code == skip_code:
            return True
        if fragment is not None and error_message_contains(error, skip_code, fragment):
            return True
    return False


class Sweepable(Protocol):
    """Anything the orchestrator can delete."""

    def delete(self) -> None:
        ...


@dataclass
class SweepResource:
    """One sweep candidate: a handler bound to its clients plus an identifier."""

    handler: ResourceHandler
    identifier: str

    def delete(self) -> None:
        try:
            self.handler.delete(self.identifier)
        except NotFoundError:
            logger.debug(f"{self.handler.type_name} {self.identifier} already gone")
            return
        logger.info(f"Swept {self.handler.type_name}: {self.identifier}")

    def __str__(self) -> str:
        return f"{self.handler.type_name} ({self.identifier})"


def sweep_orchestrator(sweepables: Sequence[Sweepable], max_workers: int = DEFAULT_MAX_WORKERS) -> None:
    """Delete every candidate independently and report failures together.

    All deletes run to completion before anything is raised, so one stuck
    resource doesn't block the rest.

    Raises:
        SweepError: One or more deletes failed; ``errors`` holds each failure
    """
    if not sweepables:
        return

    errors: List[BaseException] = []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(sweepables)))) as executor:
        future_to_item = {executor.submit(item.delete): item for item in sweepables}
        for future in as_completed(future_to_item):
            item = future_to_item[future]
            try:
                future.result()
            except Exception as e:
                logger.warning(f"Failed to sweep {item}: {e}")
                errors.append(_wrap_delete_error(item, e))

    if errors:
        raise SweepError(
            f"{len(errors)} of {len(sweepables)} deletions failed: "
            + "; ".join(str(e) for e in errors),
            errors=errors
        )


def _wrap_delete_error(item: Sweepable, error: Exception) -> Exception:
    if isinstance(item, SweepResource):
        return SweepError(
            f"deleting {item}: {error}",
            context=ErrorContext(
                resource_id=item.identifier,
                resource_type=item.handler.type_name,
                operation='delete'
            ),
            cause=error
        )
    return error
