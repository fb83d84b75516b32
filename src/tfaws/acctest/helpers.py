"""Names, environment gating and destroy verification for acceptance scenarios."""

import os
import random
import string
from typing import Mapping, Optional

from botocore.exceptions import ClientError

from tfaws.acctest.checks import CheckError, CheckFunc
from tfaws.state.models import State
from tfaws.utils.errors import NotFoundError, is_error_code
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)

ACC_ENV_VAR = "TFAWS_ACC"
RESOURCE_PREFIX = "tf-acc-test"

# Error codes that prove a resource is gone during destroy verification.
# SSM Contacts answers ValidationException once the replication set is deleted.
ABSENT_ERROR_CODES = ('ResourceNotFoundException', 'ValidationException')


def random_with_prefix(prefix: str = RESOURCE_PREFIX, length: int = 19) -> str:
    """Unique resource name, e.g. ``tf-acc-test-4820174638190237465``."""
    return f"{prefix}-{''.join(random.choices(string.digits, k=length))}"


def random_alias(prefix: str = "tf-acc-test", length: int = 10) -> str:
    """Lowercase name for APIs that reject digits-only or upper case suffixes."""
    return f"{prefix}-{''.join(random.choices(string.ascii_lowercase, k=length))}"


def acceptance_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get(ACC_ENV_VAR, "").lower() in ("1", "true", "yes")


def pre_check(environ: Optional[Mapping[str, str]] = None) -> None:
    """Skip the calling test unless live acceptance runs are enabled."""
    if not acceptance_enabled(environ):
        import pytest

        pytest.skip(f"acceptance tests skipped unless env '{ACC_ENV_VAR}' is set")


def check_destroy(provider, type_name: str) -> CheckFunc:
    """Every resource of type_name in state no longer exists remotely."""
    def check(state: State) -> None:
        handler = provider.resource(type_name)
        for instance in state.list_resources(type_name):
            try:
                handler.read(instance.id)
            except NotFoundError:
                continue
            except ClientError as e:
                if is_error_code(e, *ABSENT_ERROR_CODES):
                    continue
                raise
            raise CheckError(f"{type_name} {instance.id} not destroyed")
    return check
