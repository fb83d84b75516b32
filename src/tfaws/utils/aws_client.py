"""Explicitly constructed registry of boto3 clients."""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError

from tfaws.config.models import ProviderConfig
from tfaws.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AWSCredentials:
    """AWS caller identity."""
    account_id: str
    user_arn: str
    user_id: str
    region: str
    partition: str = 'aws'
    profile: Optional[str] = None


class ClientRegistry:
    """Caches one boto3 client per (service, region) for the provider's lifetime.

    A registry is created by whoever owns the provider instance and handed to
    every handler that needs AWS access; nothing looks it up globally.
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        session: Optional[boto3.Session] = None,
        max_pool_connections: int = 50
    ):
        """Initialize client registry.

        Args:
            config: Provider configuration (region, profile, assume_role, retries)
            session: Pre-built boto3 session, mostly for tests
            max_pool_connections: Maximum number of connections per client
        """
        self.config = config or ProviderConfig()
        self._session = session
        self._clients: Dict[Tuple[str, str], Any] = {}
        self._credentials: Optional[AWSCredentials] = None
        self._lock = threading.RLock()

        self._boto_config = Config(
            max_pool_connections=max_pool_connections,
            retries={
                'mode': 'adaptive',
                'max_attempts': self.config.max_retries + 1
            },
            connect_timeout=10,
            read_timeout=60
        )

    @property
    def session(self) -> boto3.Session:
        """Get or create the boto3 session, assuming the configured role if any."""
        with self._lock:
            if self._session is None:
                kwargs = {}
                if self.config.profile:
                    kwargs['profile_name'] = self.config.profile
                if self.config.region:
                    kwargs['region_name'] = self.config.region

                self._session = boto3.Session(**kwargs)
                logger.info(f"Created AWS session - Region: {self._session.region_name}, "
                            f"Profile: {self.config.profile or 'default'}")

                if self.config.assume_role:
                    self._session = self._assume_role(self._session)

            return self._session

    @property
    def region(self) -> str:
        """Default region of this registry."""
        return self.config.region or self.session.region_name

    def client(self, service_name: str, region: Optional[str] = None):
        """Get a cached boto3 client.

        Args:
            service_name: AWS service name (e.g. 'kafka', 'ssm-contacts')
            region: Region override, defaults to the registry region

        Returns:
            Boto3 client for the service and region
        """
        with self._lock:
            key = (service_name, region or self.config.region or '')
            if key in self._clients:
                return self._clients[key]

            kwargs = {'config': self._boto_config}
            if region:
                kwargs['region_name'] = region
            client = self.session.client(service_name, **kwargs)
            self._clients[key] = client

            logger.debug(f"Created {service_name} client for region {key[1] or 'default'}")
            return client

    def register(self, service_name: str, client: Any, region: Optional[str] = None) -> None:
        """Pre-seed a client, e.g. a stub in tests."""
        with self._lock:
            self._clients[(service_name, region or self.config.region or '')] = client

    def for_region(self, region: str) -> 'ClientRegistry':
        """Build a sibling registry bound to another region, sharing nothing."""
        return ClientRegistry(self.config.model_copy(update={'region': region}))

    def caller_identity(self) -> AWSCredentials:
        """Validate credentials and return the caller identity.

        Raises:
            NoCredentialsError: If no credentials are found
            ClientError: If credentials are invalid
        """
        if self._credentials is not None:
            return self._credentials

        try:
            identity = self.client('sts').get_caller_identity()
        except (NoCredentialsError, PartialCredentialsError):
            logger.error("No usable AWS credentials found. Configure credentials using "
                         "the AWS CLI, environment variables, or an IAM role.")
            raise
        except ClientError as e:
            logger.error(f"Failed to validate AWS credentials: {e}")
            raise

        self._credentials = AWSCredentials(
            account_id=identity['Account'],
            user_arn=identity['Arn'],
            user_id=identity['UserId'],
            region=self.region,
            partition=identity['Arn'].split(':')[1],
            profile=self.config.profile
        )
        return self._credentials

    @property
    def account_id(self) -> str:
        return self.caller_identity().account_id

    @property
    def partition(self) -> str:
        return self.caller_identity().partition

    def _assume_role(self, base_session: boto3.Session) -> boto3.Session:
        role = self.config.assume_role
        logger.info(f"Assuming IAM role: {role.role_arn}")

        params = {
            'RoleArn': role.role_arn,
            'RoleSessionName': role.session_name,
            'DurationSeconds': role.duration_seconds
        }
        if role.external_id:
            params['ExternalId'] = role.external_id

        sts = base_session.client('sts', config=self._boto_config)
        credentials = sts.assume_role(**params)['Credentials']

        return boto3.Session(
            aws_access_key_id=credentials['AccessKeyId'],
            aws_secret_access_key=credentials['SecretAccessKey'],
            aws_session_token=credentials['SessionToken'],
            region_name=self.config.region or base_session.region_name
        )

    def clear_cache(self) -> None:
        """Drop cached clients, session and identity."""
        with self._lock:
            self._clients.clear()
            self._session = None
            self._credentials = None
        logger.debug("Cleared AWS client cache")
