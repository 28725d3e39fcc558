"""
Configuration providers for the document store connection.

The store settings either come straight from the application config
(environment / .env) or are resolved at startup from AWS Secrets Manager
using the ambient platform credentials.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from api.exceptions import SecretResolutionError
from utilities.config import AppConfig

logger = structlog.get_logger(__name__)


class StoreSettings(BaseModel):
    """Connection parameters for the document store. Unresolved values are None."""
    endpoint: Optional[str] = Field(None, description="Store endpoint / connection URL")
    access_key: Optional[str] = Field(None, description="Store access key")
    database: Optional[str] = Field(None, description="Database identifier")
    collection: Optional[str] = Field(None, description="Collection identifier")


class ConfigProvider(ABC):
    """Source of document store settings, selected at startup."""

    @abstractmethod
    async def resolve(self) -> StoreSettings:
        ...


class EnvironmentConfigProvider(ConfigProvider):
    """Reads the store settings from the application config."""

    def __init__(self, app_config: AppConfig):
        self.app_config = app_config

    async def resolve(self) -> StoreSettings:
        return StoreSettings(
            endpoint=self.app_config.store_endpoint,
            access_key=self.app_config.store_access_key,
            database=self.app_config.store_database,
            collection=self.app_config.store_collection,
        )


class SecretVaultClient:
    """Async wrapper around the AWS Secrets Manager client."""

    def __init__(self, client=None, region_name: Optional[str] = None):
        self._client = client
        self.region_name = region_name

    def _ensure_client(self):
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self.region_name)
        return self._client

    def _get_secret_value(self, name: str) -> dict:
        return self._ensure_client().get_secret_value(SecretId=name)

    async def connect(self) -> None:
        """
        Create the Secrets Manager client.

        Must complete before secrets are fetched concurrently; boto3 client
        creation on the default session is not thread-safe.
        """
        await asyncio.to_thread(self._ensure_client)

    async def get_secret(self, name: str) -> str:
        """
        Fetch the string value of a named secret.

        Raises:
            SecretResolutionError: if the vault call fails or the secret is binary
        """
        try:
            response = await asyncio.to_thread(self._get_secret_value, name)
        except (BotoCoreError, ClientError) as e:
            raise SecretResolutionError(name, str(e)) from e

        value = response.get("SecretString")
        if value is None:
            raise SecretResolutionError(name, "secret has no string value")
        return value


class SecretVaultConfigProvider(ConfigProvider):
    """
    Resolves the store settings from named vault secrets.

    A secret that cannot be fetched is logged and left as None; there is no
    retry and no fallback to the environment.
    """

    def __init__(self, vault: SecretVaultClient, secret_names: Dict[str, str]):
        self.vault = vault
        self.secret_names = secret_names

    async def _fetch(self, secret_name: str) -> Optional[str]:
        try:
            return await self.vault.get_secret(secret_name)
        except SecretResolutionError as e:
            logger.error("Failed to retrieve secret", secret=secret_name, error=str(e))
            return None

    async def resolve(self) -> StoreSettings:
        try:
            await self.vault.connect()
        except BotoCoreError as e:
            logger.error("Failed to create secret vault client", error=str(e))
            return StoreSettings()

        fields = list(self.secret_names)
        values = await asyncio.gather(
            *(self._fetch(self.secret_names[field]) for field in fields)
        )
        resolved = dict(zip(fields, values))
        logger.info(
            "Store settings resolved from secret vault",
            resolved=[field for field, value in resolved.items() if value is not None],
            missing=[field for field, value in resolved.items() if value is None]
        )
        return StoreSettings(**resolved)


def build_config_provider(app_config: AppConfig) -> ConfigProvider:
    """Pick the settings provider named by ``config_source``."""
    if app_config.config_source == "vault":
        vault = SecretVaultClient(region_name=app_config.aws_region)
        return SecretVaultConfigProvider(vault, app_config.secret_names())
    return EnvironmentConfigProvider(app_config)
