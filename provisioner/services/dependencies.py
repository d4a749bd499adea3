from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Union

from azure.identity.aio import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.storage.aio import StorageManagementClient

from provisioner.services.config import StorageConfig
from provisioner.services.setup.container_setup_service import ContainerSetupService
from provisioner.services.signing_service import SigningService
from provisioner.services.storage_service import StorageService


def get_storage_config(**overrides) -> StorageConfig:
    """Provider for the process-wide storage config (env + CLI overrides)."""

    return StorageConfig.from_env(**overrides)


def get_credential(config: StorageConfig) -> Union[ClientSecretCredential, DefaultAzureCredential]:
    """Service-principal credential when tenant/client/secret are all set, else the default chain."""

    if config.has_client_secret:
        return ClientSecretCredential(
            tenant_id=config.tenant_id,
            client_id=config.client_id,
            client_secret=config.client_secret,
        )
    return DefaultAzureCredential()


@asynccontextmanager
async def storage_management_client(config: StorageConfig) -> AsyncIterator[StorageManagementClient]:
    credential = get_credential(config)
    async with credential:
        async with StorageManagementClient(credential, config.subscription_id) as client:
            yield client


def get_storage_service(config: StorageConfig, *, client: StorageManagementClient) -> StorageService:
    return StorageService(config, client=client)


def get_container_setup_service(storage: StorageService) -> ContainerSetupService:
    return ContainerSetupService(storage=storage)


def get_signing_service(config: StorageConfig) -> SigningService:
    return SigningService(config)
