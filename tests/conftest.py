"""Pytest configuration and fixtures."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from provisioner.services.config import StorageConfig


ACCOUNT_KEY = base64.b64encode(b"not-a-real-storage-account-key").decode("ascii")
CONTAINER_ID = (
    "/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/rg-test"
    "/providers/Microsoft.Storage/storageAccounts/acctest/blobServices/default/containers/abcd"
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's Azure environment out of the tests."""
    for name in [
        "AZURE_SUBSCRIPTION_ID",
        "AZURE_ACCOUNT_KEY",
        "AZURE_RESOURCE_GROUP",
        "AZURE_STORAGE_ACCOUNT",
        "AZURE_CONTAINER_NAME",
        "AZURE_CONTAINER_PREFIX",
        "SAS_DURATION_HOURS",
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    """Storage config addressing container "abcd"."""
    return StorageConfig(
        subscription_id="00000000-0000-0000-0000-000000000000",
        account_key=ACCOUNT_KEY,
        resource_group="rg-test",
        account_name="acctest",
        container_name="abcd",
    )


def _make_container(name="abcd", container_id=CONTAINER_ID):
    return SimpleNamespace(name=name, id=container_id, public_access="None")


@pytest.fixture
def mgmt_client():
    """Stand-in for an open StorageManagementClient."""
    client = MagicMock()
    client.blob_containers.get = AsyncMock(return_value=_make_container())
    client.blob_containers.create = AsyncMock(return_value=_make_container())
    client.storage_accounts.list_account_sas = AsyncMock(
        return_value=SimpleNamespace(account_sas_token="sv=2022-11-02&ss=b&srt=s&sp=r&sig=abc")
    )
    return client


@pytest.fixture
def container_factory():
    """Build fake BlobContainer objects as returned by the management API."""
    return _make_container
