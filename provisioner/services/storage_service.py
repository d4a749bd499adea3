from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.mgmt.storage.models import (
    AccountSasParameters,
    BlobContainer,
    HttpProtocol,
    Permissions,
    PublicAccess,
    Services,
    SignedResourceTypes,
)

from provisioner.models.storage import AccessWindow, ContainerInfo, SignedToken
from provisioner.services.config import StorageConfig, validate_container_name


logger = logging.getLogger(__name__)


class StorageServiceError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code

    @classmethod
    def from_exception(cls, message: str, exc: BaseException) -> "StorageServiceError":
        status_code = getattr(exc, "status_code", None)
        error_code = getattr(exc, "error_code", None)
        if status_code is not None:
            message = f"{message} (HTTP {status_code}{', ' + str(error_code) if error_code else ''})"
        return cls(message, status_code=status_code, error_code=error_code)


class ContainerNotFoundError(StorageServiceError):
    pass


def _is_not_found(exc: BaseException) -> bool:
    if isinstance(exc, ResourceNotFoundError):
        return True
    return isinstance(exc, HttpResponseError) and exc.status_code == HTTPStatus.NOT_FOUND


class StorageService:
    """Management-plane calls against one storage account.

    `client` is an open `azure.mgmt.storage.aio.StorageManagementClient` (or anything
    exposing the same `blob_containers` / `storage_accounts` operation groups).
    """

    # Account SAS issued by the management API signs with the primary key.
    _KEY_TO_SIGN = "key1"

    def __init__(self, config: StorageConfig, *, client: Any) -> None:
        self._config = config
        self._client = client

    @property
    def config(self) -> StorageConfig:
        return self._config

    async def get_container(self, *, name: str) -> ContainerInfo:
        """Look up a blob container by name.

        Raises:
            ContainerNotFoundError: the container (or its account) does not exist.
            StorageServiceError: any other failure.
        """

        name = validate_container_name(name)
        try:
            container = await self._client.blob_containers.get(
                self._config.resource_group,
                self._config.account_name,
                name,
            )
        except Exception as exc:
            if _is_not_found(exc):
                raise ContainerNotFoundError.from_exception(f"Blob container not found: {name}", exc) from exc
            logger.exception("Blob container lookup failed (container=%s)", name)
            raise StorageServiceError.from_exception(f"Failed to look up blob container: {name}", exc) from exc

        return ContainerInfo.from_blob_container(container, name=name)

    async def create_container(self, *, name: str) -> ContainerInfo:
        name = validate_container_name(name)
        try:
            container = await self._client.blob_containers.create(
                self._config.resource_group,
                self._config.account_name,
                name,
                BlobContainer(public_access=PublicAccess.NONE),
            )
        except Exception as exc:
            logger.exception("Blob container create failed (container=%s)", name)
            raise StorageServiceError.from_exception(f"Failed to create blob container: {name}", exc) from exc

        return ContainerInfo.from_blob_container(container, name=name)

    async def issue_read_token(self, *, window: AccessWindow) -> SignedToken:
        """Request a read-only account SAS for blob service objects.

        The token is signed remotely by the management API; `window` already
        guarantees a positive validity period.
        """

        parameters = AccountSasParameters(
            services=Services.B,
            resource_types=SignedResourceTypes.S,
            permissions=Permissions.R,
            protocols=HttpProtocol.HTTPS_HTTP,
            shared_access_start_time=window.start,
            shared_access_expiry_time=window.end,
            key_to_sign=self._KEY_TO_SIGN,
        )

        try:
            response = await self._client.storage_accounts.list_account_sas(
                self._config.resource_group,
                self._config.account_name,
                parameters,
            )
        except Exception as exc:
            logger.exception("Account SAS request failed (account=%s)", self._config.account_name)
            raise StorageServiceError.from_exception(
                f"Failed to issue account SAS token (account={self._config.account_name})", exc
            ) from exc

        token = getattr(response, "account_sas_token", None)
        if not token:
            raise StorageServiceError(f"Signer returned an empty SAS token (account={self._config.account_name})")

        return SignedToken(token=token, window=window, permissions="r", scope="account")
