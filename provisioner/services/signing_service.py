from __future__ import annotations

import logging

from azure.storage.blob import ContainerSasPermissions, generate_container_sas

from provisioner.models.storage import AccessWindow, SignedToken
from provisioner.services.config import StorageConfig, validate_container_name
from provisioner.services.storage_service import StorageServiceError


logger = logging.getLogger(__name__)


class SigningService:
    """Data-plane container SAS, signed locally with the storage account key."""

    def __init__(self, config: StorageConfig) -> None:
        self._config = config

    @staticmethod
    def permissions_for(*, write: bool) -> ContainerSasPermissions:
        if write:
            return ContainerSasPermissions(create=True, delete=True, list=True, add=True)
        return ContainerSasPermissions(read=True, list=True)

    def sign_container(self, *, container_name: str, window: AccessWindow, write: bool = False) -> SignedToken:
        container_name = validate_container_name(container_name)
        if not self._config.account_key:
            raise StorageServiceError("Cannot sign container SAS without an account key")

        permission = self.permissions_for(write=write)
        try:
            token = generate_container_sas(
                account_name=self._config.account_name,
                container_name=container_name,
                account_key=self._config.account_key,
                permission=permission,
                start=window.start,
                expiry=window.end,
            )
        except Exception as exc:
            logger.exception("Container SAS signing failed (container=%s)", container_name)
            raise StorageServiceError(f"Failed to sign container SAS (container={container_name})") from exc

        return SignedToken(token=token, window=window, permissions=str(permission), scope="container")

    def container_url(self, *, container_name: str, token: str) -> str:
        return f"https://{self._config.account_name}.blob.core.windows.net/{container_name}?{token}"
