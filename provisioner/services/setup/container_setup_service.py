from __future__ import annotations

import logging

from provisioner.models.storage import EnsureContainerResult
from provisioner.services.storage_service import (
    ContainerNotFoundError,
    StorageService,
    StorageServiceError,
)


logger = logging.getLogger(__name__)


class ContainerVerificationError(StorageServiceError):
    pass


class ContainerSetupService:
    """Provisioning helper for blob containers.

    Looks the container up through the management API and creates it only when the
    lookup reports not-found. A freshly created container is looked up once more
    before it is reported. There is no retry: every failure other than the initial
    not-found propagates as `StorageServiceError`.
    """

    def __init__(self, *, storage: StorageService) -> None:
        self._storage = storage

    async def ensure_container(self, *, name: str) -> EnsureContainerResult:
        try:
            existing = await self._storage.get_container(name=name)
        except ContainerNotFoundError as exc:
            logger.info("Blob container could not be found (%s), creating it now", exc.error_code or "not found")
        else:
            logger.info("Blob container already exists, id: %s", existing.id)
            return EnsureContainerResult(container=existing, exists=True, created=False)

        created = await self._storage.create_container(name=name)
        logger.info("Created blob container: %s", created.id)

        try:
            confirmed = await self._storage.get_container(name=name)
        except ContainerNotFoundError as exc:
            raise ContainerVerificationError(
                f"Blob container missing right after creation: {name}",
                status_code=exc.status_code,
                error_code=exc.error_code,
            ) from exc
        logger.info("Double check, blob container id: %s", confirmed.id)

        return EnsureContainerResult(container=confirmed, exists=True, created=True)
