from __future__ import annotations

import math
import os
import random
import re
import string
from dataclasses import dataclass, field
from datetime import timedelta
from typing import ClassVar, Optional

# 3-63 chars, lowercase letters/digits/single hyphens, alphanumeric at both ends.
_CONTAINER_NAME_RE = re.compile(r"^(?=.{3,63}$)[a-z0-9]+(-[a-z0-9]+)*$")

DEFAULT_SAS_HOURS = 24.0
# Ten years; keeps now + duration well inside the datetime range.
MAX_SAS_HOURS = 24.0 * 365 * 10


def random_container_name(prefix: str = "blob-container-", *, length: int = 4) -> str:
    """Return ``prefix`` followed by ``length`` random lowercase letters."""

    suffix = "".join(random.choices(string.ascii_lowercase, k=length))
    return f"{prefix}{suffix}"


def validate_container_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Container name must be provided")
    if not _CONTAINER_NAME_RE.match(cleaned):
        raise ValueError(
            "Invalid container name "
            f"{cleaned!r}: use 3-63 lowercase letters, digits or single hyphens, "
            "starting and ending with a letter or digit"
        )
    return cleaned


def sas_duration_from_hours(hours: float, *, source: str = "SAS duration") -> timedelta:
    """Convert a validity period in hours to a timedelta, rejecting unusable values."""

    if not math.isfinite(hours):
        raise ValueError(f"Invalid {source}; must be a finite number")
    if hours <= 0:
        raise ValueError(f"Invalid {source}; must be positive")
    if hours > MAX_SAS_HOURS:
        raise ValueError(f"Invalid {source}; must be at most {MAX_SAS_HOURS:g} hours")
    return timedelta(hours=hours)


@dataclass(frozen=True)
class StorageConfig:
    """Runtime configuration for the storage management and signing calls.

    Built once at startup and passed explicitly to every service.
    """

    subscription_id: str
    account_key: str = field(repr=False)
    resource_group: str
    account_name: str
    container_name: str
    sas_duration: timedelta = timedelta(hours=DEFAULT_SAS_HOURS)
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)

    DEFAULT_RESOURCE_GROUP: ClassVar[str] = "blob-provisioner"
    DEFAULT_ACCOUNT_NAME: ClassVar[str] = "blobprovisioner"
    DEFAULT_CONTAINER_PREFIX: ClassVar[str] = "blob-container-"

    def __post_init__(self) -> None:
        validate_container_name(self.container_name)
        if self.sas_duration <= timedelta(0):
            raise ValueError("SAS duration must be positive")
        if self.sas_duration > timedelta(hours=MAX_SAS_HOURS):
            raise ValueError(f"SAS duration must be at most {MAX_SAS_HOURS:g} hours")

    @property
    def has_client_secret(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)

    @staticmethod
    def _parse_hours(raw: Optional[str], *, env_name: str = "SAS_DURATION_HOURS") -> timedelta:
        if not raw:
            return timedelta(hours=DEFAULT_SAS_HOURS)
        try:
            hours = float(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid {env_name}; must be a number") from exc
        return sas_duration_from_hours(hours, source=env_name)

    @staticmethod
    def from_env(
        *,
        resource_group: Optional[str] = None,
        account_name: Optional[str] = None,
        container_name: Optional[str] = None,
        sas_hours: Optional[float] = None,
    ) -> "StorageConfig":
        """Load config from the environment; keyword arguments take precedence."""

        subscription_id = os.getenv("AZURE_SUBSCRIPTION_ID")
        if not subscription_id:
            raise ValueError("Missing required environment variable: AZURE_SUBSCRIPTION_ID")

        account_key = os.getenv("AZURE_ACCOUNT_KEY")
        if not account_key:
            raise ValueError("Missing required environment variable: AZURE_ACCOUNT_KEY")

        resolved_group = resource_group or os.getenv("AZURE_RESOURCE_GROUP") or StorageConfig.DEFAULT_RESOURCE_GROUP
        resolved_account = account_name or os.getenv("AZURE_STORAGE_ACCOUNT") or StorageConfig.DEFAULT_ACCOUNT_NAME

        resolved_container = container_name or os.getenv("AZURE_CONTAINER_NAME")
        if not resolved_container:
            prefix = os.getenv("AZURE_CONTAINER_PREFIX") or StorageConfig.DEFAULT_CONTAINER_PREFIX
            resolved_container = random_container_name(prefix)

        if sas_hours is not None:
            sas_duration = sas_duration_from_hours(sas_hours, source="--hours")
        else:
            sas_duration = StorageConfig._parse_hours(os.getenv("SAS_DURATION_HOURS"))

        return StorageConfig(
            subscription_id=subscription_id,
            account_key=account_key,
            resource_group=resolved_group,
            account_name=resolved_account,
            container_name=resolved_container.strip(),
            sas_duration=sas_duration,
            tenant_id=os.getenv("AZURE_TENANT_ID") or None,
            client_id=os.getenv("AZURE_CLIENT_ID") or None,
            client_secret=os.getenv("AZURE_CLIENT_SECRET") or None,
        )
