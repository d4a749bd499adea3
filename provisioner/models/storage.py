from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ContainerInfo(BaseModel):
    name: str = Field(..., description="Blob container name")
    id: Optional[str] = Field(default=None, description="ARM resource id")
    public_access: Optional[str] = None

    @staticmethod
    def from_blob_container(container: Any, *, name: str) -> "ContainerInfo":
        public_access = getattr(container, "public_access", None)
        return ContainerInfo(
            name=getattr(container, "name", None) or name,
            id=getattr(container, "id", None),
            public_access=str(getattr(public_access, "value", public_access)) if public_access is not None else None,
        )


class EnsureContainerResult(BaseModel):
    container: ContainerInfo
    exists: bool
    created: bool


class AccessWindow(BaseModel):
    """Validity window of a signed token.

    Both instants are timezone-aware UTC; naive values are taken as UTC.
    """

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _end_after_start(self) -> "AccessWindow":
        if self.end <= self.start:
            raise ValueError(f"Access window end ({self.end.isoformat()}) must be later than start ({self.start.isoformat()})")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @staticmethod
    def starting_now(duration: timedelta, *, now: Optional[datetime] = None) -> "AccessWindow":
        start = now if now is not None else datetime.now(timezone.utc)
        try:
            end = start + duration
        except OverflowError as exc:
            raise ValueError(f"Access window duration {duration} runs past the supported date range") from exc
        return AccessWindow(start=start, end=end)


class SignedToken(BaseModel):
    token: str = Field(..., description="Opaque SAS token")
    window: AccessWindow
    permissions: str
    scope: Literal["account", "container"]
