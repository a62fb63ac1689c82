"""Pydantic models for slide configurations and API responses."""

import re
import unicodedata
from enum import IntEnum
from typing import Any, Optional
from uuid import UUID, NAMESPACE_URL, uuid5

from pydantic import BaseModel, ConfigDict, Field, field_validator

ACCESSORY_NAMESPACE = "slidelocal"


def slugify(text: str) -> str:
    """Convert text to URL-friendly slug."""
    # Normalize unicode characters (convert umlauts etc to ASCII)
    text = unicodedata.normalize('NFKD', text)
    text = text.encode('ascii', 'ignore').decode('ascii')
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[-\s]+', '-', text)
    return text.strip('-')


def make_slide_id(host: str, name: str) -> UUID:
    """Stable identifier for a slide, derived from host and name."""
    return uuid5(NAMESPACE_URL, f"{ACCESSORY_NAMESPACE}:{host}:{name}")


class PositionState(IntEnum):
    """Movement state of a window covering."""
    DECREASING = 0
    INCREASING = 1
    STOPPED = 2


class SlideConfig(BaseModel):
    """One configured Slide device."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    slug: Optional[str] = Field(
        None, max_length=50, validate_default=True, description="URL-friendly identifier"
    )
    host: str = Field(..., min_length=1, max_length=255, description="Slide hostname/IP")
    code: Optional[str] = Field(None, description="Slide device code, used as digest password")
    username: Optional[str] = Field(None, description="Digest username")
    timeout: Optional[int] = Field(None, ge=1, description="RPC timeout in milliseconds")
    poll_interval: Optional[int] = Field(
        None, alias="pollInterval", description="Polling interval in milliseconds"
    )

    @field_validator('slug', mode='before')
    @classmethod
    def auto_slug(cls, v, info):
        """Auto-generate slug from name if not provided."""
        if v is None and 'name' in info.data:
            return slugify(info.data['name'])
        return v

    @field_validator('host')
    @classmethod
    def validate_host(cls, v):
        """Validate host is hostname or IP."""
        if not v or v.startswith('http'):
            raise ValueError('Host must be hostname or IP, not URL')
        return v.rstrip('/')

    @field_validator('code', mode='before')
    @classmethod
    def coerce_code(cls, v):
        """Accept numeric device codes as written on the label."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def slide_id(self) -> UUID:
        return make_slide_id(self.host, self.name)

    def client_username(self, default: str) -> Optional[str]:
        """Digest username, only when a device code is set."""
        if not self.code:
            return None
        return self.username or default


class SlidesFile(BaseModel):
    """Content of slides.json."""

    model_config = ConfigDict(populate_by_name=True)

    poll_interval: Optional[int] = Field(None, alias="pollInterval")
    slides: list[dict] = Field(default_factory=list)


class SlideStatus(BaseModel):
    """Response model for a slide."""

    id: UUID = Field(..., description="Stable slide identifier")
    name: str
    slug: Optional[str] = None
    host: str
    auth_enabled: bool = Field(False, description="Whether digest auth is configured")
    current_position: Optional[int] = Field(None, description="Last known percent open")
    target_position: Optional[int] = Field(None, description="Last requested percent open")
    position_state: PositionState = PositionState.STOPPED


class SlideListResponse(BaseModel):
    """Response model for listing slides."""

    slides: list[SlideStatus]
    count: int


class TargetPositionRequest(BaseModel):
    """Request body for moving a slide."""

    position: int = Field(..., ge=0, le=100, description="Target percent open")


class PositionResponse(BaseModel):
    """Response model for position reads."""

    id: UUID
    position: int = Field(..., description="Current percent open")


class CommandResponse(BaseModel):
    """Response model for slide commands."""

    status: str = Field(..., description="Operation status")
    id: UUID = Field(..., description="Slide identifier")
    message: str = Field(..., description="Status message")
    result: Optional[Any] = Field(None, description="Device result, if any")
