"""Announcement-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementCreate(BaseModel):
    """Schema for adding an announcement."""

    message: str = Field(..., min_length=1)


class AnnouncementUpdate(BaseModel):
    """Partial update of an announcement."""

    message: str | None = Field(default=None, min_length=1)
    active: bool | None = None


class AnnouncementResponse(BaseModel):
    """Schema for announcement information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    active: bool
