"""Device registration schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeviceCreate(BaseModel):
    """Schema for registering a button or screen."""

    name: str = Field(..., min_length=1, max_length=64)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class DeviceResponse(BaseModel):
    """Registered device, including its token for provisioning the hardware."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    token: str


class DeviceRegistered(BaseModel):
    """Result of a registration; ``created`` is False when the name already existed."""

    name: str
    created: bool
