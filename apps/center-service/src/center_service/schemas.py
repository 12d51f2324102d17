from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

FACILITY_TAGS = (
    "Shelter",
    "Medical",
    "Food",
    "Water",
    "Clothing",
    "Sanitation",
    "Communications",
    "Security",
)


class CenterCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1, max_length=500)
    lat: float
    lng: float
    description: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    contact_phone: str | None = Field(default=None, max_length=64)
    contact_email: str | None = Field(default=None, max_length=255)
    facilities: list[str] = Field(default_factory=list)


class CenterUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    lat: float | None = None
    lng: float | None = None
    description: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    contact_phone: str | None = Field(default=None, max_length=64)
    contact_email: str | None = Field(default=None, max_length=255)
    facilities: list[str] | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_null_for_required_fields(self) -> CenterUpdateRequest:
        for name in ("name", "address", "lat", "lng", "facilities", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class CenterItem(BaseModel):
    id: str
    name: str
    address: str
    description: str | None = None
    lat: float
    lng: float
    capacity: int | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    facilities: list[str] = Field(default_factory=list)
    is_active: bool
    created_at: str
    updated_at: str


class DistancedCenterItem(CenterItem):
    distance: float


class UserLocation(BaseModel):
    lat: float
    lng: float
