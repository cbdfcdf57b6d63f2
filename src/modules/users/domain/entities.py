"""User domain entities.

User profiles live in the remote document store, one document per user keyed
by ``uid``. Document keys are camelCase; Python attributes are snake_case.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.core.domain.clock import now_millis


class UserRole(str, Enum):
    """User role enum."""

    REGULAR_USER = "REGULAR_USER"
    MECHANIC = "MECHANIC"
    TOW_OPERATOR = "TOW_OPERATOR"
    GARAGE_OWNER = "GARAGE_OWNER"


class DocumentModel(BaseModel):
    """Value object stored as a nested document map."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )


class GeoLocation(DocumentModel):
    latitude: float = 0.0
    longitude: float = 0.0
    address: str = ""
    city: str = ""
    country: str = ""


class CarDetails(DocumentModel):
    """Vehicle owned by a regular user."""

    make: str = Field(default="", description="e.g. Toyota")
    model: str = Field(default="", description="e.g. Corolla")
    year: int = 0
    vin: str = Field(default="", description="Vehicle Identification Number")
    color: str = ""
    license_plate: str = ""
    car_image_url: str = ""


class ProviderDetails(DocumentModel):
    """Business profile of a mechanic, tow operator or garage owner."""

    business_name: str = ""
    services: list[str] = Field(default_factory=list)
    rating: float = 0.0
    total_reviews: int = 0
    location: GeoLocation | None = None
    price_range: str = ""
    working_hours: str = ""
    description: str = ""
    certifications: list[str] = Field(default_factory=list)


class User(DocumentModel):
    """User profile document."""

    uid: str = Field(default="", description="用户 ID，同时作为文档 key")
    email: str = ""
    name: str = ""
    photo_url: str = ""
    phone_number: str = ""
    age: int = 0
    role: UserRole = Field(default=UserRole.REGULAR_USER)
    is_online: bool = False
    last_seen: int = Field(default_factory=now_millis, description="epoch 毫秒")
    car_details: CarDetails | None = None
    provider_details: ProviderDetails | None = None
    fcm_token: str = Field(default="", description="推送通知 token")
    created_at: int = Field(default_factory=now_millis, description="epoch 毫秒")
