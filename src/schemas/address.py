"""Pydantic schemas for user delivery addresses."""
from pydantic import AliasChoices, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schemas.entity import Entity, EntityRequest


class Address(Entity):
    """A delivery address. At most one per user is the default."""

    model_config = ConfigDict(alias_generator=to_camel)

    # Older endpoints send fullName/phoneNumber instead of name/phone
    name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("name", "fullName"),
    )
    phone: str | None = Field(
        default=None,
        validation_alias=AliasChoices("phone", "phoneNumber"),
    )
    address: str | None = None
    city: str | None = None
    district: str | None = None
    ward: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class AddressCreate(EntityRequest):
    """Schema for adding an address."""

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    latitude: float | None = None
    longitude: float | None = None
    is_default: bool = False


class AddressUpdate(EntityRequest):
    """Schema for updating an address. All fields are optional."""

    name: str | None = None
    phone: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_default: bool | None = None
