"""Base schema for records mirrored by the collection cache."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Entity(BaseModel):
    """
    A single server-owned record.

    Only the identity and structure fields are modelled. Everything else the
    server sends is kept as pydantic extra fields and exposed via `payload`,
    so root and child endpoints that return differently-shaped records for the
    same entity still validate.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    parent_id: str | None = Field(default=None, alias="parentId")
    is_default: bool | None = Field(default=None, alias="isDefault")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Server ids may be numeric; they are compared as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("parent_id", mode="before")
    @classmethod
    def coerce_parent_id(cls, v: Any) -> Any:
        """Numeric parents become strings; an empty string means root."""
        if v == "":
            return None
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_root(self) -> bool:
        """True if the entity has no parent."""
        return self.parent_id is None

    @property
    def payload(self) -> dict[str, Any]:
        """Fields the cache does not interpret."""
        return dict(self.model_extra or {})

    def to_api(self) -> dict[str, Any]:
        """Serialize using the API's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EntityRequest(BaseModel):
    """
    Base for create/update request bodies.

    Fields are declared in snake_case and sent in camelCase. Only fields that
    were explicitly set are sent, so an update schema doubles as a partial
    payload.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict[str, Any]:
        """Serialize the fields that were set, using camelCase names."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
