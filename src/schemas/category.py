"""Pydantic schemas for product and service categories."""
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from schemas.entity import Entity, EntityRequest

CategoryType = Literal["product", "service"]


class Category(Entity):
    """A node in the category tree. Roots have no parent."""

    model_config = ConfigDict(alias_generator=to_camel)

    name: str
    description: str | None = None
    icon: str | None = None
    image_url: str | None = None
    type: CategoryType | None = None
    is_active: bool | None = None
    product_count: int | None = None


def _normalize_parent_id(v: Any) -> Any:
    """A blank parent id means a root category."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip() or None
    return v


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Category name is required")
    return v


class CategoryCreate(EntityRequest):
    """
    Schema for creating a category.

    Defaults are sent along with the set fields; a root category omits
    `parentId` entirely.
    """

    name: str = Field(..., min_length=1)
    description: str | None = None
    parent_id: str | None = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        """Category names are trimmed and must not be blank."""
        return _strip_name(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def blank_parent_is_root(cls, v: Any) -> Any:
        return _normalize_parent_id(v)

    def to_api(self) -> dict[str, Any]:
        """Serialize every non-null field using camelCase names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CategoryUpdate(EntityRequest):
    """
    Schema for updating a category. All fields are optional.

    An explicitly blank `parent_id` is sent as null and moves the category to
    the root.
    """

    name: str | None = None
    description: str | None = None
    parent_id: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        """Category names are trimmed and must not be blank."""
        return _strip_name(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def blank_parent_is_root(cls, v: Any) -> Any:
        return _normalize_parent_id(v)
