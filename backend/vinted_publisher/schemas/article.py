from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class Condition(str, Enum):
    NEW_WITH_TAG = "new_with_tag"
    NEW_WITHOUT_TAG = "new_without_tag"
    NEW_WITH_TAGS = "new_with_tags"
    NEW_WITHOUT_TAGS = "new_without_tags"
    VERY_GOOD = "very_good"
    GOOD = "good"
    SATISFACTORY = "satisfactory"


class Article(BaseModel):
    """A listing ready to be published; validated by the caller's own store."""

    id: Optional[str] = None
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    brand: Optional[str] = None
    size: Optional[str] = None
    condition: Condition
    color: Optional[str] = None
    material: Optional[str] = None
    price: Decimal = Field(gt=0)

    # Local paths or http(s) URLs; the first one becomes the cover photo
    photos: List[str] = Field(default_factory=list, alias="photoSources")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("description", "brand", "size", "color", "material", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return str(value) if value is not None else None


class Credentials(BaseModel):
    email: str = Field(min_length=1)
    password: SecretStr
