from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from vinted_publisher.schemas.article import Article, Credentials


class PublicationStatus(str, Enum):
    PUBLISHED = "published"
    FAILED = "failed"
    # Submitted but never confirmed: the item may exist on the site
    UNKNOWN = "unknown"


class PublicationResult(BaseModel):
    """Outcome of one publish call. Built once, never mutated."""

    success: bool
    status: PublicationStatus
    url: Optional[str] = None
    error: Optional[str] = None
    article_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.success:
            if not self.url or self.status is not PublicationStatus.PUBLISHED:
                raise ValueError("a successful publication needs a url")
        elif self.url is not None or self.status is PublicationStatus.PUBLISHED:
            raise ValueError("a failed publication cannot carry a url")
        return self

    @classmethod
    def published(cls, url: str, article_id: Optional[str] = None) -> "PublicationResult":
        return cls(success=True, status=PublicationStatus.PUBLISHED, url=url, article_id=article_id)

    @classmethod
    def failed(cls, error: str, article_id: Optional[str] = None) -> "PublicationResult":
        return cls(success=False, status=PublicationStatus.FAILED, error=error, article_id=article_id)

    @classmethod
    def unknown(cls, error: str, article_id: Optional[str] = None) -> "PublicationResult":
        return cls(success=False, status=PublicationStatus.UNKNOWN, error=error, article_id=article_id)


class PublishRequest(BaseModel):
    article: Article
    credentials: Credentials


class PublicationRead(BaseModel):
    article_id: str
    status: PublicationStatus
    vinted_url: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
