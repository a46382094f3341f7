from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from vinted_publisher.core.database import Base


class VintedPublication(Base):
    __tablename__ = "vinted_publications"

    id = Column(Integer, primary_key=True, index=True)

    # Caller-side article identifier (the article store lives elsewhere)
    article_id = Column(String(100), nullable=False, index=True, unique=True)

    # 'published' / 'failed' / 'unknown'
    status = Column(String(20), nullable=False)

    vinted_url = Column(String(500), nullable=True)
    error = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
