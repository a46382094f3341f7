"""Publication outcomes stored per article."""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vinted_publisher.models.publication import VintedPublication
from vinted_publisher.schemas.publication import PublicationResult

logger = logging.getLogger(__name__)


def record_publication(db: Session, result: PublicationResult) -> Optional[VintedPublication]:
    """Upsert the outcome for result.article_id. Never raises."""
    if not result.article_id:
        return None

    try:
        record = (
            db.query(VintedPublication)
            .filter(VintedPublication.article_id == result.article_id)
            .first()
        )
        if not record:
            record = VintedPublication(article_id=result.article_id)
            db.add(record)
        record.status = result.status.value
        record.vinted_url = result.url
        record.error = result.error
        db.commit()
        db.refresh(record)
        return record
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not record publication of article %s: %s", result.article_id, e)
        return None


def get_publication(db: Session, article_id: str) -> Optional[VintedPublication]:
    return (
        db.query(VintedPublication)
        .filter(VintedPublication.article_id == article_id)
        .first()
    )
