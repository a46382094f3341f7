import asyncio
import logging
import uuid
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from vinted_publisher.core.config import get_settings
from vinted_publisher.core.database import SessionLocal, get_db
from vinted_publisher.core.progress_tracker import progress_tracker
from vinted_publisher.schemas.article import Credentials
from vinted_publisher.schemas.publication import (
    PublicationRead,
    PublicationResult,
    PublicationStatus,
    PublishRequest,
)
from vinted_publisher.services.publication_records import get_publication, record_publication
from vinted_publisher.services.vinted_client import ProgressCallback, VintedPublisher

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/vinted",
    tags=["vinted"],
)

# One session file per process: publishes run one after another
_publish_lock = asyncio.Lock()

JOB_STATUS = {
    PublicationStatus.PUBLISHED: "completed",
    PublicationStatus.FAILED: "failed",
    PublicationStatus.UNKNOWN: "unknown",
}

PublisherFactory = Callable[[Credentials, ProgressCallback], VintedPublisher]


def get_publisher_factory() -> PublisherFactory:
    settings = get_settings()

    def factory(credentials: Credentials, progress: ProgressCallback) -> VintedPublisher:
        return VintedPublisher(credentials, settings=settings, progress=progress)

    return factory


def get_session_factory():
    return SessionLocal


@router.post("/publish", status_code=status.HTTP_202_ACCEPTED)
async def publish_to_vinted(
    payload: PublishRequest,
    background_tasks: BackgroundTasks,
    publisher_factory: PublisherFactory = Depends(get_publisher_factory),
    session_factory=Depends(get_session_factory),
):
    job_id = str(uuid.uuid4())
    progress_tracker.start(job_id, "Starting Vinted publish...")

    async def _publish_background():
        result = None
        try:
            async with _publish_lock:
                publisher = publisher_factory(payload.credentials, progress_tracker.reporter(job_id))
                result = await publisher.publish_article(payload.article)

            # Background work gets its own DB session
            bg_db = session_factory()
            try:
                record_publication(bg_db, result)
            finally:
                bg_db.close()
        except Exception as e:
            logger.exception("Publish job %s crashed", job_id)
            progress_tracker.add_message(job_id, f"Publish job crashed: {e}", "error")
            if result is None:
                result = PublicationResult.failed(f"Publish job crashed: {e}", article_id=payload.article.id)

        progress_tracker.finish(job_id, JOB_STATUS[result.status], result.model_dump(mode="json"))

    background_tasks.add_task(_publish_background)

    return {"job_id": job_id, "message": "Publish started", "status": "processing"}


@router.get("/publish/progress/{job_id}")
async def get_publish_progress(job_id: str):
    """Get progress messages and, once finished, the outcome of a publish job"""
    job = progress_tracker.get_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")

    return {
        "job_id": job_id,
        "status": job["status"],
        "messages": progress_tracker.get_progress(job_id),
        "latest_message": progress_tracker.get_latest_message(job_id),
        "result": job["result"],
    }


@router.get("/publications/{article_id}", response_model=PublicationRead)
def read_publication(article_id: str, db: Session = Depends(get_db)):
    record = get_publication(db, article_id)
    if not record:
        raise HTTPException(status_code=404, detail="No publication recorded for this article")
    return record
