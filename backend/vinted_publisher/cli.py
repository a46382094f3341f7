"""Publish a single article from a JSON file.

Usage:
    vinted-publish article.json [--email EMAIL] [--password PASSWORD] [--headed]

The article file uses the same shape as the HTTP API's ``article`` object.
Credentials default to VINTED_EMAIL / VINTED_PASSWORD from the environment.
Exit status: 0 published, 1 failed, 2 submitted but unconfirmed.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from vinted_publisher.core.config import get_settings
from vinted_publisher.core.database import Base, SessionLocal
from vinted_publisher.core.logging import configure_logging
from vinted_publisher.schemas.article import Article, Credentials
from vinted_publisher.schemas.publication import PublicationResult, PublicationStatus
from vinted_publisher.services.browser_session import BrowserSession
from vinted_publisher.services.publication_records import record_publication
from vinted_publisher.services.vinted_client import VintedPublisher

logger = logging.getLogger(__name__)

EXIT_CODES = {
    PublicationStatus.PUBLISHED: 0,
    PublicationStatus.FAILED: 1,
    PublicationStatus.UNKNOWN: 2,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vinted-publish", description="Publish one article to Vinted.")
    parser.add_argument("article", type=Path, help="Path to the article JSON file")
    parser.add_argument("--email", help="Vinted account email (default: VINTED_EMAIL)")
    parser.add_argument("--password", help="Vinted account password (default: VINTED_PASSWORD)")
    parser.add_argument("--session-file", help="Where the session cookies are kept")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL)")
    return parser


def load_article(path: Path) -> Article:
    with path.open("r", encoding="utf-8") as handle:
        return Article.model_validate(json.load(handle))


async def publish(article: Article, credentials: Credentials, session_file: Optional[str], headed: bool) -> PublicationResult:
    settings = get_settings()
    session = BrowserSession(settings, session_file=session_file, headless=False if headed else None)
    publisher = VintedPublisher(credentials, settings=settings, browser_session=session)
    return await publisher.publish_article(article)


def save_outcome(result: PublicationResult, session_factory=None) -> None:
    """Record the outcome per article id, as the HTTP service does. Never raises."""
    db = (session_factory or SessionLocal)()
    try:
        Base.metadata.create_all(bind=db.get_bind())
        record_publication(db, result)
    except SQLAlchemyError as e:
        logger.error("Could not prepare the publications table: %s", e)
    finally:
        db.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        article = load_article(args.article)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Could not read article {args.article}: {e}", file=sys.stderr)
        return 1

    email = args.email or settings.vinted_email
    password = args.password or settings.vinted_password
    if not email or not password:
        print("Vinted credentials not configured (use --email/--password or VINTED_EMAIL/VINTED_PASSWORD)", file=sys.stderr)
        return 1

    result = asyncio.run(
        publish(article, Credentials(email=email, password=password), args.session_file, args.headed)
    )
    save_outcome(result)
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return EXIT_CODES[result.status]


if __name__ == "__main__":
    sys.exit(main())
