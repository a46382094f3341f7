"""
Item form population.

Fields are written one at a time in a fixed order with a settle point after
each write: the creation page re-renders on every change and a write issued
before it settles can be lost.
"""
import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from vinted_publisher.core.constants import CONDITION_OPTIONS
from vinted_publisher.schemas.article import Article
from vinted_publisher.services.errors import FormFillError
from vinted_publisher.services.vinted_driver import FormField, SiteDriver

logger = logging.getLogger(__name__)

OPTIONAL_TEXT_FIELDS = {
    FormField.DESCRIPTION: "description",
    FormField.BRAND: "brand",
    FormField.SIZE: "size",
    FormField.COLOR: "color",
    FormField.MATERIAL: "material",
}


def format_price(price: Decimal) -> str:
    return str(Decimal(price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def form_values(article: Article) -> List[Tuple[FormField, str]]:
    """(field, value) pairs in write order; absent optional fields are skipped."""
    values = []
    for field in FormField:
        if field is FormField.TITLE:
            values.append((field, article.title))
        elif field is FormField.CONDITION:
            values.append((field, CONDITION_OPTIONS[article.condition.value]))
        elif field is FormField.PRICE:
            values.append((field, format_price(article.price)))
        else:
            value = getattr(article, OPTIONAL_TEXT_FIELDS[field])
            if value:
                values.append((field, value))
    return values


async def fill_article_form(driver: SiteDriver, article: Article, settle_seconds: float = 0.5) -> None:
    logger.info("Filling article form...")
    for field, value in form_values(article):
        try:
            await driver.set_field(field, value)
        except Exception as e:
            logger.error("Could not set %s: %s", field.value, e)
            raise FormFillError(f"Form filling failed on {field.value}: {e}") from e
        await asyncio.sleep(settle_seconds)
    logger.info("Form filled successfully")
