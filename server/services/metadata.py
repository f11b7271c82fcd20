"""Site metadata: one-row CMS table with static fallback, and head tags."""

from html import escape
from typing import Any, Dict

from constants import DEFAULT_COLLECTION_TITLE, DEFAULT_INTRO_TITLE
from core.config import Settings
from core.logging import get_logger
from models.site import SiteData
from services.baserow import BaserowClient

logger = get_logger(__name__)


def default_site_data(settings: Settings) -> SiteData:
    return SiteData(
        title=settings.site_title,
        description=settings.site_description,
        site_url=settings.site_url,
    )


def _text(record: Dict[str, Any], field: str) -> str:
    value = record.get(field)
    if value is None or value is False:
        return ""
    return str(value).strip()


async def load_site_data(settings: Settings, baserow: BaserowClient) -> SiteData:
    """Read the site data table, or fall back to configured defaults."""
    if not settings.site_table_id:
        logger.warning("Site data table is not configured, using default site values")
        logger.warning(
            "To manage site texts from Baserow: create a table with a single row, "
            "add the fields introTitulo, introTexto, coleccionTitulo, coleccionTexto, "
            "then set SITE_TABLE_ID to the table id (from the URL /table/<ID>/)"
        )
        return default_site_data(settings)

    records = await baserow.fetch_table_records(settings.site_table_id)
    record = records[0] if records else None
    if not record:
        logger.warning("Site data table is empty, using default site values",
                       table_id=settings.site_table_id)
        return default_site_data(settings)

    fields = settings.site_fields
    return SiteData(
        title=_text(record, fields.title) or settings.site_title,
        description=_text(record, fields.description) or settings.site_description,
        site_url=_text(record, fields.site_url) or settings.site_url,
        intro_title=_text(record, fields.intro_title) or DEFAULT_INTRO_TITLE,
        intro_text=_text(record, fields.intro_text),
        collection_title=_text(record, fields.collection_title) or DEFAULT_COLLECTION_TITLE,
        collection_text=_text(record, fields.collection_text),
    )


def build_head(site: SiteData) -> str:
    """Title, description and OpenGraph tags for the document head."""
    title = escape(site.title)
    description = escape(site.description)
    url = escape(site.site_url)
    return (
        f"<title>{title}</title>"
        f'<meta name="description" content="{description}">'
        f'<meta property="og:title" content="{title}">'
        f'<meta property="og:description" content="{description}">'
        f'<meta property="og:url" content="{url}">'
        '<meta property="og:type" content="website">'
    )
