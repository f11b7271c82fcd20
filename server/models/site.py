"""Site-level content models."""

from pydantic import BaseModel

from constants import DEFAULT_COLLECTION_TITLE, DEFAULT_INTRO_TITLE


class SiteData(BaseModel):
    """Title, description and section texts of the site."""

    title: str
    description: str
    site_url: str
    intro_title: str = DEFAULT_INTRO_TITLE
    intro_text: str = ""
    collection_title: str = DEFAULT_COLLECTION_TITLE
    collection_text: str = ""
