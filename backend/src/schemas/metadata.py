"""Pydantic schemas for the metadata scraping endpoint."""
from schemas.validators import CamelModel, HttpUrlStr


class MetadataRequest(CamelModel):
    """URL to scrape. Must be an absolute http(s) URL."""

    url: HttpUrlStr


class MetadataResponse(CamelModel):
    """
    Scraped page metadata.

    title, description and favicon are always present (description may be empty);
    ogImage is omitted when the page declares none.
    """

    title: str
    description: str
    favicon: str
    og_image: str | None = None
