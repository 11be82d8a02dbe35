"""Page metadata scraping endpoint."""
from fastapi import APIRouter, HTTPException

from schemas.metadata import MetadataRequest, MetadataResponse
from services.url_scraper import scrape_metadata

router = APIRouter(prefix="/api/metadata", tags=["metadata"])


@router.post(
    "",
    response_model=MetadataResponse,
    response_model_exclude_none=True,
)
async def fetch_metadata(data: MetadataRequest) -> MetadataResponse:
    """
    Fetch a page and extract its title, description, favicon and preview image.

    Unreachable or unparseable pages still return 200 with defaults derived from
    the hostname. Only a malformed URL is an error.
    """
    try:
        metadata = await scrape_metadata(data.url)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return MetadataResponse(
        title=metadata.title,
        description=metadata.description,
        favicon=metadata.favicon,
        og_image=metadata.og_image,
    )
