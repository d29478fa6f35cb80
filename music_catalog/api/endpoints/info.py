from fastapi import APIRouter
import logging

from music_catalog.schemas.models import InfoResponse

router = APIRouter(tags=["info"])
logger = logging.getLogger(__name__)

API_TITLE = "Music info"
API_VERSION = "0.0.1"


@router.get("/info", response_model=InfoResponse, summary="Get API information")
async def get_info():
    """Returns the API title and version."""
    logger.info("API info requested")
    return InfoResponse(title=API_TITLE, version=API_VERSION)
