from fastapi import APIRouter, Depends

from doppel_feed.schemas import TasteProfile

from app.deps.deps import get_letterboxd_service
from app.schemas import LetterboxdParseRequest, LetterboxdProfileRequest

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("/letterboxd", response_model=TasteProfile)
async def fetch_letterboxd_profile(
    req: LetterboxdProfileRequest,
    letterboxd=Depends(get_letterboxd_service),
):
    """
    Fetch and summarize a member's public RSS feed.

    Always 200: feed problems come back as `{"status": "error", "error": ...}`
    so the client can still synthesize a twin from the bio alone.
    """
    return await letterboxd.get_profile(req.url)


@router.post("/letterboxd/parse", response_model=TasteProfile)
def parse_letterboxd_document(
    req: LetterboxdParseRequest,
    letterboxd=Depends(get_letterboxd_service),
):
    return letterboxd.parse_document(req.xml)
