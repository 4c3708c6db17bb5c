"""
Story Routes - Gemini-powered text suggestions for pages and titles
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import logging

from errors import StorySuggestionError
from schemas.story_schemas import StorySuggestRequest, StoryBatchRequest, TitleSuggestRequest
from services import story_service
from services.story_service import StoryContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/story-suggest", tags=["story"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("")
def suggest_story(request: StorySuggestRequest):
    """Suggest 1-4 lines of story text for one page."""
    if not request.bookTitle or request.pageNumber is None or request.totalPages is None:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields: bookTitle, pageNumber, totalPages")

    style = request.style or "classic"
    if style not in story_service.STORY_STYLES:
        return _error(status.HTTP_400_BAD_REQUEST, f"Unknown story style: {style}")

    context = StoryContext(
        page_number=request.pageNumber,
        total_pages=request.totalPages,
        book_title=request.bookTitle,
        location_name=request.locationName,
        previous_page_text=request.previousPageText,
        style=style,
    )
    try:
        suggestion = story_service.suggest_story_text(request.imageDescription, context)
    except StorySuggestionError as e:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return {"suggestion": suggestion}


@router.post("/batch")
def suggest_story_batch(request: StoryBatchRequest):
    """Suggest one caption per page for the whole book."""
    if not request.bookTitle:
        return _error(status.HTTP_400_BAD_REQUEST, "bookTitle is required")
    if not request.pageCount or request.pageCount < 1:
        return _error(status.HTTP_400_BAD_REQUEST, "pageCount is required and must be at least 1")

    try:
        suggestions = story_service.suggest_story_batch(request.bookTitle, request.pageCount, request.context)
    except StorySuggestionError as e:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return {"suggestions": suggestions}


@router.post("/title")
def suggest_title(request: TitleSuggestRequest):
    locations = [str(location) for location in request.locations if location]
    if not locations:
        return _error(status.HTTP_400_BAD_REQUEST, "locations is required")
    return {"title": story_service.suggest_book_title(locations)}
