"""
Story Schemas - Bodies of the story suggestion endpoints (camelCase, as sent by the web client)
"""
from pydantic import BaseModel
from typing import Optional, List, Any


class StorySuggestRequest(BaseModel):
    imageDescription: Optional[str] = None
    pageNumber: Optional[int] = None
    totalPages: Optional[int] = None
    locationName: Optional[str] = None
    bookTitle: Optional[str] = None
    previousPageText: Optional[str] = None
    style: Optional[str] = None


class StoryBatchRequest(BaseModel):
    bookTitle: Optional[str] = None
    pageCount: Optional[int] = None
    context: Optional[str] = None


class TitleSuggestRequest(BaseModel):
    locations: List[Any] = []
